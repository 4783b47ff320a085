"""
Integration tests for the orchestrator and its responders.

Tests the full flow of:
- Coordinator routing through a trailing sentinel
- Specialist agent/tools loop against the mock backend clients
- Session history carried across requests
"""

import pytest
from unittest.mock import Mock

from langchain_core.messages import AIMessage, ToolMessage

from src.agents.coordinator import create_coordinator_agent
from src.agents.devops import create_devops_agent, MockDevOpsClient
from src.agents.servicenow import create_servicenow_agent, MockServiceNowClient
from src.orchestrator import MultiAgentOrchestrator, RoutingDirective, RunState
from src.orchestrator.chat_service import ChatService
from src.orchestrator.orchestrator import build_orchestrator
from src.orchestrator.session_store import InMemorySessionStore
from src.utils.config import UnifiedConfig


class TestJaneSmithScenario:
    """How many bugs does Jane Smith have? -> DevOps bug count tool."""

    @pytest.fixture
    def llms(self, scripted_llm, tool_call_message, echo_tool_step):
        return {
            "coordinator": scripted_llm(
                AIMessage(content="Let me check Azure DevOps for Jane Smith's bugs. ROUTE_TO_DEVOPS_AGENT")),
            "devops": scripted_llm(
                tool_call_message("devops_bug_count", {"assignee": "Jane Smith"}),
                echo_tool_step),
            "servicenow": scripted_llm(),
        }

    @pytest.fixture
    def orchestrator(self, llms):
        coordinator = create_coordinator_agent(llm=llms["coordinator"])
        devops = create_devops_agent(llm=llms["devops"], client=MockDevOpsClient())
        servicenow = create_servicenow_agent(llm=llms["servicenow"], client=MockServiceNowClient())
        return MultiAgentOrchestrator(coordinator, {"DevOps": devops, "ServiceNow": servicenow})

    @pytest.mark.asyncio
    async def test_bug_count_reaches_devops_response(self, orchestrator, llms):
        result = await orchestrator.process("How many bugs does Jane Smith have?")

        assert result.succeeded
        assert result.routing == RoutingDirective.DEVOPS
        response = result.to_response()
        assert "Found 2 active bugs assigned to Jane Smith [MOCK DATA]" in response["devOpsResponse"]
        assert "OPERATION_COMPLETE" not in response["devOpsResponse"]
        assert response["coordinatorResponse"] == "Let me check Azure DevOps for Jane Smith's bugs."
        assert response["chatResponse"] == response["coordinatorResponse"]
        assert response["serviceNowResponse"] is None
        llms["servicenow"].ainvoke.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_specialist_model_sees_tool_output(self, orchestrator, llms):
        await orchestrator.process("How many bugs does Jane Smith have?")

        second_call_messages = llms["devops"].ainvoke.await_args_list[1].args[0]
        tool_messages = [m for m in second_call_messages if isinstance(m, ToolMessage)]
        assert tool_messages[-1].content == "Found 2 active bugs assigned to Jane Smith [MOCK DATA]"

    @pytest.mark.asyncio
    async def test_specialist_receives_instructions_and_coordinator_turn(self, orchestrator, llms):
        await orchestrator.process("How many bugs does Jane Smith have?")

        first_call_messages = llms["devops"].ainvoke.await_args_list[0].args[0]
        assert first_call_messages[0].type == "system"
        assert first_call_messages[1].content == "How many bugs does Jane Smith have?"
        assert first_call_messages[2].content == "Let me check Azure DevOps for Jane Smith's bugs."

    @pytest.mark.asyncio
    async def test_run_records_all_new_turns(self, orchestrator):
        result = await orchestrator.process("How many bugs does Jane Smith have?")

        authors = [turn.author_name for turn in result.context.new_turns]
        assert authors == [None, "Coordinator", "DevOps"]


class TestServiceNowScenario:

    @pytest.mark.asyncio
    async def test_critical_incident_count(self, scripted_llm, tool_call_message, echo_tool_step):
        coordinator = create_coordinator_agent(llm=scripted_llm(
            AIMessage(content="I'll check ServiceNow. ROUTE_TO_SERVICENOW_AGENT")))
        servicenow = create_servicenow_agent(
            llm=scripted_llm(tool_call_message("servicenow_incident_count", {"priority": "1"}), echo_tool_step),
            client=MockServiceNowClient())
        devops = create_devops_agent(llm=scripted_llm(), client=MockDevOpsClient())
        orchestrator = MultiAgentOrchestrator(coordinator, {"DevOps": devops, "ServiceNow": servicenow})

        result = await orchestrator.process("How many critical incidents are open?")

        assert result.to_response()["serviceNowResponse"] == \
            "Found 3 active Critical priority incidents [MOCK DATA]"
        assert result.to_response()["devOpsResponse"] is None

    @pytest.mark.asyncio
    async def test_tool_failure_reaches_caller_as_text(self, scripted_llm, tool_call_message, echo_tool_step):
        class BrokenClient(MockServiceNowClient):
            is_mock = False

            def query_table(self, table, query):
                raise ConnectionError("instance unreachable")

        coordinator = create_coordinator_agent(llm=scripted_llm(
            AIMessage(content="Checking. ROUTE_TO_SERVICENOW_AGENT")))
        servicenow = create_servicenow_agent(
            llm=scripted_llm(tool_call_message("servicenow_incident_count", {"priority": "2"}), echo_tool_step),
            client=BrokenClient())
        orchestrator = MultiAgentOrchestrator(coordinator, {"ServiceNow": servicenow})

        result = await orchestrator.process("High priority incidents?")

        assert result.succeeded
        assert result.specialist_texts["ServiceNow"] == "Error querying incidents: instance unreachable"


class TestGeneralConversation:

    @pytest.mark.asyncio
    async def test_greeting_needs_no_specialist(self, scripted_llm):
        devops_llm = scripted_llm()
        coordinator = create_coordinator_agent(llm=scripted_llm(
            AIMessage(content="Hello! I can answer Azure DevOps and ServiceNow questions.")))
        devops = create_devops_agent(llm=devops_llm, client=MockDevOpsClient())
        orchestrator = MultiAgentOrchestrator(coordinator, {"DevOps": devops})

        result = await orchestrator.process("Hello")

        assert result.state == RunState.COMPLETE
        assert result.final_text == "Hello! I can answer Azure DevOps and ServiceNow questions."
        assert result.specialist_texts == {}
        devops_llm.ainvoke.assert_not_awaited()

    def test_only_tool_bearing_responders_run_a_tool_loop(self, scripted_llm):
        coordinator = create_coordinator_agent(llm=scripted_llm())
        devops = create_devops_agent(llm=scripted_llm(), client=MockDevOpsClient())

        assert coordinator.uses_tools is False
        assert devops.uses_tools is True


class TestChatServiceWithBuiltOrchestrator:

    @pytest.mark.asyncio
    async def test_history_flows_into_next_request(self, scripted_llm, tool_call_message,
                                                   echo_tool_step, write_config, clean_env):
        app_config = UnifiedConfig(write_config({}))
        coordinator_llm = scripted_llm(
            AIMessage(content="Checking DevOps. ROUTE_TO_DEVOPS_AGENT"),
            AIMessage(content="She has 2 active bugs."),
        )
        devops_llm = scripted_llm(
            tool_call_message("devops_bug_count", {"assignee": "Jane Smith"}),
            echo_tool_step,
        )

        def orchestrator_factory():
            # Responders are created in order: coordinator, DevOps, ServiceNow
            llm_factory = Mock(side_effect=[coordinator_llm, devops_llm, scripted_llm()])
            return build_orchestrator(app_config, llm_factory=llm_factory)

        store = InMemorySessionStore(ttl_seconds=60, cleanup_interval_seconds=60)
        service = ChatService(store, orchestrator_factory=orchestrator_factory)

        first = await service.chat("How many bugs does Jane Smith have?", session_id="jane")
        second = await service.chat("Summarize that", session_id="jane")

        assert "Found 2 active bugs assigned to Jane Smith [MOCK DATA]" in first["devOpsResponse"]
        assert second["chatResponse"] == "She has 2 active bugs."

        # Second coordinator call sees the prior three turns plus the new prompt
        second_messages = coordinator_llm.ainvoke.await_args_list[1].args[0]
        contents = [m.content for m in second_messages[1:]]
        assert contents == [
            "How many bugs does Jane Smith have?",
            "Checking DevOps.",
            "Found 2 active bugs assigned to Jane Smith [MOCK DATA]",
            "Summarize that",
        ]
