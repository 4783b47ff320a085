"""Multi-agent orchestrator.

One instance drives one chat request:

    BUILDING_CONTEXT -> COORDINATOR_RUNNING -> ROUTING_* -> SPECIALIST_RUNNING? -> COMPLETE

The coordinator always runs. Its trailing routing token decides whether the
DevOps or ServiceNow specialist runs next, sequentially, on the same context.
A "both" directive is recognized but not dispatched. Unexpected failures end
the run early with whatever was produced so far recorded on the result.
"""

from typing import Any, AsyncIterator, Dict, Iterable, Optional

from src.utils.config import config
from src.utils.config.constants import DEVOPS_AGENT_NAME, SERVICENOW_AGENT_NAME
from src.utils.exceptions import OrchestrationError
from src.utils.logging.framework import SmartLogger, log_operation

from .context import ConversationContext, ConversationTurn
from .routing import (
    RoutingDirective,
    RoutingTokenFilter,
    classify_directive,
    strip_completion_marker,
    strip_routing_tokens,
)
from .types import AggregateResult, RunState, ROUTING_STATES

logger = SmartLogger("orchestrator")

SPECIALIST_FOR_DIRECTIVE = {
    RoutingDirective.DEVOPS: DEVOPS_AGENT_NAME,
    RoutingDirective.SERVICENOW: SERVICENOW_AGENT_NAME,
}


class MultiAgentOrchestrator:
    """Coordinator-first orchestration over a windowed conversation context.

    Args:
        coordinator: Responder that classifies the request
        specialists: Specialist responders keyed by agent name
        history_window: Prior turns carried into a run (defaults to config)
    """

    def __init__(self, coordinator, specialists: Dict[str, Any],
                 history_window: Optional[int] = None):
        self.coordinator = coordinator
        self.specialists = dict(specialists)
        self.history_window = history_window if history_window is not None else config.history_window

    def _set_state(self, result: AggregateResult, state: RunState) -> None:
        logger.debug("orchestrator_state_transition",
                     from_state=result.state.value,
                     to_state=state.value)
        result.state = state

    async def process(self, user_input: str,
                      history: Optional[Iterable[ConversationTurn]] = None) -> AggregateResult:
        """Run one request through the coordinator and at most one specialist."""
        result = AggregateResult()

        with log_operation("orchestrator", "process_chat", input_length=len(user_input)):
            try:
                context = ConversationContext.from_history(history or [], user_input, self.history_window)
                result.context = context
                logger.info("context_built",
                            carried_over=context.carried_over,
                            window=self.history_window)

                self._set_state(result, RunState.COORDINATOR_RUNNING)
                directive = await self._run_coordinator(context, result)

                result.routing = directive
                self._set_state(result, ROUTING_STATES[directive])
                logger.info("routing_decision", directive=directive.value)

                if directive in SPECIALIST_FOR_DIRECTIVE:
                    self._set_state(result, RunState.SPECIALIST_RUNNING)
                    await self._run_specialist(SPECIALIST_FOR_DIRECTIVE[directive], context, result)
                elif directive == RoutingDirective.BOTH:
                    # No dispatch policy exists for both specialists yet
                    logger.warning("routing_both_not_implemented",
                                   coordinator_text_length=len(result.coordinator_text or ""))

                self._set_state(result, RunState.COMPLETE)

            except Exception as e:
                result.error = OrchestrationError(result.state.value, e)
                logger.error("orchestration_failed",
                             state=result.state.value,
                             error=str(e),
                             error_type=type(e).__name__)

            # The coordinator's text is the primary answer even when a specialist ran
            result.final_text = result.coordinator_text or ""
            logger.info("orchestration_result", **result.to_log_dict())

        return result

    async def _run_coordinator(self, context: ConversationContext,
                               result: AggregateResult) -> RoutingDirective:
        raw_texts = [raw for raw in await self.coordinator.invoke(context) if raw and raw.strip()]
        texts = []

        for raw in raw_texts:
            cleaned = strip_routing_tokens(raw)
            if cleaned:
                texts.append(cleaned)
                context.add_assistant_message(cleaned, self.coordinator.name)

        if texts:
            result.coordinator_text = "\n".join(texts)
        # Only the suffix of the collected output routes
        return classify_directive("\n".join(raw_texts))

    async def _run_specialist(self, name: str, context: ConversationContext,
                              result: AggregateResult) -> None:
        specialist = self.specialists.get(name)
        if specialist is None:
            raise LookupError(f"No specialist registered under '{name}'")

        logger.info("specialist_invoke", specialist=name, turn_count=len(context))
        texts = []
        for raw in await specialist.invoke(context):
            cleaned = strip_completion_marker(raw)
            if cleaned:
                texts.append(cleaned)
                context.add_assistant_message(cleaned, name)

        if texts:
            result.specialist_texts[name] = "\n".join(texts)
        logger.info("specialist_complete", specialist=name, message_count=len(texts))

    async def process_stream(self, user_input: str,
                             history: Optional[Iterable[ConversationTurn]] = None) -> AsyncIterator[str]:
        """Relay the coordinator's text as it is generated.

        Specialists are never invoked on this path. Routing tokens are
        filtered out of the relayed chunks.
        """
        context = ConversationContext.from_history(history or [], user_input, self.history_window)
        token_filter = RoutingTokenFilter()
        raw_chunks = []

        logger.info("stream_start", carried_over=context.carried_over)
        try:
            async for chunk in self.coordinator.invoke_stream(context):
                raw_chunks.append(chunk)
                ready = token_filter.feed(chunk)
                if ready:
                    yield ready
        except Exception as e:
            logger.error("stream_failed", error=str(e), error_type=type(e).__name__)
            raise OrchestrationError(RunState.COORDINATOR_RUNNING.value, e) from e

        remainder = token_filter.flush()
        if remainder:
            yield remainder

        directive = classify_directive("".join(raw_chunks))
        if directive != RoutingDirective.NONE:
            logger.info("stream_routing_not_dispatched", directive=directive.value)
        logger.info("stream_complete", chunk_count=len(raw_chunks))


def build_orchestrator(app_config=None, llm_factory=None) -> MultiAgentOrchestrator:
    """Construct a fresh orchestrator with its own responders and clients.

    Args:
        app_config: Configuration to read (defaults to the global config)
        llm_factory: Optional callable ``(settings) -> chat model`` used for every responder
    """
    from src.agents.base.responder import ResponderSettings
    from src.agents.coordinator import create_coordinator_agent
    from src.agents.devops import create_devops_agent, create_devops_client
    from src.agents.servicenow import create_servicenow_agent, create_servicenow_client

    app_config = app_config or config
    settings = ResponderSettings.from_config(app_config)

    def make_llm():
        return llm_factory(settings) if llm_factory else None

    coordinator = create_coordinator_agent(llm=make_llm(), settings=settings)
    specialists = {
        DEVOPS_AGENT_NAME: create_devops_agent(
            llm=make_llm(), client=create_devops_client(app_config), settings=settings),
        SERVICENOW_AGENT_NAME: create_servicenow_agent(
            llm=make_llm(), client=create_servicenow_client(app_config), settings=settings),
    }
    return MultiAgentOrchestrator(coordinator, specialists, history_window=app_config.history_window)


def validate_specialist_config(app_config=None) -> None:
    """Fail fast at startup when a specialist's real-mode settings are incomplete.

    Raises:
        ConfigError: Naming the missing settings
    """
    from src.agents.devops import create_devops_client
    from src.agents.servicenow import create_servicenow_client

    app_config = app_config or config
    create_devops_client(app_config)
    create_servicenow_client(app_config)
    logger.info("specialist_config_valid",
                devops_mock=app_config.devops_use_mock,
                servicenow_mock=app_config.servicenow_use_mock)
