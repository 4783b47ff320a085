"""Chat responder shared by the coordinator and the specialists.

A responder pairs a fixed system instruction with a chat model and, when it
has tools, a LangGraph agent/tools loop so the model can call tools on its
own before answering. The orchestrator only ever sees the finished text.
"""

import operator
from dataclasses import dataclass
from typing import Any, AsyncIterator, List, Optional, Sequence, TypedDict, Annotated

from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.tools import BaseTool
from langgraph.graph import StateGraph, END
from langgraph.prebuilt import ToolNode, tools_condition

from src.orchestrator.context import ConversationContext
from src.utils.config.constants import DEFAULT_SERVICE_ID
from src.utils.logging.framework import SmartLogger


class ResponderState(TypedDict):
    """State for a responder's agent/tools loop."""
    messages: Annotated[List[Any], operator.add]


@dataclass
class ResponderSettings:
    """Response-generation settings handed to the model host."""
    temperature: float = 0.3
    top_p: Optional[float] = 0.9
    auto_invoke_tools: bool = True
    service_id: str = DEFAULT_SERVICE_ID

    @classmethod
    def from_config(cls, app_config) -> "ResponderSettings":
        return cls(
            temperature=app_config.llm_temperature,
            top_p=app_config.llm_top_p,
            auto_invoke_tools=True,
            service_id=app_config.llm_service_id,
        )


def message_text(message: Any) -> str:
    """Plain text of a message or chunk; content blocks are concatenated."""
    content = getattr(message, "content", "")
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class ChatResponder:
    """Named responder bound to instructions, settings, a model and tools."""

    def __init__(self, name: str, instructions: str, llm: Any,
                 tools: Optional[Sequence[BaseTool]] = None,
                 settings: Optional[ResponderSettings] = None,
                 component: str = "orchestrator"):
        self.name = name
        self.instructions = instructions
        self.settings = settings or ResponderSettings()
        self.tools = list(tools or [])
        self._llm = llm
        self._logger = SmartLogger(component)
        self._graph = self._build_graph() if self.tools and self.settings.auto_invoke_tools else None

    @property
    def uses_tools(self) -> bool:
        return self._graph is not None

    def _build_graph(self):
        """Build the agent/tools loop for a tool-bearing responder."""
        llm_with_tools = self._llm.bind_tools(self.tools)
        responder_logger = self._logger
        name = self.name

        async def agent(state: ResponderState):
            responder_logger.info("responder_llm_call",
                                  responder=name,
                                  message_count=len(state["messages"]))
            response = await llm_with_tools.ainvoke(state["messages"])
            responder_logger.info("responder_llm_response",
                                  responder=name,
                                  response_type=type(response).__name__,
                                  has_tool_calls=bool(getattr(response, "tool_calls", None)))
            return {"messages": [response]}

        graph_builder = StateGraph(ResponderState)
        graph_builder.add_node("agent", agent)
        graph_builder.add_node("tools", ToolNode(self.tools))

        graph_builder.set_entry_point("agent")
        graph_builder.add_conditional_edges(
            "agent",
            tools_condition,
            {
                "tools": "tools",
                "__end__": END
            }
        )
        graph_builder.add_edge("tools", "agent")

        # No checkpointer: each run starts from the context it is handed
        return graph_builder.compile()

    def _build_messages(self, context: ConversationContext) -> List[BaseMessage]:
        return context.to_messages(self.instructions)

    async def invoke(self, context: ConversationContext) -> List[str]:
        """Run to completion and return the text of each new answer message.

        Intermediate tool-calling messages are not returned.
        """
        messages = self._build_messages(context)
        self._logger.info("responder_invoke_start",
                          responder=self.name,
                          turn_count=len(context),
                          tool_count=len(self.tools),
                          service_id=self.settings.service_id)

        if not self.uses_tools:
            response = await self._llm.ainvoke(messages)
            new_messages = [response]
        else:
            final_state = await self._graph.ainvoke({"messages": messages})
            new_messages = final_state["messages"][len(messages):]

        texts = []
        for message in new_messages:
            if not isinstance(message, AIMessage) or message.tool_calls:
                continue
            text = message_text(message)
            if text:
                texts.append(text)

        self._logger.info("responder_invoke_complete",
                          responder=self.name,
                          new_message_count=len(new_messages),
                          text_count=len(texts))
        return texts

    async def invoke_stream(self, context: ConversationContext) -> AsyncIterator[str]:
        """Yield generated text chunks as they arrive.

        The caller may stop iterating at any point to cancel.
        """
        messages = self._build_messages(context)
        self._logger.info("responder_stream_start",
                          responder=self.name,
                          turn_count=len(context))

        if not self.uses_tools:
            async for chunk in self._llm.astream(messages):
                text = message_text(chunk)
                if text:
                    yield text
            return

        async for chunk, metadata in self._graph.astream({"messages": messages}, stream_mode="messages"):
            if metadata.get("langgraph_node") != "agent":
                continue
            text = message_text(chunk)
            if text:
                yield text
