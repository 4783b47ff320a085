"""Type definitions for orchestration runs and the caller-facing response."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, TypedDict

from src.utils.config.constants import DEVOPS_AGENT_NAME, SERVICENOW_AGENT_NAME
from src.utils.exceptions import OrchestrationError
from .context import ConversationContext
from .routing import RoutingDirective


class RunState(str, Enum):
    """Orchestration state machine positions."""
    BUILDING_CONTEXT = "building_context"
    COORDINATOR_RUNNING = "coordinator_running"
    ROUTING_NONE = "routing_none"
    ROUTING_DEVOPS = "routing_devops"
    ROUTING_SERVICENOW = "routing_servicenow"
    ROUTING_BOTH = "routing_both"
    SPECIALIST_RUNNING = "specialist_running"
    COMPLETE = "complete"


ROUTING_STATES = {
    RoutingDirective.NONE: RunState.ROUTING_NONE,
    RoutingDirective.DEVOPS: RunState.ROUTING_DEVOPS,
    RoutingDirective.SERVICENOW: RunState.ROUTING_SERVICENOW,
    RoutingDirective.BOTH: RunState.ROUTING_BOTH,
}


class ChatResponsePayload(TypedDict, total=False):
    """Caller-facing response body."""
    chatResponse: str
    coordinatorResponse: Optional[str]
    devOpsResponse: Optional[str]
    serviceNowResponse: Optional[str]
    sessionId: str


@dataclass
class AggregateResult:
    """Outcome of one orchestration run.

    ``final_text`` is the coordinator's cleaned text whether or not a
    specialist ran; specialist answers stay in ``specialist_texts``.
    """
    coordinator_text: Optional[str] = None
    specialist_texts: Dict[str, Optional[str]] = field(default_factory=dict)
    final_text: str = ""
    routing: RoutingDirective = RoutingDirective.NONE
    state: RunState = RunState.BUILDING_CONTEXT
    error: Optional[OrchestrationError] = None
    context: Optional[ConversationContext] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.state == RunState.COMPLETE

    def to_response(self) -> ChatResponsePayload:
        return {
            "chatResponse": self.final_text,
            "coordinatorResponse": self.coordinator_text,
            "devOpsResponse": self.specialist_texts.get(DEVOPS_AGENT_NAME),
            "serviceNowResponse": self.specialist_texts.get(SERVICENOW_AGENT_NAME),
        }

    def to_log_dict(self) -> Dict[str, Any]:
        return {
            "routing": self.routing.value,
            "state": self.state.value,
            "has_coordinator_text": self.coordinator_text is not None,
            "specialists": sorted(self.specialist_texts),
            "error": str(self.error) if self.error else None,
        }
