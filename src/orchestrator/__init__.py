"""Multi-agent orchestration for the IT operations assistant."""

from .context import ConversationContext, ConversationTurn, TurnRole
from .routing import RoutingDirective, classify_directive, strip_routing_tokens, strip_completion_marker
from .types import AggregateResult, RunState
from .orchestrator import MultiAgentOrchestrator

__all__ = [
    "ConversationContext",
    "ConversationTurn",
    "TurnRole",
    "RoutingDirective",
    "classify_directive",
    "strip_routing_tokens",
    "strip_completion_marker",
    "AggregateResult",
    "RunState",
    "MultiAgentOrchestrator",
]
