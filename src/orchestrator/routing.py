"""Routing sentinel classification and stripping.

The coordinator signals a hand-off by ending its text with a literal routing
token. Detection is an exact, case-sensitive suffix match on the trimmed text.
Stripping removes every recognized token wherever it appears and trims the
result, so applying it twice is the same as applying it once.
"""

from enum import Enum
from typing import List

from src.utils.config.constants import (
    ROUTE_TO_DEVOPS_AGENT,
    ROUTE_TO_SERVICENOW_AGENT,
    ROUTE_TO_BOTH,
    OPERATION_COMPLETE,
)


class RoutingDirective(str, Enum):
    NONE = "none"
    DEVOPS = "devops"
    SERVICENOW = "servicenow"
    BOTH = "both"


ROUTING_TOKENS = {
    ROUTE_TO_DEVOPS_AGENT: RoutingDirective.DEVOPS,
    ROUTE_TO_SERVICENOW_AGENT: RoutingDirective.SERVICENOW,
    ROUTE_TO_BOTH: RoutingDirective.BOTH,
}


def classify_directive(text: str) -> RoutingDirective:
    """Resolve the routing directive from a coordinator message.

    Each token is checked independently; when more than one matches the
    last one in token order wins.
    """
    if not text:
        return RoutingDirective.NONE

    trimmed = text.strip()
    directive = RoutingDirective.NONE
    for token, candidate in ROUTING_TOKENS.items():
        if trimmed.endswith(token):
            directive = candidate
    return directive


def strip_routing_tokens(text: str) -> str:
    if not text:
        return ""
    for token in ROUTING_TOKENS:
        text = text.replace(token, "")
    return text.strip()


def strip_completion_marker(text: str) -> str:
    if not text:
        return ""
    return text.replace(OPERATION_COMPLETE, "").strip()


class RoutingTokenFilter:
    """Removes routing tokens from a chunked text stream.

    Holds back just enough trailing characters that a token split across
    chunks is never emitted partially.
    """

    def __init__(self):
        self._buffer = ""
        self._holdback = max(len(token) for token in ROUTING_TOKENS) - 1
        self._emitted: List[str] = []

    def feed(self, chunk: str) -> str:
        self._buffer += chunk
        for token in ROUTING_TOKENS:
            self._buffer = self._buffer.replace(token, "")

        safe = len(self._buffer) - self._holdback
        if safe <= 0:
            return ""

        ready, self._buffer = self._buffer[:safe], self._buffer[safe:]
        self._emitted.append(ready)
        return ready

    def flush(self) -> str:
        remainder = self._buffer
        for token in ROUTING_TOKENS:
            remainder = remainder.replace(token, "")
        remainder = remainder.rstrip()
        self._buffer = ""
        if remainder:
            self._emitted.append(remainder)
        return remainder

    @property
    def text(self) -> str:
        """Everything emitted so far, trimmed."""
        return "".join(self._emitted).strip()
