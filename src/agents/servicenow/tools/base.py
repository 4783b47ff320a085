"""Base class for ServiceNow ITSM tools.

Provides the shared plumbing for every ServiceNow tool:
- Bound client (real or mock) and mock-data annotation
- Consistent call/result/error logging
- Error containment: failures are returned as text, never raised
- Display helpers for priority and incident state codes
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from langchain.tools import BaseTool

from src.utils.config.constants import MOCK_DATA_SUFFIX
from src.utils.logging.framework import SmartLogger, log_execution

logger = SmartLogger("servicenow")

PRIORITY_TEXT = {
    "1": "Critical",
    "2": "High",
    "3": "Moderate",
    "4": "Low",
    "5": "Planning",
}

INCIDENT_STATE_TEXT = {
    "1": "New",
    "2": "In Progress",
    "3": "On Hold",
    "6": "Resolved",
    "7": "Closed",
    "8": "Canceled",
}


def priority_text(priority: Optional[str]) -> str:
    return PRIORITY_TEXT.get(priority, f"Priority {priority}")


def incident_state_text(state: Optional[str]) -> str:
    return INCIDENT_STATE_TEXT.get(state, f"State {state}")


class BaseServiceNowTool(BaseTool, ABC):
    """Base class for all ServiceNow tools."""

    client: Any = None
    mock_mode: bool = False
    # Completes the phrase "Error <error_action>: ..."
    error_action: str = "querying ServiceNow"

    @property
    def mock_suffix(self) -> str:
        return MOCK_DATA_SUFFIX if self.mock_mode else ""

    def _log_call(self, **kwargs):
        """Log tool call with consistent format."""
        logger.info("tool_call",
                    component="servicenow",
                    tool_name=self.name,
                    tool_args=kwargs,
                    mock_mode=self.mock_mode)

    def _log_result(self, result: str):
        """Log tool result with consistent format."""
        logger.info("tool_result",
                    component="servicenow",
                    tool_name=self.name,
                    result_preview=result[:200])

    def _log_query(self, table: str, query: str):
        """Log the encoded query sent to the client."""
        logger.info("glide_query",
                    component="servicenow",
                    tool_name=self.name,
                    table=table,
                    query=query)

    def _handle_error(self, error: Exception) -> str:
        logger.error("tool_error",
                     component="servicenow",
                     tool_name=self.name,
                     error=str(error),
                     error_type=type(error).__name__)
        return f"Error {self.error_action}: {error}"

    def _query(self, table: str, query: str):
        self._log_query(table, query)
        return self.client.query_table(table, query)

    @staticmethod
    def _display_value(record: Dict[str, Any], field_name: str) -> Optional[str]:
        """Display value of a reference field, or None when absent."""
        value = record.get(field_name)
        if isinstance(value, dict):
            return value.get("display_value")
        return value

    @log_execution("servicenow", "tool_execute", include_args=True, include_result=True)
    def _run(self, **kwargs) -> str:
        """Execute tool with automatic logging and error handling."""
        self._log_call(**kwargs)

        try:
            result = self._execute(**kwargs)
        except Exception as e:
            return self._handle_error(e)

        self._log_result(result)
        return result

    @abstractmethod
    def _execute(self, **kwargs) -> str:
        """Execute the tool's main logic. Must be implemented by subclasses."""
        pass
