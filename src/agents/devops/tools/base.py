"""Base class for Azure DevOps tools.

Every tool wraps one ``DevOpsClient`` call and returns a short text summary.
Failures never escape a tool: they come back as ``"Error <action>: <detail>"``
so the model always receives something it can relay.
"""

from abc import ABC, abstractmethod
from typing import Any

from langchain.tools import BaseTool

from src.utils.config.constants import MOCK_DATA_SUFFIX
from src.utils.logging.framework import SmartLogger, log_execution

logger = SmartLogger("devops")


class BaseDevOpsTool(BaseTool, ABC):
    """Base class for all Azure DevOps tools."""

    client: Any = None
    mock_mode: bool = False
    # Completes the phrase "Error <error_action>: ..."
    error_action: str = "running Azure DevOps query"

    @property
    def mock_suffix(self) -> str:
        return MOCK_DATA_SUFFIX if self.mock_mode else ""

    def _log_call(self, **kwargs):
        logger.info("tool_call",
                    component="devops",
                    tool_name=self.name,
                    tool_args=kwargs,
                    mock_mode=self.mock_mode)

    def _log_result(self, result: str):
        logger.info("tool_result",
                    component="devops",
                    tool_name=self.name,
                    result_preview=result[:200])

    def _handle_error(self, error: Exception) -> str:
        logger.error("tool_error",
                     component="devops",
                     tool_name=self.name,
                     error=str(error),
                     error_type=type(error).__name__)
        return f"Error {self.error_action}: {error}"

    @log_execution("devops", "tool_execute", include_args=True, include_result=True)
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
