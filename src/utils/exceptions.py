"""Error taxonomy shared by backend clients and the orchestrator"""

from typing import Optional


class TransportError(Exception):
    """A backend request failed or returned a non-success status"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class OrchestrationError(Exception):
    """A responder or tool failure surfaced during an orchestrator run"""
    def __init__(self, stage: str, original_error: Exception):
        self.stage = stage
        self.original_error = original_error
        super().__init__(f"Error during {stage}: {str(original_error)}")
