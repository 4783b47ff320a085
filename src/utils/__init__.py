"""Cross-cutting utilities.

- agents/: Responder system prompts
- config/: Layered configuration and constants
- logging/: Per-component JSON logging
"""

from .input_validation import validate_orchestrator_input, ValidationError
from .exceptions import TransportError, OrchestrationError

__all__ = [
    'validate_orchestrator_input',
    'ValidationError',
    'TransportError',
    'OrchestrationError',
]
