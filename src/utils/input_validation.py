"""Prompt validation at the chat boundary.

Only caller-supplied prompts pass through here; model output and
responder-to-responder traffic are trusted.
"""

import re
from typing import Optional

from .logging.framework import SmartLogger

logger = SmartLogger("chat_api")

# Markup that has no business in a chat prompt
REJECTED_PATTERNS = (
    re.compile(r'<script.*?>', re.IGNORECASE),
    re.compile(r'javascript:', re.IGNORECASE),
    re.compile(r'vbscript:', re.IGNORECASE),
    re.compile(r'data:text/html', re.IGNORECASE),
    re.compile(r'<[^>]*\bon\w+\s*=', re.IGNORECASE),
    re.compile(r'<!--.*?-->', re.DOTALL),
)


class ValidationError(Exception):
    """Prompt rejected before reaching the coordinator"""
    pass


def sanitize_prompt(prompt: str, max_length: int) -> str:
    """Length and markup checks, then trim and drop null bytes.

    Raises:
        ValidationError: If the prompt is too long or carries rejected markup
    """
    if len(prompt) > max_length:
        raise ValidationError(f"Input too long: {len(prompt)} > {max_length}")

    if any(pattern.search(prompt) for pattern in REJECTED_PATTERNS):
        raise ValidationError("Potentially malicious content detected")

    return prompt.strip().replace('\x00', '')


def validate_orchestrator_input(user_input: str, max_length: Optional[int] = None) -> str:
    """Validate a chat prompt.

    Args:
        user_input: Raw prompt from the caller
        max_length: Override for ``security.max_input_length``

    Returns:
        The trimmed prompt

    Raises:
        ValidationError: If the prompt is missing, blank, too long or rejected
    """
    if not isinstance(user_input, str):
        raise ValidationError(f"Expected string, got {type(user_input).__name__}")

    if not user_input.strip():
        raise ValidationError("Empty input not allowed")

    if max_length is None:
        from .config import config
        max_length = config.max_input_length

    try:
        return sanitize_prompt(user_input, max_length)
    except ValidationError as e:
        logger.warning("prompt_rejected", error=str(e), prompt_length=len(user_input))
        raise
