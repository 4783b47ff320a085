"""Agent-specific utilities (system prompts)."""
