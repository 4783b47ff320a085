"""Agent system prompts and messages."""

from .coordinator_prompts import coordinator_sys_msg
from .devops_prompts import devops_agent_sys_msg
from .servicenow_prompts import servicenow_agent_sys_msg

__all__ = [
    'coordinator_sys_msg',
    'devops_agent_sys_msg',
    'servicenow_agent_sys_msg',
]
