"""Coordinator responder: answers general questions and routes by trailing sentinel."""

from typing import Any, Optional

from src.agents.base.responder import ChatResponder, ResponderSettings
from src.utils.agents.prompts import coordinator_sys_msg
from src.utils.config import config
from src.utils.config.constants import COORDINATOR_AGENT_NAME


def create_coordinator_agent(llm: Optional[Any] = None,
                             settings: Optional[ResponderSettings] = None) -> ChatResponder:
    """Build the coordinator. It has no tools of its own."""
    settings = settings or ResponderSettings.from_config(config)

    if llm is None:
        from src.utils.llm import create_azure_openai_chat
        llm = create_azure_openai_chat(temperature=settings.temperature, top_p=settings.top_p)

    return ChatResponder(
        name=COORDINATOR_AGENT_NAME,
        instructions=coordinator_sys_msg(),
        llm=llm,
        settings=settings,
        component="orchestrator",
    )
