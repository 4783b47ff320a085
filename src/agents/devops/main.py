"""Azure DevOps specialist responder."""

from typing import Any, Optional

from src.agents.base.responder import ChatResponder, ResponderSettings
from src.agents.devops.clients import DevOpsClient, create_devops_client
from src.agents.devops.tools import create_devops_tools
from src.utils.agents.prompts import devops_agent_sys_msg
from src.utils.config import config
from src.utils.config.constants import DEVOPS_AGENT_NAME
from src.utils.logging.framework import SmartLogger, log_execution

logger = SmartLogger("devops")


@log_execution("devops", "create_devops_agent", include_args=False, include_result=False)
def create_devops_agent(llm: Optional[Any] = None,
                        client: Optional[DevOpsClient] = None,
                        settings: Optional[ResponderSettings] = None) -> ChatResponder:
    """Build the DevOps specialist with its tool catalog bound to one client.

    Raises:
        ConfigError: If real mode is configured without its connection settings
    """
    client = client if client is not None else create_devops_client()
    tools = create_devops_tools(client)
    settings = settings or ResponderSettings.from_config(config)

    if llm is None:
        from src.utils.llm import create_azure_openai_chat
        llm = create_azure_openai_chat(temperature=settings.temperature, top_p=settings.top_p)

    logger.info("devops_agent_created",
                mock_mode=client.is_mock,
                tools_count=len(tools),
                tool_names=[tool.name for tool in tools])

    return ChatResponder(
        name=DEVOPS_AGENT_NAME,
        instructions=devops_agent_sys_msg(),
        llm=llm,
        tools=tools,
        settings=settings,
        component="devops",
    )
