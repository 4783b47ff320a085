"""ServiceNow specialist responder for incident and change request questions."""

from typing import Any, Optional

from src.agents.base.responder import ChatResponder, ResponderSettings
from src.agents.servicenow.clients import ServiceNowClient, create_servicenow_client
from src.agents.servicenow.tools import create_servicenow_tools
from src.utils.agents.prompts import servicenow_agent_sys_msg
from src.utils.config import config
from src.utils.config.constants import SERVICENOW_AGENT_NAME
from src.utils.logging.framework import SmartLogger, log_execution

logger = SmartLogger("servicenow")


@log_execution("servicenow", "create_servicenow_agent", include_args=False, include_result=False)
def create_servicenow_agent(llm: Optional[Any] = None,
                            client: Optional[ServiceNowClient] = None,
                            settings: Optional[ResponderSettings] = None) -> ChatResponder:
    """Build the ServiceNow specialist with its tool catalog bound to one client.

    Raises:
        ConfigError: If real mode is configured without its connection settings
    """
    client = client if client is not None else create_servicenow_client()
    tools = create_servicenow_tools(client)
    settings = settings or ResponderSettings.from_config(config)

    if llm is None:
        from src.utils.llm import create_azure_openai_chat
        llm = create_azure_openai_chat(temperature=settings.temperature, top_p=settings.top_p)

    logger.info("servicenow_agent_created",
                mock_mode=client.is_mock,
                tools_count=len(tools),
                tool_names=[tool.name for tool in tools])

    return ChatResponder(
        name=SERVICENOW_AGENT_NAME,
        instructions=servicenow_agent_sys_msg(),
        llm=llm,
        tools=tools,
        settings=settings,
        component="servicenow",
    )
