"""Centralized LLM utilities for the IT operations assistant"""

from typing import Optional, Dict, Any
from langchain_openai import AzureChatOpenAI
from src.utils.config.unified_config import config as app_config
from src.utils.config.constants import AZURE_OPENAI_API_VERSION
from src.utils.logging.framework import SmartLogger

logger = SmartLogger("system")


def create_azure_openai_chat(temperature: Optional[float] = None,
                             top_p: Optional[float] = None,
                             **kwargs) -> AzureChatOpenAI:
    """Create Azure OpenAI chat instance using global config.

    Credentials come from the secrets store; generation settings default to
    the ``llm`` config section and may be overridden per responder.

    Raises:
        ConfigError: If the endpoint, key or deployment name is missing
    """
    llm_kwargs: Dict[str, Any] = {
        "azure_endpoint": app_config.get_secret("azure_openai_endpoint"),
        "azure_deployment": app_config.get_secret("azure_openai_deployment"),
        "openai_api_version": (app_config.get_secret("azure_openai_api_version", required=False)
                               or AZURE_OPENAI_API_VERSION),
        "openai_api_key": app_config.get_secret("azure_openai_key"),
        "temperature": app_config.llm_temperature if temperature is None else temperature,
        "max_tokens": app_config.llm_max_tokens,
        "timeout": app_config.llm_timeout,
    }

    effective_top_p = app_config.llm_top_p if top_p is None else top_p
    if effective_top_p is not None:
        llm_kwargs["top_p"] = effective_top_p

    llm_kwargs.update(kwargs)

    logger.info("creating_llm_instance",
                deployment=llm_kwargs.get("azure_deployment"),
                temperature=llm_kwargs.get("temperature"),
                top_p=llm_kwargs.get("top_p"),
                max_tokens=llm_kwargs.get("max_tokens"))

    return AzureChatOpenAI(**llm_kwargs)


__all__ = [
    "create_azure_openai_chat",
]
