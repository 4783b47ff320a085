"""
Global pytest configuration and fixtures for the IT operations assistant tests.

Provides scripted chat models, mock backend clients and configuration
fixtures shared by the unit and integration suites.
"""

import os
import sys
import json
import tempfile
import pytest
from pathlib import Path
from typing import Any, Callable, List, Union
from unittest.mock import Mock, AsyncMock

# Add project root to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

# Keep test runs from writing into the working tree's logs/ directory
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "itops-assistant-test-logs"))

from langchain_core.messages import AIMessage, ToolMessage, AIMessageChunk

from src.utils.config import UnifiedConfig
from src.utils.config.constants import OPERATION_COMPLETE
from src.agents.devops.clients import MockDevOpsClient
from src.agents.servicenow.clients import MockServiceNowClient


Step = Union[AIMessage, Callable[[List[Any]], AIMessage]]


# ============================================================================
# Scripted Chat Models
# ============================================================================

def make_scripted_llm(*steps: Step) -> Mock:
    """Mock chat model that answers each ``ainvoke`` with the next scripted step.

    A step is either a ready AIMessage or a callable receiving the messages
    sent to the model and returning one.
    """
    queue = list(steps)

    async def respond(messages, *args, **kwargs):
        step = queue.pop(0)
        return step(messages) if callable(step) else step

    llm = Mock()
    llm.ainvoke = AsyncMock(side_effect=respond)
    llm.bind_tools = Mock(return_value=llm)
    return llm


def make_streaming_llm(*chunks: str) -> Mock:
    """Mock chat model whose ``astream`` yields the given text chunks."""
    async def astream(messages, *args, **kwargs):
        for chunk in chunks:
            yield AIMessageChunk(content=chunk)

    llm = Mock()
    llm.astream = Mock(side_effect=astream)
    llm.bind_tools = Mock(return_value=llm)
    return llm


def tool_call(name: str, args: dict, call_id: str = "call_1") -> AIMessage:
    return AIMessage(content="", tool_calls=[{"id": call_id, "name": name, "args": args}])


def echo_tool_result(messages: List[Any]) -> AIMessage:
    """Answer with the most recent tool output followed by the completion marker."""
    tool_messages = [m for m in messages if isinstance(m, ToolMessage)]
    content = tool_messages[-1].content if tool_messages else "No tool output"
    return AIMessage(content=f"{content}\n{OPERATION_COMPLETE}")


@pytest.fixture
def scripted_llm():
    """Factory for scripted chat models."""
    return make_scripted_llm


@pytest.fixture
def streaming_llm():
    """Factory for streaming chat models."""
    return make_streaming_llm


@pytest.fixture
def tool_call_message():
    return tool_call


@pytest.fixture
def echo_tool_step():
    return echo_tool_result


# ============================================================================
# Backend Client Fixtures
# ============================================================================

@pytest.fixture
def devops_mock_client():
    return MockDevOpsClient()


@pytest.fixture
def servicenow_mock_client():
    return MockServiceNowClient()


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables for testing."""
    env_vars = {
        "AZURE_OPENAI_ENDPOINT": "https://test.openai.azure.com",
        "AZURE_OPENAI_API_KEY": "test-api-key",
        "AZURE_OPENAI_CHAT_DEPLOYMENT_NAME": "test-deployment",
        "AZURE_OPENAI_API_VERSION": "2024-06-01",
        "DEVOPS_PERSONAL_ACCESS_TOKEN": "test-pat",
        "SERVICENOW_USER": "test.user",
        "SERVICENOW_PASSWORD": "test-password",
    }

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every environment variable the configuration layer reads."""
    for key in list(UnifiedConfig.SECRET_ENV_VARS.values()) + list(UnifiedConfig.ENV_OVERRIDES):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def write_config(tmp_path):
    """Write a system_config.json into a temp dir and return its path."""
    def _write(data: dict) -> str:
        config_file = tmp_path / "system_config.json"
        config_file.write_text(json.dumps(data, indent=2))
        return str(config_file)
    return _write


@pytest.fixture
def real_mode_config(write_config, clean_env):
    """Config file with both specialists in real mode; secrets are left to each test."""
    path = write_config({
        "devops": {
            "use_mock": False,
            "organization_url": "https://dev.azure.com/contoso",
            "project_name": "Platform",
        },
        "servicenow": {
            "use_mock": False,
            "instance_url": "contoso",
        },
    })
    return path


# ============================================================================
# Markers
# ============================================================================

def pytest_collection_modifyitems(config, items):
    """Mark tests by the directory they live in."""
    for item in items:
        path = str(item.path)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)
        elif f"{os.sep}integration{os.sep}" in path:
            item.add_marker(pytest.mark.integration)
