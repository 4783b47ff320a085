"""Layered configuration for the IT operations assistant.

Precedence (highest first):
    1. Environment variables (see ``UnifiedConfig.ENV_OVERRIDES``)
    2. system_config.json
    3. ``CODE_DEFAULTS``

Secrets never come from the file: they are read from the environment only
and exposed through ``get_secret``.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from src.utils.logging.framework import SmartLogger

from .constants import (
    RECENT_MESSAGES_COUNT,
    DEFAULT_SESSION_TTL_SECONDS,
    DEFAULT_CLEANUP_INTERVAL_SECONDS,
    DEFAULT_SERVICE_ID,
    DEVOPS_API_VERSION,
    SERVICENOW_RESULT_LIMIT,
    DEFAULT_HOST,
    DEFAULT_CHAT_PORT,
    DEFAULT_TIMEOUT_SECONDS,
)

logger = SmartLogger("system")

CODE_DEFAULTS: Dict[str, Any] = {
    "llm": {
        "temperature": 0.3,
        "top_p": 0.9,
        "max_tokens": 4000,
        "timeout": 120,
        "service_id": DEFAULT_SERVICE_ID,
    },
    "conversation": {
        "history_window": RECENT_MESSAGES_COUNT,
        "session_ttl_seconds": DEFAULT_SESSION_TTL_SECONDS,
        "cleanup_interval_seconds": DEFAULT_CLEANUP_INTERVAL_SECONDS,
    },
    "devops": {
        "use_mock": True,
        "organization_url": None,
        "project_name": None,
        "api_version": DEVOPS_API_VERSION,
        "timeout": DEFAULT_TIMEOUT_SECONDS,
    },
    "servicenow": {
        "use_mock": True,
        "instance_url": None,
        "result_limit": SERVICENOW_RESULT_LIMIT,
        "timeout": DEFAULT_TIMEOUT_SECONDS,
    },
    "server": {
        "host": DEFAULT_HOST,
        "port": DEFAULT_CHAT_PORT,
    },
    "security": {
        "max_input_length": 50000,
    },
}


class ConfigError(Exception):
    """Missing or unusable configuration."""
    pass


def merge_sections(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay ``override`` on a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_sections(merged[key], value)
        else:
            merged[key] = value
    return merged


TRUE_STRINGS = ('true', '1', 'yes', 'on')
FALSE_STRINGS = ('false', '0', 'no', 'off')


def coerce_env_value(raw: str, default: Any = None) -> Union[str, int, float, bool]:
    """Convert an environment string to the type of the setting's default.

    Settings without a typed default (``None`` or text) keep the raw string.

    Raises:
        ConfigError: If the string is not a valid value of that type
    """
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise ConfigError(f"Expected a boolean ({'/'.join(TRUE_STRINGS + FALSE_STRINGS)}), got {raw!r}")
    if isinstance(default, (int, float)):
        try:
            return type(default)(raw.strip())
        except ValueError:
            raise ConfigError(f"Expected {type(default).__name__}, got {raw!r}") from None
    return raw


class UnifiedConfig:
    """Read-only view over defaults, the JSON file and the environment."""

    # Secret key -> environment variable
    SECRET_ENV_VARS = {
        'azure_openai_key': 'AZURE_OPENAI_API_KEY',
        'azure_openai_endpoint': 'AZURE_OPENAI_ENDPOINT',
        'azure_openai_deployment': 'AZURE_OPENAI_CHAT_DEPLOYMENT_NAME',
        'azure_openai_api_version': 'AZURE_OPENAI_API_VERSION',
        'devops_token': 'DEVOPS_PERSONAL_ACCESS_TOKEN',
        'servicenow_user': 'SERVICENOW_USER',
        'servicenow_pass': 'SERVICENOW_PASSWORD',
    }

    # Environment variable -> dotted config path
    ENV_OVERRIDES = {
        'LLM_TEMPERATURE': 'llm.temperature',
        'LLM_TOP_P': 'llm.top_p',
        'LLM_MAX_TOKENS': 'llm.max_tokens',
        'LLM_TIMEOUT': 'llm.timeout',
        'CONVERSATION_HISTORY_WINDOW': 'conversation.history_window',
        'SESSION_TTL_SECONDS': 'conversation.session_ttl_seconds',
        'DEVOPS_USE_MOCK': 'devops.use_mock',
        'DEVOPS_ORGANIZATION_URL': 'devops.organization_url',
        'DEVOPS_PROJECT_NAME': 'devops.project_name',
        'SERVICENOW_USE_MOCK': 'servicenow.use_mock',
        'SERVICENOW_INSTANCE_URL': 'servicenow.instance_url',
        'SERVER_HOST': 'server.host',
        'SERVER_PORT': 'server.port',
    }

    def __init__(self, config_file: str = "system_config.json"):
        self._config_file = config_file
        self._config = merge_sections(CODE_DEFAULTS, self._read_file())
        self._apply_env_overrides()
        self._secrets = {
            key: os.environ[env_var]
            for key, env_var in self.SECRET_ENV_VARS.items()
            if os.environ.get(env_var)
        }

        logger.info("unified_config_loaded",
                    config_file=config_file,
                    secret_keys=sorted(self._secrets),
                    devops_mock=self.devops_use_mock,
                    servicenow_mock=self.servicenow_use_mock)

    def _read_file(self) -> Dict[str, Any]:
        path = Path(self._config_file)
        if not path.exists():
            logger.warning("config_file_not_found", path=str(path), using_defaults=True)
            return {}

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("config_file_load_error", path=str(path), error=str(e), using_defaults=True)
            return {}

        if not isinstance(data, dict):
            logger.error("config_file_load_error", path=str(path),
                         error="top level must be an object", using_defaults=True)
            return {}
        return data

    def _apply_env_overrides(self):
        for env_var, path in self.ENV_OVERRIDES.items():
            raw = os.environ.get(env_var)
            if raw is None:
                continue
            *parents, leaf = path.split('.')
            defaults = CODE_DEFAULTS
            section = self._config
            for key in parents:
                defaults = defaults.get(key, {})
                section = section.setdefault(key, {})
            try:
                section[leaf] = coerce_env_value(raw, defaults.get(leaf))
            except ConfigError as e:
                raise ConfigError(f"Invalid value for {env_var}: {e}") from e
            logger.debug("env_override_applied", env_var=env_var, config_path=path)

    def get(self, path: str, default: Any = None) -> Any:
        """Value at a dotted path such as ``'devops.use_mock'``, or ``default``."""
        value: Any = self._config
        for key in path.split('.'):
            if not isinstance(value, dict) or key not in value:
                return default
            value = value[key]
        return value

    def get_secret(self, key: str, required: bool = True) -> Optional[str]:
        """Secret from the environment.

        Raises:
            ConfigError: If ``required`` and the secret is not set
        """
        value = self._secrets.get(key)
        if value is None and required:
            raise ConfigError(
                f"Required secret '{key}' not found in environment variable {self.SECRET_ENV_VARS.get(key, key)}")
        return value

    def has_secret(self, key: str) -> bool:
        return key in self._secrets

    @property
    def llm_temperature(self) -> float:
        return self.get('llm.temperature', 0.3)

    @property
    def llm_top_p(self) -> Optional[float]:
        return self.get('llm.top_p')

    @property
    def llm_max_tokens(self) -> int:
        return self.get('llm.max_tokens', 4000)

    @property
    def llm_timeout(self) -> int:
        return self.get('llm.timeout', 120)

    @property
    def llm_service_id(self) -> str:
        return self.get('llm.service_id', DEFAULT_SERVICE_ID)

    @property
    def history_window(self) -> int:
        return self.get('conversation.history_window', RECENT_MESSAGES_COUNT)

    @property
    def session_ttl_seconds(self) -> int:
        return self.get('conversation.session_ttl_seconds', DEFAULT_SESSION_TTL_SECONDS)

    @property
    def cleanup_interval_seconds(self) -> int:
        return self.get('conversation.cleanup_interval_seconds', DEFAULT_CLEANUP_INTERVAL_SECONDS)

    @property
    def devops_use_mock(self) -> bool:
        return bool(self.get('devops.use_mock', True))

    @property
    def servicenow_use_mock(self) -> bool:
        return bool(self.get('servicenow.use_mock', True))

    @property
    def max_input_length(self) -> int:
        return self.get('security.max_input_length', 50000)

    @property
    def server_host(self) -> str:
        return self.get('server.host', DEFAULT_HOST)

    @property
    def server_port(self) -> int:
        return self.get('server.port', DEFAULT_CHAT_PORT)


# Singleton instance
config = UnifiedConfig()
