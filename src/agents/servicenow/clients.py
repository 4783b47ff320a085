"""ServiceNow backend clients.

``RealServiceNowClient`` queries the Table API with a raw encoded query;
``MockServiceNowClient`` answers from fixtures keyed by the exact query string.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol

import requests
from requests.auth import HTTPBasicAuth

from src.utils.config import config, ConfigError
from src.utils.config.constants import SERVICENOW_RESULT_LIMIT, DEFAULT_TIMEOUT_SECONDS
from src.utils.exceptions import TransportError
from src.utils.logging.framework import SmartLogger

logger = SmartLogger("servicenow")

INCIDENT_TABLE = "incident"
CHANGE_REQUEST_TABLE = "change_request"


@dataclass
class ServiceNowResponse:
    """Records returned by a Table API query."""
    result: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "ServiceNowResponse":
        return cls(result=list(data.get("result") or []))

    def __len__(self) -> int:
        return len(self.result)


class ServiceNowClient(Protocol):
    """Capability interface shared by the real and mock clients."""

    is_mock: bool

    def query_table(self, table: str, query: str) -> ServiceNowResponse:
        ...


def normalize_instance_url(instance: str) -> str:
    """Expand a bare instance name to its service-now.com URL."""
    instance = instance.strip().rstrip('/')
    if not instance.startswith('http'):
        if '.service-now.com' not in instance:
            instance = f"https://{instance}.service-now.com"
        else:
            instance = f"https://{instance}"
    return instance


class RealServiceNowClient:
    """Table API client using basic authentication."""

    is_mock = False

    def __init__(self, instance_url: str, username: str, password: str,
                 result_limit: int = SERVICENOW_RESULT_LIMIT,
                 timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.instance_url = normalize_instance_url(instance_url)
        self.result_limit = result_limit
        self.timeout = timeout
        self._auth = HTTPBasicAuth(username, password)
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json"
        }

    def _build_url(self, table: str, query: str) -> str:
        return f"{self.instance_url}/api/now/table/{table}?{query}&sysparm_limit={self.result_limit}"

    def query_table(self, table: str, query: str) -> ServiceNowResponse:
        url = self._build_url(table, query)
        logger.info("servicenow_query", table=table, query=query)

        try:
            response = requests.request(
                method="GET",
                url=url,
                auth=self._auth,
                headers=self._headers,
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            reason = e.response.reason if e.response is not None else ""
            logger.error("servicenow_request_failed", table=table, status_code=status, reason=reason)
            raise TransportError(f"ServiceNow query failed: {status} {reason}".rstrip(), status_code=status) from e
        except requests.RequestException as e:
            logger.error("servicenow_request_failed", table=table, error=str(e), error_type=type(e).__name__)
            raise TransportError(f"ServiceNow query failed: {e}") from e

        result = ServiceNowResponse.from_json(response.json())
        logger.info("servicenow_query_result", table=table, result_count=len(result))
        return result


def _incident(number: str, short_description: str, priority: str, state: str,
              category: str, created: str, assignee: str) -> Dict[str, Any]:
    return {
        "number": number,
        "short_description": short_description,
        "priority": priority,
        "state": state,
        "category": category,
        "sys_created_on": created,
        "assigned_to": {"display_value": assignee},
    }


def _change_request(number: str, short_description: str, state: str) -> Dict[str, Any]:
    return {
        "number": number,
        "short_description": short_description,
        "state": {"display_value": state},
    }


_INC_DB_DOWN = _incident("INC0001001", "Production database down", "1", "2",
                         "Database", "2023-06-15 10:30:22", "John Smith")
_INC_WEBSITE = _incident("INC0001002", "Website unavailable", "1", "2",
                         "Network", "2023-06-15 14:22:10", "Jane Doe")
_INC_PAYMENTS = _incident("INC0001003", "Payment processing failing", "1", "1",
                          "Software", "2023-06-15 16:45:33", "Bob Johnson")
_INC_EMAIL = _incident("INC0002001", "Users cannot access email", "2", "2",
                       "Email", "2023-06-14 08:12:45", "Alice Brown")
_INC_CRM = _incident("INC0002002", "CRM system slow performance", "2", "2",
                     "Software", "2023-06-14 09:32:18", "John Smith")
_INC_PRINTER = _incident("INC0003001", "Printer not working", "3", "2",
                         "Hardware", "2023-06-13 11:22:33", "Support Team")

RECENT_INCIDENTS_KEY = "sys_created_on>=2023-06-10&active=true"


class MockServiceNowClient:
    """Fixture-backed client used when ``servicenow.use_mock`` is on.

    Lookup is by exact query string. Date-windowed incident queries with no
    exact fixture fall back to the recent-incidents fixture; anything else
    unmatched is an empty result.
    """

    is_mock = True

    INCIDENTS: Dict[str, List[Dict[str, Any]]] = {
        "priority=1&active=true": [_INC_DB_DOWN, _INC_WEBSITE, _INC_PAYMENTS],
        "priority=2&active=true": [_INC_EMAIL, _INC_CRM],
        "priority=3&active=true": [_INC_PRINTER],
        "assigned_to.name=John Smith&active=true": [_INC_DB_DOWN, _INC_CRM],
        "assigned_to.name=Jane Doe&active=true": [_INC_WEBSITE],
        RECENT_INCIDENTS_KEY: [_INC_DB_DOWN, _INC_WEBSITE, _INC_PAYMENTS, _INC_EMAIL, _INC_CRM],
        "number=INC0001001": [_INC_DB_DOWN],
    }

    CHANGE_REQUESTS: Dict[str, List[Dict[str, Any]]] = {
        "state.display_value=New": [
            _change_request("CHG0001001", "Deploy new application version", "New"),
            _change_request("CHG0001002", "Update firewall rules", "New"),
            _change_request("CHG0001003", "Install new server", "New"),
        ],
        "state.display_value=Assess": [
            _change_request("CHG0002001", "Network infrastructure upgrade", "Assess"),
            _change_request("CHG0002002", "Database migration", "Assess"),
        ],
        "state.display_value=Authorize": [
            _change_request("CHG0003001", "Deploy security patches", "Authorize"),
        ],
    }

    def query_table(self, table: str, query: str) -> ServiceNowResponse:
        if table == INCIDENT_TABLE:
            fixtures = self.INCIDENTS
        elif table == CHANGE_REQUEST_TABLE:
            fixtures = self.CHANGE_REQUESTS
        else:
            logger.debug("mock_servicenow_unsupported_table", table=table)
            return ServiceNowResponse()

        records = fixtures.get(query)
        if records is None and table == INCIDENT_TABLE and "sys_created_on>=" in query:
            logger.debug("mock_servicenow_recent_fallback", query=query)
            records = fixtures[RECENT_INCIDENTS_KEY]

        logger.debug("mock_servicenow_query",
                     table=table,
                     query=query,
                     matched=records is not None)
        return ServiceNowResponse(result=copy.deepcopy(records or []))


def create_servicenow_client(app_config=None) -> ServiceNowClient:
    """Select the client variant from the ``servicenow`` config section.

    Raises:
        ConfigError: If real mode is selected and a connection setting is missing
    """
    app_config = app_config or config

    if app_config.servicenow_use_mock:
        logger.info("servicenow_client_selected", mode="mock")
        return MockServiceNowClient()

    instance_url = app_config.get("servicenow.instance_url")
    username = app_config.get_secret("servicenow_user", required=False)
    password = app_config.get_secret("servicenow_pass", required=False)

    missing = [
        name for name, value in (
            ("servicenow.instance_url", instance_url),
            ("SERVICENOW_USER", username),
            ("SERVICENOW_PASSWORD", password),
        ) if not value
    ]
    if missing:
        raise ConfigError(f"Missing required ServiceNow settings: {', '.join(missing)}")

    logger.info("servicenow_client_selected",
                mode="real",
                instance_url=instance_url,
                has_auth=True)
    return RealServiceNowClient(
        instance_url,
        username,
        password,
        result_limit=app_config.get("servicenow.result_limit", SERVICENOW_RESULT_LIMIT),
        timeout=app_config.get("servicenow.timeout", DEFAULT_TIMEOUT_SECONDS),
    )
