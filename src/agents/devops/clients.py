"""Azure DevOps backend clients.

Two interchangeable implementations of the ``DevOpsClient`` capability:
``RealDevOpsClient`` talks to the Azure DevOps REST API with WIQL queries,
``MockDevOpsClient`` serves fixed fixtures and never fails.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol

import requests
from requests.auth import HTTPBasicAuth

from src.utils.config import config, ConfigError
from src.utils.config.constants import (
    DEVOPS_API_VERSION,
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_TIMEOUT_SECONDS,
)
from src.utils.datetime_utils import days_ago_date
from src.utils.exceptions import TransportError
from src.utils.logging.framework import SmartLogger

logger = SmartLogger("devops")


@dataclass(frozen=True)
class WorkItemReference:
    id: int
    url: str = ""


@dataclass
class WiqlResult:
    """Work item references returned by a WIQL query."""
    work_items: List[WorkItemReference] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "WiqlResult":
        return cls(work_items=[
            WorkItemReference(id=int(item["id"]), url=item.get("url", ""))
            for item in data.get("workItems") or []
        ])

    @classmethod
    def from_ids(cls, ids: List[int]) -> "WiqlResult":
        return cls(work_items=[WorkItemReference(id=i, url=f"https://example.com/{i}") for i in ids])

    @property
    def ids(self) -> List[int]:
        return [item.id for item in self.work_items]

    def __len__(self) -> int:
        return len(self.work_items)


class DevOpsClient(Protocol):
    """Capability interface shared by the real and mock clients."""

    is_mock: bool

    def query_work_items_by_assignee(self, assignee: str) -> WiqlResult:
        ...

    def query_bugs_by_assignee(self, assignee: str) -> WiqlResult:
        ...

    def query_recent_work_items(self, days: int = DEFAULT_LOOKBACK_DAYS) -> WiqlResult:
        ...

    def get_work_item(self, work_item_id: int) -> Dict[str, Any]:
        ...


def _quote(value: str) -> str:
    """Escape a value for a single-quoted WIQL literal."""
    return value.replace("'", "''")


def build_assignee_query(assignee: str) -> str:
    return (
        "SELECT [System.Id] FROM WorkItems "
        f"WHERE [System.AssignedTo] CONTAINS '{_quote(assignee)}' "
        "AND [System.State] <> 'Closed' "
        "AND [System.State] <> 'Removed'"
    )


def build_bug_query(assignee: str) -> str:
    return (
        "SELECT [System.Id] FROM WorkItems "
        f"WHERE [System.AssignedTo] CONTAINS '{_quote(assignee)}' "
        "AND [System.WorkItemType] = 'Bug' "
        "AND [System.State] <> 'Closed' "
        "AND [System.State] <> 'Removed'"
    )


def build_recent_query(days: int) -> str:
    return (
        "SELECT [System.Id], [System.Title], [System.WorkItemType], [System.CreatedBy] "
        "FROM WorkItems "
        f"WHERE [System.CreatedDate] >= '{days_ago_date(days)}' "
        "ORDER BY [System.CreatedDate] DESC"
    )


class RealDevOpsClient:
    """Azure DevOps REST client authenticated with a personal access token."""

    is_mock = False

    def __init__(self, organization_url: str, project_name: str, personal_access_token: str,
                 api_version: str = DEVOPS_API_VERSION, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.organization_url = organization_url.rstrip('/')
        self.project_name = project_name
        self.api_version = api_version
        self.timeout = timeout
        # Azure DevOps expects an empty username with the PAT as password
        self._auth = HTTPBasicAuth("", personal_access_token)
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json"
        }

    @property
    def base_url(self) -> str:
        return f"{self.organization_url}/{self.project_name}/_apis/wit"

    def _make_request(self, method: str, url: str, failure_message: str, **kwargs) -> requests.Response:
        """Send one request; any failure becomes a TransportError."""
        try:
            response = requests.request(
                method=method,
                url=url,
                auth=self._auth,
                headers=self._headers,
                timeout=self.timeout,
                **kwargs
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            reason = e.response.reason if e.response is not None else ""
            logger.error("devops_request_failed", url=url, status_code=status, reason=reason)
            raise TransportError(f"{failure_message}: {status} {reason}".rstrip(), status_code=status) from e
        except requests.RequestException as e:
            logger.error("devops_request_failed", url=url, error=str(e), error_type=type(e).__name__)
            raise TransportError(f"{failure_message}: {e}") from e
        return response

    def run_wiql(self, query: str) -> WiqlResult:
        url = f"{self.base_url}/wiql?api-version={self.api_version}"
        logger.info("wiql_query", query=query, project=self.project_name)
        response = self._make_request("POST", url, "WIQL query failed", json={"query": query})
        result = WiqlResult.from_json(response.json())
        logger.info("wiql_query_result", result_count=len(result))
        return result

    def query_work_items_by_assignee(self, assignee: str) -> WiqlResult:
        return self.run_wiql(build_assignee_query(assignee))

    def query_bugs_by_assignee(self, assignee: str) -> WiqlResult:
        return self.run_wiql(build_bug_query(assignee))

    def query_recent_work_items(self, days: int = DEFAULT_LOOKBACK_DAYS) -> WiqlResult:
        return self.run_wiql(build_recent_query(days))

    def get_work_item(self, work_item_id: int) -> Dict[str, Any]:
        url = f"{self.base_url}/workitems/{work_item_id}?api-version={self.api_version}"
        response = self._make_request("GET", url, f"Error retrieving work item {work_item_id}")
        return response.json()


def _work_item(item_id: int, title: str, item_type: str, state: str,
               display_name: str, unique_name: str) -> Dict[str, Any]:
    return {
        "id": item_id,
        "fields": {
            "System.Title": title,
            "System.WorkItemType": item_type,
            "System.State": state,
            "System.AssignedTo": {
                "displayName": display_name,
                "uniqueName": unique_name,
            },
        },
    }


class MockDevOpsClient:
    """Fixture-backed client used when ``devops.use_mock`` is on."""

    is_mock = True

    WORK_ITEMS_BY_ASSIGNEE: Dict[str, List[int]] = {
        "John Doe": [1001, 1002, 1003],
        "Jane Smith": [2001, 2002, 2003, 2004, 2005],
    }

    BUGS_BY_ASSIGNEE: Dict[str, List[int]] = {
        "John Doe": [1001],
        "Jane Smith": [2001, 2003],
    }

    RECENT_BY_DAYS: Dict[int, List[int]] = {
        7: [3001, 3002, 3003, 3004, 3005],
        30: [3001, 3002, 3003, 3004, 3005, 3006, 3007, 3008],
    }

    WORK_ITEM_DETAILS: Dict[int, Dict[str, Any]] = {
        1001: _work_item(1001, "Fix critical login bug", "Bug", "Active",
                         "John Doe", "john.doe@example.com"),
        2001: _work_item(2001, "Implement new authentication flow", "Bug", "Active",
                         "Jane Smith", "jane.smith@example.com"),
        3001: _work_item(3001, "Add user profile feature", "User Story", "New",
                         "John Doe", "john.doe@example.com"),
    }

    def query_work_items_by_assignee(self, assignee: str) -> WiqlResult:
        ids = self.WORK_ITEMS_BY_ASSIGNEE.get(assignee, [])
        logger.debug("mock_devops_query", query="work_items_by_assignee", assignee=assignee, result_count=len(ids))
        return WiqlResult.from_ids(ids)

    def query_bugs_by_assignee(self, assignee: str) -> WiqlResult:
        ids = self.BUGS_BY_ASSIGNEE.get(assignee, [])
        logger.debug("mock_devops_query", query="bugs_by_assignee", assignee=assignee, result_count=len(ids))
        return WiqlResult.from_ids(ids)

    def query_recent_work_items(self, days: int = DEFAULT_LOOKBACK_DAYS) -> WiqlResult:
        ids = self.RECENT_BY_DAYS.get(days)
        if ids is None:
            logger.debug("mock_devops_recent_fallback", requested_days=days, fallback_days=DEFAULT_LOOKBACK_DAYS)
            ids = self.RECENT_BY_DAYS[DEFAULT_LOOKBACK_DAYS]
        return WiqlResult.from_ids(ids)

    def get_work_item(self, work_item_id: int) -> Dict[str, Any]:
        details = self.WORK_ITEM_DETAILS.get(work_item_id)
        if details is not None:
            return copy.deepcopy(details)
        # Unknown ids get a placeholder record instead of a failure
        return _work_item(work_item_id, "Sample work item", "Task", "New", "Unassigned", "")


def create_devops_client(app_config=None) -> DevOpsClient:
    """Select the client variant from the ``devops`` config section.

    Raises:
        ConfigError: If real mode is selected and a connection setting is missing
    """
    app_config = app_config or config

    if app_config.devops_use_mock:
        logger.info("devops_client_selected", mode="mock")
        return MockDevOpsClient()

    organization_url = app_config.get("devops.organization_url")
    project_name = app_config.get("devops.project_name")
    token = app_config.get_secret("devops_token", required=False)

    missing = [
        name for name, value in (
            ("devops.organization_url", organization_url),
            ("devops.project_name", project_name),
            ("DEVOPS_PERSONAL_ACCESS_TOKEN", token),
        ) if not value
    ]
    if missing:
        raise ConfigError(f"Missing required Azure DevOps settings: {', '.join(missing)}")

    logger.info("devops_client_selected",
                mode="real",
                organization_url=organization_url,
                project=project_name)
    return RealDevOpsClient(
        organization_url,
        project_name,
        token,
        api_version=app_config.get("devops.api_version", DEVOPS_API_VERSION),
        timeout=app_config.get("devops.timeout", DEFAULT_TIMEOUT_SECONDS),
    )
