"""
Unit tests for the ServiceNow clients and tools.
"""

import json
import pytest
import requests
from unittest.mock import patch
from freezegun import freeze_time

from src.agents.servicenow.clients import (
    CHANGE_REQUEST_TABLE,
    INCIDENT_TABLE,
    MockServiceNowClient,
    RealServiceNowClient,
    ServiceNowResponse,
    create_servicenow_client,
    normalize_instance_url,
)
from src.agents.servicenow.tools import (
    ServiceNowChangeRequestCount,
    ServiceNowIncidentCount,
    ServiceNowIncidentDetails,
    ServiceNowIncidentsAssignedTo,
    ServiceNowRecentIncidents,
    create_servicenow_tools,
)
from src.agents.servicenow.tools.base import priority_text, incident_state_text
from src.utils.config import UnifiedConfig, ConfigError
from src.utils.exceptions import TransportError


def _response(status_code, payload=None, reason="OK"):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.url = "https://contoso.service-now.com/api/now/table/incident"
    response._content = json.dumps(payload or {}).encode("utf-8")
    return response


class RecordingClient(MockServiceNowClient):
    """Mock client that remembers every query it receives."""

    def __init__(self):
        self.queries = []

    def query_table(self, table, query):
        self.queries.append((table, query))
        return super().query_table(table, query)


class TestDisplayHelpers:

    @pytest.mark.parametrize("code,text", [
        ("1", "Critical"), ("2", "High"), ("3", "Moderate"), ("4", "Low"), ("5", "Planning"),
    ])
    def test_priority_text(self, code, text):
        assert priority_text(code) == text

    def test_unknown_priority(self):
        assert priority_text("9") == "Priority 9"

    def test_incident_state_text(self):
        assert incident_state_text("2") == "In Progress"
        assert incident_state_text("42") == "State 42"


class TestNormalizeInstanceUrl:

    @pytest.mark.parametrize("raw,expected", [
        ("contoso", "https://contoso.service-now.com"),
        ("contoso.service-now.com", "https://contoso.service-now.com"),
        ("https://contoso.service-now.com/", "https://contoso.service-now.com"),
    ])
    def test_normalizes(self, raw, expected):
        assert normalize_instance_url(raw) == expected


class TestMockServiceNowClient:

    def test_priority_fixture(self, servicenow_mock_client):
        result = servicenow_mock_client.query_table(INCIDENT_TABLE, "priority=1&active=true")
        assert [r["number"] for r in result.result] == ["INC0001001", "INC0001002", "INC0001003"]

    def test_unmatched_query_is_empty(self, servicenow_mock_client):
        assert len(servicenow_mock_client.query_table(INCIDENT_TABLE, "priority=4&active=true")) == 0

    def test_unsupported_table_is_empty(self, servicenow_mock_client):
        assert len(servicenow_mock_client.query_table("problem", "priority=1&active=true")) == 0

    def test_recent_incidents_fall_back_for_any_date(self, servicenow_mock_client):
        result = servicenow_mock_client.query_table(INCIDENT_TABLE, "sys_created_on>=2031-01-01&active=true")
        assert len(result) == 5

    def test_change_requests_by_state(self, servicenow_mock_client):
        assert len(servicenow_mock_client.query_table(CHANGE_REQUEST_TABLE, "state.display_value=Assess")) == 2

    def test_results_are_copies(self, servicenow_mock_client):
        first = servicenow_mock_client.query_table(INCIDENT_TABLE, "number=INC0001001")
        first.result[0]["short_description"] = "changed"
        second = servicenow_mock_client.query_table(INCIDENT_TABLE, "number=INC0001001")
        assert second.result[0]["short_description"] == "Production database down"


class TestRealServiceNowClient:

    @pytest.fixture
    def client(self):
        return RealServiceNowClient("contoso", "svc.user", "secret", result_limit=50)

    def test_query_builds_table_url(self, client):
        payload = {"result": [{"number": "INC1"}]}
        with patch("src.agents.servicenow.clients.requests.request",
                   return_value=_response(200, payload)) as request:
            result = client.query_table(INCIDENT_TABLE, "priority=1&active=true")

        assert result.result == [{"number": "INC1"}]
        kwargs = request.call_args.kwargs
        assert kwargs["method"] == "GET"
        assert kwargs["url"] == (
            "https://contoso.service-now.com/api/now/table/incident"
            "?priority=1&active=true&sysparm_limit=50"
        )
        assert kwargs["auth"].username == "svc.user"

    def test_http_error_becomes_transport_error(self, client):
        with patch("src.agents.servicenow.clients.requests.request",
                   return_value=_response(500, reason="Internal Server Error")):
            with pytest.raises(TransportError) as exc_info:
                client.query_table(INCIDENT_TABLE, "priority=1&active=true")

        assert str(exc_info.value) == "ServiceNow query failed: 500 Internal Server Error"
        assert exc_info.value.status_code == 500

    def test_missing_result_key(self, client):
        with patch("src.agents.servicenow.clients.requests.request", return_value=_response(200, {})):
            assert client.query_table(INCIDENT_TABLE, "number=INC1").result == []


class TestServiceNowTools:

    def test_incident_count_defaults_to_critical(self):
        client = RecordingClient()
        tool = ServiceNowIncidentCount(client=client, mock_mode=True)

        result = tool.invoke({})

        assert result == "Found 3 active Critical priority incidents [MOCK DATA]"
        assert client.queries == [(INCIDENT_TABLE, "priority=1&active=true")]

    def test_incident_count_high(self, servicenow_mock_client):
        tool = ServiceNowIncidentCount(client=servicenow_mock_client, mock_mode=True)
        assert tool.invoke({"priority": "2"}) == "Found 2 active High priority incidents [MOCK DATA]"

    def test_incidents_assigned_to(self, servicenow_mock_client):
        tool = ServiceNowIncidentsAssignedTo(client=servicenow_mock_client, mock_mode=True)
        assert tool.invoke({"assigned_to": "John Smith"}) == \
            "Found 2 active incidents assigned to John Smith [MOCK DATA]"

    @freeze_time("2024-05-20 08:00:00")
    def test_recent_incidents_query_and_listing(self):
        client = RecordingClient()
        tool = ServiceNowRecentIncidents(client=client, mock_mode=True)

        result = tool.invoke({})

        assert client.queries == [(INCIDENT_TABLE, "sys_created_on>=2024-05-13&active=true")]
        assert result.startswith("Recent incidents (last 7 days) [MOCK DATA]:\n")
        assert "• INC0001001: Production database down (Critical priority)\n" in result
        assert "• INC0002001: Users cannot access email (High priority)\n" in result

    def test_recent_incidents_empty(self):
        class EmptyClient(MockServiceNowClient):
            def query_table(self, table, query):
                return ServiceNowResponse()

        tool = ServiceNowRecentIncidents(client=EmptyClient(), mock_mode=False)
        assert tool.invoke({"days": 2}) == "No incidents found in the last 2 days"

    def test_incident_details(self, servicenow_mock_client):
        tool = ServiceNowIncidentDetails(client=servicenow_mock_client, mock_mode=True)
        result = tool.invoke({"incident_number": "INC0001001"})

        assert result.startswith("Incident INC0001001 [MOCK DATA]:\n")
        assert "• Short Description: Production database down\n" in result
        assert "• State: In Progress\n" in result
        assert "• Priority: Critical\n" in result
        assert "• Category: Database\n" in result
        assert "• Assigned To: John Smith\n" in result
        assert "• Created: 2023-06-15 10:30:22\n" in result

    def test_incident_not_found(self, servicenow_mock_client):
        tool = ServiceNowIncidentDetails(client=servicenow_mock_client, mock_mode=True)
        assert tool.invoke({"incident_number": "INC9999999"}) == "Incident INC9999999 not found"

    def test_change_request_count_defaults_to_new(self, servicenow_mock_client):
        tool = ServiceNowChangeRequestCount(client=servicenow_mock_client, mock_mode=True)
        assert tool.invoke({}) == "Found 3 change requests in 'New' state [MOCK DATA]"

    def test_change_request_count_unknown_state(self, servicenow_mock_client):
        tool = ServiceNowChangeRequestCount(client=servicenow_mock_client, mock_mode=True)
        assert tool.invoke({"state": "Implement"}) == "Found 0 change requests in 'Implement' state [MOCK DATA]"

    def test_transport_failure_is_returned_as_text(self):
        client = RealServiceNowClient("contoso", "svc.user", "secret")
        tool = ServiceNowIncidentCount(client=client, mock_mode=False)
        with patch("src.agents.servicenow.clients.requests.request",
                   return_value=_response(500, reason="Internal Server Error")):
            result = tool.invoke({"priority": "1"})

        assert result == "Error querying incidents: ServiceNow query failed: 500 Internal Server Error"

    def test_catalog(self, servicenow_mock_client):
        tools = create_servicenow_tools(servicenow_mock_client)
        assert {t.name for t in tools} == {
            "servicenow_incident_count",
            "servicenow_incidents_assigned_to",
            "servicenow_recent_incidents",
            "servicenow_incident_details",
            "servicenow_change_request_count",
        }
        assert all(t.mock_mode for t in tools)


class TestCreateServiceNowClient:

    def test_mock_mode_selects_mock(self, write_config, clean_env):
        app_config = UnifiedConfig(write_config({"servicenow": {"use_mock": True}}))
        assert isinstance(create_servicenow_client(app_config), MockServiceNowClient)

    def test_real_mode_with_credentials(self, real_mode_config, monkeypatch):
        monkeypatch.setenv("SERVICENOW_USER", "svc.user")
        monkeypatch.setenv("SERVICENOW_PASSWORD", "secret")

        client = create_servicenow_client(UnifiedConfig(real_mode_config))

        assert isinstance(client, RealServiceNowClient)
        assert client.instance_url == "https://contoso.service-now.com"

    def test_real_mode_missing_credentials(self, real_mode_config):
        with pytest.raises(ConfigError) as exc_info:
            create_servicenow_client(UnifiedConfig(real_mode_config))

        assert "SERVICENOW_USER" in str(exc_info.value)
        assert "SERVICENOW_PASSWORD" in str(exc_info.value)
