"""ServiceNow tools for incident and change request queries."""

from typing import List, Optional
from pydantic import BaseModel, Field

from .base import BaseServiceNowTool, priority_text, incident_state_text
from ..clients import INCIDENT_TABLE, CHANGE_REQUEST_TABLE
from src.utils.config.constants import (
    DEFAULT_LOOKBACK_DAYS,
    DEFAULT_INCIDENT_PRIORITY,
    DEFAULT_CHANGE_REQUEST_STATE,
    MAX_LISTED_ITEMS,
)
from src.utils.datetime_utils import days_ago_date


class ServiceNowIncidentCount(BaseServiceNowTool):
    """Count active incidents at one priority level."""
    name: str = "servicenow_incident_count"
    description: str = "Get count of active incidents with the specified priority level"
    error_action: str = "querying incidents"

    class Input(BaseModel):
        priority: str = Field(DEFAULT_INCIDENT_PRIORITY,
                              description="Priority level (1=Critical, 2=High, 3=Moderate, 4=Low, 5=Planning)")

    args_schema: type = Input

    def _execute(self, priority: str = DEFAULT_INCIDENT_PRIORITY) -> str:
        result = self._query(INCIDENT_TABLE, f"priority={priority}&active=true")
        return f"Found {len(result.result)} active {priority_text(priority)} priority incidents{self.mock_suffix}"


class ServiceNowIncidentsAssignedTo(BaseServiceNowTool):
    """Count active incidents assigned to a person."""
    name: str = "servicenow_incidents_assigned_to"
    description: str = "Get count of active incidents assigned to a specific person"
    error_action: str = "querying incidents"

    class Input(BaseModel):
        assigned_to: str = Field(description="Name or user ID of the assigned person")

    args_schema: type = Input

    def _execute(self, assigned_to: str) -> str:
        result = self._query(INCIDENT_TABLE, f"assigned_to.name={assigned_to}&active=true")
        return f"Found {len(result.result)} active incidents assigned to {assigned_to}{self.mock_suffix}"


class ServiceNowRecentIncidents(BaseServiceNowTool):
    """List active incidents created in the last N days."""
    name: str = "servicenow_recent_incidents"
    description: str = "Get recent active incidents created in the last specified days"
    error_action: str = "querying recent incidents"

    class Input(BaseModel):
        days: int = Field(DEFAULT_LOOKBACK_DAYS, description="Number of days to look back, default is 7")

    args_schema: type = Input

    def _execute(self, days: int = DEFAULT_LOOKBACK_DAYS) -> str:
        result = self._query(INCIDENT_TABLE, f"sys_created_on>={days_ago_date(days)}&active=true")
        if not result.result:
            return f"No incidents found in the last {days} days"

        lines = [f"Recent incidents (last {days} days){self.mock_suffix}:\n"]
        for incident in result.result[:MAX_LISTED_ITEMS]:
            lines.append(
                f"• {incident['number']}: {incident['short_description']} "
                f"({priority_text(incident['priority'])} priority)\n"
            )
        return "".join(lines)


class ServiceNowIncidentDetails(BaseServiceNowTool):
    """Describe a single incident by number."""
    name: str = "servicenow_incident_details"
    description: str = "Get incident details by incident number"
    error_action: str = "getting incident details"

    class Input(BaseModel):
        incident_number: str = Field(description="Incident number (e.g., INC0000123)")

    args_schema: type = Input

    def _execute(self, incident_number: str) -> str:
        result = self._query(INCIDENT_TABLE, f"number={incident_number}")
        if not result.result:
            return f"Incident {incident_number} not found"

        incident = result.result[0]
        assignee = self._display_value(incident, "assigned_to") or "Unassigned"

        return (
            f"Incident {incident_number}{self.mock_suffix}:\n"
            f"• Short Description: {incident['short_description']}\n"
            f"• State: {incident_state_text(incident['state'])}\n"
            f"• Priority: {priority_text(incident['priority'])}\n"
            f"• Category: {incident['category']}\n"
            f"• Assigned To: {assignee}\n"
            f"• Created: {incident['sys_created_on']}\n"
        )


class ServiceNowChangeRequestCount(BaseServiceNowTool):
    """Count change requests in one state."""
    name: str = "servicenow_change_request_count"
    description: str = "Get count of change requests with the specified state"
    error_action: str = "querying change requests"

    class Input(BaseModel):
        state: str = Field(DEFAULT_CHANGE_REQUEST_STATE,
                           description="State of change requests (e.g., 'New', 'Assess', 'Authorize', 'Scheduled', 'Implement')")

    args_schema: type = Input

    def _execute(self, state: str = DEFAULT_CHANGE_REQUEST_STATE) -> str:
        result = self._query(CHANGE_REQUEST_TABLE, f"state.display_value={state}")
        return f"Found {len(result.result)} change requests in '{state}' state{self.mock_suffix}"


def create_servicenow_tools(client, mock_mode: Optional[bool] = None) -> List[BaseServiceNowTool]:
    """Bind the ServiceNow tool catalog to one client."""
    if mock_mode is None:
        mock_mode = bool(getattr(client, "is_mock", False))

    return [
        ServiceNowIncidentCount(client=client, mock_mode=mock_mode),
        ServiceNowIncidentsAssignedTo(client=client, mock_mode=mock_mode),
        ServiceNowRecentIncidents(client=client, mock_mode=mock_mode),
        ServiceNowIncidentDetails(client=client, mock_mode=mock_mode),
        ServiceNowChangeRequestCount(client=client, mock_mode=mock_mode),
    ]
