"""ServiceNow tools for ITSM operations."""

from .base import BaseServiceNowTool, priority_text, incident_state_text
from .unified import (
    ServiceNowIncidentCount,
    ServiceNowIncidentsAssignedTo,
    ServiceNowRecentIncidents,
    ServiceNowIncidentDetails,
    ServiceNowChangeRequestCount,
    create_servicenow_tools
)

__all__ = [
    'BaseServiceNowTool',
    'priority_text',
    'incident_state_text',
    'ServiceNowIncidentCount',
    'ServiceNowIncidentsAssignedTo',
    'ServiceNowRecentIncidents',
    'ServiceNowIncidentDetails',
    'ServiceNowChangeRequestCount',
    'create_servicenow_tools'
]
