"""ServiceNow specialist: incident and change request queries over the Table API."""

from .clients import (
    ServiceNowClient,
    RealServiceNowClient,
    MockServiceNowClient,
    ServiceNowResponse,
    create_servicenow_client
)
from .main import create_servicenow_agent

__all__ = [
    'ServiceNowClient',
    'RealServiceNowClient',
    'MockServiceNowClient',
    'ServiceNowResponse',
    'create_servicenow_client',
    'create_servicenow_agent'
]
