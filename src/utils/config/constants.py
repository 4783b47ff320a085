"""
Central constants file for the IT operations assistant.

Single source of truth for agent names, control sentinels, mock-data
annotations, and other repeated values.
"""

# Agent names
COORDINATOR_AGENT_NAME = "Coordinator"
DEVOPS_AGENT_NAME = "DevOps"
SERVICENOW_AGENT_NAME = "ServiceNow"

# Routing sentinels emitted by the coordinator (exact, case-sensitive suffixes)
ROUTE_TO_DEVOPS_AGENT = "ROUTE_TO_DEVOPS_AGENT"
ROUTE_TO_SERVICENOW_AGENT = "ROUTE_TO_SERVICENOW_AGENT"
ROUTE_TO_BOTH = "ROUTE_TO_BOTH"

# Completion sentinel emitted by specialists
OPERATION_COMPLETE = "OPERATION_COMPLETE"

# Appended to tool output when a fixture-backed client is active
MOCK_DATA_SUFFIX = " [MOCK DATA]"

# Conversation
RECENT_MESSAGES_COUNT = 5
DEFAULT_SESSION_TTL_SECONDS = 3600
DEFAULT_CLEANUP_INTERVAL_SECONDS = 300

# Tool defaults
DEFAULT_LOOKBACK_DAYS = 7
DEFAULT_INCIDENT_PRIORITY = "1"
DEFAULT_CHANGE_REQUEST_STATE = "New"
MAX_LISTED_ITEMS = 10

# Model host
DEFAULT_SERVICE_ID = "azure-openai"
AZURE_OPENAI_API_VERSION = "2024-06-01"

# Backend APIs
DEVOPS_API_VERSION = "7.1"
SERVICENOW_RESULT_LIMIT = 100

# Network constants
DEFAULT_HOST = "0.0.0.0"
DEFAULT_CHAT_PORT = 8000

# Default timeout values
DEFAULT_TIMEOUT_SECONDS = 30
