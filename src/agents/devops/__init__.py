"""Azure DevOps specialist: work item counts, bug counts, recent items and details."""

from .clients import (
    DevOpsClient,
    RealDevOpsClient,
    MockDevOpsClient,
    WiqlResult,
    WorkItemReference,
    create_devops_client
)
from .main import create_devops_agent

__all__ = [
    'DevOpsClient',
    'RealDevOpsClient',
    'MockDevOpsClient',
    'WiqlResult',
    'WorkItemReference',
    'create_devops_client',
    'create_devops_agent'
]
