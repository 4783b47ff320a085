"""Azure DevOps tools for work item queries."""

from .base import BaseDevOpsTool
from .unified import (
    DevOpsWorkItemCount,
    DevOpsBugCount,
    DevOpsRecentWorkItems,
    DevOpsWorkItemDetails,
    create_devops_tools
)

__all__ = [
    'BaseDevOpsTool',
    'DevOpsWorkItemCount',
    'DevOpsBugCount',
    'DevOpsRecentWorkItems',
    'DevOpsWorkItemDetails',
    'create_devops_tools'
]
