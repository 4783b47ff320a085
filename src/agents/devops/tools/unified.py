"""Azure DevOps work item tools."""

from typing import List, Optional
from pydantic import BaseModel, Field

from .base import BaseDevOpsTool
from src.utils.config.constants import DEFAULT_LOOKBACK_DAYS, MAX_LISTED_ITEMS


class DevOpsWorkItemCount(BaseDevOpsTool):
    """Count active work items assigned to a person."""
    name: str = "devops_work_item_count"
    description: str = "Count active (not Closed or Removed) Azure DevOps work items assigned to a person"
    error_action: str = "querying work items"

    class Input(BaseModel):
        assignee: str = Field(description="Display name of the assignee, e.g. 'John Doe'")

    args_schema: type = Input

    def _execute(self, assignee: str) -> str:
        result = self.client.query_work_items_by_assignee(assignee)
        return f"Found {len(result.work_items)} active work items assigned to {assignee}{self.mock_suffix}"


class DevOpsBugCount(BaseDevOpsTool):
    """Count active bugs assigned to a person."""
    name: str = "devops_bug_count"
    description: str = "Count active Azure DevOps bugs assigned to a person"
    error_action: str = "querying bugs"

    class Input(BaseModel):
        assignee: str = Field(description="Display name of the assignee, e.g. 'Jane Smith'")

    args_schema: type = Input

    def _execute(self, assignee: str) -> str:
        result = self.client.query_bugs_by_assignee(assignee)
        return f"Found {len(result.work_items)} active bugs assigned to {assignee}{self.mock_suffix}"


class DevOpsRecentWorkItems(BaseDevOpsTool):
    """List work items created in the last N days.

    Only the first ten ids are listed; the header still names the window.
    """
    name: str = "devops_recent_work_items"
    description: str = "List Azure DevOps work items created in the last N days"
    error_action: str = "querying recent work items"

    class Input(BaseModel):
        days: int = Field(DEFAULT_LOOKBACK_DAYS, description="How many days back to look (default 7)")

    args_schema: type = Input

    def _execute(self, days: int = DEFAULT_LOOKBACK_DAYS) -> str:
        result = self.client.query_recent_work_items(days)
        if not result.work_items:
            return f"No work items found in the last {days} days"

        lines = [f"Recent work items (last {days} days){self.mock_suffix}:\n"]
        for item in result.work_items[:MAX_LISTED_ITEMS]:
            lines.append(f"• Work Item #{item.id}: Created in the last {days} days\n")
        return "".join(lines)


class DevOpsWorkItemDetails(BaseDevOpsTool):
    """Get the title, type, state and assignee of one work item."""
    name: str = "devops_work_item_details"
    description: str = "Get details (title, type, state, assignee) of an Azure DevOps work item by ID"
    error_action: str = "getting work item details"

    class Input(BaseModel):
        work_item_id: int = Field(description="Numeric work item ID, e.g. 1001")

    args_schema: type = Input

    def _execute(self, work_item_id: int) -> str:
        item = self.client.get_work_item(work_item_id)
        fields = item["fields"]

        assigned_to = fields.get("System.AssignedTo")
        if isinstance(assigned_to, dict) and assigned_to.get("displayName"):
            assignee = assigned_to["displayName"]
        else:
            assignee = "Unassigned"

        return (
            f"Work Item #{work_item_id}{self.mock_suffix}:\n"
            f"• Title: {fields['System.Title']}\n"
            f"• Type: {fields['System.WorkItemType']}\n"
            f"• State: {fields['System.State']}\n"
            f"• Assigned To: {assignee}\n"
        )


def create_devops_tools(client, mock_mode: Optional[bool] = None) -> List[BaseDevOpsTool]:
    """Bind the DevOps tool catalog to one client.

    ``mock_mode`` defaults to the client's own ``is_mock`` flag.
    """
    if mock_mode is None:
        mock_mode = bool(getattr(client, "is_mock", False))

    return [
        DevOpsWorkItemCount(client=client, mock_mode=mock_mode),
        DevOpsBugCount(client=client, mock_mode=mock_mode),
        DevOpsRecentWorkItems(client=client, mock_mode=mock_mode),
        DevOpsWorkItemDetails(client=client, mock_mode=mock_mode),
    ]
