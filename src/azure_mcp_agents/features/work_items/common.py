from dataclasses import dataclass
from typing import Any, Dict

from azure.devops.connection import Connection
from azure.devops.v7_1.core.core_client import CoreClient
from azure.devops.v7_1.work_item_tracking.models import WorkItem
from azure.devops.v7_1.work_item_tracking.work_item_tracking_client import WorkItemTrackingClient

from azure_mcp_agents.utils.azure_client import AzureDevOpsClientError
from azure_mcp_agents.utils.formatting import display_name

UNASSIGNED = "Unassigned"


@dataclass
class WorkItemSummary:
    id: int
    title: str
    state: str
    assigned_to: str
    tags: str

    @classmethod
    def from_work_item(cls, work_item: WorkItem) -> "WorkItemSummary":
        """
        Decode a work item field bag, falling back per field when a value is missing.

        Args:
            work_item: Work item returned by the work item tracking client

        Returns:
            WorkItemSummary with fallback values filled in
        """
        fields = work_item.fields or {}
        return cls(
            id=work_item.id,
            title=_text(fields, "System.Title", "No Title"),
            state=_text(fields, "System.State", "Unknown"),
            assigned_to=_assignee(fields.get("System.AssignedTo")),
            tags=_text(fields, "System.Tags", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Id": self.id,
            "Title": self.title,
            "State": self.state,
            "AssignedTo": self.assigned_to,
            "Tags": self.tags,
        }


def _text(fields: Dict[str, Any], name: str, fallback: str) -> str:
    value = fields.get(name)
    return fallback if value is None else str(value)


def _assignee(value: Any) -> str:
    if isinstance(value, str):
        return value or UNASSIGNED
    return display_name(value) or UNASSIGNED


def get_core_client(connection: Connection) -> CoreClient:
    """
    Get the core client for Azure DevOps.

    Args:
        connection: Shared Azure DevOps connection

    Returns:
        CoreClient instance

    Raises:
        AzureDevOpsClientError: If client creation fails
    """
    core_client = connection.clients_v7_1.get_core_client()

    if core_client is None:
        raise AzureDevOpsClientError("Failed to get core client.")

    return core_client


def get_work_item_client(connection: Connection) -> WorkItemTrackingClient:
    """
    Get the work item tracking client for Azure DevOps.

    Args:
        connection: Shared Azure DevOps connection

    Returns:
        WorkItemTrackingClient instance

    Raises:
        AzureDevOpsClientError: If client creation fails
    """
    wit_client = connection.clients_v7_1.get_work_item_tracking_client()

    if wit_client is None:
        raise AzureDevOpsClientError("Failed to get work item tracking client.")

    return wit_client
