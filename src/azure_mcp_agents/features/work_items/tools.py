from typing import List, Optional

from azure.devops.connection import Connection
from azure.devops.exceptions import AzureDevOpsServiceError
from azure.devops.v7_1.work_item_tracking.models import JsonPatchOperation, Wiql
from loguru import logger
from mcp.server.fastmcp import FastMCP

from azure_mcp_agents.features.work_items.common import (
    WorkItemSummary,
    get_core_client,
    get_work_item_client,
)
from azure_mcp_agents.utils.formatting import (
    error_result,
    iterate_pages,
    json_result,
    parse_positive_int,
)

DEFAULT_WORK_ITEM_TYPE = "Task"
DEFAULT_MAX_COUNT = 10
# Upper bound of ids accepted by a single get_work_items call
MAX_BATCH_SIZE = 200

WORK_ITEM_FIELDS = [
    "System.Id",
    "System.Title",
    "System.State",
    "System.AssignedTo",
    "System.Tags",
]

PROJECT_REQUIRED = "Project name is required and cannot be empty."


def _wiql_literal(value: str) -> str:
    """Quote a value as a WIQL string literal."""
    return "'" + value.replace("'", "''") + "'"


def _build_work_items_query(project_name: str, work_item_type: str) -> str:
    return (
        f"SELECT {', '.join(f'[{field}]' for field in WORK_ITEM_FIELDS)} "
        "FROM WorkItems "
        f"WHERE [System.TeamProject] = {_wiql_literal(project_name)} "
        f"AND [System.WorkItemType] = {_wiql_literal(work_item_type)} "
        "ORDER BY [System.ChangedDate] DESC"
    )


def _resolve_max_count(max_count_raw: Optional[str]) -> int:
    if not max_count_raw:
        return DEFAULT_MAX_COUNT

    max_count = parse_positive_int(max_count_raw)
    if max_count is None:
        logger.warning(
            f"Invalid maxCount value '{max_count_raw}' provided. "
            f"Defaulting to {DEFAULT_MAX_COUNT}."
        )
        return DEFAULT_MAX_COUNT

    if max_count > MAX_BATCH_SIZE:
        logger.warning(f"maxCount {max_count} exceeds the batch limit. Using {MAX_BATCH_SIZE}.")
        return MAX_BATCH_SIZE

    return max_count


def _list_projects_impl(connection: Connection) -> str:
    """
    Implementation of project listing.

    Args:
        connection: Shared Azure DevOps connection

    Returns:
        JSON array of project names, or the error shape
    """
    logger.info("Listing Azure DevOps projects")
    try:
        core_client = get_core_client(connection)
        project_names = [project.name for project in iterate_pages(core_client.get_projects)]

        logger.info(f"Retrieved {len(project_names)} projects")
        return json_result(project_names)
    except Exception as e:
        logger.exception(f"Error listing projects: {e}")
        return error_result(f"Error listing projects: {str(e)}")


def _list_work_items_impl(
    connection: Connection,
    project_name: str,
    work_item_type: Optional[str] = None,
    max_count: Optional[str] = None,
) -> str:
    """
    Implementation of work item listing.

    Args:
        connection: Shared Azure DevOps connection
        project_name: Azure DevOps project name
        work_item_type: Work item type to filter by (optional). Defaults to Task.
        max_count: Maximum number of work items as a numeric string (optional). Defaults to 10.

    Returns:
        JSON array of work items, or the error shape
    """
    logger.info("Listing Azure DevOps work items.")

    if not project_name:
        logger.error("Project name not provided or is empty.")
        return error_result(PROJECT_REQUIRED)

    work_item_type = work_item_type or DEFAULT_WORK_ITEM_TYPE
    top = _resolve_max_count(max_count)

    try:
        wit_client = get_work_item_client(connection)

        wiql = Wiql(query=_build_work_items_query(project_name, work_item_type))
        logger.info(f"Executing WIQL query: {wiql.query}")

        query_result = wit_client.query_by_wiql(wiql, top=top)

        work_item_refs = query_result.work_items if query_result else None
        if not work_item_refs:
            logger.info(f"No work items found in project {project_name} of type {work_item_type}")
            return json_result([])

        work_item_ids = [ref.id for ref in work_item_refs[:top]]
        logger.info(f"Fetching details for {len(work_item_ids)} work items.")

        work_items = wit_client.get_work_items(
            ids=work_item_ids,
            fields=WORK_ITEM_FIELDS,
            as_of=query_result.as_of,
        )

        if not work_items:
            logger.warning("Retrieved work item IDs but could not fetch details.")
            return error_result("Retrieved work item IDs but could not fetch details.")

        result = [
            WorkItemSummary.from_work_item(work_item).to_dict()
            for work_item in work_items
            if work_item is not None
        ]

        logger.info(f"Retrieved {len(result)} work items from project {project_name}")
        return json_result(result)
    except Exception as e:
        logger.exception(f"Error listing work items: {e}")
        return error_result(f"Error listing work items: {str(e)}")


def _build_create_document(
    title: str,
    description: Optional[str] = None,
    assigned_to: Optional[str] = None,
    tags: Optional[str] = None,
) -> List[JsonPatchOperation]:
    """
    Build the patch document for a new work item. Only provided fields are set.
    """
    values = [
        ("System.Title", title),
        ("System.Description", description),
        ("System.AssignedTo", assigned_to),
        ("System.Tags", tags),
    ]
    return [
        JsonPatchOperation(op="add", path=f"/fields/{field}", value=value)
        for field, value in values
        if value
    ]


def _create_work_item_impl(
    connection: Connection,
    project_name: str,
    work_item_type: str,
    title: str,
    description: Optional[str] = None,
    assigned_to: Optional[str] = None,
    tags: Optional[str] = None,
) -> str:
    """
    Implementation of work item creation.

    Args:
        connection: Shared Azure DevOps connection
        project_name: Azure DevOps project name
        work_item_type: Type of the work item (e.g. Bug, Task, User Story)
        title: Title of the work item
        description: Description (optional)
        assigned_to: Display name or email of the assignee (optional)
        tags: Semicolon-separated tags (optional)

    Returns:
        JSON object with id, url and message, or the error shape
    """
    logger.info(
        f"Attempting to create a new work item in project {project_name} "
        f"of type {work_item_type} with title {title}"
    )

    if not project_name:
        logger.error("Project name not provided or is empty for creating a work item.")
        return error_result(PROJECT_REQUIRED)
    if not work_item_type:
        logger.error("Work item type not provided or is empty for creating a work item.")
        return error_result("Work item type is required and cannot be empty.")
    if not title:
        logger.error("Title not provided or is empty for creating a work item.")
        return error_result("Title is required and cannot be empty.")

    try:
        wit_client = get_work_item_client(connection)
        document = _build_create_document(title, description, assigned_to, tags)
        logger.info(
            "Sending request to create work item with patch: "
            f"{[operation.as_dict() for operation in document]}"
        )

        work_item = wit_client.create_work_item(
            document=document,
            project=project_name,
            type=work_item_type,
        )

        if work_item is None or work_item.id is None:
            logger.error(
                f"Failed to create work item in project {project_name}. "
                "The result was null or did not contain an ID."
            )
            return error_result("Failed to create work item. Result was null or ID was missing.")

        logger.info(f"Successfully created work item with ID: {work_item.id} in project {project_name}")
        return json_result({
            "id": work_item.id,
            # API URL, not the web UI URL
            "url": work_item.url,
            "message": f"Successfully created work item {work_item.id}.",
        })
    except AzureDevOpsServiceError as e:
        logger.exception(f"Error creating work item in project {project_name}: {e}")
        return error_result(f"Error creating work item (Azure DevOps): {str(e)}")
    except Exception as e:
        logger.exception(f"Error creating work item in project {project_name}: {e}")
        return error_result(f"Error creating work item: {str(e)}")


def register_tools(mcp: FastMCP, connection: Connection) -> None:
    """
    Register work item tools with the MCP server.

    Args:
        mcp: The FastMCP server instance
        connection: Shared Azure DevOps connection
    """

    @mcp.tool(name="list_azure_boards_projects")
    def list_projects() -> str:
        """
        Lists Azure DevOps projects.

        Returns:
            JSON array of project names
        """
        return _list_projects_impl(connection)


    @mcp.tool(name="list_azure_boards_work_items")
    def list_work_items(
        project_name: str,
        work_item_type: Optional[str] = None,
        max_count: Optional[str] = None,
    ) -> str:
        """
        Lists Azure DevOps work items for a specific project and type, most recently changed first.

        Args:
            project_name: Name of the Azure DevOps project.
            work_item_type: Type of work items to retrieve (e.g., Bug, Task, User Story). Defaults to Task if not specified.
            max_count: Maximum number of work items to retrieve. Defaults to 10 if not specified or invalid.

        Returns:
            JSON array of work items with Id, Title, State, AssignedTo and Tags
        """
        return _list_work_items_impl(connection, project_name, work_item_type, max_count)


    @mcp.tool(name="create_azure_boards_work_item")
    def create_work_item(
        project_name: str,
        work_item_type: str,
        title: str,
        description: Optional[str] = None,
        assigned_to: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> str:
        """
        Creates a new work item in Azure DevOps.

        Args:
            project_name: Name of the Azure DevOps project where the work item will be created.
            work_item_type: Type of the work item to create (e.g., Bug, Task, User Story).
            title: Title of the new work item.
            description: Description for the new work item (optional).
            assigned_to: Display name or email of the user to assign the work item to (optional).
            tags: Semicolon-separated list of tags for the work item (optional).

        Returns:
            JSON object with the new work item id and API URL
        """
        return _create_work_item_impl(
            connection,
            project_name,
            work_item_type,
            title,
            description=description,
            assigned_to=assigned_to,
            tags=tags,
        )
