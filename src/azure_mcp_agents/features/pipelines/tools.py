import json
from typing import Dict, Optional

from azure.devops.connection import Connection
from azure.devops.v7_1.build.models import Build, DefinitionReference
from loguru import logger
from mcp.server.fastmcp import FastMCP

from azure_mcp_agents.features.pipelines.common import (
    PipelineRunStatus,
    PipelineSummary,
    QueuedRun,
    get_build_client,
)
from azure_mcp_agents.utils.formatting import (
    error_result,
    is_not_found,
    iterate_pages,
    json_result,
    parse_positive_int,
)

PROJECT_REQUIRED = "Project name is required and cannot be empty."


def _parse_pipeline_parameters(raw: str) -> Optional[Dict[str, str]]:
    """
    Parse pipeline parameters given as a JSON object of string values.

    Raises:
        ValueError: If the text is not valid JSON or not an object of strings
    """
    parameters = json.loads(raw)
    if parameters is None:
        return None
    if not isinstance(parameters, dict):
        raise ValueError("Expected a JSON object of key-value pairs.")
    for key, value in parameters.items():
        if not isinstance(value, str):
            raise ValueError(f"Value of parameter '{key}' must be a string.")
    return parameters


def _list_pipelines_impl(connection: Connection, project_name: str) -> str:
    """
    Implementation of pipeline listing.

    Args:
        connection: Shared Azure DevOps connection
        project_name: Azure DevOps project name

    Returns:
        JSON array of pipelines, or the error shape
    """
    logger.info(f"Listing Azure DevOps pipelines for project {project_name}")

    if not project_name:
        logger.error("Project name not provided or is empty.")
        return error_result(PROJECT_REQUIRED)

    try:
        build_client = get_build_client(connection)
        definitions = list(iterate_pages(build_client.get_definitions, project=project_name))

        if not definitions:
            logger.info(f"No pipelines found in project {project_name}")
            return json_result([])

        result = [PipelineSummary.from_definition(definition).to_dict() for definition in definitions]

        logger.info(f"Retrieved {len(result)} pipelines from project {project_name}")
        return json_result(result)
    except Exception as e:
        logger.exception(f"Error listing pipelines in project {project_name}: {e}")
        return error_result(f"Error listing pipelines: {str(e)}")


def _run_pipeline_impl(
    connection: Connection,
    project_name: str,
    pipeline_id: str,
    branch_name: Optional[str] = None,
    pipeline_parameters: Optional[str] = None,
) -> str:
    """
    Implementation of queuing a pipeline run.

    Args:
        connection: Shared Azure DevOps connection
        project_name: Azure DevOps project name
        pipeline_id: Pipeline (build definition) ID as a numeric string
        branch_name: Branch to run on (optional). The pipeline's default branch is used otherwise.
        pipeline_parameters: JSON object of string key-value pairs (optional)

    Returns:
        JSON object describing the queued run, or the error shape
    """
    logger.info(f"Attempting to run pipeline ID {pipeline_id} in project {project_name}")

    if not project_name:
        logger.error("Project name not provided or is empty.")
        return error_result(PROJECT_REQUIRED)

    definition_id = parse_positive_int(pipeline_id)
    if definition_id is None:
        logger.error(f"Invalid Pipeline ID '{pipeline_id}' provided. It must be a positive integer.")
        return error_result("Pipeline ID is required and must be a positive integer.")

    try:
        build_client = get_build_client(connection)

        try:
            definition = build_client.get_definition(project=project_name, definition_id=definition_id)
        except Exception as e:
            if not is_not_found(e):
                logger.exception(
                    f"Error retrieving pipeline definition for ID {definition_id} in project {project_name}: {e}"
                )
                return error_result(f"Error retrieving pipeline definition: {str(e)}")
            definition = None

        if definition is None:
            logger.error(f"Pipeline with ID {definition_id} not found in project {project_name}.")
            return error_result(f"Pipeline with ID {definition_id} not found in project '{project_name}'.")

        build = Build(
            definition=DefinitionReference(id=definition_id),
            project=definition.project,
        )

        if branch_name:
            build.source_branch = branch_name

        if pipeline_parameters:
            try:
                parameters = _parse_pipeline_parameters(pipeline_parameters)
            except ValueError as e:
                logger.error(f"Error deserializing pipeline parameters JSON: {pipeline_parameters}")
                return error_result(f"Invalid pipeline parameters JSON format: {str(e)}")
            if parameters is not None:
                build.parameters = json.dumps(parameters)

        logger.info(
            f"Queueing build for pipeline {definition_id} in project {project_name} with "
            f"SourceBranch: '{build.source_branch or 'default'}' and Parameters: '{build.parameters or 'none'}'"
        )

        queued_build = build_client.queue_build(build=build, project=project_name)

        logger.info(
            f"Successfully queued build ID {queued_build.id} for pipeline {definition_id} "
            f"with status {queued_build.status or 'Unknown'}"
        )
        return json_result(QueuedRun.from_build(queued_build).to_dict())
    except Exception as e:
        logger.exception(f"Error running pipeline ID {definition_id} in project {project_name}: {e}")
        return error_result(f"Error running pipeline: {str(e)}")


def _get_pipeline_run_status_impl(connection: Connection, project_name: str, build_id: str) -> str:
    """
    Implementation of pipeline run status retrieval.

    Args:
        connection: Shared Azure DevOps connection
        project_name: Azure DevOps project name
        build_id: Run (build) ID as a numeric string

    Returns:
        JSON object with the run status, or the error shape
    """
    logger.info(f"Attempting to get status for pipeline run (build) ID {build_id} in project {project_name}")

    if not project_name:
        logger.error("Project name not provided or is empty for getting pipeline run status.")
        return error_result(PROJECT_REQUIRED)

    run_id = parse_positive_int(build_id)
    if run_id is None:
        logger.error(f"Invalid Build ID '{build_id}' provided. It must be a positive integer.")
        return error_result("Build ID is required and must be a positive integer.")

    try:
        build_client = get_build_client(connection)

        try:
            build = build_client.get_build(project=project_name, build_id=run_id)
        except Exception as e:
            if not is_not_found(e):
                logger.exception(
                    f"Error retrieving pipeline run (build) with ID {run_id} in project {project_name}: {e}"
                )
                return error_result(f"Error retrieving pipeline run status: {str(e)}")
            build = None

        if build is None:
            logger.warning(f"Pipeline run (build) with ID {run_id} not found in project {project_name}.")
            return error_result(f"Pipeline run (build) with ID {run_id} not found in project '{project_name}'.")

        logger.info(
            f"Successfully retrieved status for build ID {build.id}: "
            f"Status - {build.status or 'Unknown'}, Result - {build.result or 'Unknown'}"
        )
        return json_result(PipelineRunStatus.from_build(build).to_dict())
    except Exception as e:
        logger.exception(f"Error getting status for pipeline run (build) ID {run_id} in project {project_name}: {e}")
        return error_result(f"Error getting pipeline run status: {str(e)}")


def register_tools(mcp: FastMCP, connection: Connection) -> None:
    """
    Register pipeline tools with the MCP server.

    Args:
        mcp: The FastMCP server instance
        connection: Shared Azure DevOps connection
    """

    @mcp.tool(name="list_azure_pipelines")
    def list_pipelines(project_name: str) -> str:
        """
        Lists Azure DevOps pipelines for a specific project.

        Args:
            project_name: Name of the Azure DevOps project.

        Returns:
            JSON array of pipelines with Id, Name, Path, Url, WebUrl and Folder
        """
        return _list_pipelines_impl(connection, project_name)


    @mcp.tool(name="run_azure_pipeline")
    def run_pipeline(
        project_name: str,
        pipeline_id: str,
        branch_name: Optional[str] = None,
        pipeline_parameters: Optional[str] = None,
    ) -> str:
        """
        Runs a specific Azure DevOps pipeline. Every call queues a new run.

        Args:
            project_name: Name of the Azure DevOps project.
            pipeline_id: ID of the pipeline to run.
            branch_name: Name of the branch to run the pipeline on (optional).
            pipeline_parameters: JSON string of key-value pairs for pipeline parameters (optional).

        Returns:
            JSON object describing the queued run
        """
        return _run_pipeline_impl(
            connection,
            project_name,
            pipeline_id,
            branch_name=branch_name,
            pipeline_parameters=pipeline_parameters,
        )


    @mcp.tool(name="get_azure_pipeline_run_status")
    def get_pipeline_run_status(project_name: str, build_id: str) -> str:
        """
        Gets the status of a specific Azure DevOps pipeline run (build).

        Args:
            project_name: Name of the Azure DevOps project.
            build_id: ID of the pipeline run (build) to get status for.

        Returns:
            JSON object with status, result, timestamps and source of the run
        """
        return _get_pipeline_run_status_impl(connection, project_name, build_id)
