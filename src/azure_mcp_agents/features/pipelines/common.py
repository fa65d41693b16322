from dataclasses import dataclass
from typing import Any, Dict, Optional

from azure.devops.connection import Connection
from azure.devops.v7_1.build.build_client import BuildClient
from azure.devops.v7_1.build.models import Build, BuildDefinitionReference

from azure_mcp_agents.utils.azure_client import AzureDevOpsClientError
from azure_mcp_agents.utils.formatting import display_name, isoformat, web_url


@dataclass
class PipelineSummary:
    id: int
    name: str
    path: Optional[str]
    url: Optional[str]
    web_url: str
    folder: Optional[str]

    @classmethod
    def from_definition(cls, definition: BuildDefinitionReference) -> "PipelineSummary":
        path = definition.path
        return cls(
            id=definition.id,
            name=definition.name,
            path=path,
            url=definition.url,
            web_url=web_url(definition),
            folder=path.strip("\\") if path is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Id": self.id,
            "Name": self.name,
            "Path": self.path,
            "Url": self.url,
            "WebUrl": self.web_url,
            "Folder": self.folder,
        }


@dataclass
class QueuedRun:
    build_id: int
    pipeline_id: Optional[int]
    project_name: Optional[str]
    status: Optional[str]
    queue_time: Optional[str]
    reason: Optional[str]
    requested_for: Optional[str]
    web_url: str
    api_url: Optional[str]

    @classmethod
    def from_build(cls, build: Build) -> "QueuedRun":
        return cls(
            build_id=build.id,
            pipeline_id=build.definition.id if build.definition else None,
            project_name=build.project.name if build.project else None,
            status=build.status,
            queue_time=isoformat(build.queue_time),
            reason=build.reason,
            requested_for=display_name(build.requested_for),
            web_url=web_url(build),
            api_url=build.url,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "BuildId": self.build_id,
            "PipelineId": self.pipeline_id,
            "ProjectName": self.project_name,
            "Status": self.status,
            "QueueTime": self.queue_time,
            "Reason": self.reason,
            "RequestedFor": self.requested_for,
            "WebUrl": self.web_url,
            "ApiUrl": self.api_url,
        }


@dataclass
class PipelineRunStatus:
    build_id: int
    pipeline_id: Optional[int]
    pipeline_name: Optional[str]
    project_name: Optional[str]
    status: Optional[str]
    result: Optional[str]
    queue_time: Optional[str]
    start_time: Optional[str]
    finish_time: Optional[str]
    source_branch: Optional[str]
    source_version: Optional[str]
    reason: Optional[str]
    requested_for: Optional[str]
    last_changed_date: Optional[str]
    web_url: str
    api_url: Optional[str]

    @classmethod
    def from_build(cls, build: Build) -> "PipelineRunStatus":
        definition = build.definition
        return cls(
            build_id=build.id,
            pipeline_id=definition.id if definition else None,
            pipeline_name=definition.name if definition else None,
            project_name=build.project.name if build.project else None,
            status=build.status,
            result=build.result,
            queue_time=isoformat(build.queue_time),
            start_time=isoformat(build.start_time),
            finish_time=isoformat(build.finish_time),
            source_branch=build.source_branch,
            source_version=build.source_version,
            reason=build.reason,
            requested_for=display_name(build.requested_for),
            last_changed_date=isoformat(build.last_changed_date),
            web_url=web_url(build),
            api_url=build.url,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "BuildId": self.build_id,
            "PipelineId": self.pipeline_id,
            "PipelineName": self.pipeline_name,
            "ProjectName": self.project_name,
            "Status": self.status,
            "Result": self.result,
            "QueueTime": self.queue_time,
            "StartTime": self.start_time,
            "FinishTime": self.finish_time,
            "SourceBranch": self.source_branch,
            "SourceVersion": self.source_version,
            "Reason": self.reason,
            "RequestedFor": self.requested_for,
            "LastChangedDate": self.last_changed_date,
            "WebUrl": self.web_url,
            "ApiUrl": self.api_url,
        }


def get_build_client(connection: Connection) -> BuildClient:
    """
    Get the build client for Azure DevOps.

    Args:
        connection: Shared Azure DevOps connection

    Returns:
        BuildClient instance

    Raises:
        AzureDevOpsClientError: If client creation fails
    """
    build_client = connection.clients_v7_1.get_build_client()

    if build_client is None:
        raise AzureDevOpsClientError("Failed to get build client.")

    return build_client
