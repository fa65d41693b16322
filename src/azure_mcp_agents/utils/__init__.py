# Azure DevOps MCP utilities package
from azure_mcp_agents.utils.azure_client import (
    AzureDevOpsClientError,
    ConfigurationError,
    create_connection,
)
from azure_mcp_agents.utils.config import Settings, load_config

__all__ = ["AzureDevOpsClientError", "ConfigurationError", "Settings", "create_connection", "load_config"]
