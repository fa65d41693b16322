"""
Azure MCP Agents server.

Builds the FastMCP server with the Azure Boards, Azure Pipelines and diagnostic
tools, sharing one Azure DevOps connection created at startup.
"""
import sys
from typing import Optional

import logfire
from azure.devops.connection import Connection
from loguru import logger
from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from azure_mcp_agents.features import register_all
from azure_mcp_agents.utils.azure_client import create_connection
from azure_mcp_agents.utils.config import Settings, load_config

SERVER_NAME = "azure-mcp-agents"

SERVER_INSTRUCTIONS = """
Tools for Azure DevOps: list projects, list and create Azure Boards work items,
list and run Azure Pipelines and check the status of a pipeline run.
Every tool returns a JSON string. Failures are returned as {"error": "<message>"}.
"""


def setup_logging(settings: Settings) -> None:
    """
    Set up loguru sinks.

    Logs go to stderr so they never mix with the stdio transport. When a
    Logfire write token is configured, records are shipped to Logfire too.
    """
    handlers = [{"sink": sys.stderr, "level": settings.log_level}]

    if settings.logfire_token:
        logfire.configure(token=settings.logfire_token, service_name=SERVER_NAME)
        handlers.append(logfire.loguru_handler())
    else:
        logger.debug("LOGFIRE_WRITE_TOKEN not set, logging to stderr only.")

    logger.configure(handlers=handlers)


def build_server(
    settings: Optional[Settings] = None,
    connection: Optional[Connection] = None,
    transport_security: Optional[TransportSecuritySettings] = None,
) -> FastMCP:
    """
    Create the MCP server and register every tool.

    Args:
        settings: Server settings. Read from the environment when omitted.
        connection: Azure DevOps connection. Created from settings when omitted.
        transport_security: Host and origin checks for the HTTP transport (optional)

    Returns:
        FastMCP server ready to run

    Raises:
        ConfigurationError: If the connection settings are incomplete
    """
    settings = settings or Settings.from_env()
    connection = connection or create_connection(settings)

    mcp = FastMCP(
        SERVER_NAME,
        instructions=SERVER_INSTRUCTIONS,
        stateless_http=True,
        json_response=True,
        transport_security=transport_security,
    )
    register_all(mcp, connection)

    logger.info("Created MCP server with Azure DevOps tools")
    return mcp


def main() -> None:
    """Main entry point to start the MCP server."""
    load_config()
    settings = Settings.from_env()
    setup_logging(settings)

    mcp = build_server(settings)
    mcp.run(transport=settings.transport)


if __name__ == "__main__":
    main()
