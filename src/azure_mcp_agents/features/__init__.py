# Azure DevOps MCP features package
from azure_mcp_agents.features import diagnostics, pipelines, work_items


def register_all(mcp, connection):
    """
    Register all features with the MCP server.
    
    Args:
        mcp: The FastMCP server instance
        connection: Shared Azure DevOps connection, created once at startup
    """
    work_items.register(mcp, connection)
    pipelines.register(mcp, connection)
    diagnostics.register(mcp)
