# Work items feature package for Azure DevOps MCP
from azure_mcp_agents.features.work_items import tools


def register(mcp, connection):
    """
    Register all work item components with the MCP server.
    
    Args:
        mcp: The FastMCP server instance
        connection: Shared Azure DevOps connection
    """
    tools.register_tools(mcp, connection)
