# Pipelines feature package for Azure DevOps MCP
from azure_mcp_agents.features.pipelines import tools


def register(mcp, connection):
    """
    Register all pipeline components with the MCP server.
    
    Args:
        mcp: The FastMCP server instance
        connection: Shared Azure DevOps connection
    """
    tools.register_tools(mcp, connection)
