# Diagnostics feature package for Azure DevOps MCP
from azure_mcp_agents.features.diagnostics import tools


def register(mcp):
    """
    Register diagnostic tools with the MCP server.
    
    Args:
        mcp: The FastMCP server instance
    """
    tools.register_tools(mcp)
