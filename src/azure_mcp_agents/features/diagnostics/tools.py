from loguru import logger
from mcp.server.fastmcp import FastMCP

GREETING = "Hello Azure Global Lisboa 2025!"


def register_tools(mcp: FastMCP) -> None:
    """
    Register diagnostic tools with the MCP server.
    
    Args:
        mcp: The FastMCP server instance
    """

    @mcp.tool(name="say_hello")
    def say_hello() -> str:
        """
        Simple hello world MCP Tool that responses with a hello message.
        """
        logger.info("Saying hello")
        return GREETING
