"""
Azure MCP Agents - MCP tools for Azure Boards and Azure Pipelines.
"""
__version__ = "0.1.0"
