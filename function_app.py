"""Azure Functions app root. The worker indexes the functions registered on ``app``."""

from azure_mcp_agents.function_app import app  # noqa: F401
