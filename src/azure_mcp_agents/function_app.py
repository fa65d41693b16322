"""Azure Functions entry point that bridges requests to the FastMCP server."""

import azure.functions as func
from mcp.server.transport_security import TransportSecuritySettings

from azure_mcp_agents.server import build_server, setup_logging
from azure_mcp_agents.utils.config import Settings

_settings = Settings.from_env()
setup_logging(_settings)

# Built once per worker process so every invocation shares one connection.
# Host headers are the function app's own domain, guarded by the function key.
_mcp_server = build_server(
    _settings,
    transport_security=TransportSecuritySettings(enable_dns_rebinding_protection=False),
)

# AsgiFunctionApp runs the ASGI lifespan on the first request, which starts
# the streamable HTTP session manager.
app = func.AsgiFunctionApp(
    app=_mcp_server.streamable_http_app(),
    http_auth_level=func.AuthLevel.FUNCTION,
)
