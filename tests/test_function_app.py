"""
Tests for the Azure Functions entry point.
"""
import asyncio
import importlib
import json
import sys

import azure.functions as func
import pytest
from loguru import logger

MODULE = "azure_mcp_agents.function_app"

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "pytest", "version": "1.0"},
    },
}


@pytest.fixture
def function_app_module(monkeypatch):
    monkeypatch.setenv("AZURE_DEVOPS_ORGANIZATION_URL", "https://dev.azure.com/contoso")
    monkeypatch.setenv("AZURE_DEVOPS_TENANT_ID", "tenant-1")
    monkeypatch.setenv("AZURE_DEVOPS_CLIENT_ID", "client-1")
    monkeypatch.delenv("LOGFIRE_WRITE_TOKEN", raising=False)
    sys.modules.pop(MODULE, None)

    yield importlib.import_module(MODULE)

    sys.modules.pop(MODULE, None)
    logger.remove()
    logger.add(sys.stderr)


def test_routes_every_path_to_the_mcp_app(function_app_module):
    functions = function_app_module.app.get_functions()

    assert len(functions) == 1
    assert functions[0].get_function_name() == "http_app_func"


def test_initialize_request_is_served(function_app_module):
    handler = function_app_module.app.get_functions()[0].get_user_function()
    request = func.HttpRequest(
        method="POST",
        url="https://contoso-mcp.azurewebsites.net/mcp",
        headers={
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
        },
        body=json.dumps(INITIALIZE).encode(),
    )

    response = asyncio.run(handler(request, None))

    assert response.status_code == 200
    body = json.loads(response.get_body())
    assert body["id"] == 1
    assert body["result"]["serverInfo"]["name"] == "azure-mcp-agents"


def test_import_fails_without_configuration(monkeypatch):
    monkeypatch.setenv("AZURE_DEVOPS_ORGANIZATION_URL", "")
    sys.modules.pop(MODULE, None)

    with pytest.raises(ValueError, match="not set in the configuration"):
        importlib.import_module(MODULE)

    sys.modules.pop(MODULE, None)
    logger.remove()
    logger.add(sys.stderr)
