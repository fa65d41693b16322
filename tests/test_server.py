"""
Tests for server assembly and tool registration.
"""
import asyncio
import sys
from unittest.mock import MagicMock

import pytest
from loguru import logger

from azure_mcp_agents import server
from azure_mcp_agents.features.diagnostics.tools import GREETING
from azure_mcp_agents.server import build_server, setup_logging
from azure_mcp_agents.utils.azure_client import ConfigurationError
from azure_mcp_agents.utils.config import Settings

TOOL_NAMES = {
    "list_azure_boards_projects",
    "list_azure_boards_work_items",
    "create_azure_boards_work_item",
    "list_azure_pipelines",
    "run_azure_pipeline",
    "get_azure_pipeline_run_status",
    "say_hello",
}


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_registers_every_tool(connection):
    mcp = build_server(Settings(), connection=connection)

    tools = asyncio.run(mcp.list_tools())

    assert {tool.name for tool in tools} == TOOL_NAMES


def test_tools_use_the_injected_connection(connection, core_client):
    core_client.get_projects.return_value = MagicMock(value=[], continuation_token=None)
    mcp = build_server(Settings(), connection=connection)

    result = mcp._tool_manager.get_tool("list_azure_boards_projects").fn()

    assert result == "[]"
    connection.clients_v7_1.get_core_client.assert_called_once_with()


def test_say_hello_returns_fixed_greeting(connection):
    mcp = build_server(Settings(), connection=connection)

    assert mcp._tool_manager.get_tool("say_hello").fn() == GREETING == "Hello Azure Global Lisboa 2025!"


def test_missing_configuration_prevents_startup():
    with pytest.raises(ConfigurationError):
        build_server(Settings())


def test_setup_logging_adds_logfire_sink(monkeypatch, restore_logger):
    configure = MagicMock()
    monkeypatch.setattr(server.logfire, "configure", configure)
    monkeypatch.setattr(server.logfire, "loguru_handler", lambda: {"sink": lambda message: None})

    setup_logging(Settings(logfire_token="token-1"))

    configure.assert_called_once_with(token="token-1", service_name=server.SERVER_NAME)


def test_setup_logging_without_token_skips_logfire(monkeypatch, restore_logger):
    configure = MagicMock()
    monkeypatch.setattr(server.logfire, "configure", configure)

    setup_logging(Settings())

    configure.assert_not_called()
