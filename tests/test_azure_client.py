"""
Tests for the Azure DevOps connection provider.
"""
from dataclasses import replace
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from azure.devops.connection import Connection
from azure.identity import DefaultAzureCredential

from azure_mcp_agents.utils import azure_client
from azure_mcp_agents.utils.azure_client import (
    AZURE_DEVOPS_SCOPE,
    USER_AGENT,
    AzureIdentityCredentials,
    ConfigurationError,
    create_connection,
    create_credential,
)
from azure_mcp_agents.utils.config import Settings

SETTINGS = Settings(
    organization_url="https://dev.azure.com/contoso",
    tenant_id="tenant-1",
    client_id="client-1",
)


@pytest.mark.parametrize("field", ["organization_url", "tenant_id", "client_id"])
def test_missing_setting_fails_fast(monkeypatch, field):
    credential_factory = MagicMock()
    monkeypatch.setattr(azure_client, "DefaultAzureCredential", credential_factory)
    settings = replace(SETTINGS, **{field: ""})

    with pytest.raises(ConfigurationError, match="not set in the configuration"):
        create_connection(settings)

    credential_factory.assert_not_called()


def test_error_names_every_missing_variable():
    with pytest.raises(ConfigurationError) as excinfo:
        create_connection(Settings())

    message = str(excinfo.value)
    assert "AZURE_DEVOPS_ORGANIZATION_URL" in message
    assert "AZURE_DEVOPS_TENANT_ID" in message
    assert "AZURE_DEVOPS_CLIENT_ID" in message


def test_creates_connection_with_identity_credentials(monkeypatch):
    credential_factory = MagicMock()
    connection_factory = MagicMock()
    monkeypatch.setattr(azure_client, "DefaultAzureCredential", credential_factory)
    monkeypatch.setattr(azure_client, "Connection", connection_factory)

    connection = create_connection(SETTINGS)

    assert connection is connection_factory.return_value
    credential_factory.assert_called_once_with(
        managed_identity_client_id="client-1",
        exclude_environment_credential=True,
    )
    kwargs = connection_factory.call_args.kwargs
    assert kwargs["base_url"] == "https://dev.azure.com/contoso"
    assert kwargs["user_agent"] == USER_AGENT
    assert isinstance(kwargs["creds"], AzureIdentityCredentials)
    assert kwargs["creds"]._tenant_id == "tenant-1"


def test_signed_session_uses_bearer_token():
    credential = MagicMock()
    credential.get_token.return_value = SimpleNamespace(token="token-abc", expires_on=0)

    session = AzureIdentityCredentials(credential).signed_session()

    assert session.headers["Authorization"] == "Bearer token-abc"
    credential.get_token.assert_called_once_with(AZURE_DEVOPS_SCOPE, tenant_id=None)


def test_every_session_gets_a_fresh_token():
    credential = MagicMock()
    credential.get_token.side_effect = [SimpleNamespace(token="one"), SimpleNamespace(token="two")]
    credentials = AzureIdentityCredentials(credential)

    session = credentials.signed_session()
    session = credentials.signed_session(session)

    assert session.headers["Authorization"] == "Bearer two"


def test_token_request_targets_the_configured_tenant():
    credential = MagicMock()
    credential.get_token.return_value = SimpleNamespace(token="token-abc")

    AzureIdentityCredentials(credential, tenant_id="tenant-1").signed_session()

    credential.get_token.assert_called_once_with(AZURE_DEVOPS_SCOPE, tenant_id="tenant-1")


def test_builds_real_credential_and_connection():
    credential = create_credential(SETTINGS)
    connection = create_connection(SETTINGS)

    assert isinstance(credential, DefaultAzureCredential)
    assert isinstance(connection, Connection)
