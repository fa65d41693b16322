"""
Azure DevOps connection built on Azure identity.
"""
from typing import Optional

import requests
from azure.devops.connection import Connection
from azure.identity import DefaultAzureCredential
from loguru import logger
from msrest.authentication import Authentication

from azure_mcp_agents import __version__
from azure_mcp_agents.utils.config import Settings

# Resource id of Azure DevOps in Microsoft Entra ID
AZURE_DEVOPS_SCOPE = "499b84ac-1321-427f-aa17-267ca6975798/.default"

USER_AGENT = f"azure-mcp-agents/{__version__}"


class ConfigurationError(ValueError):
    """Raised when the Azure DevOps connection settings are incomplete."""
    pass


class AzureDevOpsClientError(Exception):
    """Exception raised for errors in Azure DevOps client operations."""
    pass


class AzureIdentityCredentials(Authentication):
    """
    msrest credentials that sign each session with an Azure identity token.

    azure-identity caches the token and renews it before expiry, so one
    instance serves the whole process lifetime.
    """

    def __init__(self, credential, tenant_id: Optional[str] = None, scope: str = AZURE_DEVOPS_SCOPE):
        self._credential = credential
        self._tenant_id = tenant_id
        self._scope = scope

    def signed_session(self, session: Optional[requests.Session] = None) -> requests.Session:
        session = super().signed_session(session)
        access_token = self._credential.get_token(self._scope, tenant_id=self._tenant_id)
        session.headers[self.header] = f"Bearer {access_token.token}"
        return session


def create_credential(settings: Settings) -> DefaultAzureCredential:
    # EnvironmentCredential picks up unrelated AZURE_* service principals
    return DefaultAzureCredential(
        managed_identity_client_id=settings.client_id,
        exclude_environment_credential=True,
    )


def create_connection(settings: Settings) -> Connection:
    """
    Create the Azure DevOps connection shared by every tool.

    Args:
        settings: Loaded server settings

    Returns:
        Connection authenticated through DefaultAzureCredential

    Raises:
        ConfigurationError: If the organization URL, tenant id or client id is missing
    """
    missing = settings.missing_connection_settings()
    if missing:
        raise ConfigurationError(
            "Azure DevOps connection parameters are not set in the configuration. "
            f"Missing: {', '.join(missing)}"
        )

    credentials = AzureIdentityCredentials(create_credential(settings), tenant_id=settings.tenant_id)
    connection = Connection(
        base_url=settings.organization_url,
        creds=credentials,
        user_agent=USER_AGENT,
    )

    logger.info(f"Created Azure DevOps connection for {settings.organization_url}")
    return connection
