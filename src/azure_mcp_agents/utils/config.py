"""
Configuration for the Azure MCP Agents server.

Settings are read from environment variables. A ``.env`` file is loaded first
when one is found next to the working directory or up to three levels above it.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

ORGANIZATION_URL_VAR = "AZURE_DEVOPS_ORGANIZATION_URL"
TENANT_ID_VAR = "AZURE_DEVOPS_TENANT_ID"
CLIENT_ID_VAR = "AZURE_DEVOPS_CLIENT_ID"


def load_config(start_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Load configuration from the nearest .env file.

    Args:
        start_dir: Directory to start searching from. Defaults to the current
            working directory.

    Returns:
        Path of the loaded .env file, or None if no file was found
    """
    current_dir = Path(start_dir) if start_dir else Path.cwd()

    for _ in range(4):
        env_file = current_dir / ".env"
        if env_file.exists():
            logger.info(f"Loading configuration from {env_file}")
            load_dotenv(dotenv_path=env_file)
            return env_file
        current_dir = current_dir.parent

    logger.debug("No .env file found. Using environment variables if available.")
    return None


@dataclass(frozen=True)
class Settings:
    organization_url: str = ""
    tenant_id: str = ""
    client_id: str = ""
    transport: str = "stdio"
    log_level: str = "INFO"
    logfire_token: str = ""

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        return cls(
            organization_url=os.environ.get(ORGANIZATION_URL_VAR, "").strip(),
            tenant_id=os.environ.get(TENANT_ID_VAR, "").strip(),
            client_id=os.environ.get(CLIENT_ID_VAR, "").strip(),
            transport=os.environ.get("MCP_TRANSPORT", "stdio").strip() or "stdio",
            log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO",
            logfire_token=os.environ.get("LOGFIRE_WRITE_TOKEN", "").strip(),
        )

    def missing_connection_settings(self) -> list[str]:
        """Names of the required connection variables that are not set."""
        required = {
            ORGANIZATION_URL_VAR: self.organization_url,
            TENANT_ID_VAR: self.tenant_id,
            CLIENT_ID_VAR: self.client_id,
        }
        return [name for name, value in required.items() if not value]
