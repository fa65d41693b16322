from unittest.mock import MagicMock

import pytest


@pytest.fixture
def core_client():
    return MagicMock()


@pytest.fixture
def wit_client():
    return MagicMock()


@pytest.fixture
def build_client():
    return MagicMock()


@pytest.fixture
def connection(core_client, wit_client, build_client):
    """Connection double minting the client fixtures."""
    connection = MagicMock()
    connection.clients_v7_1.get_core_client.return_value = core_client
    connection.clients_v7_1.get_work_item_tracking_client.return_value = wit_client
    connection.clients_v7_1.get_build_client.return_value = build_client
    return connection
