"""Shared fixtures."""

import pytest
from fakes import FakeTransport

from openwebclient.client import WebClient
from openwebclient.config import clear_config_instance


@pytest.fixture
def transport():
    return FakeTransport(bodies=["first", "second", "third"])


@pytest.fixture
def client(transport):
    return WebClient(transport)


@pytest.fixture(autouse=True)
def cleanup():
    """Clean up the global config between tests."""
    yield
    clear_config_instance()
