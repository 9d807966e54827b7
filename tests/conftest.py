"""
Global pytest fixtures for the cloudhandle test suite.

Provides:
- Fast settle/retry timings so provider polling tests finish quickly
- Isolated mock stores
- GCP credentials and fake Compute clients
"""
import os
from unittest.mock import MagicMock

import pytest

# Set test environment BEFORE any cloudhandle imports
os.environ["TESTING"] = "true"
os.environ["ENVIRONMENT"] = "local"
os.environ["CREATE_SETTLE_TIMEOUT_SECONDS"] = "0.5"
os.environ["CREATE_POLL_MIN_WAIT_SECONDS"] = "0.01"
os.environ["CREATE_POLL_MAX_WAIT_SECONDS"] = "0.05"
os.environ["PROVIDER_RETRY_MIN_WAIT_SECONDS"] = "0.01"
os.environ["PROVIDER_RETRY_MAX_WAIT_SECONDS"] = "0.02"
os.environ["OPERATION_TIMEOUT_SECONDS"] = "5"
os.environ.pop("GCP_PROJECT_ID", None)

from cloudhandle.shared.core.config import get_settings  # noqa: E402
from cloudhandle.shared.core.credentials import GCPCredentials  # noqa: E402
from cloudhandle.services.handlers.mock.store import MockResourceStore, default_store  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_default_store():
    default_store.reset()
    yield
    default_store.reset()


@pytest.fixture
def store() -> MockResourceStore:
    return MockResourceStore()


@pytest.fixture
def gcp_credentials() -> GCPCredentials:
    return GCPCredentials(project_id="proj-test-123", region="us-central1")


@pytest.fixture
def compute_client() -> MagicMock:
    """Stand-in for a compute_v1 AddressesClient / FirewallsClient."""
    client = MagicMock(name="compute_client")
    client.list.return_value = []
    return client
