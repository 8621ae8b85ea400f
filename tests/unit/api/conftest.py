"""Fixtures for HTTP API tests."""

import pytest
from eth_account import Account
from fastapi.testclient import TestClient

from gateway.api.endpoints import get_engine
from gateway.api.main import app
from tests.helpers import TEST_PRIVATE_KEY


@pytest.fixture
def client(engine):
    """Test client over the fake-chain engine (startup hook not run)."""
    app.dependency_overrides[get_engine] = lambda: engine
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def owner() -> str:
    """Lowercase address of TEST_PRIVATE_KEY."""
    return Account.from_key(TEST_PRIVATE_KEY).address.lower()


@pytest.fixture
def dai_usdc_pool(fake_client, dai, usdc):
    """1,000,000 DAI / 2,000,000 USDC."""
    return fake_client.add_pair(dai, 1_000_000 * 10**18, usdc, 2_000_000 * 10**6)
