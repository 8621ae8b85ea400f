"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from gateway.chain.directory import AssetDirectory, parse_token_list, read_token_list
from gateway.config import EngineContext
from gateway.engine import SwapEngine
from gateway.models.asset import Asset
from tests.helpers import (
    DAI,
    USDC,
    USDT,
    FakeChainClient,
    RecordingSigner,
    make_asset,
    make_context,
    make_eth,
    make_weth,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"
TOKEN_LIST_PATH = FIXTURES_DIR / "token_list.json"


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return FIXTURES_DIR


@pytest.fixture
def context() -> EngineContext:
    """Mainnet context, zero slippage tolerance, 60s TTL."""
    return make_context()


@pytest.fixture
def dai() -> Asset:
    return make_asset(DAI, "DAI")


@pytest.fixture
def usdc() -> Asset:
    return make_asset(USDC, "USDC")


@pytest.fixture
def usdt() -> Asset:
    return make_asset(USDT, "USDT")


@pytest.fixture
def weth() -> Asset:
    return make_weth()


@pytest.fixture
def eth() -> Asset:
    return make_eth()


@pytest.fixture
def fake_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def signer() -> RecordingSigner:
    return RecordingSigner()


@pytest.fixture
def directory(context: EngineContext) -> AssetDirectory:
    """Directory loaded from the fixture token list."""
    data = read_token_list(TOKEN_LIST_PATH)
    return AssetDirectory(context.network, parse_token_list(data, context.network.chain_id))


@pytest.fixture
def engine(
    context: EngineContext, fake_client: FakeChainClient, directory: AssetDirectory
) -> SwapEngine:
    """Engine over the fake chain client."""
    return SwapEngine(context, fake_client, directory)  # type: ignore[arg-type]
