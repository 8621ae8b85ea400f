"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Token addresses, wallets and a fixed clock
- factories: Asset, pair, route and context factory functions
- fakes: In-memory chain client and a recording signer
"""

from tests.helpers.constants import (
    CHAIN_ID,
    DAI,
    NOW,
    RECIPIENT,
    ROUTER,
    TEST_PRIVATE_KEY,
    TOKEN_DECIMALS,
    USDC,
    USDT,
    WETH,
)
from tests.helpers.factories import (
    make_asset,
    make_context,
    make_eth,
    make_pair,
    make_route,
    make_weth,
)
from tests.helpers.fakes import FakeChainClient, RecordingSigner

__all__ = [
    # Constants
    "CHAIN_ID",
    "WETH",
    "USDC",
    "DAI",
    "USDT",
    "TOKEN_DECIMALS",
    "ROUTER",
    "RECIPIENT",
    "TEST_PRIVATE_KEY",
    "NOW",
    # Factories
    "make_asset",
    "make_context",
    "make_eth",
    "make_pair",
    "make_route",
    "make_weth",
    # Fakes
    "FakeChainClient",
    "RecordingSigner",
]
