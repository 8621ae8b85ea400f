"""Shared constants for tests.

All addresses are lowercase for consistency with normalize_address().

Token order by address (UniswapV2 token0 first): DAI < USDC < WETH < USDT.

Usage:
    from tests.helpers import WETH, USDC
    # or
    from tests.helpers.constants import WETH, USDC
"""

CHAIN_ID = 1

# =============================================================================
# Mainnet tokens
# =============================================================================

WETH = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"  # Wrapped Ether (18 decimals)
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"  # USD Coin (6 decimals)
DAI = "0x6b175474e89094c44da98b954eedeac495271d0f"  # Dai Stablecoin (18 decimals)
USDT = "0xdac17f958d2ee523a2206206994597c13d831ec7"  # Tether USD (6 decimals)

TOKEN_DECIMALS = {
    WETH: 18,
    USDC: 6,
    DAI: 18,
    USDT: 6,
}

# =============================================================================
# UniswapV2 deployment
# =============================================================================

ROUTER = "0x7a250d5630b4cf539739df2c5dacb4c659f2488d"
FACTORY = "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f"

# Well-known WETH/USDC pair address, for checking CREATE2 derivation
WETH_USDC_PAIR = "0xb4e16d0168e52d35cacd2c6185b44281ec28c9dc"

# =============================================================================
# Wallets
# =============================================================================

# Throwaway key; never holds funds
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

RECIPIENT = "0x" + "ab" * 20

# Fixed clock for deadline assertions
NOW = 1_700_000_000
