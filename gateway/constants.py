"""Protocol constants for the swap gateway.

Centralizes well-known addresses and protocol parameters of the UniswapV2
deployment and the chains it is deployed on.
"""

from gateway.models.types import is_valid_address


def _validate_address(name: str, address: str) -> str:
    """Validate and return a lowercase address.

    Raises:
        ValueError: If the address is invalid
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid {name} address: {address} (must be 0x + 40 hex chars)")
    return address.lower()


# UniswapV2 deployment (same addresses on every supported chain)
UNISWAP_V2_ROUTER = _validate_address("router", "0x7a250d5630b4cf539739df2c5dacb4c659f2488d")
UNISWAP_V2_FACTORY = _validate_address("factory", "0x5c69bee701ef814a2b6a3edd4b1652cb9cc5aa6f")
UNISWAP_V2_INIT_CODE_HASH = "0x96e8ac4277198ff8b6f785478aa9a39f403cb768dd02cbee326c3e7da348845f"

# Standard UniswapV2 pool fee: 30 bps (0.3%)
POOL_FEE_BPS = 30
FEE_DENOMINATOR = 10_000

# Time-to-live for a swap, in seconds. Embedded on-chain as the deadline.
SWAP_TTL_SECONDS = 60

# Fixed gas ceilings (not estimated per call)
SWAP_GAS_LIMIT = 1_200_000
APPROVAL_GAS_LIMIT = 50_000

# Chain ids covered by the UniswapV2 deployment, by network name
CHAIN_IDS = {
    "mainnet": 1,
    "ropsten": 3,
    "rinkeby": 4,
    "goerli": 5,
    "kovan": 42,
}

# Wrapped native asset (bridge asset) per chain id
WRAPPED_NATIVE = {
    1: _validate_address("WETH", "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"),
    3: _validate_address("WETH", "0xc778417e063141139fce010982780140aa0cd5ab"),
    4: _validate_address("WETH", "0xc778417e063141139fce010982780140aa0cd5ab"),
    5: _validate_address("WETH", "0xb4fbf271143f4fbf7b91a5ded31805e42b2208d6"),
    42: _validate_address("WETH", "0xd0a1e359811322d97991e03f863a0c30c2cf029c"),
}

NATIVE_SYMBOL = "ETH"
NATIVE_DECIMALS = 18
