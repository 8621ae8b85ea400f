"""Configuration for the swap gateway.

Two layers:
- NetworkConfig / EngineContext: immutable values passed explicitly to the
  pure engine operations (route resolution, trade calculation, call building).
- Settings: process configuration read from environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation

from gateway.constants import (
    APPROVAL_GAS_LIMIT,
    CHAIN_IDS,
    NATIVE_DECIMALS,
    NATIVE_SYMBOL,
    POOL_FEE_BPS,
    SWAP_GAS_LIMIT,
    SWAP_TTL_SECONDS,
    UNISWAP_V2_FACTORY,
    UNISWAP_V2_INIT_CODE_HASH,
    UNISWAP_V2_ROUTER,
    WRAPPED_NATIVE,
)
from gateway.errors import InvalidNetwork
from gateway.models.asset import Asset
from gateway.models.types import normalize_address


@dataclass(frozen=True)
class NetworkConfig:
    """Chain-level parameters of a UniswapV2 deployment.

    Attributes:
        name: Network name (e.g. "mainnet")
        chain_id: EIP-155 chain id
        router: UniswapV2Router02 address
        factory: UniswapV2Factory address
        init_code_hash: Pair contract init code hash used for CREATE2 addresses
        wrapped_native: The bridge asset (WETH on Ethereum chains)
    """

    name: str
    chain_id: int
    router: str
    factory: str
    init_code_hash: str
    wrapped_native: Asset

    @classmethod
    def for_network(cls, name: str, *, router: str | None = None) -> NetworkConfig:
        """Build the configuration for a named network.

        Raises:
            InvalidNetwork: If the network is not supported
        """
        chain_id = CHAIN_IDS.get(name.lower())
        if chain_id is None:
            raise InvalidNetwork(
                f"Invalid network {name} (supported: {', '.join(sorted(CHAIN_IDS))})"
            )
        weth = Asset(
            chain_id=chain_id,
            address=WRAPPED_NATIVE[chain_id],
            symbol="WETH",
            decimals=18,
            name="Wrapped Ether",
        )
        return cls(
            name=name.lower(),
            chain_id=chain_id,
            router=normalize_address(router or UNISWAP_V2_ROUTER, validate=True),
            factory=UNISWAP_V2_FACTORY,
            init_code_hash=UNISWAP_V2_INIT_CODE_HASH,
            wrapped_native=weth,
        )

    @property
    def native(self) -> Asset:
        return Asset.native(self.chain_id, NATIVE_SYMBOL, NATIVE_DECIMALS)

    def wrap(self, asset: Asset) -> Asset:
        """Map the native coin to its wrapped asset; other assets unchanged."""
        return self.wrapped_native if asset.is_native else asset


@dataclass(frozen=True)
class EngineContext:
    """Immutable engine parameters shared by every request.

    Attributes:
        network: Chain parameters
        slippage_tolerance: Fraction in [0, 1). 0 means any adverse price
            movement between quote and inclusion reverts the swap.
        ttl_seconds: Deadline offset from submission time
        swap_gas_limit: Fixed gas limit attached to swaps
        approval_gas_limit: Fixed gas limit attached to ERC-20 approvals
        fee_bps: Pool fee in basis points
    """

    network: NetworkConfig
    slippage_tolerance: Decimal = Decimal("0")
    ttl_seconds: int = SWAP_TTL_SECONDS
    swap_gas_limit: int = SWAP_GAS_LIMIT
    approval_gas_limit: int = APPROVAL_GAS_LIMIT
    fee_bps: int = POOL_FEE_BPS

    def __post_init__(self) -> None:
        tolerance = self.slippage_tolerance
        if not tolerance.is_finite() or not Decimal("0") <= tolerance < Decimal("1"):
            raise ValueError(f"Slippage tolerance must be in [0, 1): {self.slippage_tolerance}")
        if self.ttl_seconds <= 0:
            raise ValueError(f"TTL must be positive: {self.ttl_seconds}")
        if not 0 <= self.fee_bps < 10_000:
            raise ValueError(f"Fee must be in [0, 10000) bps: {self.fee_bps}")

    @classmethod
    def for_network(cls, name: str, **kwargs: object) -> EngineContext:
        return cls(network=NetworkConfig.for_network(name), **kwargs)  # type: ignore[arg-type]

    def with_tolerance(self, tolerance: Decimal) -> EngineContext:
        return replace(self, slippage_tolerance=tolerance)


def _env(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _env_decimal(name: str, default: str) -> Decimal:
    raw = _env(name, default)
    try:
        value = Decimal(raw)
    except InvalidOperation as err:
        raise ValueError(f"{name} must be a decimal number, got '{raw}'") from err
    if not value.is_finite():
        raise ValueError(f"{name} must be a finite decimal number, got '{raw}'")
    return value


@dataclass(frozen=True)
class Settings:
    """Process settings, read from the environment by from_env()."""

    network: str = "mainnet"
    rpc_url: str = "http://localhost:8545"
    router: str | None = None
    token_list_url: str | None = None
    token_list_path: str | None = None
    slippage_tolerance: Decimal = Decimal("0")
    ttl_seconds: int = SWAP_TTL_SECONDS
    swap_gas_limit: int = SWAP_GAS_LIMIT
    approval_gas_limit: int = APPROVAL_GAS_LIMIT
    gas_price_gwei: Decimal = Decimal("50")
    rpc_timeout_seconds: float = 10.0
    rpc_max_retries: int = 3
    rpc_backoff_seconds: float = 0.5
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            network=_env("ETHEREUM_CHAIN", "mainnet"),
            rpc_url=_env("ETHEREUM_RPC_URL", "http://localhost:8545"),
            router=os.environ.get("UNISWAP_ROUTER") or None,
            token_list_url=os.environ.get("ETHEREUM_TOKEN_LIST_URL") or None,
            token_list_path=os.environ.get("ETHEREUM_TOKEN_LIST_PATH") or None,
            slippage_tolerance=_env_decimal("SLIPPAGE_TOLERANCE", "0"),
            ttl_seconds=int(_env("SWAP_TTL_SECONDS", str(SWAP_TTL_SECONDS))),
            swap_gas_limit=int(_env("SWAP_GAS_LIMIT", str(SWAP_GAS_LIMIT))),
            approval_gas_limit=int(_env("ETH_APPROVAL_GAS_LIMIT", str(APPROVAL_GAS_LIMIT))),
            gas_price_gwei=_env_decimal("ETH_GAS_PRICE_GWEI", "50"),
            rpc_timeout_seconds=float(_env("RPC_TIMEOUT_SECONDS", "10")),
            rpc_max_retries=int(_env("RPC_MAX_RETRIES", "3")),
            rpc_backoff_seconds=float(_env("RPC_BACKOFF_SECONDS", "0.5")),
            host=_env("GATEWAY_HOST", "0.0.0.0"),
            port=int(_env("GATEWAY_PORT", "5000")),
            debug=_env("GATEWAY_DEBUG", "false").lower() in ("true", "1", "yes"),
            log_level=_env("GATEWAY_LOG_LEVEL", "INFO").upper(),
        )

    def engine_context(self) -> EngineContext:
        """Build the immutable engine context.

        Raises:
            InvalidNetwork: If the configured network is not supported
        """
        return EngineContext(
            network=NetworkConfig.for_network(self.network, router=self.router),
            slippage_tolerance=self.slippage_tolerance,
            ttl_seconds=self.ttl_seconds,
            swap_gas_limit=self.swap_gas_limit,
            approval_gas_limit=self.approval_gas_limit,
        )
