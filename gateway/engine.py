"""Swap routing and execution engine.

SwapEngine wires the stages together:

    resolve_route -> compute_trade -> build_call -> submit -> poll

Route resolution and submission touch the network; trade calculation and
call building are pure functions of the immutable EngineContext.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

import structlog

from gateway.chain.client import ChainClient
from gateway.chain.directory import AssetDirectory
from gateway.chain.pairs import PairDataFetcher
from gateway.encoding.router_v2 import SwapCallParameters, build_call
from gateway.errors import AssetNotFound
from gateway.execution.submitter import Signer, TransactionSubmitter
from gateway.execution.types import TransactionHandle, TransactionReceipt
from gateway.models.asset import Asset
from gateway.models.types import UINT256_MAX, is_valid_address
from gateway.routing.resolver import RouteResolver
from gateway.routing.types import Route, RouteResolution
from gateway.trading.calculator import compute_trade
from gateway.trading.types import TradeDirection, TradeResult

if TYPE_CHECKING:
    from gateway.config import EngineContext, Settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapSubmission:
    """Everything produced by one pass through the pipeline."""

    trade: TradeResult
    call: SwapCallParameters
    handle: TransactionHandle


class SwapEngine:
    """Facade over route resolution, trade calculation and execution.

    Args:
        context: Immutable engine parameters
        client: Shared chain client
        directory: Asset directory for symbol lookup
        default_gas_price_gwei: Gas price used when a caller passes none
    """

    def __init__(
        self,
        context: EngineContext,
        client: ChainClient,
        directory: AssetDirectory,
        *,
        default_gas_price_gwei: Decimal = Decimal("50"),
    ) -> None:
        self.context = context
        self.client = client
        self.directory = directory
        self.default_gas_price_gwei = default_gas_price_gwei
        self.pairs = PairDataFetcher(context, client)
        self.resolver = RouteResolver(self.pairs)
        self.submitter = TransactionSubmitter(context, client)

    @classmethod
    async def from_settings(cls, settings: Settings) -> SwapEngine:
        """Build an engine (and load its token list) from process settings.

        Raises:
            InvalidNetwork: The configured network is not supported
        """
        context = settings.engine_context()
        client = ChainClient.from_url(
            settings.rpc_url,
            timeout=settings.rpc_timeout_seconds,
            max_retries=settings.rpc_max_retries,
            backoff=settings.rpc_backoff_seconds,
        )
        directory = await AssetDirectory.load(
            context.network,
            path=settings.token_list_path,
            url=settings.token_list_url,
            timeout=settings.rpc_timeout_seconds,
        )
        logger.info(
            "engine_ready",
            network=context.network.name,
            chain_id=context.network.chain_id,
            router=context.network.router,
            assets=len(directory),
            slippage_tolerance=str(context.slippage_tolerance),
        )
        return cls(
            context, client, directory, default_gas_price_gwei=settings.gas_price_gwei
        )

    @property
    def network_name(self) -> str:
        return self.context.network.name

    async def resolve_asset(self, symbol_or_address: str) -> Asset:
        """Directory lookup, falling back to on-chain metadata for addresses.

        Raises:
            AssetNotFound: Unknown symbol, or an address with no readable
                ERC-20 metadata
        """
        asset = self.directory.lookup(symbol_or_address)
        if asset is not None:
            return asset
        if not is_valid_address(symbol_or_address):
            raise AssetNotFound(f"Unknown asset {symbol_or_address} on {self.network_name}")

        code = await self.client.get_code(symbol_or_address)
        if not code:
            raise AssetNotFound(f"No contract at {symbol_or_address} on {self.network_name}")
        symbol, decimals = await self.client.token_metadata(symbol_or_address)
        logger.info("asset_resolved_on_chain", address=symbol_or_address, symbol=symbol)
        return Asset(
            chain_id=self.context.network.chain_id,
            address=symbol_or_address,
            symbol=symbol,
            decimals=decimals,
        )

    async def find_route(self, input_asset: Asset, output_asset: Asset) -> RouteResolution:
        return await self.resolver.resolve(self.context, input_asset, output_asset)

    async def resolve_route(self, input_asset: Asset, output_asset: Asset) -> Route:
        """Direct or bridged route.

        Raises:
            NoLiquidity: Neither a direct nor a bridged route exists
            RpcFailure: Pair state could not be read
        """
        resolution = await self.find_route(input_asset, output_asset)
        return resolution.unwrap()

    def compute_trade(
        self,
        route: Route,
        direction: TradeDirection,
        amount: int,
        *,
        now: float | None = None,
    ) -> TradeResult:
        return compute_trade(self.context, route, direction, amount, now=now)

    def build_call(self, trade: TradeResult, recipient: str) -> SwapCallParameters:
        return build_call(self.context, trade, recipient)

    async def submit(
        self,
        signer: Signer,
        call: SwapCallParameters,
        gas_price_gwei: Decimal | None = None,
    ) -> TransactionHandle:
        price = self.default_gas_price_gwei if gas_price_gwei is None else gas_price_gwei
        return await self.submitter.submit(signer, call, price)

    async def poll(self, handle: TransactionHandle | str) -> TransactionReceipt | None:
        if isinstance(handle, str):
            handle = TransactionHandle(tx_hash=handle)
        return await self.submitter.poll_receipt(handle)

    async def quote(
        self,
        input_asset: Asset,
        output_asset: Asset,
        direction: TradeDirection,
        amount: int,
        *,
        now: float | None = None,
    ) -> TradeResult:
        """Resolve a route and price a trade on it without submitting."""
        route = await self.resolve_route(input_asset, output_asset)
        return self.compute_trade(route, direction, amount, now=now)

    async def swap(
        self,
        signer: Signer,
        input_asset: Asset,
        output_asset: Asset,
        direction: TradeDirection,
        amount: int,
        *,
        gas_price_gwei: Decimal | None = None,
        recipient: str | None = None,
    ) -> SwapSubmission:
        """Run the full pipeline and broadcast the swap.

        The output goes to the signer unless a recipient is given.
        """
        trade = await self.quote(input_asset, output_asset, direction, amount)
        call = self.build_call(trade, recipient or signer.address)
        handle = await self.submit(signer, call, gas_price_gwei)
        logger.info(
            "swap_submitted",
            tx_hash=handle.tx_hash,
            path=trade.route.describe(),
            method=call.method.value,
            input_amount=trade.input_amount,
            output_amount=trade.output_amount,
            deadline=call.deadline,
        )
        return SwapSubmission(trade=trade, call=call, handle=handle)

    async def balances(self, owner: str, assets: list[Asset]) -> dict[Asset, int]:
        """Raw balances of owner, read concurrently."""

        async def balance_of(asset: Asset) -> int:
            if asset.is_native:
                return await self.client.native_balance(owner)
            return await self.client.token_balance(asset.address, owner)

        amounts = await asyncio.gather(*(balance_of(asset) for asset in assets))
        return dict(zip(assets, amounts, strict=True))

    async def allowances(
        self, owner: str, assets: list[Asset], spender: str | None = None
    ) -> dict[Asset, int]:
        """Raw ERC-20 allowances granted by owner to spender (the router by default).

        The native coin needs no approval and is reported as unlimited.
        """
        spender = spender or self.context.network.router

        async def allowance_of(asset: Asset) -> int:
            if asset.is_native:
                return UINT256_MAX
            return await self.client.allowance(asset.address, owner, spender)

        amounts = await asyncio.gather(*(allowance_of(asset) for asset in assets))
        return dict(zip(assets, amounts, strict=True))

    async def approve(
        self,
        signer: Signer,
        asset: Asset,
        amount: int | None = None,
        *,
        gas_price_gwei: Decimal | None = None,
        spender: str | None = None,
    ) -> TransactionHandle:
        """Approve spender (the router by default); amount None means unlimited."""
        if asset.is_native:
            raise ValueError("The native coin does not need approval")
        price = self.default_gas_price_gwei if gas_price_gwei is None else gas_price_gwei
        return await self.submitter.approve(
            signer,
            asset.address,
            spender or self.context.network.router,
            UINT256_MAX if amount is None else amount,
            price,
        )


__all__ = ["SwapEngine", "SwapSubmission"]
