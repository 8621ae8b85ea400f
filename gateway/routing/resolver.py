"""Route discovery between two assets.

The search is a fixed two-step policy:

1. Direct pair (input, output).
2. Only when step 1 finds no pool: (input, bridge) and (bridge, output),
   fetched concurrently, where the bridge is the chain's wrapped native asset.

Nothing beyond two hops is attempted.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Protocol

import structlog

from gateway.routing.types import Route, RouteResolution

if TYPE_CHECKING:
    from gateway.amm.uniswap_v2 import Pair
    from gateway.config import EngineContext
    from gateway.models.asset import Asset

logger = structlog.get_logger()


class PairSource(Protocol):
    """Anything that can read a pair's current reserves.

    Implementations return None when no pool exists for the two assets and
    raise RpcFailure for network errors. Missing liquidity and a failed read
    must stay distinguishable.
    """

    async def fetch_pair(self, asset_a: Asset, asset_b: Asset) -> Pair | None: ...


class RouteResolver:
    """Finds a direct or bridged route for an asset pair.

    Args:
        pair_source: Reader for on-chain pair state (see PairSource)
    """

    def __init__(self, pair_source: PairSource) -> None:
        self._source = pair_source

    async def resolve(
        self,
        context: EngineContext,
        input_asset: Asset,
        output_asset: Asset,
    ) -> RouteResolution:
        """Resolve a route from input_asset to output_asset.

        Args:
            context: Engine context (provides the network and bridge asset)
            input_asset: Asset being sold (may be the native coin)
            output_asset: Asset being bought (may be the native coin)

        Returns:
            RouteResolution tagged DIRECT, BRIDGED or NOT_FOUND
        """
        network = context.network
        token_in = network.wrap(input_asset)
        token_out = network.wrap(output_asset)
        bridge = network.wrapped_native

        if token_in == token_out:
            return RouteResolution.not_found(
                f"Input and output resolve to the same asset ({token_in.symbol})"
            )

        direct = await self._source.fetch_pair(token_in, token_out)
        if direct is not None:
            route = Route.through([direct], input_asset, output_asset, bridge)
            logger.debug("route_resolved", kind="direct", path=route.describe())
            return RouteResolution.direct(route)

        if bridge in (token_in, token_out):
            logger.info(
                "route_not_found",
                input=input_asset.symbol,
                output=output_asset.symbol,
                reason="no_direct_pair_bridge_is_endpoint",
            )
            return RouteResolution.not_found(
                f"No pair for {token_in.symbol}/{token_out.symbol}"
            )

        logger.debug(
            "trying_bridged_route",
            input=token_in.symbol,
            output=token_out.symbol,
            bridge=bridge.symbol,
        )
        first, second = await asyncio.gather(
            self._source.fetch_pair(token_in, bridge),
            self._source.fetch_pair(bridge, token_out),
        )
        if first is None or second is None:
            missing = [
                f"{a.symbol}/{b.symbol}"
                for leg, (a, b) in ((first, (token_in, bridge)), (second, (bridge, token_out)))
                if leg is None
            ]
            logger.info(
                "route_not_found",
                input=input_asset.symbol,
                output=output_asset.symbol,
                missing_pairs=missing,
            )
            return RouteResolution.not_found(
                f"No route from {input_asset.symbol} to {output_asset.symbol} "
                f"(missing {', '.join(missing)})"
            )

        route = Route.through([first, second], input_asset, output_asset, bridge)
        logger.debug("route_resolved", kind="bridged", path=route.describe())
        return RouteResolution.bridged(route)


__all__ = ["PairSource", "RouteResolver"]
