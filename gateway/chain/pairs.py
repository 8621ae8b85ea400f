"""On-chain UniswapV2 pair reads."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from gateway.amm.uniswap_v2 import Pair, compute_pair_address, sort_assets

if TYPE_CHECKING:
    from gateway.chain.client import ChainClient
    from gateway.config import EngineContext
    from gateway.models.asset import Asset

logger = structlog.get_logger()


class PairDataFetcher:
    """Reads fresh reserves for a pair of (wrapped) assets.

    The pair address is derived offline with CREATE2, so a missing pool costs
    one get_code call and no factory lookup. Nothing is cached between calls.
    """

    def __init__(self, context: EngineContext, client: ChainClient) -> None:
        self.context = context
        self.client = client

    def pair_address(self, asset_a: Asset, asset_b: Asset) -> str:
        network = self.context.network
        return compute_pair_address(network.factory, network.init_code_hash, asset_a, asset_b)

    async def fetch_pair(self, asset_a: Asset, asset_b: Asset) -> Pair | None:
        """Current pair state, or None when no pool is deployed.

        Raises:
            RpcFailure: The node could not be read
        """
        address = self.pair_address(asset_a, asset_b)
        code = await self.client.get_code(address)
        if not code:
            logger.debug(
                "pair_not_deployed", token_a=asset_a.symbol, token_b=asset_b.symbol, pair=address
            )
            return None

        reserve0, reserve1 = await self.client.get_reserves(address)
        token0, token1 = sort_assets(asset_a, asset_b)
        logger.debug(
            "pair_fetched",
            pair=address,
            token0=token0.symbol,
            token1=token1.symbol,
            reserve0=reserve0,
            reserve1=reserve1,
        )
        return Pair(
            asset_a=token0,
            asset_b=token1,
            reserve_a=reserve0,
            reserve_b=reserve1,
            address=address,
            fee_bps=self.context.fee_bps,
        )


__all__ = ["PairDataFetcher"]
