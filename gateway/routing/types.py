"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from gateway.amm.uniswap_v2 import Pair
from gateway.errors import NoLiquidity
from gateway.models.asset import Asset

MAX_HOPS = 2


class RouteKind(str, Enum):
    """Outcome of route resolution."""

    DIRECT = "direct"
    BRIDGED = "bridged"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Route:
    """An ordered path of 1 or 2 pairs from input_asset to output_asset.

    input_asset/output_asset are what the caller asked for and may be the
    native coin; `path` holds the assets actually traded through the pairs,
    with the native coin replaced by its wrapped asset.
    """

    pairs: tuple[Pair, ...]
    path: tuple[Asset, ...]
    input_asset: Asset
    output_asset: Asset

    def __post_init__(self) -> None:
        if not 1 <= len(self.pairs) <= MAX_HOPS:
            raise ValueError(f"Route must have 1 to {MAX_HOPS} pairs, got {len(self.pairs)}")
        if len(self.path) != len(self.pairs) + 1:
            raise ValueError("Route path length must be pairs + 1")
        if not _same_or_wrapped(self.path[0], self.input_asset):
            raise ValueError(f"Route does not start at {self.input_asset.symbol}")
        if not _same_or_wrapped(self.path[-1], self.output_asset):
            raise ValueError(f"Route does not end at {self.output_asset.symbol}")
        for i, pair in enumerate(self.pairs):
            if not (pair.involves(self.path[i]) and pair.involves(self.path[i + 1])):
                raise ValueError(f"Pair {pair.address} does not connect hop {i}")
            if self.path[i] == self.path[i + 1]:
                raise ValueError(f"Hop {i} trades {self.path[i].symbol} for itself")
        for first, second in zip(self.pairs, self.pairs[1:], strict=False):
            shared = set(first.assets) & set(second.assets)
            if len(shared) != 1:
                raise ValueError("Consecutive pairs must share exactly one asset")

    @classmethod
    def through(
        cls,
        pairs: list[Pair] | tuple[Pair, ...],
        input_asset: Asset,
        output_asset: Asset,
        wrapped_native: Asset,
    ) -> Route:
        """Build a route by walking the pairs from the (wrapped) input asset."""
        current = wrapped_native if input_asset.is_native else input_asset
        path = [current]
        for pair in pairs:
            current = pair.other(current)
            path.append(current)
        return cls(
            pairs=tuple(pairs),
            path=tuple(path),
            input_asset=input_asset,
            output_asset=output_asset,
        )

    @property
    def kind(self) -> RouteKind:
        return RouteKind.DIRECT if len(self.pairs) == 1 else RouteKind.BRIDGED

    @property
    def bridge_asset(self) -> Asset | None:
        return self.path[1] if len(self.path) == 3 else None

    @property
    def addresses(self) -> list[str]:
        """Path as token addresses, as the router expects it."""
        return [asset.address for asset in self.path]

    @property
    def mid_price(self) -> Decimal:
        """Price of one input asset in output assets, ignoring fees and size."""
        price = Decimal(1)
        for pair, asset in zip(self.pairs, self.path, strict=False):
            price *= pair.price_of(asset)
        return price

    def describe(self) -> str:
        return " -> ".join(asset.symbol for asset in self.path)


def _same_or_wrapped(path_asset: Asset, requested: Asset) -> bool:
    return requested.is_native or path_asset == requested


@dataclass(frozen=True)
class RouteResolution:
    """Tagged result of the direct-then-bridged route search."""

    kind: RouteKind
    route: Route | None = None
    reason: str | None = None

    @classmethod
    def direct(cls, route: Route) -> RouteResolution:
        return cls(kind=RouteKind.DIRECT, route=route)

    @classmethod
    def bridged(cls, route: Route) -> RouteResolution:
        return cls(kind=RouteKind.BRIDGED, route=route)

    @classmethod
    def not_found(cls, reason: str) -> RouteResolution:
        return cls(kind=RouteKind.NOT_FOUND, reason=reason)

    @property
    def found(self) -> bool:
        return self.route is not None

    def unwrap(self) -> Route:
        """Return the route or raise NoLiquidity."""
        if self.route is None:
            raise NoLiquidity(self.reason or "No route found")
        return self.route


__all__ = ["MAX_HOPS", "Route", "RouteKind", "RouteResolution"]
