"""Tests for Route validation and RouteResolution."""

from decimal import Decimal

import pytest

from gateway.errors import NoLiquidity
from gateway.routing.types import Route, RouteKind, RouteResolution
from tests.helpers import make_pair, make_route


class TestRoute:
    """Tests for Route construction and derived values."""

    def test_direct_route(self, dai, usdc):
        pair = make_pair(dai, 1_000_000, usdc, 2_000_000)
        route = make_route([pair], dai, usdc)

        assert route.kind is RouteKind.DIRECT
        assert route.path == (dai, usdc)
        assert route.bridge_asset is None
        assert route.addresses == [dai.address, usdc.address]
        assert route.describe() == "DAI -> USDC"

    def test_bridged_route(self, dai, usdc, weth):
        first = make_pair(dai, 1_000_000, weth, 2_000_000)
        second = make_pair(weth, 2_000_000, usdc, 1_000_000)
        route = make_route([first, second], dai, usdc)

        assert route.kind is RouteKind.BRIDGED
        assert route.path == (dai, weth, usdc)
        assert route.bridge_asset == weth

    def test_native_input_walks_from_wrapped(self, eth, weth, usdc):
        pair = make_pair(weth, 10, usdc, 20)
        route = make_route([pair], eth, usdc)

        assert route.input_asset == eth
        assert route.path == (weth, usdc)

    def test_rejects_disconnected_pairs(self, dai, usdc, weth, usdt):
        first = make_pair(dai, 1, weth, 1)
        unrelated = make_pair(usdc, 1, usdt, 1)
        with pytest.raises(ValueError):
            make_route([first, unrelated], dai, usdt)

    def test_rejects_wrong_endpoint(self, dai, usdc, weth):
        pair = make_pair(dai, 1, usdc, 1)
        with pytest.raises(ValueError, match="does not end"):
            Route(pairs=(pair,), path=(dai, usdc), input_asset=dai, output_asset=weth)

    def test_rejects_too_many_hops(self, dai, usdc, weth, usdt):
        pairs = (make_pair(dai, 1, weth, 1), make_pair(weth, 1, usdc, 1), make_pair(usdc, 1, usdt, 1))
        with pytest.raises(ValueError, match="1 to 2"):
            Route(pairs=pairs, path=(dai, weth, usdc, usdt), input_asset=dai, output_asset=usdt)

    def test_rejects_empty(self, dai, usdc):
        with pytest.raises(ValueError):
            Route(pairs=(), path=(dai,), input_asset=dai, output_asset=usdc)

    def test_rejects_same_pair_twice(self, dai, weth):
        """Going out and back through one pool shares two assets, not one."""
        pair = make_pair(dai, 1, weth, 1)
        with pytest.raises(ValueError):
            Route(pairs=(pair, pair), path=(dai, weth, dai), input_asset=dai, output_asset=dai)

    def test_mid_price(self, dai, usdc, weth):
        first = make_pair(dai, 1_000 * 10**18, weth, 1 * 10**18)
        second = make_pair(weth, 1 * 10**18, usdc, 2_000 * 10**6)
        route = make_route([first, second], dai, usdc)
        # 0.001 WETH per DAI, 2000 USDC per WETH
        assert route.mid_price == Decimal(2)


class TestRouteResolution:
    def test_not_found_unwrap_raises_no_liquidity(self):
        resolution = RouteResolution.not_found("No pair for A/B")
        assert not resolution.found
        assert resolution.kind is RouteKind.NOT_FOUND
        with pytest.raises(NoLiquidity, match="No pair for A/B"):
            resolution.unwrap()

    def test_direct_unwrap(self, dai, usdc):
        route = make_route([make_pair(dai, 1, usdc, 1)], dai, usdc)
        resolution = RouteResolution.direct(route)
        assert resolution.found
        assert resolution.unwrap() is route
