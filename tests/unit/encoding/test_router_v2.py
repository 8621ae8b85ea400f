"""Tests for UniswapV2Router02 call encoding."""

import pytest
from eth_abi import decode  # type: ignore[attr-defined]
from eth_utils import function_signature_to_4byte_selector

from gateway.config import EngineContext, NetworkConfig
from gateway.encoding.router_v2 import NativeSide, SwapMethod, build_call, native_side
from gateway.trading.calculator import compute_trade
from gateway.trading.types import TradeDirection
from tests.helpers import NOW, RECIPIENT, ROUTER, make_context, make_pair, make_route


def trade_for(context, route, direction, amount):
    return compute_trade(context, route, direction, amount, now=NOW)


@pytest.fixture
def token_route(dai, usdc):
    return make_route([make_pair(dai, 1_000_000, usdc, 2_000_000)], dai, usdc)


@pytest.fixture
def eth_in_route(eth, weth, usdc):
    return make_route([make_pair(weth, 1_000_000, usdc, 2_000_000)], eth, usdc)


@pytest.fixture
def eth_out_route(eth, weth, usdc):
    return make_route([make_pair(usdc, 2_000_000, weth, 1_000_000)], usdc, eth)


class TestSelectors:
    @pytest.mark.parametrize("method", list(SwapMethod))
    def test_selector_matches_signature(self, method):
        expected = "0x" + function_signature_to_4byte_selector(method.signature).hex()
        assert method.selector == expected


class TestVariantSelection:
    @pytest.mark.parametrize(
        ("route_name", "direction", "method"),
        [
            ("token_route", TradeDirection.EXACT_IN, SwapMethod.SWAP_EXACT_TOKENS_FOR_TOKENS),
            ("eth_in_route", TradeDirection.EXACT_IN, SwapMethod.SWAP_EXACT_ETH_FOR_TOKENS),
            ("eth_out_route", TradeDirection.EXACT_IN, SwapMethod.SWAP_EXACT_TOKENS_FOR_ETH),
            ("token_route", TradeDirection.EXACT_OUT, SwapMethod.SWAP_TOKENS_FOR_EXACT_TOKENS),
            ("eth_in_route", TradeDirection.EXACT_OUT, SwapMethod.SWAP_ETH_FOR_EXACT_TOKENS),
            ("eth_out_route", TradeDirection.EXACT_OUT, SwapMethod.SWAP_TOKENS_FOR_EXACT_ETH),
        ],
    )
    def test_method_by_direction_and_native_side(
        self, request, context, route_name, direction, method
    ):
        route = request.getfixturevalue(route_name)
        call = build_call(context, trade_for(context, route, direction, 1000), RECIPIENT)
        assert call.method is method
        assert call.selector == method.selector
        assert call.calldata.startswith(method.selector)

    def test_native_side(self, context, token_route, eth_in_route, eth_out_route):
        sides = [
            native_side(trade_for(context, route, TradeDirection.EXACT_IN, 1000))
            for route in (token_route, eth_in_route, eth_out_route)
        ]
        assert sides == [NativeSide.NONE, NativeSide.INPUT, NativeSide.OUTPUT]


class TestArguments:
    def test_exact_tokens_for_tokens(self, context, token_route, dai, usdc):
        trade = trade_for(context, token_route, TradeDirection.EXACT_IN, 1000)
        call = build_call(context, trade, RECIPIENT)

        amount_in, amount_out_min, path, to, deadline = decode(
            SwapMethod.SWAP_EXACT_TOKENS_FOR_TOKENS.arg_types, call.encoded_args
        )
        assert amount_in == 1000
        assert amount_out_min == 1992
        assert [a.lower() for a in path] == [dai.address, usdc.address]
        assert to.lower() == RECIPIENT
        assert deadline == NOW + 60
        assert call.native_value == 0
        assert call.router == ROUTER
        assert call.deadline == NOW + 60

    def test_tokens_for_exact_tokens(self, context, token_route):
        trade = trade_for(context, token_route, TradeDirection.EXACT_OUT, 1992)
        call = build_call(context, trade, RECIPIENT)

        amount_out, amount_in_max, _, _, _ = decode(
            SwapMethod.SWAP_TOKENS_FOR_EXACT_TOKENS.arg_types, call.encoded_args
        )
        assert amount_out == 1992
        assert amount_in_max == 1000
        assert call.native_value == 0

    def test_exact_eth_for_tokens_attaches_input(self, context, eth_in_route, weth, usdc):
        trade = trade_for(context, eth_in_route, TradeDirection.EXACT_IN, 1000)
        call = build_call(context, trade, RECIPIENT)

        amount_out_min, path, _, _ = decode(
            SwapMethod.SWAP_EXACT_ETH_FOR_TOKENS.arg_types, call.encoded_args
        )
        assert amount_out_min == 1992
        assert [a.lower() for a in path] == [weth.address, usdc.address]
        assert call.native_value == 1000

    def test_eth_for_exact_tokens_attaches_max_input(self, eth_in_route):
        context = make_context(slippage_tolerance="0.005")
        trade = trade_for(context, eth_in_route, TradeDirection.EXACT_OUT, 1992)
        call = build_call(context, trade, RECIPIENT)

        (amount_out, _, _, _) = decode(
            SwapMethod.SWAP_ETH_FOR_EXACT_TOKENS.arg_types, call.encoded_args
        )
        assert amount_out == 1992
        assert call.native_value == 1005

    def test_tokens_for_exact_eth(self, context, eth_out_route, usdc, weth):
        trade = trade_for(context, eth_out_route, TradeDirection.EXACT_OUT, 1000)
        call = build_call(context, trade, RECIPIENT)

        amount_out, amount_in_max, path, _, _ = decode(
            SwapMethod.SWAP_TOKENS_FOR_EXACT_ETH.arg_types, call.encoded_args
        )
        assert amount_out == 1000
        assert amount_in_max == trade.counter_amount
        assert [a.lower() for a in path] == [usdc.address, weth.address]
        assert call.native_value == 0

    def test_bridged_path_has_three_addresses(self, context, dai, weth, usdc):
        route = make_route(
            [make_pair(dai, 1_000_000, weth, 2_000_000), make_pair(weth, 2_000_000, usdc, 1_000_000)],
            dai,
            usdc,
        )
        call = build_call(context, trade_for(context, route, TradeDirection.EXACT_IN, 1000), RECIPIENT)
        _, amount_out_min, path, _, _ = decode(
            SwapMethod.SWAP_EXACT_TOKENS_FOR_TOKENS.arg_types, call.encoded_args
        )
        assert amount_out_min == 992
        assert [a.lower() for a in path] == [dai.address, weth.address, usdc.address]

    def test_router_override(self, token_route):
        custom = "0x" + "12" * 20
        context = EngineContext(network=NetworkConfig.for_network("mainnet", router=custom))
        call = build_call(context, trade_for(context, token_route, TradeDirection.EXACT_IN, 1000), RECIPIENT)
        assert call.router == custom


class TestValidation:
    @pytest.mark.parametrize("recipient", ["", "0x1234", "not-an-address", "0x" + "gg" * 20])
    def test_invalid_recipient_raises(self, context, token_route, recipient):
        trade = trade_for(context, token_route, TradeDirection.EXACT_IN, 1000)
        with pytest.raises(ValueError, match="recipient"):
            build_call(context, trade, recipient)

    def test_build_is_pure(self, context, token_route):
        trade = trade_for(context, token_route, TradeDirection.EXACT_IN, 1000)
        assert build_call(context, trade, RECIPIENT) == build_call(context, trade, RECIPIENT)
