"""UniswapV2Router02 call encoding.

A trade maps to exactly one of six router methods, chosen by trade direction
and by which side (if any) is the chain's native coin:

    direction   native side   method                      native value
    EXACT_IN    none          swapExactTokensForTokens    0
    EXACT_IN    input         swapExactETHForTokens       amount in
    EXACT_IN    output        swapExactTokensForETH       0
    EXACT_OUT   none          swapTokensForExactTokens    0
    EXACT_OUT   input         swapETHForExactTokens       max amount in
    EXACT_OUT   output        swapTokensForExactETH       0
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from eth_abi import encode  # type: ignore[attr-defined]

from gateway.config import EngineContext
from gateway.models.types import is_valid_address, normalize_address
from gateway.safe_int import S
from gateway.trading.types import TradeDirection, TradeResult


class NativeSide(str, Enum):
    NONE = "none"
    INPUT = "input"
    OUTPUT = "output"


class SwapMethod(str, Enum):
    """Router methods with their 4-byte selectors and argument types."""

    SWAP_EXACT_TOKENS_FOR_TOKENS = "swapExactTokensForTokens"
    SWAP_EXACT_ETH_FOR_TOKENS = "swapExactETHForTokens"
    SWAP_EXACT_TOKENS_FOR_ETH = "swapExactTokensForETH"
    SWAP_TOKENS_FOR_EXACT_TOKENS = "swapTokensForExactTokens"
    SWAP_ETH_FOR_EXACT_TOKENS = "swapETHForExactTokens"
    SWAP_TOKENS_FOR_EXACT_ETH = "swapTokensForExactETH"

    @property
    def selector(self) -> str:
        return _SELECTORS[self]

    @property
    def arg_types(self) -> list[str]:
        if self in (SwapMethod.SWAP_EXACT_ETH_FOR_TOKENS, SwapMethod.SWAP_ETH_FOR_EXACT_TOKENS):
            return ["uint256", "address[]", "address", "uint256"]
        return ["uint256", "uint256", "address[]", "address", "uint256"]

    @property
    def signature(self) -> str:
        return f"{self.value}({','.join(self.arg_types)})"


_SELECTORS = {
    SwapMethod.SWAP_EXACT_TOKENS_FOR_TOKENS: "0x38ed1739",
    SwapMethod.SWAP_EXACT_ETH_FOR_TOKENS: "0x7ff36ab5",
    SwapMethod.SWAP_EXACT_TOKENS_FOR_ETH: "0x18cbafe5",
    SwapMethod.SWAP_TOKENS_FOR_EXACT_TOKENS: "0x8803dbee",
    SwapMethod.SWAP_ETH_FOR_EXACT_TOKENS: "0xfb3bdb41",
    SwapMethod.SWAP_TOKENS_FOR_EXACT_ETH: "0x4a25d94a",
}


@dataclass(frozen=True)
class SwapCallParameters:
    """Everything needed to send a router call.

    Attributes:
        method: Router method
        selector: 0x-prefixed 4-byte selector
        encoded_args: ABI-encoded arguments
        native_value: Wei to attach (non-zero only when paying in native coin)
        router: Router contract address
        deadline: Unix timestamp embedded in the call
    """

    method: SwapMethod
    selector: str
    encoded_args: bytes
    native_value: int
    router: str
    deadline: int

    @property
    def calldata(self) -> str:
        """0x-prefixed transaction data."""
        return self.selector + self.encoded_args.hex()


def native_side(trade: TradeResult) -> NativeSide:
    route = trade.route
    if route.input_asset.is_native and route.output_asset.is_native:
        raise ValueError("Cannot swap the native coin for itself")
    if route.input_asset.is_native:
        return NativeSide.INPUT
    if route.output_asset.is_native:
        return NativeSide.OUTPUT
    return NativeSide.NONE


# Each builder returns (argument values before path, native value)
_Builder = Callable[[TradeResult], tuple[list[int], int]]

_BUILDERS: dict[tuple[TradeDirection, NativeSide], tuple[SwapMethod, _Builder]] = {
    (TradeDirection.EXACT_IN, NativeSide.NONE): (
        SwapMethod.SWAP_EXACT_TOKENS_FOR_TOKENS,
        lambda t: ([t.amount_in_max, t.amount_out_min], 0),
    ),
    (TradeDirection.EXACT_IN, NativeSide.INPUT): (
        SwapMethod.SWAP_EXACT_ETH_FOR_TOKENS,
        lambda t: ([t.amount_out_min], t.amount_in_max),
    ),
    (TradeDirection.EXACT_IN, NativeSide.OUTPUT): (
        SwapMethod.SWAP_EXACT_TOKENS_FOR_ETH,
        lambda t: ([t.amount_in_max, t.amount_out_min], 0),
    ),
    (TradeDirection.EXACT_OUT, NativeSide.NONE): (
        SwapMethod.SWAP_TOKENS_FOR_EXACT_TOKENS,
        lambda t: ([t.amount_out_min, t.amount_in_max], 0),
    ),
    (TradeDirection.EXACT_OUT, NativeSide.INPUT): (
        SwapMethod.SWAP_ETH_FOR_EXACT_TOKENS,
        lambda t: ([t.amount_out_min], t.amount_in_max),
    ),
    (TradeDirection.EXACT_OUT, NativeSide.OUTPUT): (
        SwapMethod.SWAP_TOKENS_FOR_EXACT_ETH,
        lambda t: ([t.amount_out_min, t.amount_in_max], 0),
    ),
}


def build_call(context: EngineContext, trade: TradeResult, recipient: str) -> SwapCallParameters:
    """Encode the router call for a computed trade.

    For EXACT_IN trades amount_in_max is the exact input and amount_out_min
    the slippage bound; for EXACT_OUT trades amount_out_min is the exact
    output and amount_in_max the bound.

    Args:
        context: Engine context (router address)
        trade: Computed trade
        recipient: Address receiving the output

    Returns:
        SwapCallParameters for the selected router method

    Raises:
        ValueError: If the recipient is not a valid address
    """
    if not is_valid_address(recipient):
        raise ValueError(f"Invalid recipient address: {recipient}")
    recipient = normalize_address(recipient)

    method, builder = _BUILDERS[(trade.direction, native_side(trade))]
    amounts, native_value = builder(trade)
    amounts = [S(amount).to_uint256() for amount in amounts]

    path_bytes = [bytes.fromhex(addr[2:]) for addr in trade.route.addresses]
    encoded_args = encode(
        method.arg_types,
        [*amounts, path_bytes, bytes.fromhex(recipient[2:]), trade.deadline],
    )
    return SwapCallParameters(
        method=method,
        selector=method.selector,
        encoded_args=encoded_args,
        native_value=native_value,
        router=context.network.router,
        deadline=trade.deadline,
    )


__all__ = ["NativeSide", "SwapCallParameters", "SwapMethod", "build_call", "native_side"]
