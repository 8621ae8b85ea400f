"""Trade calculation over a resolved route.

Exact-input trades walk the route forward, feeding each hop's output into the
next hop. Exact-output trades walk it backwards from the requested output.
All amounts are integers in raw token units; every division truncates like
the on-chain UniswapV2Library.
"""

from __future__ import annotations

import time
from decimal import Decimal

import structlog

from gateway.config import EngineContext
from gateway.routing.types import Route
from gateway.safe_int import S
from gateway.trading.types import TradeDirection, TradeResult

logger = structlog.get_logger()


def hop_amounts_out(route: Route, amount_in: int) -> list[int]:
    """Amounts at each path position when selling exactly amount_in.

    Raises:
        InsufficientLiquidity: A hop drains its output reserve or hits an
            empty reserve
        InsufficientInputAmount: A hop's output truncates to zero
    """
    amounts = [amount_in]
    for pair, asset_in in zip(route.pairs, route.path, strict=False):
        amounts.append(pair.get_output_amount(asset_in, amounts[-1]))
    return amounts


def hop_amounts_in(route: Route, amount_out: int) -> list[int]:
    """Amounts at each path position when buying exactly amount_out.

    Raises:
        InsufficientLiquidity: A hop's requested output is not strictly
            below its output reserve
    """
    amounts = [0] * (len(route.pairs) + 1)
    amounts[-1] = amount_out
    for i in range(len(route.pairs) - 1, -1, -1):
        amounts[i] = route.pairs[i].get_input_amount(route.path[i + 1], amounts[i + 1])
    return amounts


def minimum_output(amount: int, tolerance: Decimal) -> int:
    """amount * (1 - tolerance), truncated."""
    num, den = tolerance.as_integer_ratio()
    return (S(amount) * S(den - num) // S(den)).value


def maximum_input(amount: int, tolerance: Decimal) -> int:
    """amount * (1 + tolerance), truncated."""
    num, den = tolerance.as_integer_ratio()
    return (S(amount) * S(den + num) // S(den)).value


def compute_trade(
    context: EngineContext,
    route: Route,
    direction: TradeDirection,
    amount: int,
    *,
    now: float | None = None,
) -> TradeResult:
    """Compute counter amount, slippage bound and deadline for a trade.

    Args:
        context: Engine context (slippage tolerance, ttl)
        route: Resolved route
        direction: Which side `amount` fixes
        amount: Exact input (EXACT_IN) or exact output (EXACT_OUT), raw units
        now: Current unix time; defaults to the wall clock

    Returns:
        TradeResult with counter_amount, bound_amount and deadline

    Raises:
        ValueError: amount is not positive
        InsufficientLiquidity: The route cannot serve the amount
    """
    if amount <= 0:
        raise ValueError(f"Trade amount must be positive: {amount}")

    tolerance = context.slippage_tolerance
    if direction is TradeDirection.EXACT_IN:
        amounts = hop_amounts_out(route, amount)
        counter = amounts[-1]
        bound = minimum_output(counter, tolerance)
    else:
        amounts = hop_amounts_in(route, amount)
        counter = amounts[0]
        bound = maximum_input(counter, tolerance)

    issued_at = int(time.time() if now is None else now)
    trade = TradeResult(
        route=route,
        direction=direction,
        amount=amount,
        counter_amount=counter,
        bound_amount=bound,
        deadline=issued_at + context.ttl_seconds,
        amounts=tuple(amounts),
    )
    logger.debug(
        "trade_computed",
        path=route.describe(),
        direction=direction.value,
        amount=amount,
        counter_amount=counter,
        bound_amount=bound,
        deadline=trade.deadline,
    )
    return trade


__all__ = [
    "compute_trade",
    "hop_amounts_in",
    "hop_amounts_out",
    "maximum_input",
    "minimum_output",
]
