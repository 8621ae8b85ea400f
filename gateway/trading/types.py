"""Type definitions for trade calculation."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from gateway.routing.types import Route


class TradeDirection(str, Enum):
    """Which side of the trade the caller fixed."""

    # Input amount fixed, output computed
    EXACT_IN = "exact_in"
    # Output amount fixed, input computed
    EXACT_OUT = "exact_out"


@dataclass(frozen=True)
class TradeResult:
    """Exact trade parameters for one route.

    Attributes:
        route: Route the trade executes on
        direction: EXACT_IN or EXACT_OUT
        amount: The amount the caller fixed (input for EXACT_IN, output for
            EXACT_OUT), in raw units
        counter_amount: Computed amount on the other side
        bound_amount: Slippage-adjusted limit on the computed side
            (minimum output for EXACT_IN, maximum input for EXACT_OUT)
        deadline: Unix timestamp after which the swap must revert
        amounts: Amount at each position of route.path
    """

    route: Route
    direction: TradeDirection
    amount: int
    counter_amount: int
    bound_amount: int
    deadline: int
    amounts: tuple[int, ...]

    @property
    def is_exact_in(self) -> bool:
        return self.direction is TradeDirection.EXACT_IN

    @property
    def input_amount(self) -> int:
        return self.amount if self.is_exact_in else self.counter_amount

    @property
    def output_amount(self) -> int:
        return self.counter_amount if self.is_exact_in else self.amount

    @property
    def amount_out_min(self) -> int:
        """Smallest output the router may deliver."""
        return self.bound_amount if self.is_exact_in else self.amount

    @property
    def amount_in_max(self) -> int:
        """Largest input the router may pull."""
        return self.amount if self.is_exact_in else self.bound_amount

    @property
    def execution_price(self) -> Decimal:
        """Output received per unit of input, in human units."""
        spent = self.route.input_asset.from_units(self.input_amount)
        received = self.route.output_asset.from_units(self.output_amount)
        return received / spent

    @property
    def price_impact(self) -> Decimal:
        """Relative shortfall of the execution price against the mid price.

        Includes the pool fee.
        """
        mid = self.route.mid_price
        return (mid - self.execution_price) / mid


__all__ = ["TradeDirection", "TradeResult"]
