"""Trade calculation (exact-in and exact-out) over 1 or 2 hop routes."""

from gateway.trading.calculator import (
    compute_trade,
    hop_amounts_in,
    hop_amounts_out,
    maximum_input,
    minimum_output,
)
from gateway.trading.types import TradeDirection, TradeResult

__all__ = [
    "TradeDirection",
    "TradeResult",
    "compute_trade",
    "hop_amounts_in",
    "hop_amounts_out",
    "maximum_input",
    "minimum_output",
]
