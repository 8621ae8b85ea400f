"""Swap Gateway - UniswapV2 routing and execution engine."""

from gateway.engine import SwapEngine, SwapSubmission

__version__ = "0.1.0"
__all__ = ["SwapEngine", "SwapSubmission", "__version__"]
