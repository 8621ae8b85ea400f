"""Router call encoding."""

from gateway.encoding.router_v2 import (
    NativeSide,
    SwapCallParameters,
    SwapMethod,
    build_call,
    native_side,
)

__all__ = ["NativeSide", "SwapCallParameters", "SwapMethod", "build_call", "native_side"]
