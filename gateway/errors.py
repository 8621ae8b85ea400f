"""Gateway error taxonomy.

Every failure the engine reports is one of these types. Each carries a
stable ``code`` used by the HTTP layer and an HTTP status.

Receipt-level failures (a reverted swap, a stale quote) are NOT exceptions:
the transaction executed and paid gas, so they are reported through
``TransactionReceipt.failure`` instead.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base error for all gateway failures."""

    code: str = "gateway_error"
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.code, "message": self.message}


class InvalidNetwork(GatewayError):
    """Unsupported network requested at construction time. Not retryable."""

    code = "invalid_network"
    status_code = 400


class InvalidRequest(GatewayError):
    """Malformed request input (bad private key, unknown connector, dust amount)."""

    code = "invalid_request"
    status_code = 400


class AssetNotFound(GatewayError):
    """Symbol or address is not known to the asset directory."""

    code = "asset_not_found"
    status_code = 404


class NoLiquidity(GatewayError):
    """Neither a direct nor a bridged pair exists for the requested assets."""

    code = "no_liquidity"
    status_code = 404


class InsufficientLiquidity(GatewayError):
    """A hop's amount cannot be served by the pool's reserves."""

    code = "insufficient_liquidity"
    status_code = 422


class InsufficientInputAmount(InsufficientLiquidity):
    """A hop's output truncates to zero for the given input."""

    code = "insufficient_input_amount"


class PriceLimitExceeded(GatewayError):
    """The quoted price is worse than the caller's limit price."""

    code = "price_limit_exceeded"
    status_code = 422


class RpcFailure(GatewayError):
    """Network or node failure during a fetch, broadcast or receipt poll.

    Attributes:
        operation: Name of the client operation that failed
        transient: True when retrying the same call may succeed
    """

    code = "rpc_failure"
    status_code = 502

    def __init__(self, message: str, *, operation: str, transient: bool) -> None:
        super().__init__(message)
        self.operation = operation
        self.transient = transient

    def to_dict(self) -> dict[str, str]:
        data = super().to_dict()
        data["operation"] = self.operation
        data["transient"] = str(self.transient).lower()
        return data


__all__ = [
    "GatewayError",
    "InvalidNetwork",
    "InvalidRequest",
    "AssetNotFound",
    "NoLiquidity",
    "InsufficientLiquidity",
    "InsufficientInputAmount",
    "PriceLimitExceeded",
    "RpcFailure",
]
