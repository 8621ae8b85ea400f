"""Type definitions for transaction submission and confirmation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ReceiptFailure(str, Enum):
    """Why an included transaction did not swap."""

    # Reverted for any reason other than an expired deadline
    REVERTED = "reverted"
    # Included after its deadline; the router rejected the stale quote
    STALE_QUOTE = "stale_quote"


@dataclass(frozen=True)
class TransactionHandle:
    """A broadcast transaction.

    deadline is None for transactions without one (approvals, or a hash
    polled without its submission context).
    """

    tx_hash: str
    deadline: int | None = None
    submitted_at: float | None = None
    nonce: int | None = None


@dataclass(frozen=True)
class TransactionReceipt:
    """Final outcome of an included transaction."""

    tx_hash: str
    block_number: int
    block_hash: str
    success: bool
    gas_used: int
    effective_gas_price: int
    logs: tuple[dict[str, Any], ...] = ()
    failure: ReceiptFailure | None = None


__all__ = ["ReceiptFailure", "TransactionHandle", "TransactionReceipt"]
