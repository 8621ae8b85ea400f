"""Domain and HTTP models."""

from gateway.models.asset import Asset
from gateway.models.types import (
    NATIVE_ADDRESS,
    UINT256_MAX,
    Address,
    TxHash,
    normalize_address,
)

__all__ = [
    # Types
    "Address",
    "TxHash",
    "NATIVE_ADDRESS",
    "UINT256_MAX",
    "normalize_address",
    # Domain
    "Asset",
]
