"""Transaction submission and confirmation."""

from gateway.execution.submitter import (
    Signer,
    TransactionSubmitter,
    encode_approve,
    gwei_to_wei,
)
from gateway.execution.types import ReceiptFailure, TransactionHandle, TransactionReceipt

__all__ = [
    "ReceiptFailure",
    "Signer",
    "TransactionHandle",
    "TransactionReceipt",
    "TransactionSubmitter",
    "encode_approve",
    "gwei_to_wei",
]
