"""Transaction signing, broadcast and confirmation tracking.

Submission is fire-and-forget: no gas estimation and no deadline check
before broadcast. A swap that lands after its deadline is rejected on-chain
and shows up as a failed receipt (STALE_QUOTE), never as a submit error.
"""

from __future__ import annotations

import asyncio
import time
from collections import OrderedDict, defaultdict
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol

import structlog
from eth_abi import encode  # type: ignore[attr-defined]
from web3 import Web3

from gateway.chain.abi import ERC20_APPROVE_SELECTOR
from gateway.errors import RpcFailure
from gateway.execution.types import ReceiptFailure, TransactionHandle, TransactionReceipt
from gateway.models.types import address_bytes

if TYPE_CHECKING:
    from gateway.chain.client import ChainClient
    from gateway.config import EngineContext
    from gateway.encoding.router_v2 import SwapCallParameters

logger = structlog.get_logger()


class Signer(Protocol):
    """What submit() needs from a wallet (eth_account LocalAccount fits)."""

    address: str

    def sign_transaction(self, transaction_dict: dict[str, Any]) -> Any: ...


def gwei_to_wei(gas_price_gwei: Decimal | int | float | str) -> int:
    return int(Web3.to_wei(Decimal(str(gas_price_gwei)), "gwei"))


def encode_approve(spender: str, amount: int) -> str:
    """Calldata for ERC-20 approve(spender, amount)."""
    return ERC20_APPROVE_SELECTOR + encode(
        ["address", "uint256"], [address_bytes(spender), amount]
    ).hex()


class TransactionSubmitter:
    """Signs and broadcasts transactions and tracks their receipts.

    Receipts are cached by hash once the transaction is included, so
    polling the same handle again returns the identical receipt object.
    The deadline of every swap sent through this submitter is remembered by
    hash, so a poll by bare hash still tells a stale quote from a revert.
    Both caches keep the `max_cached` most recently used entries.

    Sends from one address are serialized: the nonce lookup and broadcast
    of one transaction finish before the next one reads the nonce.
    """

    def __init__(
        self, context: EngineContext, client: ChainClient, *, max_cached: int = 1024
    ) -> None:
        self.context = context
        self.client = client
        self.max_cached = max(1, max_cached)
        self._receipts: OrderedDict[str, TransactionReceipt] = OrderedDict()
        self._deadlines: OrderedDict[str, int] = OrderedDict()
        self._nonce_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def submit(
        self,
        signer: Signer,
        call: SwapCallParameters,
        gas_price_gwei: Decimal | int | float | str,
    ) -> TransactionHandle:
        """Sign and broadcast a router call.

        Args:
            signer: Wallet paying for and sending the swap
            call: Encoded router call
            gas_price_gwei: Legacy gas price in gwei

        Returns:
            Handle carrying the hash and the call deadline

        Raises:
            RpcFailure: Nonce lookup or broadcast failed
        """
        return await self._send(
            signer,
            to=call.router,
            data=call.calldata,
            value=call.native_value,
            gas_limit=self.context.swap_gas_limit,
            gas_price_gwei=gas_price_gwei,
            deadline=call.deadline,
        )

    async def approve(
        self,
        signer: Signer,
        token: str,
        spender: str,
        amount: int,
        gas_price_gwei: Decimal | int | float | str,
    ) -> TransactionHandle:
        """Sign and broadcast an ERC-20 approval with the fixed approval gas limit."""
        return await self._send(
            signer,
            to=token,
            data=encode_approve(spender, amount),
            value=0,
            gas_limit=self.context.approval_gas_limit,
            gas_price_gwei=gas_price_gwei,
            deadline=None,
        )

    async def _send(
        self,
        signer: Signer,
        *,
        to: str,
        data: str,
        value: int,
        gas_limit: int,
        gas_price_gwei: Decimal | int | float | str,
        deadline: int | None,
    ) -> TransactionHandle:
        async with self._nonce_locks[signer.address.lower()]:
            nonce = await self.client.get_transaction_count(signer.address)
            tx = {
                "to": Web3.to_checksum_address(to),
                "data": data,
                "value": value,
                "gas": gas_limit,
                "gasPrice": gwei_to_wei(gas_price_gwei),
                "nonce": nonce,
                "chainId": self.context.network.chain_id,
            }
            signed = signer.sign_transaction(tx)
            tx_hash = await self.client.send_raw_transaction(bytes(signed.raw_transaction))
        if deadline is not None:
            self._remember(self._deadlines, tx_hash.lower(), deadline)
        handle = TransactionHandle(
            tx_hash=tx_hash, deadline=deadline, submitted_at=time.time(), nonce=nonce
        )
        logger.info(
            "transaction_submitted",
            tx_hash=tx_hash,
            sender=signer.address,
            to=tx["to"],
            nonce=nonce,
            value=value,
            gas_limit=gas_limit,
            deadline=deadline,
        )
        return handle

    async def poll_receipt(self, handle: TransactionHandle) -> TransactionReceipt | None:
        """Receipt of an included transaction, or None while pending.

        Raises:
            RpcFailure: The node could not be queried
        """
        key = handle.tx_hash.lower()
        cached = self._receipts.get(key)
        if cached is not None:
            self._receipts.move_to_end(key)
            return cached

        raw = await self.client.get_transaction_receipt(handle.tx_hash)
        if raw is None:
            return None

        success = raw["status"] == 1
        failure = None
        if not success:
            deadline = handle.deadline
            if deadline is None:
                deadline = self._deadlines.get(key)
            failure = await self._classify_failure(deadline, raw["block_number"])

        receipt = TransactionReceipt(
            tx_hash=key,
            block_number=raw["block_number"],
            block_hash=raw["block_hash"],
            success=success,
            gas_used=raw["gas_used"],
            effective_gas_price=raw["effective_gas_price"],
            logs=tuple(raw["logs"]),
            failure=failure,
        )
        logger.info(
            "transaction_confirmed",
            tx_hash=key,
            block_number=receipt.block_number,
            success=success,
            failure=failure.value if failure else None,
        )
        # A concurrent poll may have stored a receipt first; keep that one
        return self._remember(self._receipts, key, receipt)

    def _remember(self, cache: OrderedDict[str, Any], key: str, value: Any) -> Any:
        value = cache.setdefault(key, value)
        cache.move_to_end(key)
        while len(cache) > self.max_cached:
            cache.popitem(last=False)
        return value

    async def _classify_failure(self, deadline: int | None, block_number: int) -> ReceiptFailure:
        if deadline is None:
            return ReceiptFailure.REVERTED
        block_time = await self.client.get_block_timestamp(block_number)
        if block_time > deadline:
            return ReceiptFailure.STALE_QUOTE
        return ReceiptFailure.REVERTED

    async def wait_for_receipt(
        self,
        handle: TransactionHandle,
        *,
        timeout: float = 120.0,
        poll_interval: float = 2.0,
    ) -> TransactionReceipt:
        """Poll until the transaction is included.

        Raises:
            RpcFailure: transient=True when the timeout elapses first
        """
        loop = asyncio.get_running_loop()
        give_up_at = loop.time() + timeout
        while True:
            receipt = await self.poll_receipt(handle)
            if receipt is not None:
                return receipt
            if loop.time() + poll_interval > give_up_at:
                raise RpcFailure(
                    f"Transaction {handle.tx_hash} not included within {timeout}s",
                    operation="wait_for_receipt",
                    transient=True,
                )
            await asyncio.sleep(poll_interval)


__all__ = ["Signer", "TransactionSubmitter", "encode_approve", "gwei_to_wei"]
