"""Async JSON-RPC client for the gateway's blockchain reads and writes.

Every call goes through ChainClient._call, which:
- bounds the call with a timeout (independent of any trade deadline)
- retries transient failures (timeouts, connection errors, HTTP 429/5xx)
  with incremental backoff
- reports failures as RpcFailure, tagged transient or permanent
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog
from aiohttp import ClientError, ClientResponseError, InvalidURL
from eth_utils import keccak
from web3 import AsyncWeb3, Web3
from web3.exceptions import ProviderConnectionError, TransactionNotFound, Web3Exception
from web3.providers.rpc import AsyncHTTPProvider

from gateway.chain.abi import ERC20_ABI, PAIR_ABI
from gateway.errors import RpcFailure

logger = structlog.get_logger()

T = TypeVar("T")

# Node answers that mean "this exact signed transaction is already in the pool"
_ALREADY_KNOWN = ("already known", "known transaction", "already imported")

_TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    TimeoutError,
    OSError,
    ProviderConnectionError,
    ClientError,
)

# Everything _call turns into RpcFailure
_RPC_ERRORS: tuple[type[BaseException], ...] = (*_TRANSIENT_ERRORS, Web3Exception, ValueError)


def is_transient(err: BaseException) -> bool:
    """True when retrying the same call may succeed.

    HTTP error responses are transient only for 429 and 5xx; any other status
    means the node rejected the request itself.
    """
    if isinstance(err, ClientResponseError):
        return err.status == 429 or err.status >= 500
    if isinstance(err, InvalidURL):
        return False
    return isinstance(err, _TRANSIENT_ERRORS)


def _describe(err: BaseException) -> str:
    if isinstance(err, ClientResponseError):
        return f"HTTP {err.status} {err.message}".strip()
    return str(err) or type(err).__name__


def _hex(value: Any) -> str:
    if isinstance(value, str):
        return value if value.startswith("0x") else "0x" + value
    return Web3.to_hex(value)


def _normalize_receipt(raw: Any) -> dict[str, Any]:
    return {
        "status": int(raw["status"]),
        "block_number": int(raw["blockNumber"]),
        "block_hash": _hex(raw["blockHash"]),
        "gas_used": int(raw["gasUsed"]),
        "effective_gas_price": int(raw.get("effectiveGasPrice", 0) or 0),
        "logs": [
            {
                "address": str(log["address"]).lower(),
                "topics": [_hex(topic) for topic in log["topics"]],
                "data": _hex(log["data"]),
            }
            for log in raw.get("logs", [])
        ],
    }


class ChainClient:
    """Thin async wrapper over AsyncWeb3.

    One instance (and its pooled HTTP provider) is shared by all requests.

    Args:
        w3: Connected AsyncWeb3 instance
        timeout: Per-call timeout in seconds
        max_retries: Retries after the first attempt for transient failures
        backoff: Base delay in seconds; attempt n waits backoff * n
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        *,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff: float = 0.5,
        rpc_url: str | None = None,
    ) -> None:
        self.w3 = w3
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.max_retries = max(0, max_retries)
        self.backoff = backoff

    @classmethod
    def from_url(cls, rpc_url: str, **kwargs: Any) -> ChainClient:
        return cls(AsyncWeb3(AsyncHTTPProvider(rpc_url)), rpc_url=rpc_url, **kwargs)

    async def _call(self, operation: str, make_call: Callable[[], Awaitable[T]]) -> T:
        """Run one RPC call with timeout, retry and error classification.

        Raises:
            RpcFailure: After retries are exhausted (transient=True) or on the
                first permanent error (transient=False)
        """
        attempts = self.max_retries + 1
        attempt = 0
        while True:
            attempt += 1
            try:
                return await asyncio.wait_for(make_call(), timeout=self.timeout)
            except _RPC_ERRORS as err:
                error = _describe(err)
                if not is_transient(err):
                    logger.warning("rpc_failed", operation=operation, error=error)
                    raise RpcFailure(
                        f"{operation} failed: {error}", operation=operation, transient=False
                    ) from err
                if attempt == attempts:
                    logger.warning(
                        "rpc_retries_exhausted",
                        operation=operation,
                        attempts=attempts,
                        error=error,
                    )
                    raise RpcFailure(
                        f"{operation} failed after {attempts} attempts: {error}",
                        operation=operation,
                        transient=True,
                    ) from err
                delay = self.backoff * attempt
                logger.debug(
                    "rpc_retry", operation=operation, attempt=attempt, delay=delay, error=error
                )
                await asyncio.sleep(delay)

    # Reads

    async def get_code(self, address: str) -> bytes:
        checksum = Web3.to_checksum_address(address)
        return bytes(await self._call("get_code", lambda: self.w3.eth.get_code(checksum)))

    async def get_reserves(self, pair_address: str) -> tuple[int, int]:
        """Current (reserve0, reserve1) of a UniswapV2 pair."""
        contract = self.w3.eth.contract(address=Web3.to_checksum_address(pair_address), abi=PAIR_ABI)
        reserve0, reserve1, _ = await self._call(
            "get_reserves", lambda: contract.functions.getReserves().call()
        )
        return int(reserve0), int(reserve1)

    async def token_metadata(self, token: str) -> tuple[str, int]:
        """(symbol, decimals) of an ERC-20 token."""
        contract = self._erc20(token)
        symbol = await self._call("token_symbol", lambda: contract.functions.symbol().call())
        decimals = await self._call("token_decimals", lambda: contract.functions.decimals().call())
        return str(symbol), int(decimals)

    async def native_balance(self, owner: str) -> int:
        checksum = Web3.to_checksum_address(owner)
        return int(await self._call("get_balance", lambda: self.w3.eth.get_balance(checksum)))

    async def token_balance(self, token: str, owner: str) -> int:
        contract = self._erc20(token)
        checksum = Web3.to_checksum_address(owner)
        return int(
            await self._call("balance_of", lambda: contract.functions.balanceOf(checksum).call())
        )

    async def allowance(self, token: str, owner: str, spender: str) -> int:
        contract = self._erc20(token)
        owner_cs = Web3.to_checksum_address(owner)
        spender_cs = Web3.to_checksum_address(spender)
        return int(
            await self._call(
                "allowance", lambda: contract.functions.allowance(owner_cs, spender_cs).call()
            )
        )

    async def gas_price(self) -> int:
        """Node's current gas price in wei."""
        return int(await self._call("gas_price", lambda: self.w3.eth.gas_price))

    async def get_transaction_count(self, address: str) -> int:
        """Next nonce for address, counting pending transactions."""
        checksum = Web3.to_checksum_address(address)
        return int(
            await self._call(
                "get_transaction_count",
                lambda: self.w3.eth.get_transaction_count(checksum, "pending"),
            )
        )

    async def get_block_timestamp(self, block_number: int) -> int:
        block = await self._call("get_block", lambda: self.w3.eth.get_block(block_number))
        return int(block["timestamp"])

    # Writes

    async def send_raw_transaction(self, raw_transaction: bytes) -> str:
        """Broadcast signed bytes and return the transaction hash.

        A node reporting the same bytes as already known counts as success;
        the hash is the keccak of the raw transaction in that case.
        """
        try:
            tx_hash = await self._call(
                "send_raw_transaction", lambda: self.w3.eth.send_raw_transaction(raw_transaction)
            )
        except RpcFailure as err:
            if not err.transient and any(m in err.message.lower() for m in _ALREADY_KNOWN):
                tx_hash = keccak(raw_transaction)
                logger.info("transaction_already_known", tx_hash=_hex(tx_hash))
            else:
                raise
        return _hex(tx_hash)

    async def get_transaction_receipt(self, tx_hash: str) -> dict[str, Any] | None:
        """Normalized receipt, or None while the transaction is pending."""

        async def fetch() -> Any:
            try:
                return await self.w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                return None

        raw = await self._call("get_transaction_receipt", fetch)
        if raw is None:
            return None
        return _normalize_receipt(raw)

    def _erc20(self, token: str) -> Any:
        return self.w3.eth.contract(address=Web3.to_checksum_address(token), abi=ERC20_ABI)


__all__ = ["ChainClient", "is_transient"]
