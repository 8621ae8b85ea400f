"""Pydantic models for the HTTP API.

Field names follow the gateway's JSON conventions (camelCase on the wire,
snake_case in Python). Human-readable amounts are decimal strings in token
units; raw on-chain amounts are not exposed as inputs.
"""

import json
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, Field

from gateway.models.types import Address, TxHash


def _parse_token_list(value: Any) -> Any:
    """Accept a JSON-encoded list as well as a list."""
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as err:
            raise ValueError("tokenList must be a list of symbols or a JSON-encoded list") from err
    return value


TokenList = Annotated[list[str], BeforeValidator(_parse_token_list)]

PositiveAmount = Annotated[Decimal, Field(gt=0)]


class WalletRequest(BaseModel):
    private_key: str = Field(alias="privateKey", description="Hex private key; never stored.")

    model_config = {"populate_by_name": True}


class BalancesRequest(WalletRequest):
    token_list: TokenList = Field(alias="tokenList", default_factory=list)


class AllowancesRequest(WalletRequest):
    token_list: TokenList = Field(alias="tokenList", default_factory=list)
    connector: str = "uniswap"


class ApproveRequest(WalletRequest):
    token: str
    amount: PositiveAmount | None = Field(
        default=None, description="Allowance in token units; unlimited when omitted."
    )
    gas_price: PositiveAmount | None = Field(default=None, alias="gasPrice")
    connector: str = "uniswap"


class PollRequest(BaseModel):
    tx_hash: TxHash = Field(alias="txHash")

    model_config = {"populate_by_name": True}


class PriceRequest(BaseModel):
    """A base/quote trade.

    side "sell" sells exactly `amount` base for quote (exact input);
    side "buy" buys exactly `amount` base with quote (exact output).
    """

    base: str
    quote: str
    amount: PositiveAmount
    side: Literal["buy", "sell"]

    model_config = {"populate_by_name": True}


class TradeRequest(PriceRequest):
    private_key: str = Field(alias="privateKey")
    gas_price: PositiveAmount | None = Field(default=None, alias="gasPrice")
    limit_price: PositiveAmount | None = Field(
        default=None,
        alias="limitPrice",
        description="Worst acceptable quote-per-base price.",
    )
    recipient: Address | None = None


class GatewayResponse(BaseModel):
    network: str
    timestamp: int = Field(description="Request start, unix milliseconds.")
    latency: float = Field(description="Seconds spent handling the request.")


class StatusResponse(GatewayResponse):
    rpc_url: str = Field(serialization_alias="rpcUrl")
    connection: bool = True


class BalancesResponse(GatewayResponse):
    balances: dict[str, str]


class AllowancesResponse(GatewayResponse):
    spender: str
    approvals: dict[str, str]


class ApproveResponse(GatewayResponse):
    token_address: str = Field(serialization_alias="tokenAddress")
    spender: str
    amount: str
    tx_hash: str = Field(serialization_alias="txHash")


class ReceiptBody(BaseModel):
    block_number: int = Field(serialization_alias="blockNumber")
    block_hash: str = Field(serialization_alias="blockHash")
    status: bool
    gas_used: int = Field(serialization_alias="gasUsed")
    effective_gas_price: int = Field(serialization_alias="effectiveGasPrice")
    failure: str | None = None
    logs: list[dict[str, Any]] = Field(default_factory=list)


class PollResponse(GatewayResponse):
    tx_hash: str = Field(serialization_alias="txHash")
    confirmed: bool
    receipt: ReceiptBody | None = None


class PriceResponse(GatewayResponse):
    base: str
    quote: str
    side: str
    amount: str
    expected_amount: str = Field(
        serialization_alias="expectedAmount",
        description="Quote received (sell) or quote paid (buy), in token units.",
    )
    price: str = Field(description="Quote per base.")
    route: list[str]
    price_impact: str = Field(serialization_alias="priceImpact")


class TradeResponse(PriceResponse):
    tx_hash: str = Field(serialization_alias="txHash")
    method: str
    deadline: int
    bound_amount: str = Field(
        serialization_alias="boundAmount",
        description="Minimum quote received (sell) or maximum quote paid (buy).",
    )
    gas_limit: int = Field(serialization_alias="gasLimit")
    gas_price: str = Field(serialization_alias="gasPrice")


__all__ = [
    "AllowancesRequest",
    "AllowancesResponse",
    "ApproveRequest",
    "ApproveResponse",
    "BalancesRequest",
    "BalancesResponse",
    "GatewayResponse",
    "PollRequest",
    "PollResponse",
    "PriceRequest",
    "PriceResponse",
    "ReceiptBody",
    "StatusResponse",
    "TradeRequest",
    "TradeResponse",
]
