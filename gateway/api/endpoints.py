"""API endpoints for the swap gateway."""

import time
from decimal import Decimal

import structlog
from eth_account import Account
from eth_account.signers.local import LocalAccount
from fastapi import APIRouter, Depends, Request

from gateway.engine import SwapEngine
from gateway.errors import InvalidRequest, PriceLimitExceeded
from gateway.models.api import (
    AllowancesRequest,
    AllowancesResponse,
    ApproveRequest,
    ApproveResponse,
    BalancesRequest,
    BalancesResponse,
    PollRequest,
    PollResponse,
    PriceRequest,
    PriceResponse,
    ReceiptBody,
    StatusResponse,
    TradeRequest,
    TradeResponse,
)
from gateway.models.asset import Asset
from gateway.trading.types import TradeDirection, TradeResult

logger = structlog.get_logger()

router = APIRouter()


def get_engine(request: Request) -> SwapEngine:
    """Dependency provider for the engine built at startup.

    Override this in tests to inject an engine over a fake chain client:
        app.dependency_overrides[get_engine] = lambda: engine

    Returns:
        The process-wide SwapEngine.
    """
    return request.app.state.engine


def _now_ms() -> int:
    return int(time.time() * 1000)


def _latency(started_ms: int) -> float:
    return (_now_ms() - started_ms) / 1000


def _fmt(value: Decimal) -> str:
    return format(value, "f")


def _wallet(private_key: str) -> LocalAccount:
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError) as err:
        raise InvalidRequest("Invalid private key") from err


def _spender(engine: SwapEngine, connector: str) -> str:
    spenders = {"uniswap": engine.context.network.router}
    spender = spenders.get(connector.lower())
    if spender is None:
        raise InvalidRequest(f"Wrong connector: {connector}")
    return spender


def _known_assets(engine: SwapEngine, symbols: list[str]) -> list[Asset]:
    """Native coin first, then every listed symbol the directory knows."""
    assets = [engine.context.network.native]
    for symbol in symbols:
        asset = engine.directory.lookup(symbol)
        if asset is None:
            logger.warning("unknown_token_skipped", symbol=symbol, network=engine.network_name)
            continue
        if asset not in assets:
            assets.append(asset)
    return assets


def _to_units(asset: Asset, amount: Decimal) -> int:
    units = asset.to_units(amount)
    if units <= 0:
        raise InvalidRequest(f"Amount {amount} is below one unit of {asset.symbol}")
    return units


async def _price_trade(engine: SwapEngine, body: PriceRequest) -> tuple[TradeResult, Asset, Asset]:
    base = await engine.resolve_asset(body.base)
    quote = await engine.resolve_asset(body.quote)
    units = _to_units(base, body.amount)
    if body.side == "sell":
        trade = await engine.quote(base, quote, TradeDirection.EXACT_IN, units)
    else:
        trade = await engine.quote(quote, base, TradeDirection.EXACT_OUT, units)
    return trade, base, quote


def _price_fields(body: PriceRequest, trade: TradeResult, quote: Asset) -> dict[str, object]:
    quote_units = trade.output_amount if body.side == "sell" else trade.input_amount
    expected = quote.from_units(quote_units)
    return {
        "base": body.base,
        "quote": body.quote,
        "side": body.side,
        "amount": _fmt(body.amount),
        "expected_amount": _fmt(expected),
        "price": _fmt(expected / body.amount),
        "route": [asset.symbol for asset in trade.route.path],
        "price_impact": _fmt(trade.price_impact),
    }


@router.post("/")
async def status(engine: SwapEngine = Depends(get_engine)) -> StatusResponse:
    """Gateway status and configured network."""
    started = _now_ms()
    return StatusResponse(
        network=engine.network_name,
        timestamp=started,
        latency=_latency(started),
        rpc_url=engine.client.rpc_url or "",
    )


@router.post("/eth/balances")
async def balances(
    body: BalancesRequest, engine: SwapEngine = Depends(get_engine)
) -> BalancesResponse:
    """Native and ERC-20 balances of the wallet, in token units."""
    started = _now_ms()
    wallet = _wallet(body.private_key)
    assets = _known_assets(engine, body.token_list)
    raw = await engine.balances(wallet.address, assets)
    return BalancesResponse(
        network=engine.network_name,
        timestamp=started,
        latency=_latency(started),
        balances={asset.symbol: _fmt(asset.from_units(amount)) for asset, amount in raw.items()},
    )


@router.post("/eth/allowances")
async def allowances(
    body: AllowancesRequest, engine: SwapEngine = Depends(get_engine)
) -> AllowancesResponse:
    """ERC-20 allowances the wallet granted to the connector's spender."""
    started = _now_ms()
    spender = _spender(engine, body.connector)
    wallet = _wallet(body.private_key)
    tokens = [a for a in _known_assets(engine, body.token_list) if not a.is_native]
    raw = await engine.allowances(wallet.address, tokens, spender)
    return AllowancesResponse(
        network=engine.network_name,
        timestamp=started,
        latency=_latency(started),
        spender=spender,
        approvals={asset.symbol: _fmt(asset.from_units(amount)) for asset, amount in raw.items()},
    )


@router.post("/eth/approve")
async def approve(
    body: ApproveRequest, engine: SwapEngine = Depends(get_engine)
) -> ApproveResponse:
    """Approve the connector's spender for a token (unlimited by default)."""
    started = _now_ms()
    spender = _spender(engine, body.connector)
    wallet = _wallet(body.private_key)
    asset = await engine.resolve_asset(body.token)
    if asset.is_native:
        raise InvalidRequest(f"{asset.symbol} does not need approval")
    units = None if body.amount is None else _to_units(asset, body.amount)
    handle = await engine.approve(
        wallet, asset, units, gas_price_gwei=body.gas_price, spender=spender
    )
    amount = "unlimited" if units is None else _fmt(asset.from_units(units))
    return ApproveResponse(
        network=engine.network_name,
        timestamp=started,
        latency=_latency(started),
        token_address=asset.address,
        spender=spender,
        amount=amount,
        tx_hash=handle.tx_hash,
    )


@router.post("/eth/poll")
async def poll(body: PollRequest, engine: SwapEngine = Depends(get_engine)) -> PollResponse:
    """Confirmation status of a transaction."""
    started = _now_ms()
    receipt = await engine.poll(body.tx_hash)
    body_receipt = None
    if receipt is not None:
        body_receipt = ReceiptBody(
            block_number=receipt.block_number,
            block_hash=receipt.block_hash,
            status=receipt.success,
            gas_used=receipt.gas_used,
            effective_gas_price=receipt.effective_gas_price,
            failure=receipt.failure.value if receipt.failure else None,
            logs=list(receipt.logs),
        )
    return PollResponse(
        network=engine.network_name,
        timestamp=started,
        latency=_latency(started),
        tx_hash=body.tx_hash,
        confirmed=receipt is not None,
        receipt=body_receipt,
    )


@router.post("/uniswap/price")
async def price(body: PriceRequest, engine: SwapEngine = Depends(get_engine)) -> PriceResponse:
    """Quote a base/quote trade without submitting it."""
    started = _now_ms()
    trade, _, quote = await _price_trade(engine, body)
    return PriceResponse(
        network=engine.network_name,
        timestamp=started,
        latency=_latency(started),
        **_price_fields(body, trade, quote),
    )


@router.post("/uniswap/trade")
async def trade(body: TradeRequest, engine: SwapEngine = Depends(get_engine)) -> TradeResponse:
    """Quote, sign and broadcast a base/quote trade."""
    started = _now_ms()
    wallet = _wallet(body.private_key)
    result, _, quote = await _price_trade(engine, body)
    fields = _price_fields(body, result, quote)

    if body.limit_price is not None:
        quoted = Decimal(str(fields["price"]))
        worse = quoted < body.limit_price if body.side == "sell" else quoted > body.limit_price
        if worse:
            logger.info(
                "trade_rejected_by_limit",
                side=body.side,
                price=str(quoted),
                limit_price=str(body.limit_price),
            )
            raise PriceLimitExceeded(
                f"Price {quoted} is worse than limit {body.limit_price} for {body.side}"
            )

    call = engine.build_call(result, body.recipient or wallet.address)
    gas_price = engine.default_gas_price_gwei if body.gas_price is None else body.gas_price
    handle = await engine.submit(wallet, call, gas_price)
    logger.info(
        "trade_submitted",
        tx_hash=handle.tx_hash,
        side=body.side,
        base=body.base,
        quote=body.quote,
        method=call.method.value,
    )
    bound_units = result.amount_out_min if body.side == "sell" else result.amount_in_max
    return TradeResponse(
        network=engine.network_name,
        timestamp=started,
        latency=_latency(started),
        tx_hash=handle.tx_hash,
        method=call.method.value,
        deadline=call.deadline,
        bound_amount=_fmt(quote.from_units(bound_units)),
        gas_limit=engine.context.swap_gas_limit,
        gas_price=_fmt(Decimal(gas_price)),
        **fields,
    )
