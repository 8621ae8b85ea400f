"""Chain-qualified asset metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal, localcontext

from gateway.models.types import NATIVE_ADDRESS, normalize_address


@dataclass(frozen=True, eq=False)
class Asset:
    """An asset on a specific chain.

    Identity is (chain_id, address); symbol and decimals are metadata and do
    not take part in equality or hashing.
    """

    chain_id: int
    address: str
    symbol: str
    decimals: int
    name: str | None = field(default=None)

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", normalize_address(self.address, validate=True))
        if not 0 <= self.decimals <= 77:
            raise ValueError(f"Invalid decimals for {self.symbol}: {self.decimals}")

    @classmethod
    def native(cls, chain_id: int, symbol: str = "ETH", decimals: int = 18) -> Asset:
        """The chain's native coin."""
        return cls(chain_id=chain_id, address=NATIVE_ADDRESS, symbol=symbol, decimals=decimals)

    @property
    def is_native(self) -> bool:
        return self.address == NATIVE_ADDRESS

    @property
    def key(self) -> tuple[int, str]:
        return (self.chain_id, self.address)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Asset):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def sorts_before(self, other: Asset) -> bool:
        """UniswapV2 token ordering (token0 has the lower address)."""
        if self.chain_id != other.chain_id:
            raise ValueError("Assets are on different chains")
        if self == other:
            raise ValueError(f"Identical assets: {self.symbol}")
        return bytes.fromhex(self.address[2:]) < bytes.fromhex(other.address[2:])

    def to_units(self, amount: Decimal | str) -> int:
        """Convert a human amount (e.g. "1.5") to raw units, truncating.

        Exact for any number of digits; only the sub-unit remainder is dropped.
        """
        value = Decimal(amount)
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(value.as_tuple().digits) + self.decimals)
            scaled = value * (Decimal(10) ** self.decimals)
            return int(scaled.to_integral_value(rounding=ROUND_DOWN))

    def from_units(self, units: int) -> Decimal:
        """Convert raw units to a human amount, exactly."""
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(str(abs(units))) + self.decimals)
            return Decimal(units) / (Decimal(10) ** self.decimals)

    def __repr__(self) -> str:
        return f"Asset({self.symbol}, chain={self.chain_id}, {self.address})"
