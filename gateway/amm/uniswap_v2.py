"""UniswapV2 pair model and constant-product math.

UniswapV2 uses the constant product formula: x * y = k
With a 0.3% fee taken from the input amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from eth_utils import keccak

from gateway.constants import FEE_DENOMINATOR, POOL_FEE_BPS
from gateway.errors import InsufficientInputAmount, InsufficientLiquidity
from gateway.models.asset import Asset
from gateway.models.types import address_bytes, normalize_address
from gateway.safe_int import S


def sort_assets(asset_a: Asset, asset_b: Asset) -> tuple[Asset, Asset]:
    """Return the two assets in UniswapV2 order (token0, token1)."""
    return (asset_a, asset_b) if asset_a.sorts_before(asset_b) else (asset_b, asset_a)


def compute_pair_address(factory: str, init_code_hash: str, asset_a: Asset, asset_b: Asset) -> str:
    """Compute the CREATE2 address of the pair contract for two assets.

    address = keccak256(0xff ++ factory ++ keccak256(token0 ++ token1) ++ init_code_hash)[12:]

    Args:
        factory: UniswapV2Factory address
        init_code_hash: 0x-prefixed keccak of the pair contract creation code
        asset_a: One side of the pair (any order)
        asset_b: Other side of the pair

    Returns:
        Lowercase 0x-prefixed pair address
    """
    token0, token1 = sort_assets(asset_a, asset_b)
    salt = keccak(address_bytes(token0.address) + address_bytes(token1.address))
    digest = keccak(
        b"\xff" + address_bytes(factory) + salt + bytes.fromhex(init_code_hash.removeprefix("0x"))
    )
    return "0x" + digest[12:].hex()


@dataclass(frozen=True)
class Pair:
    """Reserve state of a UniswapV2 pair, read fresh for one request.

    asset_a/asset_b are stored in canonical order (asset_a is token0).
    """

    asset_a: Asset
    asset_b: Asset
    reserve_a: int
    reserve_b: int
    address: str
    # Fee in basis points (30 = 0.3%)
    fee_bps: int = POOL_FEE_BPS

    def __post_init__(self) -> None:
        if not self.asset_a.sorts_before(self.asset_b):
            raise ValueError(
                f"Pair assets out of order: {self.asset_a.symbol}/{self.asset_b.symbol}"
            )
        if self.reserve_a < 0 or self.reserve_b < 0:
            raise ValueError("Pair reserves cannot be negative")
        object.__setattr__(self, "address", normalize_address(self.address, validate=True))

    @classmethod
    def from_reserves(
        cls,
        asset_x: Asset,
        asset_y: Asset,
        reserve_x: int,
        reserve_y: int,
        address: str,
        fee_bps: int = POOL_FEE_BPS,
    ) -> Pair:
        """Build a pair from two assets in any order."""
        if asset_x.sorts_before(asset_y):
            return cls(asset_x, asset_y, reserve_x, reserve_y, address, fee_bps)
        return cls(asset_y, asset_x, reserve_y, reserve_x, address, fee_bps)

    @property
    def assets(self) -> tuple[Asset, Asset]:
        return (self.asset_a, self.asset_b)

    @property
    def fee_multiplier(self) -> int:
        """10000 - fee_bps. For 30 bps this is 9970."""
        return FEE_DENOMINATOR - self.fee_bps

    def involves(self, asset: Asset) -> bool:
        return asset == self.asset_a or asset == self.asset_b

    def other(self, asset: Asset) -> Asset:
        """The asset on the opposite side of the pair."""
        if asset == self.asset_a:
            return self.asset_b
        if asset == self.asset_b:
            return self.asset_a
        raise ValueError(f"Asset {asset.symbol} not in pair {self.address}")

    def get_reserves(self, asset_in: Asset) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if asset_in == self.asset_a:
            return self.reserve_a, self.reserve_b
        if asset_in == self.asset_b:
            return self.reserve_b, self.reserve_a
        raise ValueError(f"Asset {asset_in.symbol} not in pair {self.address}")

    def price_of(self, asset: Asset) -> Decimal:
        """Mid price of `asset` in units of the other asset (decimal adjusted)."""
        reserve_in, reserve_out = self.get_reserves(asset)
        if reserve_in == 0:
            raise InsufficientLiquidity(f"Pair {self.address} has an empty reserve")
        other = self.other(asset)
        return other.from_units(reserve_out) / asset.from_units(reserve_in)

    def get_output_amount(self, asset_in: Asset, amount_in: int) -> int:
        """Output of selling exactly `amount_in` of `asset_in` into this pair."""
        reserve_in, reserve_out = self.get_reserves(asset_in)
        return constant_product.get_amount_out(
            amount_in, reserve_in, reserve_out, self.fee_multiplier
        )

    def get_input_amount(self, asset_out: Asset, amount_out: int) -> int:
        """Input required to buy exactly `amount_out` of `asset_out` from this pair."""
        reserve_out, reserve_in = self.get_reserves(asset_out)
        return constant_product.get_amount_in(
            amount_out, reserve_in, reserve_out, self.fee_multiplier
        )


class ConstantProductAMM:
    """UniswapV2 constant product math.

    Formula: amount_out = (amount_in * 997 * reserve_out) / (reserve_in * 1000 + amount_in * 997)

    The 997/1000 factor accounts for the 0.3% fee. All divisions truncate,
    matching UniswapV2Library on-chain.
    """

    def get_amount_out(
        self,
        amount_in: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = 9970,
    ) -> int:
        """Calculate output amount using constant product formula.

        Formula: amount_out = (in * fee * res_out) / (res_in * 10000 + in * fee)

        Args:
            amount_in: Input token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool
            fee_multiplier: Fee multiplier (default 9970 for 0.3% fee)

        Returns:
            Output token amount

        Raises:
            InsufficientLiquidity: If a reserve is empty
            InsufficientInputAmount: If the output truncates to zero
        """
        if amount_in <= 0:
            raise InsufficientInputAmount(f"Input amount must be positive: {amount_in}")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity(
                f"Empty reserve (reserve_in={reserve_in}, reserve_out={reserve_out})"
            )

        amount_in_with_fee = S(amount_in) * S(fee_multiplier)
        numerator = amount_in_with_fee * S(reserve_out)
        denominator = S(reserve_in) * S(FEE_DENOMINATOR) + amount_in_with_fee
        # Always below reserve_out while reserve_in > 0, however large the input
        amount_out = (numerator // denominator).value
        if amount_out == 0:
            raise InsufficientInputAmount(f"Input {amount_in} yields zero output")
        return amount_out

    def get_amount_in(
        self,
        amount_out: int,
        reserve_in: int,
        reserve_out: int,
        fee_multiplier: int = 9970,
    ) -> int:
        """Calculate required input for desired output.

        Formula: amount_in = (res_in * out * 10000) / ((res_out - out) * fee) + 1

        The +1 mirrors UniswapV2Library.getAmountIn so the computed input is
        never below what the router will actually pull.

        Args:
            amount_out: Desired output token amount
            reserve_in: Reserve of input token in pool
            reserve_out: Reserve of output token in pool
            fee_multiplier: Fee multiplier (default 9970 for 0.3% fee)

        Returns:
            Required input token amount

        Raises:
            InsufficientLiquidity: If a reserve is empty or amount_out is not
                strictly below the output reserve
        """
        if amount_out <= 0:
            raise InsufficientInputAmount(f"Output amount must be positive: {amount_out}")
        if reserve_in <= 0 or reserve_out <= 0:
            raise InsufficientLiquidity(
                f"Empty reserve (reserve_in={reserve_in}, reserve_out={reserve_out})"
            )
        if amount_out >= reserve_out:
            raise InsufficientLiquidity(
                f"Requested output {amount_out} exceeds reserve {reserve_out}"
            )

        numerator = S(reserve_in) * S(amount_out) * S(FEE_DENOMINATOR)
        denominator = (S(reserve_out) - S(amount_out)) * S(fee_multiplier)

        return ((numerator // denominator) + S(1)).value


# Singleton instance
constant_product = ConstantProductAMM()


__all__ = [
    "Pair",
    "ConstantProductAMM",
    "constant_product",
    "compute_pair_address",
    "sort_assets",
]
