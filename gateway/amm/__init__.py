"""Constant-product AMM math and pair model."""

from gateway.amm.uniswap_v2 import (
    ConstantProductAMM,
    Pair,
    compute_pair_address,
    constant_product,
    sort_assets,
)

__all__ = [
    "ConstantProductAMM",
    "Pair",
    "compute_pair_address",
    "constant_product",
    "sort_assets",
]
