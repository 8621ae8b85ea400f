"""Blockchain access: JSON-RPC client, pair reads and the asset directory."""

from gateway.chain.client import ChainClient, is_transient
from gateway.chain.directory import AssetDirectory, parse_token_list
from gateway.chain.pairs import PairDataFetcher

__all__ = [
    "AssetDirectory",
    "ChainClient",
    "PairDataFetcher",
    "is_transient",
    "parse_token_list",
]
