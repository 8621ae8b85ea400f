"""Asset directory backed by a Uniswap-format token list.

Token list format:
    {"name": ..., "tokens": [{"chainId": 1, "address": "0x...",
      "symbol": "DAI", "decimals": 18, "name": "Dai Stablecoin"}, ...]}

Test networks usually load a local JSON file; mainnet loads a hosted list
over HTTP.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import httpx
import structlog

from gateway.config import NetworkConfig
from gateway.errors import AssetNotFound
from gateway.models.asset import Asset
from gateway.models.types import is_valid_address, normalize_address

logger = structlog.get_logger()


def parse_token_list(data: dict[str, Any], chain_id: int) -> list[Asset]:
    """Assets of one chain from a token list document.

    Entries for other chains are ignored; malformed entries are skipped with
    a warning.
    """
    assets: list[Asset] = []
    for entry in data.get("tokens", []):
        if entry.get("chainId") != chain_id:
            continue
        try:
            assets.append(
                Asset(
                    chain_id=chain_id,
                    address=entry["address"],
                    symbol=entry["symbol"],
                    decimals=int(entry["decimals"]),
                    name=entry.get("name"),
                )
            )
        except (KeyError, TypeError, ValueError) as err:
            logger.warning("token_list_entry_skipped", entry=entry, error=str(err))
    return assets


async def fetch_token_list(url: str, timeout: float = 10.0) -> dict[str, Any]:
    async with httpx.AsyncClient(timeout=timeout) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response.json()


def read_token_list(path: str | Path) -> dict[str, Any]:
    with open(path) as f:
        return json.load(f)


class AssetDirectory:
    """Symbol/address lookup for the assets of one network.

    The native coin (ETH) and the wrapped native asset are always present.
    refresh() swaps in a freshly loaded index in one assignment, so readers
    never see a partial list.
    """

    def __init__(
        self,
        network: NetworkConfig,
        assets: Iterable[Asset] = (),
        *,
        path: str | None = None,
        url: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.network = network
        self.path = path
        self.url = url
        self.timeout = timeout
        self._index = self._build_index(assets)

    @classmethod
    async def load(
        cls,
        network: NetworkConfig,
        *,
        path: str | None = None,
        url: str | None = None,
        timeout: float = 10.0,
    ) -> AssetDirectory:
        """Create a directory and load its token list.

        A local path wins over a URL when both are given.
        """
        directory = cls(network, path=path, url=url, timeout=timeout)
        await directory.refresh()
        return directory

    async def refresh(self) -> None:
        """Reload the token list from its source.

        Raises:
            httpx.HTTPError: The hosted list could not be fetched
            OSError: The local file could not be read
        """
        if self.path:
            data = read_token_list(self.path)
            source = self.path
        elif self.url:
            data = await fetch_token_list(self.url, self.timeout)
            source = self.url
        else:
            return
        assets = parse_token_list(data, self.network.chain_id)
        self._index = self._build_index(assets)
        logger.info(
            "token_list_loaded", source=source, network=self.network.name, assets=len(assets)
        )

    def _build_index(self, assets: Iterable[Asset]) -> dict[str, Asset]:
        index: dict[str, Asset] = {}
        for asset in [self.network.native, self.network.wrapped_native, *assets]:
            if asset.chain_id != self.network.chain_id:
                continue
            index.setdefault(asset.address, asset)
            index.setdefault(asset.symbol.upper(), asset)
        return index

    @property
    def assets(self) -> list[Asset]:
        return list({asset.key: asset for asset in self._index.values()}.values())

    def __len__(self) -> int:
        return len(self.assets)

    def lookup(self, symbol_or_address: str) -> Asset | None:
        """Find an asset by symbol (case-insensitive) or address."""
        if is_valid_address(symbol_or_address):
            return self._index.get(normalize_address(symbol_or_address))
        return self._index.get(symbol_or_address.upper())

    def require(self, symbol_or_address: str) -> Asset:
        asset = self.lookup(symbol_or_address)
        if asset is None:
            raise AssetNotFound(f"Unknown asset {symbol_or_address} on {self.network.name}")
        return asset


__all__ = ["AssetDirectory", "fetch_token_list", "parse_token_list", "read_token_list"]
