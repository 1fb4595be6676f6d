"""In-memory asset store seeded with example holdings."""

from __future__ import annotations

import secrets
import string
from threading import Lock
from typing import Callable

from finvest_server.portfolio.models import Asset, AssetType, NewAsset

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 9


def generate_asset_id() -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def seed_assets() -> list[Asset]:
    return [
        Asset("1", "PETR4", "PETROBRAS PN", AssetType.STOCK, 100, 28.50, 35.20, "Energy"),
        Asset("2", "HGLG11", "CSHG LOGISTICA", AssetType.REAL_ESTATE_FUND, 15, 155.00, 162.30, "Logistics"),
        Asset("3", "BTC", "BITCOIN", AssetType.CRYPTO, 0.005, 250000, 380000, "Crypto"),
        Asset("4", "TESOURO SELIC", "TESOURO SELIC 2027", AssetType.FIXED_INCOME, 1, 12000, 12500, "Government"),
    ]


class AssetStore:
    """Thread-safe ordered asset collection without persistence."""

    def __init__(
        self,
        assets: list[Asset] | None = None,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._assets: list[Asset] = list(assets or [])
        self._lock = Lock()
        self._on_change = on_change

    def set_change_callback(self, callback: Callable[[], None] | None) -> None:
        self._on_change = callback

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def list_assets(self) -> list[Asset]:
        with self._lock:
            return list(self._assets)

    def get(self, asset_id: str) -> Asset | None:
        with self._lock:
            return next((asset for asset in self._assets if asset.id == asset_id), None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._assets)

    def add(self, new_asset: NewAsset) -> Asset:
        with self._lock:
            taken = {asset.id for asset in self._assets}
            asset_id = generate_asset_id()
            while asset_id in taken:
                asset_id = generate_asset_id()
            asset = Asset(id=asset_id, **vars(new_asset))
            self._assets.append(asset)
        self._changed()
        return asset

    def remove(self, asset_id: str) -> bool:
        with self._lock:
            kept = [asset for asset in self._assets if asset.id != asset_id]
            removed = len(kept) != len(self._assets)
            self._assets = kept
        if removed:
            self._changed()
        return removed
