"""Typed portfolio models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AssetType(str, Enum):
    STOCK = "Stock"
    REAL_ESTATE_FUND = "Real Estate Fund"
    CRYPTO = "Crypto"
    FIXED_INCOME = "Fixed Income"
    CASH = "Cash"

    @classmethod
    def parse(cls, value: str | AssetType) -> AssetType:
        """Accept enum members, member names or display values (case-insensitive)."""
        if isinstance(value, AssetType):
            return value
        raw = str(value).strip()
        key = raw.upper().replace("-", "_").replace(" ", "_")
        if key == "FII":
            return cls.REAL_ESTATE_FUND
        if key in cls.__members__:
            return cls.__members__[key]
        for member in cls:
            if member.value.lower() == raw.lower():
                return member
        raise ValueError(f"Unknown asset type: {value!r}. Expected one of {[m.value for m in cls]}.")


@dataclass(frozen=True)
class NewAsset:
    ticker: str
    name: str
    type: AssetType
    quantity: float
    average_price: float
    current_price: float
    sector: str | None = None


@dataclass(frozen=True)
class Asset:
    id: str
    ticker: str
    name: str
    type: AssetType
    quantity: float
    average_price: float
    current_price: float
    sector: str | None = None


@dataclass
class PortfolioSummary:
    total_value: float
    total_invested: float
    profitability: float
    profitability_value: float


@dataclass
class AllocationEntry:
    type: AssetType
    value: float


@dataclass
class AssetPerformance:
    asset_id: str
    ticker: str
    line_total: float
    gain: float
    gain_percent: float | None


@dataclass
class ValidationIssue:
    field: str
    message: str
    code: str = "invalid_value"
