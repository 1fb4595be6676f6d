"""Portfolio summary, allocation and per-asset performance analytics.

Every function here is a pure computation over the asset collection. Results
are rebuilt from scratch on each call since the store can change between reads.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from finvest_server.portfolio.models import AllocationEntry, Asset, AssetPerformance, PortfolioSummary

FRAME_COLUMNS = ["Id", "Ticker", "Type", "Quantity", "Average_Price", "Current_Price"]


def assets_to_frame(assets: Iterable[Asset]) -> pd.DataFrame:
    rows = [
        {
            "Id": asset.id,
            "Ticker": asset.ticker,
            "Type": asset.type,
            "Quantity": float(asset.quantity),
            "Average_Price": float(asset.average_price),
            "Current_Price": float(asset.current_price),
        }
        for asset in assets
    ]
    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    frame["Market_Value"] = frame["Quantity"].astype(float) * frame["Current_Price"].astype(float)
    frame["Cost_Basis"] = frame["Quantity"].astype(float) * frame["Average_Price"].astype(float)
    return frame


def calculate_total_portfolio_value(frame: pd.DataFrame) -> float:
    return float(frame["Market_Value"].sum())


def calculate_total_invested(frame: pd.DataFrame) -> float:
    return float(frame["Cost_Basis"].sum())


def calculate_profitability_percent(total_value: float, total_invested: float) -> float:
    if total_invested <= 0:
        return 0.0
    return ((total_value - total_invested) / total_invested) * 100.0


def calculate_portfolio_summary(assets: Iterable[Asset]) -> PortfolioSummary:
    frame = assets_to_frame(assets)
    total_value = calculate_total_portfolio_value(frame)
    total_invested = calculate_total_invested(frame)
    return PortfolioSummary(
        total_value=total_value,
        total_invested=total_invested,
        profitability=calculate_profitability_percent(total_value, total_invested),
        profitability_value=total_value - total_invested,
    )


def calculate_allocation(assets: Iterable[Asset]) -> list[AllocationEntry]:
    """Current value summed per asset type, in order of first appearance."""
    frame = assets_to_frame(assets)
    if frame.empty:
        return []
    totals = frame.groupby("Type", sort=False)["Market_Value"].sum()
    return [AllocationEntry(type=asset_type, value=float(value)) for asset_type, value in totals.items()]


def calculate_allocation_percent(allocation: list[AllocationEntry]) -> dict[str, float]:
    total = sum(entry.value for entry in allocation)
    if total <= 0:
        return {}
    return {entry.type.value: (entry.value / total) * 100.0 for entry in allocation}


def calculate_asset_performance(assets: Iterable[Asset]) -> list[AssetPerformance]:
    """Line total, absolute gain and gain percent per asset.

    ``gain_percent`` is ``None`` when the average price is zero.
    """
    frame = assets_to_frame(assets)
    if frame.empty:
        return []
    average = frame["Average_Price"].to_numpy(dtype=float)
    current = frame["Current_Price"].to_numpy(dtype=float)
    quantity = frame["Quantity"].to_numpy(dtype=float)
    gains = (current - average) * quantity
    with np.errstate(divide="ignore", invalid="ignore"):
        gain_percent = np.where(average != 0, (current / average - 1.0) * 100.0, np.nan)

    out: list[AssetPerformance] = []
    for idx, row in enumerate(frame.itertuples(index=False)):
        pct = float(gain_percent[idx])
        out.append(
            AssetPerformance(
                asset_id=row.Id,
                ticker=row.Ticker,
                line_total=float(row.Market_Value),
                gain=float(gains[idx]),
                gain_percent=pct if np.isfinite(pct) else None,
            )
        )
    return out
