"""Response formatting helpers."""

from __future__ import annotations

import math

from finvest_server.portfolio.models import AssetPerformance, PortfolioSummary

AI_DISCLAIMER = "AI-generated content for informational use only. This is not financial advice."
CURRENCY_SYMBOLS = {"BRL": "R$", "USD": "$", "EUR": "EUR", "GBP": "GBP"}


def format_money(value: float | None, currency: str = "BRL") -> str:
    if value is None or not math.isfinite(value):
        return "n/a"
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol} {abs(value):,.2f}"


def format_percent(value: float | None, signed: bool = False) -> str:
    if value is None or not math.isfinite(value):
        return "n/a"
    prefix = "+" if signed and value >= 0 else ""
    return f"{prefix}{value:.2f}%"


def summary_lines(summary: PortfolioSummary, currency: str = "BRL") -> list[str]:
    return [
        f"Total value: {format_money(summary.total_value, currency)}",
        f"Total invested: {format_money(summary.total_invested, currency)}",
        (
            f"Profitability: {format_percent(summary.profitability, signed=True)} "
            f"({format_money(summary.profitability_value, currency)})"
        ),
    ]


def performance_line(performance: AssetPerformance, currency: str = "BRL") -> str:
    gain_prefix = "+" if performance.gain >= 0 else ""
    return (
        f"{performance.ticker}: {format_money(performance.line_total, currency)} "
        f"[{gain_prefix}{format_money(performance.gain, currency)} / {format_percent(performance.gain_percent)}]"
    )
