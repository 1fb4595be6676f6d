"""Advisory prompt construction and fallback messages."""

from __future__ import annotations

import json

from finvest_server.lib.formatters import format_money, format_percent
from finvest_server.portfolio.models import Asset, PortfolioSummary

ADVISOR_SYSTEM_INSTRUCTION = (
    "You are a senior financial analyst, conservative but attentive to opportunities. "
    "Your tone is professional and educational."
)
ADVICE_EMPTY = "Could not generate the analysis right now."
ADVICE_UNAVAILABLE = "Advisory unavailable: could not reach the AI advisor. Check your API key."


def project_assets(assets: list[Asset]) -> list[dict[str, object]]:
    """Ticker/type/value projection sent to the model instead of the full records."""
    return [
        {"ticker": asset.ticker, "type": asset.type.value, "total": asset.quantity * asset.current_price}
        for asset in assets
    ]


def build_advice_prompt(assets: list[Asset], summary: PortfolioSummary, currency: str = "BRL") -> str:
    return (
        "Act as an expert financial advisor and analyze my personal portfolio.\n\n"
        "Summary:\n"
        f"- Total: {format_money(summary.total_value, currency)}\n"
        f"- Invested: {format_money(summary.total_invested, currency)}\n"
        f"- Profitability: {format_percent(summary.profitability)}\n\n"
        "Assets:\n"
        f"{json.dumps(project_assets(assets), ensure_ascii=True)}\n\n"
        "Provide a concise 3-paragraph analysis:\n"
        "1. Diversification analysis (am I too concentrated?).\n"
        "2. Improvement or rebalancing suggestions based on the current market.\n"
        "3. A 0 to 10 score for the portfolio's health.\n\n"
        "Use simple Markdown formatting."
    )
