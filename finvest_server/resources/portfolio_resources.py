"""Portfolio resource definitions."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from finvest_server.runtime.response import to_jsonable

if TYPE_CHECKING:
    from finvest_server.tools.registry import ToolServices

CURRENT_PORTFOLIO_URI = "portfolio://current"
ASSETS_URI = "portfolio://assets"
ADVICE_URI = "portfolio://advice"


def register_portfolio_resources(mcp: FastMCP, services: "ToolServices") -> None:
    @mcp.resource(
        CURRENT_PORTFOLIO_URI,
        name="current-portfolio",
        title="Current Portfolio Dashboard",
        description="Summary, allocation and per-asset results recomputed from the asset store.",
        mime_type="application/json",
    )
    def current_portfolio_resource() -> str:
        return json.dumps(to_jsonable(services.portfolio.current_snapshot()), ensure_ascii=True, allow_nan=False)

    @mcp.resource(
        ASSETS_URI,
        name="portfolio-assets",
        title="Portfolio Assets",
        description="Every asset currently recorded.",
        mime_type="application/json",
    )
    def assets_resource() -> str:
        return json.dumps(to_jsonable(services.portfolio.list_assets()), ensure_ascii=True, allow_nan=False)

    @mcp.resource(
        ADVICE_URI,
        name="portfolio-advice",
        title="Latest Portfolio Advice",
        description="Most recent AI advisor analysis.",
        mime_type="text/markdown",
    )
    def advice_resource() -> str:
        advice = services.portfolio.state.advice
        if not advice:
            raise ValueError("Advice resource not found. Run get_financial_advice first.")
        return advice
