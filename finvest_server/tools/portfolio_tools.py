"""Portfolio-domain MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from finvest_server.runtime.response import error_response, success_response
from finvest_server.tools.common import tool_event

if TYPE_CHECKING:
    from finvest_server.tools.registry import ToolServices


def register_portfolio_tools(mcp: FastMCP, services: ToolServices) -> None:
    metrics = getattr(services, "metrics", None)

    @mcp.tool(description="List every asset currently recorded in the portfolio.")
    def list_assets() -> str:
        with tool_event("list_assets", metrics):
            return success_response(services.portfolio.list_assets())

    @mcp.tool(
        description=(
            "Record a new asset. asset_type is one of Stock, Real Estate Fund, Crypto, Fixed Income, Cash. "
            "The ticker is upper-cased and doubles as the name when name is empty."
        )
    )
    def add_asset(
        ticker: str,
        asset_type: str,
        quantity: float,
        average_price: float,
        current_price: float,
        name: str = "",
        sector: str = "",
    ) -> str:
        with tool_event("add_asset", metrics) as call:
            payload = {
                "ticker": ticker,
                "type": asset_type,
                "quantity": quantity,
                "average_price": average_price,
                "current_price": current_price,
                "name": name,
                "sector": sector,
            }
            try:
                asset = services.portfolio.add_asset(payload)
            except ValueError as error:
                call.fail("validation_error")
                return error_response("VALIDATION_ERROR", str(error))
            return success_response(asset)

    @mcp.tool(description="Remove an asset by id.")
    def remove_asset(asset_id: str) -> str:
        with tool_event("remove_asset", metrics) as call:
            if not services.portfolio.remove_asset(asset_id):
                call.fail("not_found")
                return error_response("NOT_FOUND", f"No asset with id {asset_id}.")
            return success_response({"removed": asset_id})

    @mcp.tool(description="Portfolio summary, allocation by asset type and per-asset results.")
    def portfolio_dashboard() -> str:
        with tool_event("portfolio_dashboard", metrics):
            return success_response(services.portfolio.dashboard())
