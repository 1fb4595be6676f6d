"""AI advisor MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from finvest_server.runtime.response import error_response, success_response
from finvest_server.runtime.state import ActionInProgressError
from finvest_server.tools.common import tool_event

if TYPE_CHECKING:
    from finvest_server.tools.registry import ToolServices


def register_advisor_tools(mcp: FastMCP, services: ToolServices) -> None:
    metrics = getattr(services, "metrics", None)

    @mcp.tool(
        description=(
            "Ask the AI advisor for a diversification analysis, rebalancing suggestions "
            "and a 0-10 health score of the current portfolio."
        )
    )
    async def get_financial_advice() -> str:
        with tool_event("get_financial_advice", metrics) as call:
            try:
                advice = await services.portfolio.get_advice()
            except ActionInProgressError as error:
                call.fail("busy")
                return error_response("BUSY", str(error))
            return success_response({"advice": advice}, ai_generated=True)
