"""Application entrypoint for the FinVest 360 MCP server."""

from __future__ import annotations

import asyncio
import logging
import os

from mcp.server.fastmcp import FastMCP
from starlette.responses import JSONResponse, Response

from finvest_server.config.settings import Settings, get_settings
from finvest_server.prompts.portfolio_prompts import register_portfolio_prompts
from finvest_server.protocol.compliance import configure_resource_notifier
from finvest_server.resources.media_resources import register_media_resources
from finvest_server.resources.portfolio_resources import register_portfolio_resources
from finvest_server.runtime.monitoring import ServerMetrics, configure_logging
from finvest_server.tools.registry import ToolServices, build_tool_services, register_all_tools

LOGGER = logging.getLogger(__name__)


def resolve_transport_mode(configured_mode: str) -> str:
    if configured_mode in {"stdio", "http"}:
        return configured_mode
    if os.getenv("PORT"):
        return "http"
    return "stdio"


def resolve_http_transport(configured_transport: str) -> str:
    if configured_transport in {"sse", "streamable"}:
        return configured_transport
    return "sse"


def build_server(settings: Settings, metrics: ServerMetrics | None = None) -> tuple[FastMCP, ToolServices]:
    mcp = FastMCP(
        name=settings.app_name,
        host=settings.host,
        port=settings.port,
        streamable_http_path=settings.mcp_path,
    )
    notifier = configure_resource_notifier(mcp)
    services = build_tool_services(
        settings,
        metrics=metrics,
        resource_updated_callback=notifier.notify_resource_updated_sync,
    )
    register_all_tools(mcp, services)
    register_portfolio_prompts(mcp)
    register_portfolio_resources(mcp, services)
    register_media_resources(mcp, services)
    return mcp, services


async def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    server_metrics = ServerMetrics()
    mcp, services = build_server(settings, metrics=server_metrics)
    resolved_mode = resolve_transport_mode(settings.transport_mode)
    resolved_http_transport = resolve_http_transport(settings.http_transport)

    @mcp.custom_route(settings.health_path, methods=["GET"])
    async def health_check(_: object) -> Response:
        snapshot = server_metrics.snapshot()
        return JSONResponse(
            {
                "status": "ok",
                "service": settings.app_name,
                "version": settings.app_version,
                "mode": resolved_mode,
                "ai_configured": bool(settings.gemini_api_key),
                "asset_count": len(services.portfolio.store),
                "video_jobs": services.portfolio.videos.job_count(),
                "uptime_seconds": round(snapshot.uptime_seconds, 3),
                "total_requests": snapshot.total_requests,
                "error_rate": round(snapshot.error_rate, 4),
                "avg_latency_ms": round(snapshot.avg_latency_ms, 3),
                "tools": snapshot.tools,
            }
        )

    @mcp.custom_route("/mcp-capabilities", methods=["GET"])
    async def mcp_capabilities(_: object) -> Response:
        options = mcp._mcp_server.create_initialization_options()
        return JSONResponse(
            {
                "server_name": options.server_name,
                "capabilities": options.capabilities.model_dump(by_alias=True, exclude_none=True),
            }
        )

    if not settings.gemini_api_key:
        LOGGER.warning("GEMINI_API_KEY is not set; advice falls back to a notice and image/video tools will fail.")
    LOGGER.info("starting %s: mode=%s transport=%s", settings.app_name, resolved_mode, resolved_http_transport)
    if resolved_mode == "stdio":
        await mcp.run_stdio_async()
    elif resolved_http_transport == "streamable":
        await mcp.run_streamable_http_async()
    else:
        await mcp.run_sse_async()


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
