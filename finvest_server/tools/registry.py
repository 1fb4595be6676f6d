"""Domain tool registry entrypoint."""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Callable

from mcp.server.fastmcp import FastMCP

from finvest_server.cache.media_cache import MediaCache
from finvest_server.config.settings import Settings
from finvest_server.portfolio.portfolio_service import PortfolioService
from finvest_server.portfolio.store import AssetStore, seed_assets
from finvest_server.providers.gemini_client import create_gemini_client
from finvest_server.runtime.monitoring import ServerMetrics
from finvest_server.runtime.state import AppState
from finvest_server.services.advisory_service import AdvisoryService
from finvest_server.services.image_service import VisionBoardService
from finvest_server.services.video_service import GoalVideoService
from finvest_server.tools.advisor_tools import register_advisor_tools
from finvest_server.tools.creative_tools import register_creative_tools
from finvest_server.tools.portfolio_tools import register_portfolio_tools


@dataclass
class ToolServices:
    portfolio: PortfolioService
    media: MediaCache
    metrics: ServerMetrics | None = None


def build_tool_services(
    settings: Settings,
    metrics: ServerMetrics | None = None,
    resource_updated_callback: Callable[[str], None] | None = None,
) -> ToolServices:
    client_factory = partial(create_gemini_client, settings)
    media = MediaCache(default_ttl_seconds=settings.media_ttl_seconds)
    store = AssetStore(seed_assets() if settings.seed_example_assets else [])
    portfolio = PortfolioService(
        store=store,
        state=AppState(),
        advisory=AdvisoryService(client_factory, settings.advice_model, currency=settings.currency),
        images=VisionBoardService(client_factory, settings.image_model),
        videos=GoalVideoService(
            client_factory,
            settings.video_model,
            media,
            poll_interval_seconds=settings.video_poll_interval_seconds,
            max_poll_attempts=settings.video_max_poll_attempts,
            job_ttl_seconds=settings.media_ttl_seconds,
        ),
        currency=settings.currency,
        resource_updated_callback=resource_updated_callback,
    )
    return ToolServices(portfolio=portfolio, media=media, metrics=metrics)


def register_all_tools(mcp: FastMCP, services: ToolServices) -> None:
    register_portfolio_tools(mcp, services)
    register_advisor_tools(mcp, services)
    register_creative_tools(mcp, services)
