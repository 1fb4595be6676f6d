"""Portfolio orchestration service for store, analytics and AI actions."""

from __future__ import annotations

from typing import Any, Callable

from finvest_server.cache.media_cache import MediaHandle
from finvest_server.lib.formatters import performance_line, summary_lines
from finvest_server.portfolio.analytics_core import (
    calculate_allocation,
    calculate_allocation_percent,
    calculate_asset_performance,
    calculate_portfolio_summary,
)
from finvest_server.portfolio.models import Asset
from finvest_server.portfolio.store import AssetStore
from finvest_server.portfolio.validation import build_new_asset
from finvest_server.runtime.state import AppState
from finvest_server.services.advisory_service import AdvisoryService
from finvest_server.services.image_service import VisionBoardService
from finvest_server.services.video_service import GoalVideoService, VideoJobHandle

CURRENT_PORTFOLIO_URI = "portfolio://current"
CHANGED_URIS = (CURRENT_PORTFOLIO_URI, "portfolio://assets")


class PortfolioService:
    def __init__(
        self,
        store: AssetStore,
        state: AppState,
        advisory: AdvisoryService,
        images: VisionBoardService,
        videos: GoalVideoService,
        currency: str = "BRL",
        resource_updated_callback: Callable[[str], None] | None = None,
    ) -> None:
        self.store = store
        self.state = state
        self.advisory = advisory
        self.images = images
        self.videos = videos
        self.currency = currency
        self._resource_updated_callback = resource_updated_callback
        self.store.set_change_callback(self._notify_changed)

    def _notify_changed(self) -> None:
        if self._resource_updated_callback is None:
            return
        for uri in CHANGED_URIS:
            self._resource_updated_callback(uri)

    def list_assets(self) -> list[Asset]:
        return self.store.list_assets()

    def add_asset(self, payload: dict[str, Any]) -> Asset:
        return self.store.add(build_new_asset(payload))

    def remove_asset(self, asset_id: str) -> bool:
        return self.store.remove(asset_id)

    def dashboard(self) -> dict[str, Any]:
        """Summary, allocation and per-asset figures recomputed from the current store."""
        assets = self.store.list_assets()
        summary = calculate_portfolio_summary(assets)
        allocation = calculate_allocation(assets)
        performance = calculate_asset_performance(assets)
        return {
            "currency": self.currency,
            "asset_count": len(assets),
            "summary": summary,
            "allocation": allocation,
            "allocation_percent": calculate_allocation_percent(allocation),
            "positions": performance,
            "text": summary_lines(summary, self.currency)
            + [performance_line(item, self.currency) for item in performance],
            "loading": self.state.loading_flags(),
        }

    async def get_advice(self) -> str:
        with self.state.guard("advice"):
            assets = self.store.list_assets()
            advice = await self.advisory.get_financial_advice(assets, calculate_portfolio_summary(assets))
            self.state.advice = advice
            return advice

    async def generate_image(self, prompt: str, resolution: str = "1K") -> str | None:
        with self.state.guard("image"):
            image = await self.images.generate_image(prompt, resolution)
            if image is not None:
                self.state.image_data_uri = image
            return image

    async def generate_video(self, prompt: str, image: str | None, aspect_ratio: str = "16:9") -> MediaHandle | None:
        source = image or self.state.image_data_uri or ""
        with self.state.guard("video"):
            media = await self.videos.generate_video(prompt, source, aspect_ratio)
            if media is not None:
                self._keep_latest_video(media)
            return media

    def start_video(self, prompt: str, image: str | None, aspect_ratio: str = "16:9") -> VideoJobHandle:
        source = image or self.state.image_data_uri or ""
        self.state.begin("video")
        try:
            handle = self.videos.start(prompt, source, aspect_ratio)
        except Exception:
            self.state.end("video")
            raise
        handle.on_done(lambda: self._finish_video(handle))
        return handle

    def _finish_video(self, handle: VideoJobHandle) -> None:
        self.state.end("video")
        media = handle.media
        if media is not None:
            self._keep_latest_video(media)

    def _keep_latest_video(self, media: MediaHandle) -> None:
        """Only the latest video stays cached; the one it replaces is released."""
        previous = self.state.video
        self.state.video = media
        if previous is not None and previous.media_id != media.media_id:
            self.videos.media_cache.release(previous.media_id)

    def video_status(self, job_id: str) -> dict[str, Any] | None:
        handle = self.videos.get_job(job_id)
        if handle is None:
            return None
        error = handle.error
        return {
            "job_id": handle.job_id,
            "status": handle.status.value,
            "operation": handle.operation_name,
            "poll_attempts": handle.poll_attempts,
            "video": handle.media,
            "error": str(error) if error else None,
        }

    def cancel_video(self, job_id: str) -> bool:
        return self.videos.cancel(job_id)

    def current_snapshot(self) -> dict[str, Any]:
        return {"uri": CURRENT_PORTFOLIO_URI, "payload": self.dashboard()}
