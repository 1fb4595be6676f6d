"""Generated media resources."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

if TYPE_CHECKING:
    from finvest_server.tools.registry import ToolServices

VIDEO_TEMPLATE_URI = "media://videos/{media_id}"


def register_media_resources(mcp: FastMCP, services: "ToolServices") -> None:
    @mcp.resource(
        VIDEO_TEMPLATE_URI,
        name="goal-video",
        title="Generated Goal Video",
        description="Video bytes fetched after a goal video job completes.",
        mime_type="video/mp4",
    )
    def goal_video(media_id: str) -> bytes:
        entry = services.media.get(media_id)
        if entry is None:
            raise ValueError("Video resource not found or expired.")
        _, content = entry
        return content
