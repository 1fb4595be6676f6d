"""Vision board and goal video MCP tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mcp.server.fastmcp import FastMCP

from finvest_server.providers.http import ProviderError
from finvest_server.runtime.response import error_response, provider_error_response, success_response
from finvest_server.runtime.state import ActionInProgressError
from finvest_server.services.video_service import BILLING_HINT
from finvest_server.tools.common import tool_event

if TYPE_CHECKING:
    from finvest_server.tools.registry import ToolServices

IMAGE_RETRY_HINT = "Image generation failed. Please try again."


def register_creative_tools(mcp: FastMCP, services: ToolServices) -> None:
    metrics = getattr(services, "metrics", None)

    @mcp.tool(
        description=(
            "Generate a 16:9 vision board image for a financial goal. "
            "resolution is one of 1K, 2K, 4K. Returns a base64 data URI."
        )
    )
    async def generate_vision_board_image(prompt: str, resolution: str = "1K") -> str:
        with tool_event("generate_vision_board_image", metrics) as call:
            try:
                image = await services.portfolio.generate_image(prompt, resolution)
            except ValueError as error:
                call.fail("validation_error")
                return error_response("VALIDATION_ERROR", str(error))
            except ActionInProgressError as error:
                call.fail("busy")
                return error_response("BUSY", str(error))
            except ProviderError as error:
                call.fail(error.code.lower())
                return provider_error_response(error, hint=IMAGE_RETRY_HINT)
            if image is None:
                return success_response({"image": None, "message": "No image produced."}, ai_generated=True)
            return success_response({"image": image}, ai_generated=True)

    @mcp.tool(
        description=(
            "Animate a goal image into a short video and wait for it to finish. "
            "image is base64 (data URI accepted); when empty the last vision board image is used. "
            "aspect_ratio is 16:9 or 9:16. This can take several minutes."
        )
    )
    async def generate_goal_video(prompt: str, image: str = "", aspect_ratio: str = "16:9") -> str:
        with tool_event("generate_goal_video", metrics) as call:
            try:
                media = await services.portfolio.generate_video(prompt, image or None, aspect_ratio)
            except ValueError as error:
                call.fail("validation_error")
                return error_response("VALIDATION_ERROR", str(error))
            except ActionInProgressError as error:
                call.fail("busy")
                return error_response("BUSY", str(error))
            except ProviderError as error:
                call.fail(error.code.lower())
                return provider_error_response(error, hint=BILLING_HINT)
            if media is None:
                return success_response({"video": None, "message": "No video produced."}, ai_generated=True)
            return success_response({"video": media}, ai_generated=True)

    @mcp.tool(description="Start a goal video job in the background and return its job id.")
    async def start_goal_video(prompt: str, image: str = "", aspect_ratio: str = "16:9") -> str:
        with tool_event("start_goal_video", metrics) as call:
            try:
                handle = services.portfolio.start_video(prompt, image or None, aspect_ratio)
            except ValueError as error:
                call.fail("validation_error")
                return error_response("VALIDATION_ERROR", str(error))
            except ActionInProgressError as error:
                call.fail("busy")
                return error_response("BUSY", str(error))
            return success_response({"job_id": handle.job_id, "status": handle.status.value})

    @mcp.tool(description="Report the status of a goal video job; includes the video resource when done.")
    def goal_video_status(job_id: str) -> str:
        with tool_event("goal_video_status", metrics) as call:
            status = services.portfolio.video_status(job_id)
            if status is None:
                call.fail("not_found")
                return error_response("NOT_FOUND", f"No video job with id {job_id}.")
            if status["status"] == "failed":
                return error_response("JOB_FAILED", status["error"] or "Video job failed.", hint=BILLING_HINT)
            return success_response(status)

    @mcp.tool(description="Cancel a running goal video job.")
    def cancel_goal_video(job_id: str) -> str:
        with tool_event("cancel_goal_video", metrics):
            return success_response({"job_id": job_id, "cancelled": services.portfolio.cancel_video(job_id)})
