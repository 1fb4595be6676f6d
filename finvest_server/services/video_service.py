"""Goal video generation: submit, poll until done, fetch bytes."""

from __future__ import annotations

import asyncio
import logging
import re
import secrets
import time
from enum import Enum
from typing import Any, Awaitable, Callable, Literal

from finvest_server.cache.media_cache import MediaCache, MediaHandle
from finvest_server.providers.gemini_client import GeminiClient, generated_video_uri
from finvest_server.providers.http import ProviderError

LOGGER = logging.getLogger(__name__)

AspectRatio = Literal["16:9", "9:16"]
VALID_ASPECT_RATIOS = ("16:9", "9:16")
VIDEO_RESOLUTION = "720p"
DEFAULT_IMAGE_MIME = "image/png"
DATA_URI_PATTERN = re.compile(r"^data:(image/[a-zA-Z0-9.+-]+);base64,")
BILLING_HINT = (
    "Video generation failed. Check that the API key belongs to a paid project with billing enabled."
)


class VideoJobStatus(str, Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


def split_image_data(image: str) -> tuple[str, str]:
    """Strip a ``data:image/...;base64,`` prefix; returns ``(mime_type, base64_data)``."""
    clean = image.strip()
    match = DATA_URI_PATTERN.match(clean)
    if not match:
        return DEFAULT_IMAGE_MIME, clean
    mime = match.group(1).lower()
    if mime == "image/jpg":
        mime = "image/jpeg"
    return mime, clean[match.end():]


def validate_aspect_ratio(aspect_ratio: str) -> AspectRatio:
    clean = aspect_ratio.strip()
    if clean not in VALID_ASPECT_RATIOS:
        raise ValueError(f"Aspect ratio must be one of: {', '.join(VALID_ASPECT_RATIOS)}.")
    return clean  # type: ignore[return-value]


def validate_video_request(prompt: str, image: str, aspect_ratio: str) -> tuple[AspectRatio, str, str]:
    if not prompt.strip():
        raise ValueError("Prompt must not be empty.")
    if not image or not image.strip():
        raise ValueError("A source image is required.")
    ratio = validate_aspect_ratio(aspect_ratio)
    mime_type, image_bytes = split_image_data(image)
    if not image_bytes:
        raise ValueError("A source image is required.")
    return ratio, mime_type, image_bytes


class VideoJobHandle:
    """Cancellable reference to a running video generation."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        self.operation_name: str | None = None
        self.poll_attempts = 0
        self.finished_at: float | None = None
        self._task: asyncio.Task[MediaHandle | None] | None = None

    def _attach(self, task: asyncio.Task[MediaHandle | None]) -> None:
        self._task = task

    @property
    def status(self) -> VideoJobStatus:
        task = self._task
        if task is None or not task.done():
            return VideoJobStatus.PENDING
        if task.cancelled():
            return VideoJobStatus.CANCELLED
        if task.exception() is not None:
            return VideoJobStatus.FAILED
        return VideoJobStatus.DONE

    @property
    def error(self) -> BaseException | None:
        if self.status is not VideoJobStatus.FAILED:
            return None
        return self._task.exception() if self._task else None

    @property
    def media(self) -> MediaHandle | None:
        if self.status is not VideoJobStatus.DONE or self._task is None:
            return None
        return self._task.result()

    def on_done(self, callback: Callable[[], None]) -> None:
        if self._task is None:
            raise RuntimeError("Video job has not been started.")
        self._task.add_done_callback(lambda _task: callback())

    def cancel(self) -> bool:
        if self._task is None or self._task.done():
            return False
        return self._task.cancel()

    async def result(self) -> MediaHandle | None:
        if self._task is None:
            raise RuntimeError("Video job has not been started.")
        return await self._task


class GoalVideoService:
    def __init__(
        self,
        client_factory: Callable[[], GeminiClient],
        model: str,
        media_cache: MediaCache,
        poll_interval_seconds: float = 5.0,
        max_poll_attempts: int = 120,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        job_ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client_factory = client_factory
        self.model = model
        self.media_cache = media_cache
        self.poll_interval_seconds = max(0.0, poll_interval_seconds)
        self.max_poll_attempts = max(0, max_poll_attempts)
        self._sleep = sleep
        self.job_ttl_seconds = max(0.0, job_ttl_seconds)
        self._clock = clock
        self._jobs: dict[str, VideoJobHandle] = {}

    async def generate_video(
        self,
        prompt: str,
        image: str,
        aspect_ratio: str = "16:9",
        handle: VideoJobHandle | None = None,
    ) -> MediaHandle | None:
        """Run one generation to completion.

        Returns None when the finished job carries no video URI. Submission,
        polling and download failures raise ProviderError.
        """
        ratio, mime_type, image_bytes = validate_video_request(prompt, image, aspect_ratio)
        progress = handle or VideoJobHandle(job_id="inline")

        client = self._client_factory()
        operation = await asyncio.to_thread(
            client.predict_long_running,
            self.model,
            {"prompt": prompt, "image": {"bytesBase64Encoded": image_bytes, "mimeType": mime_type}},
            {"sampleCount": 1, "resolution": VIDEO_RESOLUTION, "aspectRatio": ratio},
        )
        operation_name = str(operation.get("name"))
        progress.operation_name = operation_name
        LOGGER.info("video job submitted: job=%s operation=%s", progress.job_id, operation_name)

        while not operation.get("done"):
            if self.max_poll_attempts and progress.poll_attempts >= self.max_poll_attempts:
                raise ProviderError(
                    "gemini",
                    "TIMEOUT",
                    f"Video job did not finish after {progress.poll_attempts} status checks.",
                )
            await self._sleep(self.poll_interval_seconds)
            operation = await asyncio.to_thread(client.get_operation, operation_name)
            progress.poll_attempts += 1
            LOGGER.debug("video job polled: job=%s attempt=%s", progress.job_id, progress.poll_attempts)

        error = operation.get("error")
        if isinstance(error, dict):
            raise ProviderError("gemini", "UPSTREAM", f"Video job failed: {error.get('message') or 'unknown error'}")

        uri = generated_video_uri(operation)
        if not uri:
            LOGGER.info("video job finished without a video: job=%s", progress.job_id)
            return None

        content, content_type = await asyncio.to_thread(client.download, uri)
        mime = (content_type or "video/mp4").split(";")[0].strip() or "video/mp4"
        media = self.media_cache.put(content, mime_type=mime)
        LOGGER.info("video job stored: job=%s media=%s bytes=%s", progress.job_id, media.media_id, media.size_bytes)
        return media

    def start(self, prompt: str, image: str, aspect_ratio: str = "16:9") -> VideoJobHandle:
        """Schedule a generation on the running loop and return its handle."""
        validate_video_request(prompt, image, aspect_ratio)
        self._prune_finished()
        handle = VideoJobHandle(job_id=secrets.token_hex(6))
        task = asyncio.get_running_loop().create_task(
            self.generate_video(prompt, image, aspect_ratio, handle=handle)
        )
        task.add_done_callback(self._record_outcome(handle))
        handle._attach(task)
        self._jobs[handle.job_id] = handle
        return handle

    def _record_outcome(self, handle: VideoJobHandle) -> Callable[[asyncio.Task[Any]], None]:
        def _callback(task: asyncio.Task[Any]) -> None:
            handle.finished_at = self._clock()
            if task.cancelled():
                LOGGER.info("video job cancelled: job=%s", handle.job_id)
                return
            error = task.exception()
            if error is not None:
                LOGGER.error("video job failed: job=%s error=%s", handle.job_id, error)

        return _callback

    def _prune_finished(self) -> None:
        """Forget jobs that finished more than job_ttl_seconds ago."""
        cutoff = self._clock() - self.job_ttl_seconds
        expired = [
            job_id
            for job_id, handle in self._jobs.items()
            if handle.finished_at is not None and handle.finished_at <= cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]

    def job_count(self) -> int:
        self._prune_finished()
        return len(self._jobs)

    def get_job(self, job_id: str) -> VideoJobHandle | None:
        self._prune_finished()
        return self._jobs.get(job_id)

    def cancel(self, job_id: str) -> bool:
        handle = self._jobs.get(job_id)
        return handle.cancel() if handle else False
