"""Vision-board image generation."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Literal

from finvest_server.providers.gemini_client import GeminiClient, first_inline_image

LOGGER = logging.getLogger(__name__)

ImageResolution = Literal["1K", "2K", "4K"]
VALID_RESOLUTIONS = ("1K", "2K", "4K")
VISION_BOARD_ASPECT_RATIO = "16:9"


def validate_resolution(resolution: str) -> ImageResolution:
    clean = resolution.strip().upper()
    if clean not in VALID_RESOLUTIONS:
        raise ValueError(f"Resolution must be one of: {', '.join(VALID_RESOLUTIONS)}.")
    return clean  # type: ignore[return-value]


class VisionBoardService:
    def __init__(self, client_factory: Callable[[], GeminiClient], model: str) -> None:
        self._client_factory = client_factory
        self.model = model

    def _generate(self, prompt: str, resolution: ImageResolution) -> str | None:
        client = self._client_factory()
        response = client.generate_content(
            self.model,
            [{"text": prompt}],
            generation_config={
                "responseModalities": ["TEXT", "IMAGE"],
                "imageConfig": {"imageSize": resolution, "aspectRatio": VISION_BOARD_ASPECT_RATIO},
            },
        )
        image = first_inline_image(response)
        if image is None:
            return None
        mime_type, data = image
        return f"data:{mime_type};base64,{data}"

    async def generate_image(self, prompt: str, resolution: str = "1K") -> str | None:
        """Return a data URI for the first generated image, or None.

        Provider errors propagate so the caller can tell the user to retry.
        """
        if not prompt.strip():
            raise ValueError("Prompt must not be empty.")
        tier = validate_resolution(resolution)
        try:
            return await asyncio.to_thread(self._generate, prompt, tier)
        except Exception as error:
            LOGGER.error("vision board generation failed: model=%s error=%s", self.model, error)
            raise
