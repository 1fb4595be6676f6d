"""Gemini REST adapter for text, image and video generation."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from finvest_server.config.settings import DEFAULT_API_BASE, Settings
from finvest_server.providers.http import ProviderError, fetch_bytes, fetch_json, post_json


class GeminiClient:
    def __init__(self, api_key: str, base_url: str = DEFAULT_API_BASE, timeout_seconds: float = 60.0) -> None:
        if not api_key:
            raise ProviderError("gemini", "AUTH", "Gemini API key is not configured. Set GEMINI_API_KEY.")
        self.api_key = api_key
        self.base_url = f"{base_url.rstrip('/')}/v1beta"
        self.timeout_seconds = timeout_seconds

    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key, "content-type": "application/json"}

    def generate_content(
        self,
        model: str,
        parts: list[dict[str, Any]],
        system_instruction: str | None = None,
        generation_config: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"contents": [{"role": "user", "parts": parts}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if generation_config:
            payload["generationConfig"] = generation_config
        data = post_json(
            f"{self.base_url}/models/{model}:generateContent",
            payload,
            provider="gemini",
            timeout_seconds=self.timeout_seconds,
            headers=self._headers(),
        )
        if not isinstance(data, dict):
            raise ProviderError("gemini", "BAD_RESPONSE", "Gemini returned an unexpected payload.")
        return data

    def predict_long_running(
        self,
        model: str,
        instance: dict[str, Any],
        parameters: dict[str, Any],
    ) -> dict[str, Any]:
        data = post_json(
            f"{self.base_url}/models/{model}:predictLongRunning",
            {"instances": [instance], "parameters": parameters},
            provider="gemini",
            timeout_seconds=self.timeout_seconds,
            headers=self._headers(),
        )
        if not isinstance(data, dict) or not data.get("name"):
            raise ProviderError("gemini", "BAD_RESPONSE", "Gemini did not return an operation handle.")
        return data

    def get_operation(self, operation_name: str) -> dict[str, Any]:
        data = fetch_json(
            f"{self.base_url}/{operation_name.lstrip('/')}",
            provider="gemini",
            timeout_seconds=self.timeout_seconds,
            headers=self._headers(),
        )
        if not isinstance(data, dict):
            raise ProviderError("gemini", "BAD_RESPONSE", "Gemini returned an unexpected operation payload.")
        return data

    def download(self, uri: str) -> tuple[bytes, str | None]:
        """Fetch a generated asset; the key travels as a query parameter."""
        separator = "&" if urlsplit(uri).query else "?"
        return fetch_bytes(f"{uri}{separator}key={self.api_key}", provider="gemini", timeout_seconds=self.timeout_seconds)


def create_gemini_client(settings: Settings) -> GeminiClient:
    """Build a fresh client per call; nothing is shared between requests."""
    return GeminiClient(
        settings.gemini_api_key or "",
        base_url=settings.gemini_api_base,
        timeout_seconds=settings.request_timeout_seconds,
    )


def response_parts(response: dict[str, Any]) -> list[dict[str, Any]]:
    candidates = response.get("candidates")
    if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
        return []
    content = candidates[0].get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list):
        return []
    return [part for part in parts if isinstance(part, dict)]


def extract_text(response: dict[str, Any]) -> str | None:
    texts = [part["text"] for part in response_parts(response) if isinstance(part.get("text"), str)]
    joined = "".join(texts).strip()
    return joined or None


def first_inline_image(response: dict[str, Any]) -> tuple[str, str] | None:
    """Return ``(mime_type, base64_data)`` of the first inline image part."""
    for part in response_parts(response):
        inline = part.get("inlineData") or part.get("inline_data")
        if isinstance(inline, dict) and inline.get("data"):
            mime = inline.get("mimeType") or inline.get("mime_type") or "image/png"
            return str(mime), str(inline["data"])
    return None


def generated_video_uri(operation: dict[str, Any]) -> str | None:
    response = operation.get("response")
    if not isinstance(response, dict):
        return None
    video_response = response.get("generateVideoResponse") or response
    samples = video_response.get("generatedSamples") or video_response.get("generatedVideos")
    if not isinstance(samples, list) or not samples or not isinstance(samples[0], dict):
        return None
    video = samples[0].get("video")
    uri = video.get("uri") if isinstance(video, dict) else None
    return str(uri) if uri else None
