"""Environment-driven settings."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_API_BASE = "https://generativelanguage.googleapis.com"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for local/stdio and HTTP-hosted modes."""

    app_name: str = "finvest-360"
    app_version: str = "1.0.0"
    transport_mode: str = "auto"
    http_transport: str = "sse"
    host: str = "0.0.0.0"
    port: int = 8000
    mcp_path: str = "/mcp"
    health_path: str = "/health"
    gemini_api_key: str | None = None
    gemini_api_base: str = DEFAULT_API_BASE
    advice_model: str = "gemini-3-flash-preview"
    image_model: str = "gemini-3-pro-image-preview"
    video_model: str = "veo-3.1-fast-generate-preview"
    request_timeout_seconds: float = 60.0
    video_poll_interval_seconds: float = 5.0
    video_max_poll_attempts: int = 120
    media_ttl_seconds: int = 3600
    currency: str = "BRL"
    log_level: str = "INFO"
    seed_example_assets: bool = True


def _as_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _as_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _as_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    """Load runtime settings from environment variables."""
    load_dotenv()

    return Settings(
        app_name=os.getenv("APP_NAME", "finvest-360"),
        transport_mode=os.getenv("TRANSPORT_MODE", "auto").strip().lower(),
        http_transport=os.getenv("HTTP_TRANSPORT", "sse").strip().lower(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_as_int(os.getenv("PORT"), 8000),
        mcp_path=os.getenv("MCP_PATH", "/mcp"),
        health_path=os.getenv("HEALTH_PATH", "/health"),
        gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
        gemini_api_base=(os.getenv("GEMINI_API_BASE") or DEFAULT_API_BASE).rstrip("/"),
        advice_model=os.getenv("ADVICE_MODEL") or "gemini-3-flash-preview",
        image_model=os.getenv("IMAGE_MODEL") or "gemini-3-pro-image-preview",
        video_model=os.getenv("VIDEO_MODEL") or "veo-3.1-fast-generate-preview",
        request_timeout_seconds=_as_float(os.getenv("REQUEST_TIMEOUT_SECONDS"), 60.0),
        video_poll_interval_seconds=_as_float(os.getenv("VIDEO_POLL_INTERVAL_SECONDS"), 5.0),
        video_max_poll_attempts=_as_int(os.getenv("VIDEO_MAX_POLL_ATTEMPTS"), 120),
        media_ttl_seconds=_as_int(os.getenv("MEDIA_TTL_SECONDS"), 3600),
        currency=os.getenv("CURRENCY", "BRL").strip().upper() or "BRL",
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        seed_example_assets=_as_bool(os.getenv("SEED_EXAMPLE_ASSETS"), True),
    )
