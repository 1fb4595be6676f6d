"""Response shaping helpers for MCP tools."""

from __future__ import annotations

import json
import math
import time
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any

from finvest_server.lib.formatters import AI_DISCLAIMER
from finvest_server.providers.http import ProviderError


def to_jsonable(data: Any) -> Any:
    if is_dataclass(data) and not isinstance(data, type):
        return to_jsonable(asdict(data))
    if isinstance(data, Enum):
        return data.value
    if isinstance(data, float) and not math.isfinite(data):
        return None
    if isinstance(data, list):
        return [to_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: to_jsonable(value) for key, value in data.items()}
    return data


def success_response(data: Any, ai_generated: bool = False, warning: str | None = None) -> str:
    payload: dict[str, Any] = {"data": to_jsonable(data), "timestamp": int(time.time())}
    if ai_generated:
        payload["disclaimer"] = AI_DISCLAIMER
    if warning:
        payload["warning"] = warning
    return json.dumps(payload, ensure_ascii=True, allow_nan=False)


def error_response(code: str, message: str, hint: str | None = None) -> str:
    payload: dict[str, Any] = {
        "error": True,
        "code": code,
        "message": message,
        "timestamp": int(time.time()),
    }
    if hint:
        payload["hint"] = hint
    return json.dumps(payload, ensure_ascii=True, allow_nan=False)


def provider_error_response(error: ProviderError, hint: str | None = None) -> str:
    return error_response(error.code, error.message, hint=hint)
