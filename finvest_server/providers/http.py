"""HTTP utilities and normalized provider errors."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Literal

import requests

ProviderName = Literal["gemini"]
ProviderErrorCode = Literal["RATE_LIMIT", "AUTH", "NOT_FOUND", "UPSTREAM", "NETWORK", "BAD_RESPONSE", "TIMEOUT"]


@dataclass
class ProviderError(Exception):
    provider: ProviderName
    code: ProviderErrorCode
    message: str
    status: int | None = None

    def __str__(self) -> str:
        return self.message


def map_status_to_code(status: int) -> ProviderErrorCode:
    if status in {401, 403}:
        return "AUTH"
    if status == 404:
        return "NOT_FOUND"
    if status == 429:
        return "RATE_LIMIT"
    return "UPSTREAM"


def _upstream_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return ""
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return ""


def _raise_for_status(response: requests.Response, provider: ProviderName) -> None:
    if response.ok:
        return
    detail = _upstream_message(response)
    message = f"Provider request failed with status {response.status_code}."
    if detail:
        message = f"{message} {detail}"
    raise ProviderError(provider, map_status_to_code(response.status_code), message, response.status_code)


def _parse_json(response: requests.Response, provider: ProviderName) -> Any:
    raw = response.text or ""
    if not raw:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as error:
        raise ProviderError(
            provider,
            "BAD_RESPONSE",
            "Provider returned non-JSON content.",
            response.status_code,
        ) from error


def post_json(
    url: str,
    payload: dict[str, Any],
    provider: ProviderName,
    timeout_seconds: float = 60.0,
    headers: dict[str, str] | None = None,
) -> Any:
    """POST a JSON body once and return the decoded JSON response."""
    try:
        response = requests.post(url, data=json.dumps(payload), headers=headers, timeout=timeout_seconds)
    except requests.RequestException as error:
        raise ProviderError(provider, "NETWORK", "Provider request failed due to network error.") from error
    _raise_for_status(response, provider)
    return _parse_json(response, provider)


def fetch_json(
    url: str,
    provider: ProviderName,
    timeout_seconds: float = 60.0,
    headers: dict[str, str] | None = None,
) -> Any:
    """GET once with uniform provider/network error mapping."""
    try:
        response = requests.get(url, headers=headers, timeout=timeout_seconds)
    except requests.RequestException as error:
        raise ProviderError(provider, "NETWORK", "Provider request failed due to network error.") from error
    _raise_for_status(response, provider)
    return _parse_json(response, provider)


def fetch_bytes(
    url: str,
    provider: ProviderName,
    timeout_seconds: float = 60.0,
    headers: dict[str, str] | None = None,
) -> tuple[bytes, str | None]:
    """GET raw content; returns the body and its Content-Type header."""
    try:
        response = requests.get(url, headers=headers, timeout=timeout_seconds)
    except requests.RequestException as error:
        raise ProviderError(provider, "NETWORK", "Provider download failed due to network error.") from error
    _raise_for_status(response, provider)
    return response.content, response.headers.get("Content-Type")
