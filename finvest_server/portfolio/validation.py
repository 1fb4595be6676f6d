"""Asset submission validation and normalization."""

from __future__ import annotations

import math
from typing import Any

from finvest_server.portfolio.models import AssetType, NewAsset, ValidationIssue

MAX_TICKER_LENGTH = 20
NUMERIC_FIELDS = ("quantity", "average_price", "current_price")


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value.strip().replace(",", "."))
        except ValueError:
            return None
    return None


def validate_new_asset(payload: dict[str, Any]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    ticker = str(payload.get("ticker") or "").strip()
    if not ticker:
        issues.append(ValidationIssue(field="ticker", code="missing_ticker", message="Ticker is required."))
    elif len(ticker) > MAX_TICKER_LENGTH:
        issues.append(
            ValidationIssue(
                field="ticker",
                code="invalid_ticker",
                message=f"Ticker must be at most {MAX_TICKER_LENGTH} characters.",
            )
        )

    try:
        AssetType.parse(payload.get("type") or "")
    except ValueError as error:
        issues.append(ValidationIssue(field="type", code="invalid_type", message=str(error)))

    for field in NUMERIC_FIELDS:
        number = _as_number(payload.get(field))
        if number is None or not math.isfinite(number):
            issues.append(
                ValidationIssue(field=field, code=f"invalid_{field}", message=f"{field} must be a finite number.")
            )
        elif number < 0:
            issues.append(
                ValidationIssue(field=field, code=f"negative_{field}", message=f"{field} must not be negative.")
            )

    quantity = _as_number(payload.get("quantity"))
    for field in ("average_price", "current_price"):
        price = _as_number(payload.get(field))
        if quantity is None or price is None:
            continue
        if math.isfinite(quantity) and math.isfinite(price) and not math.isfinite(quantity * price):
            issues.append(
                ValidationIssue(
                    field=field,
                    code="value_overflow",
                    message=f"quantity x {field} is too large to represent.",
                )
            )
    return issues


def build_new_asset(payload: dict[str, Any]) -> NewAsset:
    """Normalize a validated payload; raises ValueError listing every issue otherwise."""
    issues = validate_new_asset(payload)
    if issues:
        raise ValueError("; ".join(f"{issue.field}: {issue.message}" for issue in issues))
    ticker = str(payload["ticker"]).strip().upper()
    name = str(payload.get("name") or "").strip() or ticker
    sector = str(payload.get("sector") or "").strip() or None
    return NewAsset(
        ticker=ticker,
        name=name,
        type=AssetType.parse(payload["type"]),
        quantity=float(_as_number(payload["quantity"]) or 0.0),
        average_price=float(_as_number(payload["average_price"]) or 0.0),
        current_price=float(_as_number(payload["current_price"]) or 0.0),
        sector=sector,
    )
