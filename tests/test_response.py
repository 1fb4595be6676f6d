import json

from finvest_server.portfolio.models import PortfolioSummary
from finvest_server.providers.http import ProviderError
from finvest_server.runtime.response import error_response, provider_error_response, success_response


def test_non_finite_numbers_become_null() -> None:
    summary = PortfolioSummary(float("inf"), 1.0, float("nan"), float("-inf"))
    body = json.loads(success_response({"summary": summary, "items": [float("inf"), 2.5]}))
    assert body["data"]["summary"] == {
        "total_value": None,
        "total_invested": 1.0,
        "profitability": None,
        "profitability_value": None,
    }
    assert body["data"]["items"] == [None, 2.5]


def test_ai_generated_payload_carries_disclaimer() -> None:
    body = json.loads(success_response({"advice": "ok"}, ai_generated=True, warning="slow_response"))
    assert body["disclaimer"]
    assert body["warning"] == "slow_response"


def test_error_envelopes() -> None:
    body = json.loads(error_response("BUSY", "wait", hint="later"))
    assert body["error"] is True
    assert body["hint"] == "later"
    mapped = json.loads(provider_error_response(ProviderError("gemini", "TIMEOUT", "too slow")))
    assert (mapped["code"], mapped["message"]) == ("TIMEOUT", "too slow")
