import asyncio
import json
import logging
from importlib.metadata import version

from finvest_server.config.settings import Settings
from finvest_server.main import build_server
from finvest_server.runtime.monitoring import ServerMetrics, log_tool_event


def test_metrics_aggregate_per_tool() -> None:
    metrics = ServerMetrics(started_at=1.0)
    metrics.record("list_assets", latency_ms=10.0, success=True)
    metrics.record("list_assets", latency_ms=30.0, success=False)
    metrics.record("add_asset", latency_ms=20.0, success=True)

    snapshot = metrics.snapshot()
    assert snapshot.total_requests == 3
    assert snapshot.error_rate == 1 / 3
    assert snapshot.avg_latency_ms == 20.0
    assert snapshot.tools["list_assets"] == {"calls": 2, "failures": 1, "avg_latency_ms": 20.0}


def test_empty_metrics_snapshot() -> None:
    snapshot = ServerMetrics().snapshot()
    assert snapshot.total_requests == 0
    assert snapshot.error_rate == 0.0
    assert snapshot.tools == {}


def test_tool_event_is_logged_as_json(caplog) -> None:
    metrics = ServerMetrics()
    with caplog.at_level(logging.INFO, logger="finvest_server.tools"):
        log_tool_event("remove_asset", latency_ms=2500.0, success=False, warning="not_found", metrics=metrics)
    event = json.loads(caplog.records[-1].getMessage())
    assert event["tool"] == "remove_asset"
    assert event["success"] is False
    assert event["warning"] == "not_found"
    assert metrics.snapshot().tools["remove_asset"]["failures"] == 1


def test_build_server_wires_tools_and_resources() -> None:
    mcp, services = build_server(Settings(gemini_api_key=None))
    tools = {tool.name for tool in asyncio.run(mcp.list_tools())}
    assert "portfolio_dashboard" in tools
    resources = {str(resource.uri) for resource in asyncio.run(mcp.list_resources())}
    assert "portfolio://current" in resources
    options = mcp._mcp_server.create_initialization_options()
    assert options.capabilities.resources.subscribe is True
    assert len(services.portfolio.store) == 4


def test_installed_mcp_is_the_1x_line() -> None:
    assert version("mcp").split(".")[0] == "1"
