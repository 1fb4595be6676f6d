"""Structured logging and health metrics aggregation."""

from __future__ import annotations

import json
import logging
import sys
import threading
import time
from dataclasses import dataclass, field

LOGGER = logging.getLogger("finvest_server.tools")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@dataclass
class ToolStats:
    calls: int = 0
    failures: int = 0
    latency_ms: float = 0.0

    @property
    def avg_latency_ms(self) -> float:
        return self.latency_ms / self.calls if self.calls else 0.0


@dataclass
class HealthSnapshot:
    uptime_seconds: float
    total_requests: int
    error_rate: float
    avg_latency_ms: float
    tools: dict[str, dict[str, float]] = field(default_factory=dict)


class ServerMetrics:
    """Per-tool call counters for the health endpoint."""

    def __init__(self, started_at: float | None = None) -> None:
        self.started_at = started_at or time.time()
        self._lock = threading.Lock()
        self._tools: dict[str, ToolStats] = {}

    def record(self, tool: str, latency_ms: float, success: bool) -> None:
        with self._lock:
            stats = self._tools.setdefault(tool, ToolStats())
            stats.calls += 1
            stats.failures += 0 if success else 1
            stats.latency_ms += max(0.0, latency_ms)

    def snapshot(self) -> HealthSnapshot:
        with self._lock:
            tools = {
                name: {"calls": s.calls, "failures": s.failures, "avg_latency_ms": round(s.avg_latency_ms, 3)}
                for name, s in self._tools.items()
            }
            calls = sum(s.calls for s in self._tools.values())
            failures = sum(s.failures for s in self._tools.values())
            latency = sum(s.latency_ms for s in self._tools.values())
        return HealthSnapshot(
            uptime_seconds=max(0.0, time.time() - self.started_at),
            total_requests=calls,
            error_rate=failures / calls if calls else 0.0,
            avg_latency_ms=latency / calls if calls else 0.0,
            tools=tools,
        )


def configure_logging(level: str = "INFO") -> None:
    """Send logs to stderr; stdout is reserved for the stdio transport."""
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def log_tool_event(
    tool: str,
    latency_ms: float,
    success: bool,
    warning: str | None = None,
    metrics: ServerMetrics | None = None,
) -> None:
    if metrics is not None:
        metrics.record(tool, latency_ms=latency_ms, success=success)
    event = {"tool": tool, "latency_ms": round(latency_ms, 3), "success": success, "timestamp": int(time.time())}
    if warning:
        event["warning"] = warning
    LOGGER.info(json.dumps(event, ensure_ascii=True))
