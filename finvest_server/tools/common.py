"""Shared tool-layer helpers."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from finvest_server.runtime.monitoring import ServerMetrics, log_tool_event


class ToolCall:
    def __init__(self) -> None:
        self.success = True
        self.warning: str | None = None

    def fail(self, warning: str | None = None) -> None:
        self.success = False
        self.warning = warning


@contextmanager
def tool_event(tool: str, metrics: ServerMetrics | None = None) -> Iterator[ToolCall]:
    """Time a tool invocation and emit one structured log event for it."""
    started = time.perf_counter()
    call = ToolCall()
    try:
        yield call
    except Exception:
        call.fail()
        raise
    finally:
        latency_ms = (time.perf_counter() - started) * 1000.0
        warning = call.warning or ("slow_response" if latency_ms > 2000 else None)
        log_tool_event(tool=tool, latency_ms=latency_ms, success=call.success, warning=warning, metrics=metrics)
