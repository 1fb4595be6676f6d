"""Explicit application state shared by the MCP handlers."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Iterator, Literal

from finvest_server.cache.media_cache import MediaHandle

Action = Literal["advice", "image", "video"]


class ActionInProgressError(RuntimeError):
    def __init__(self, action: str) -> None:
        super().__init__(f"A {action} request is already in progress. Wait for it to finish.")
        self.action = action


@dataclass
class AppState:
    """In-flight flags plus the latest result of each user action.

    Results are only replaced on success, so a failed action leaves the
    previous advice, image or video in place.
    """

    advice: str = ""
    image_data_uri: str | None = None
    video: MediaHandle | None = None
    _in_flight: set[str] = field(default_factory=set)
    _lock: Lock = field(default_factory=Lock)

    def is_busy(self, action: Action) -> bool:
        with self._lock:
            return action in self._in_flight

    def begin(self, action: Action) -> None:
        with self._lock:
            if action in self._in_flight:
                raise ActionInProgressError(action)
            self._in_flight.add(action)

    def end(self, action: Action) -> None:
        with self._lock:
            self._in_flight.discard(action)

    @contextmanager
    def guard(self, action: Action) -> Iterator[None]:
        self.begin(action)
        try:
            yield
        finally:
            self.end(action)

    def loading_flags(self) -> dict[str, bool]:
        with self._lock:
            return {action: action in self._in_flight for action in ("advice", "image", "video")}
