"""In-memory TTL store for generated media bytes."""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass
from threading import Lock

MEDIA_URI_PREFIX = "media://videos/"


@dataclass(frozen=True)
class MediaHandle:
    media_id: str
    uri: str
    mime_type: str
    size_bytes: int


@dataclass
class _MediaItem:
    content: bytes
    handle: MediaHandle
    expires_at: float


class MediaCache:
    """Thread-safe blob store; entries expire so fetched videos do not pile up."""

    def __init__(self, default_ttl_seconds: int = 3600) -> None:
        self.default_ttl_seconds = max(1, default_ttl_seconds)
        self._data: dict[str, _MediaItem] = {}
        self._lock = Lock()

    def put(self, content: bytes, mime_type: str = "video/mp4", ttl_seconds: int | None = None) -> MediaHandle:
        ttl = self.default_ttl_seconds if ttl_seconds is None else max(1, ttl_seconds)
        media_id = secrets.token_hex(8)
        handle = MediaHandle(
            media_id=media_id,
            uri=f"{MEDIA_URI_PREFIX}{media_id}",
            mime_type=mime_type,
            size_bytes=len(content),
        )
        with self._lock:
            self._evict_expired(time.time())
            self._data[media_id] = _MediaItem(content=content, handle=handle, expires_at=time.time() + ttl)
        return handle

    def get(self, media_id: str) -> tuple[MediaHandle, bytes] | None:
        now = time.time()
        with self._lock:
            item = self._data.get(media_id)
            if not item:
                return None
            if item.expires_at < now:
                self._data.pop(media_id, None)
                return None
            return item.handle, item.content

    def release(self, media_id: str) -> bool:
        with self._lock:
            return self._data.pop(media_id, None) is not None

    def _evict_expired(self, now: float) -> None:
        expired = [key for key, item in self._data.items() if item.expires_at < now]
        for key in expired:
            self._data.pop(key, None)
