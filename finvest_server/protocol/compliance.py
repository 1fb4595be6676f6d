"""Resource subscriptions, update notifications and error mapping for the MCP server."""

from __future__ import annotations

import asyncio
import logging
from threading import Lock
from typing import Any

import mcp.types as mcp_types
from mcp.server.fastmcp import FastMCP
from mcp.server.lowlevel.server import request_ctx
from mcp.shared.exceptions import McpError

LOGGER = logging.getLogger(__name__)
RESOURCE_NOT_FOUND_CODE = -32002
MISSING_RESOURCE_MARKERS = ("unknown resource", "not found", "expired")


class SubscriptionRegistry:
    """Sessions keyed by the resource URI they subscribed to."""

    def __init__(self) -> None:
        self._by_uri: dict[str, set[Any]] = {}
        self._lock = Lock()

    def add(self, uri: str, session: Any) -> None:
        with self._lock:
            self._by_uri.setdefault(uri, set()).add(session)

    def discard(self, uri: str, session: Any) -> None:
        with self._lock:
            sessions = self._by_uri.get(uri)
            if sessions is None:
                return
            sessions.discard(session)
            if not sessions:
                del self._by_uri[uri]

    def sessions(self, uri: str) -> list[Any]:
        with self._lock:
            return list(self._by_uri.get(uri, ()))

    def uris(self) -> list[str]:
        with self._lock:
            return list(self._by_uri)


def to_mcp_error(uri: str, error: Exception) -> McpError:
    message = str(error).lower()
    if any(marker in message for marker in MISSING_RESOURCE_MARKERS):
        return McpError(
            mcp_types.ErrorData(code=RESOURCE_NOT_FOUND_CODE, message="Resource not found", data={"uri": uri})
        )
    LOGGER.error("resource read failed: uri=%s error=%s", uri, error)
    return McpError(mcp_types.ErrorData(code=mcp_types.INTERNAL_ERROR, message="Internal error", data=None))


class ResourceNotifier:
    """Pushes resources/updated to subscribed sessions when the portfolio changes."""

    def __init__(self, mcp: FastMCP) -> None:
        self.mcp = mcp
        self.subscriptions = SubscriptionRegistry()
        self._pending: set[asyncio.Task[None]] = set()
        server = mcp._mcp_server
        self._advertise_subscriptions(server)
        self._install_handlers(server)

    @staticmethod
    def _advertise_subscriptions(server: Any) -> None:
        base_capabilities = server.get_capabilities

        def get_capabilities(notification_options, experimental_capabilities):
            capabilities = base_capabilities(notification_options, experimental_capabilities)
            capabilities.resources = mcp_types.ResourcesCapability(subscribe=True, listChanged=True)
            return capabilities

        server.get_capabilities = get_capabilities

    def _install_handlers(self, server: Any) -> None:
        @server.subscribe_resource()
        async def subscribe_resource(uri) -> None:
            context = request_ctx.get(None)
            if context is not None:
                self.subscriptions.add(str(uri), context.session)

        @server.unsubscribe_resource()
        async def unsubscribe_resource(uri) -> None:
            context = request_ctx.get(None)
            if context is not None:
                self.subscriptions.discard(str(uri), context.session)

        @server.read_resource()
        async def read_resource(uri):
            try:
                return await self.mcp.read_resource(uri)
            except Exception as error:
                raise to_mcp_error(str(uri), error) from error

    async def notify_resource_updated(self, uri: str) -> None:
        for session in self.subscriptions.sessions(uri):
            try:
                await session.send_resource_updated(uri)
            except Exception as error:
                LOGGER.warning("dropping subscriber for %s: %s", uri, error)
                self.subscriptions.discard(uri, session)

    def notify_resource_updated_sync(self, uri: str) -> None:
        """Schedule a notification from synchronous code; no-op outside an event loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        task = loop.create_task(self.notify_resource_updated(uri))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def get_subscribed_uris(self, prefix: str | None = None) -> list[str]:
        uris = self.subscriptions.uris()
        if prefix is None:
            return uris
        return [uri for uri in uris if uri.startswith(prefix)]


def configure_resource_notifier(mcp: FastMCP) -> ResourceNotifier:
    return ResourceNotifier(mcp)
