from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Iterable, Optional

from sync_server.storage.memory import SharedStateStore
from sync_shared.protocol import MsgType, make_event
from sync_shared.protocol.errors import DeliveryError, ErrorCode

from .connection import ConnectionContext

logger = logging.getLogger(__name__)


class ConnectionManager:
    """
    Registry of live connections.

    Sending never touches the network: events are put on the connection's outbox
    and its sender task writes them out, so one stalled client cannot hold up the
    others. A full outbox or a closed connection unregisters that connection.
    """

    def __init__(self, store: SharedStateStore) -> None:
        self.store = store
        self._by_id: Dict[str, ConnectionContext] = {}

    def register(self, ctx: ConnectionContext) -> str:
        """Track `ctx` and queue its hydration snapshot ahead of any later broadcast."""
        snapshot = self.store.snapshot()
        self._by_id[ctx.connection_id] = ctx
        self._enqueue(ctx, make_event(MsgType.INIT, snapshot.to_init_payload()))
        logger.info("Client connected: %s (%s), %s online", ctx.connection_id, ctx.peername, len(self._by_id))
        return ctx.connection_id

    def unregister(self, connection_id: str) -> Optional[ConnectionContext]:
        ctx = self._by_id.pop(connection_id, None)
        if ctx:
            ctx.abort()
            logger.info("Client disconnected: %s, %s online", connection_id, len(self._by_id))
        return ctx

    def count(self) -> int:
        return len(self._by_id)

    def broadcast(self, event: Dict[str, Any], exclude: Optional[Iterable[str]] = None) -> int:
        """Queue `event` for every connection not in `exclude`; returns how many accepted it."""
        excluded = set(exclude or ())
        delivered = 0
        for ctx in list(self._by_id.values()):
            if ctx.connection_id in excluded:
                continue
            try:
                self._enqueue(ctx, event)
                delivered += 1
            except DeliveryError as exc:
                logger.warning("Dropping connection %s: %s", ctx.connection_id, exc.message)
                self.unregister(ctx.connection_id)
        return delivered

    def _enqueue(self, ctx: ConnectionContext, event: Dict[str, Any]) -> None:
        if ctx.closed:
            raise DeliveryError(ctx.connection_id, "Connection already closed")
        try:
            ctx.outbox.put_nowait(event)
        except asyncio.QueueFull as exc:
            raise DeliveryError(
                ctx.connection_id,
                f"Outbox full ({ctx.outbox.maxsize} pending events)",
                ErrorCode.SLOW_CONSUMER,
            ) from exc
