from __future__ import annotations

import logging
from typing import Any, Dict

from sync_server.core.connection import ConnectionContext
from sync_server.core.connection_manager import ConnectionManager
from sync_server.storage.memory import SharedStateStore
from sync_shared.protocol import CanvasUpdatePayload, MsgType, make_event, parse_payload

logger = logging.getLogger(__name__)


class CanvasService:
    """Last-write-wins canvas shared by all clients."""

    def __init__(self, store: SharedStateStore, connection_manager: ConnectionManager) -> None:
        self.store = store
        self.connection_manager = connection_manager

    async def handle_update(self, message: Dict[str, Any], ctx: ConnectionContext) -> Dict[str, Any]:
        payload: CanvasUpdatePayload = parse_payload(MsgType.CANVAS_UPDATE, message.get("payload"))
        self.store.set_canvas(payload.data)
        logger.debug("[CANVAS] Updated by %s (%s chars)", ctx.connection_id, len(payload.data))

        # The sender already holds this drawing locally.
        event = make_event(MsgType.CANVAS_UPDATE, {"data": payload.data})
        self.connection_manager.broadcast(event, exclude={ctx.connection_id})
        return event

    async def handle_clear(self, message: Dict[str, Any], ctx: ConnectionContext) -> Dict[str, Any]:
        parse_payload(MsgType.CANVAS_CLEAR, message.get("payload"))
        self.store.clear_canvas()
        logger.info("[CANVAS] Cleared by %s", ctx.connection_id)

        event = make_event(MsgType.CANVAS_CLEAR)
        self.connection_manager.broadcast(event)
        return event
