from __future__ import annotations

import logging
from typing import Any, Dict

from sync_server.core.connection import ConnectionContext
from sync_server.core.connection_manager import ConnectionManager
from sync_server.storage.memory import SharedStateStore
from sync_shared.protocol import MsgType, NoiseAddPayload, make_event, parse_payload

logger = logging.getLogger(__name__)


class NoiseService:
    """Accepts recorded noise clips and shares them with every client."""

    def __init__(self, store: SharedStateStore, connection_manager: ConnectionManager) -> None:
        self.store = store
        self.connection_manager = connection_manager

    async def handle_add(self, message: Dict[str, Any], ctx: ConnectionContext) -> Dict[str, Any]:
        payload: NoiseAddPayload = parse_payload(MsgType.NOISE_ADD, message.get("payload"))
        author = payload.name.strip() or "Anonymous"
        # Oversized clips raise ValidationError here and never reach the log.
        clip = self.store.append_sound(author, payload.data, payload.timestamp, payload.id)
        logger.info("[NOISE] %s added clip #%s (%s bytes)", author, clip.id, clip.size)

        event = make_event(MsgType.NOISE_ADD, clip.to_dict())
        self.connection_manager.broadcast(event)
        return event
