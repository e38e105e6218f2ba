from __future__ import annotations

import logging
from typing import Any, Dict

from sync_server.core.connection import ConnectionContext
from sync_server.core.connection_manager import ConnectionManager
from sync_server.storage.memory import SharedStateStore
from sync_shared.protocol import ChatMessagePayload, MsgType, make_event, parse_payload
from sync_shared.protocol.errors import ErrorCode, ValidationError

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(self, store: SharedStateStore, connection_manager: ConnectionManager) -> None:
        self.store = store
        self.connection_manager = connection_manager

    async def handle_message(self, message: Dict[str, Any], ctx: ConnectionContext) -> Dict[str, Any]:
        payload: ChatMessagePayload = parse_payload(MsgType.CHAT_MESSAGE, message.get("payload"))
        if not payload.text.strip():
            raise ValidationError("Chat text is empty", ErrorCode.EMPTY_TEXT)
        author = payload.name.strip() or "Anonymous"
        stored = self.store.append_message(author, payload.text, payload.timestamp, payload.id)
        logger.info("[CHAT] %s: %s", author, payload.text)

        # Echo to the sender too so it sees the server-assigned id and position.
        event = make_event(MsgType.CHAT_MESSAGE, stored.to_dict())
        self.connection_manager.broadcast(event)
        return event
