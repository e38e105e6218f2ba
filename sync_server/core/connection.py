from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from sync_shared.utils.common import generate_connection_id


@dataclass
class ConnectionContext:
    websocket: Any  # fastapi.WebSocket
    peername: str
    connection_id: str = field(default_factory=generate_connection_id)
    outbox: "asyncio.Queue[Dict[str, Any]]" = field(default_factory=asyncio.Queue)
    closed: bool = False
    sender_task: Optional[asyncio.Task] = None

    def abort(self) -> None:
        """Mark the connection dead and stop its sender task."""
        self.closed = True
        task = self.sender_task
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()
