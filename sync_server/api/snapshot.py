"""Read-only views of the shared state for clients that poll instead of holding a socket."""
from __future__ import annotations

from typing import Any, Dict, List

from sync_server.core.connection_manager import ConnectionManager
from sync_server.storage.memory import SharedStateStore


class SnapshotAPI:
    def __init__(self, store: SharedStateStore, connection_manager: ConnectionManager) -> None:
        self.store = store
        self.connection_manager = connection_manager

    def get_health(self) -> Dict[str, Any]:
        counts = self.store.counts()
        return {
            "status": "ok",
            "connections": self.connection_manager.count(),
            "messages": counts["messages"],
            "sounds": counts["sounds"],
            "hasCanvas": counts["hasCanvas"],
        }

    def get_messages(self) -> List[Dict[str, Any]]:
        return list(self.store.snapshot().messages)

    def get_sounds(self) -> List[Dict[str, Any]]:
        return list(self.store.snapshot().sounds)

    def get_canvas(self) -> Dict[str, Any]:
        return {"data": self.store.snapshot().canvas}
