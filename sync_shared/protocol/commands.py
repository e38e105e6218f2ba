from __future__ import annotations

from enum import StrEnum
from typing import Union


class MsgType(StrEnum):
    """
    Canonical event names shared by client/server.
    Names mirror the socket event names the portal page emits (chat:message, ...).
    """

    # Hydration
    INIT = "init"

    # Chat domain
    CHAT_MESSAGE = "chat:message"

    # Noise (audio clip) domain
    NOISE_ADD = "noise:add"

    # Canvas domain
    CANVAS_UPDATE = "canvas:update"
    CANVAS_CLEAR = "canvas:clear"


# Events a client is allowed to emit; init is server-only.
CLIENT_COMMANDS = frozenset(
    {
        MsgType.CHAT_MESSAGE.value,
        MsgType.NOISE_ADD.value,
        MsgType.CANVAS_UPDATE.value,
        MsgType.CANVAS_CLEAR.value,
    }
)


def normalize_command(command: Union[str, MsgType]) -> str:
    """Convert enum/string into canonical command text."""
    return command.value if isinstance(command, MsgType) else str(command)


def is_client_command(value: str) -> bool:
    return normalize_command(value) in CLIENT_COMMANDS


__all__ = [
    "MsgType",
    "CLIENT_COMMANDS",
    "normalize_command",
    "is_client_command",
]
