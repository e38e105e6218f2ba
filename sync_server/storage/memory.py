from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Tuple, Union

from sync_shared.protocol.constants import (
    MAX_CLIP_SIZE,
    MESSAGE_LOG_LIMIT,
    MESSAGE_TAIL,
    SOUND_LOG_LIMIT,
    SOUND_TAIL,
)
from sync_shared.protocol.errors import ErrorCode, StatusCode, ValidationError
from sync_shared.protocol.framing import payload_size
from sync_shared.utils.common import utc_timestamp_ms

ClientId = Optional[Union[str, int, float]]
Timestamp = Union[int, float, str]


@dataclass(frozen=True)
class Message:
    id: int
    author: str
    text: str
    timestamp: Timestamp
    client_id: ClientId = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.author,
            "text": self.text,
            "timestamp": self.timestamp,
            "clientId": self.client_id,
        }


@dataclass(frozen=True)
class SoundClip:
    id: int
    author: str
    payload: str
    timestamp: Timestamp
    client_id: ClientId = None

    @property
    def size(self) -> int:
        return payload_size(self.payload)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.author,
            "data": self.payload,
            "timestamp": self.timestamp,
            "clientId": self.client_id,
        }


@dataclass(frozen=True)
class StateSnapshot:
    """Point-in-time, read-only view of the shared state."""

    messages: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)
    sounds: Tuple[Dict[str, Any], ...] = field(default_factory=tuple)
    canvas: Optional[str] = None
    version: int = 0

    def to_init_payload(self) -> Dict[str, Any]:
        return {
            "messages": list(self.messages),
            "sounds": list(self.sounds),
            "canvasData": self.canvas,
            "version": self.version,
        }


def _tail(items: Deque[Any], count: int) -> List[Any]:
    if count <= 0:
        return []
    start = max(len(items) - count, 0)
    return list(itertools.islice(items, start, None))


class SharedStateStore:
    """
    Owns the chat log, the noise clip log and the canvas snapshot.

    Every operation is synchronous and runs to completion on the event loop, so
    callers that do not await between a mutation and its fan-out observe each
    transition atomically.
    """

    def __init__(
        self,
        message_limit: int = MESSAGE_LOG_LIMIT,
        sound_limit: int = SOUND_LOG_LIMIT,
        message_tail: int = MESSAGE_TAIL,
        sound_tail: int = SOUND_TAIL,
        max_clip_size: int = MAX_CLIP_SIZE,
    ) -> None:
        if message_limit < 1 or sound_limit < 1:
            raise ValueError("log limits must be positive")
        self.message_tail = message_tail
        self.sound_tail = sound_tail
        self.max_clip_size = max_clip_size
        self._messages: Deque[Message] = deque(maxlen=message_limit)
        self._sounds: Deque[SoundClip] = deque(maxlen=sound_limit)
        self._canvas: Optional[str] = None
        self._ids = itertools.count(1)
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    # --- Messaging -------------------------------------------------------
    def append_message(
        self,
        author: str,
        text: str,
        timestamp: Optional[Timestamp] = None,
        client_id: ClientId = None,
    ) -> Message:
        message = Message(
            id=next(self._ids),
            author=author,
            text=text,
            timestamp=timestamp if timestamp is not None else utc_timestamp_ms(),
            client_id=client_id,
        )
        # deque(maxlen) drops from the head once the limit is exceeded
        self._messages.append(message)
        self._version += 1
        return message

    def messages_tail(self, count: Optional[int] = None) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in _tail(self._messages, self.message_tail if count is None else count)]

    # --- Noise -----------------------------------------------------------
    def append_sound(
        self,
        author: str,
        payload: str,
        timestamp: Optional[Timestamp] = None,
        client_id: ClientId = None,
    ) -> SoundClip:
        size = payload_size(payload)
        if size > self.max_clip_size:
            raise ValidationError(
                f"Noise clip of {size} bytes exceeds limit of {self.max_clip_size}",
                ErrorCode.PAYLOAD_TOO_LARGE,
                StatusCode.PAYLOAD_TOO_LARGE,
            )
        clip = SoundClip(
            id=next(self._ids),
            author=author,
            payload=payload,
            timestamp=timestamp if timestamp is not None else utc_timestamp_ms(),
            client_id=client_id,
        )
        self._sounds.append(clip)
        self._version += 1
        return clip

    def sounds_tail(self, count: Optional[int] = None) -> List[Dict[str, Any]]:
        return [s.to_dict() for s in _tail(self._sounds, self.sound_tail if count is None else count)]

    # --- Canvas ----------------------------------------------------------
    @property
    def canvas(self) -> Optional[str]:
        return self._canvas

    def set_canvas(self, blob: str) -> None:
        self._canvas = blob
        self._version += 1

    def clear_canvas(self) -> None:
        self._canvas = None
        self._version += 1

    # --- Views -----------------------------------------------------------
    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            messages=tuple(self.messages_tail()),
            sounds=tuple(self.sounds_tail()),
            canvas=self._canvas,
            version=self._version,
        )

    def counts(self) -> Dict[str, Any]:
        return {
            "messages": len(self._messages),
            "sounds": len(self._sounds),
            "hasCanvas": bool(self._canvas),
        }
