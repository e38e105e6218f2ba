from __future__ import annotations

import time
from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from .commands import MsgType, normalize_command
from .constants import DEFAULT_VERSION
from .errors import ErrorCode, ValidationError

ClientId = Union[str, int, float]
Timestamp = Union[int, float, str]


def _default_timestamp() -> int:
    return int(time.time() * 1000)


class ChatMessagePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[ClientId] = None
    name: str = "Anonymous"
    text: str
    timestamp: Optional[Timestamp] = None


class NoiseAddPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[ClientId] = None
    name: str = "Anonymous"
    data: str
    timestamp: Optional[Timestamp] = None


class CanvasUpdatePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: str


class CanvasClearPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")


PAYLOAD_MODELS: Dict[str, Type[BaseModel]] = {
    MsgType.CHAT_MESSAGE.value: ChatMessagePayload,
    MsgType.NOISE_ADD.value: NoiseAddPayload,
    MsgType.CANVAS_UPDATE.value: CanvasUpdatePayload,
    MsgType.CANVAS_CLEAR.value: CanvasClearPayload,
}


def parse_payload(command: Union[str, MsgType], payload: Any) -> BaseModel:
    """Validate `payload` against the model registered for `command`."""
    command_text = normalize_command(command)
    model = PAYLOAD_MODELS.get(command_text)
    if model is None:
        raise ValidationError(f"Unknown command {command_text!r}", ErrorCode.UNKNOWN_COMMAND)
    try:
        return model.model_validate(payload if payload is not None else {})
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid {command_text} payload: {exc}") from exc


def make_event(command: Union[str, MsgType], payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build the outbound envelope for a server event."""
    return {
        "type": "event",
        "timestamp": _default_timestamp(),
        "command": normalize_command(command),
        "headers": {"version": DEFAULT_VERSION},
        "payload": payload or {},
    }


__all__ = [
    "ChatMessagePayload",
    "NoiseAddPayload",
    "CanvasUpdatePayload",
    "CanvasClearPayload",
    "PAYLOAD_MODELS",
    "parse_payload",
    "make_event",
]
