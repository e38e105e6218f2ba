"""
Shared protocol package that centralizes event names, message models, framing helpers,
and validation utilities for the sync server and its clients.
"""

from .commands import MsgType, is_client_command, normalize_command
from .constants import DEFAULT_VERSION, ENCODING, MAX_CLIP_SIZE, MAX_FRAME_SIZE
from .errors import DeliveryError, ErrorCode, ProtocolError, StartupError, StatusCode, ValidationError
from .framing import decode_msg, encode_msg, payload_size
from .messages import (
    CanvasClearPayload,
    CanvasUpdatePayload,
    ChatMessagePayload,
    NoiseAddPayload,
    make_event,
    parse_payload,
)
from .validator import load_schema, validate_msg, validate_version

__all__ = [
    "MsgType",
    "is_client_command",
    "normalize_command",
    "DEFAULT_VERSION",
    "ENCODING",
    "MAX_CLIP_SIZE",
    "MAX_FRAME_SIZE",
    "ErrorCode",
    "ProtocolError",
    "StatusCode",
    "ValidationError",
    "DeliveryError",
    "StartupError",
    "encode_msg",
    "decode_msg",
    "payload_size",
    "ChatMessagePayload",
    "NoiseAddPayload",
    "CanvasUpdatePayload",
    "CanvasClearPayload",
    "make_event",
    "parse_payload",
    "load_schema",
    "validate_msg",
    "validate_version",
]
