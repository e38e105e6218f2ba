from __future__ import annotations

import json
from typing import Union

from .constants import ENCODING, MAX_FRAME_SIZE
from .errors import ErrorCode, StatusCode, ValidationError


def encode_msg(msg: dict) -> str:
    """Encode message dict into a compact JSON text frame."""
    try:
        return json.dumps(msg, ensure_ascii=False, separators=(",", ":"))
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Encode failed: {exc}", ErrorCode.DECODE_FAILED) from exc


def decode_msg(data: Union[str, bytes], max_size: int = MAX_FRAME_SIZE) -> dict:
    """Decode a text (or binary) frame into a dictionary."""
    size = len(data) if isinstance(data, bytes) else len(data.encode(ENCODING))
    if size > max_size:
        raise ValidationError(
            f"Frame of {size} bytes exceeds limit of {max_size}",
            ErrorCode.PAYLOAD_TOO_LARGE,
            StatusCode.PAYLOAD_TOO_LARGE,
        )
    try:
        text = data.decode(ENCODING) if isinstance(data, bytes) else data
        message = json.loads(text)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError(f"Decode failed: {exc}", ErrorCode.DECODE_FAILED) from exc
    if not isinstance(message, dict):
        raise ValidationError("Frame must be a JSON object", ErrorCode.DECODE_FAILED)
    return message


def payload_size(data: Union[str, bytes, None]) -> int:
    """Size in bytes of an encoded blob as it travels on the wire."""
    if data is None:
        return 0
    if isinstance(data, bytes):
        return len(data)
    return len(data.encode(ENCODING))


__all__ = ["encode_msg", "decode_msg", "payload_size"]
