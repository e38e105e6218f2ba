from __future__ import annotations

from enum import IntEnum
from typing import Optional


class StatusCode(IntEnum):
    """HTTP-like status codes used across errors."""

    BAD_REQUEST = 400
    PAYLOAD_TOO_LARGE = 413
    UPGRADE_REQUIRED = 426
    INTERNAL_ERROR = 500
    SERVICE_UNAVAILABLE = 503


class ErrorCode(IntEnum):
    """Domain specific error codes."""

    VERSION_MISMATCH = 1002
    PARAM_MISSING = 1004
    EMPTY_TEXT = 1007
    PAYLOAD_TOO_LARGE = 1008
    UNKNOWN_COMMAND = 1009
    DECODE_FAILED = 1010
    SLOW_CONSUMER = 1011
    CONNECTION_CLOSED = 1012
    PORT_IN_USE = 1013
    DISPATCHER_STOPPED = 1014


class ProtocolError(Exception):
    """Structured protocol exception carrying status + code + message."""

    def __init__(self, status: StatusCode, code: Optional[ErrorCode] = None, message: str = "") -> None:
        self.status = status
        self.code = code
        self.message = message
        super().__init__(f"{status.name} ({int(status)}): {message} (code={code.name if code else 'n/a'})")


class ValidationError(ProtocolError):
    """An inbound event was rejected; it is dropped without touching shared state."""

    def __init__(self, message: str, code: Optional[ErrorCode] = ErrorCode.PARAM_MISSING,
                 status: StatusCode = StatusCode.BAD_REQUEST) -> None:
        super().__init__(status, code, message)


class DeliveryError(ProtocolError):
    """A connection can no longer receive events."""

    def __init__(self, connection_id: str, message: str, code: Optional[ErrorCode] = ErrorCode.CONNECTION_CLOSED) -> None:
        self.connection_id = connection_id
        super().__init__(StatusCode.SERVICE_UNAVAILABLE, code, message)


class StartupError(ProtocolError):
    """Fatal condition detected before the server starts accepting connections."""

    def __init__(self, message: str, code: Optional[ErrorCode] = ErrorCode.PORT_IN_USE) -> None:
        super().__init__(StatusCode.INTERNAL_ERROR, code, message)


__all__ = [
    "StatusCode",
    "ErrorCode",
    "ProtocolError",
    "ValidationError",
    "DeliveryError",
    "StartupError",
]
