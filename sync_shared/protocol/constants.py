"""Protocol-wide constants shared by client and server."""

DEFAULT_VERSION = "1.0"
ENCODING = "utf-8"
MIB = 1024 * 1024
MAX_FRAME_SIZE = 10 * MIB  # overall request-body cap
MAX_CLIP_SIZE = 1 * MIB  # per noise clip payload

MESSAGE_LOG_LIMIT = 100
SOUND_LOG_LIMIT = 30
MESSAGE_TAIL = 50
SOUND_TAIL = 20

__all__ = [
    "DEFAULT_VERSION",
    "ENCODING",
    "MIB",
    "MAX_FRAME_SIZE",
    "MAX_CLIP_SIZE",
    "MESSAGE_LOG_LIMIT",
    "SOUND_LOG_LIMIT",
    "MESSAGE_TAIL",
    "SOUND_TAIL",
]
