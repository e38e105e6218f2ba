from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv

from sync_shared.protocol.constants import (
    MAX_CLIP_SIZE,
    MAX_FRAME_SIZE,
    MESSAGE_LOG_LIMIT,
    MESSAGE_TAIL,
    SOUND_LOG_LIMIT,
    SOUND_TAIL,
)

DEFAULT_SERVER_CONFIG: Dict[str, Any] = {
    "host": "0.0.0.0",
    "port": 3000,
    "log_level": "INFO",
    "max_body_size": MAX_FRAME_SIZE,
    "max_clip_size": MAX_CLIP_SIZE,
    "message_limit": MESSAGE_LOG_LIMIT,
    "sound_limit": SOUND_LOG_LIMIT,
    "message_tail": MESSAGE_TAIL,
    "sound_tail": SOUND_TAIL,
    "outbox_size": 256,
}

SERVER_CONFIG = DEFAULT_SERVER_CONFIG.copy()


def load_server_config(env_path: str = ".env") -> Dict[str, Any]:
    """Apply `.env` and environment overrides on top of the defaults."""
    if Path(env_path).exists():
        load_dotenv(env_path)
    SERVER_CONFIG["host"] = os.getenv("SYNC_HOST", SERVER_CONFIG["host"])
    SERVER_CONFIG["port"] = int(os.getenv("PORT", SERVER_CONFIG["port"]))
    SERVER_CONFIG["log_level"] = os.getenv("SYNC_LOG_LEVEL", SERVER_CONFIG["log_level"])
    SERVER_CONFIG["max_body_size"] = int(os.getenv("SYNC_MAX_BODY_SIZE", SERVER_CONFIG["max_body_size"]))
    SERVER_CONFIG["max_clip_size"] = int(os.getenv("SYNC_MAX_CLIP_SIZE", SERVER_CONFIG["max_clip_size"]))
    SERVER_CONFIG["message_limit"] = int(os.getenv("SYNC_MESSAGE_LIMIT", SERVER_CONFIG["message_limit"]))
    SERVER_CONFIG["sound_limit"] = int(os.getenv("SYNC_SOUND_LIMIT", SERVER_CONFIG["sound_limit"]))
    SERVER_CONFIG["message_tail"] = int(os.getenv("SYNC_MESSAGE_TAIL", SERVER_CONFIG["message_tail"]))
    SERVER_CONFIG["sound_tail"] = int(os.getenv("SYNC_SOUND_TAIL", SERVER_CONFIG["sound_tail"]))
    SERVER_CONFIG["outbox_size"] = int(os.getenv("SYNC_OUTBOX_SIZE", SERVER_CONFIG["outbox_size"]))
    return SERVER_CONFIG


__all__ = ["DEFAULT_SERVER_CONFIG", "SERVER_CONFIG", "load_server_config"]
