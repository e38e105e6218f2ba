from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from .commands import MsgType, is_client_command, normalize_command
from .constants import DEFAULT_VERSION
from .errors import ErrorCode, StatusCode, ValidationError

SCHEMA_DIR = Path(__file__).parent / "schemas"

# Mapping command -> schema filename (relative to SCHEMA_DIR)
SCHEMA_REGISTRY: Dict[str, str] = {
    MsgType.CHAT_MESSAGE.value: "chat.message.json",
    MsgType.NOISE_ADD.value: "noise.add.json",
    MsgType.CANVAS_UPDATE.value: "canvas.update.json",
    MsgType.CANVAS_CLEAR.value: "canvas.clear.json",
}


def _schema_path(command: str) -> Optional[Path]:
    filename = SCHEMA_REGISTRY.get(command)
    if not filename:
        return None
    path = SCHEMA_DIR / filename
    return path if path.exists() else None


@lru_cache(maxsize=16)
def load_schema(command: str) -> Optional[dict]:
    """Load JSON schema for command if present."""
    command_text = normalize_command(command)
    path = _schema_path(command_text)
    if not path:
        return None
    with path.open("r", encoding="utf-8") as fp:
        return json.load(fp)


def validate_version(headers: Optional[Dict[str, Any]]) -> None:
    """Reject frames that declare a protocol version other than ours; undeclared is accepted."""
    if headers is None:
        return
    if not isinstance(headers, dict):
        raise ValidationError("headers must be an object")
    version = headers.get("version")
    if version is not None and version != DEFAULT_VERSION:
        raise ValidationError(
            f"Protocol version mismatch: expected {DEFAULT_VERSION}, got {version}",
            ErrorCode.VERSION_MISMATCH,
            StatusCode.UPGRADE_REQUIRED,
        )


def validate_msg(msg: Dict[str, Any], schema: Optional[dict] = None) -> None:
    """Run standard validations (version + known command + json-schema)."""
    validate_version(msg.get("headers"))
    command = msg.get("command")
    if not isinstance(command, str) or not is_client_command(command):
        raise ValidationError(f"Unknown command {command!r}", ErrorCode.UNKNOWN_COMMAND)
    if not schema:
        schema = load_schema(command)
    if schema:
        try:
            jsonschema.validate(instance=msg, schema=schema)
        except jsonschema.ValidationError as exc:
            raise ValidationError(f"Schema validation failed: {exc.message}") from exc


__all__ = ["SCHEMA_REGISTRY", "load_schema", "validate_msg", "validate_version"]
