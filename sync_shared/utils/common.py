from __future__ import annotations

import time
from typing import Optional
from uuid import uuid4


def generate_connection_id(prefix: Optional[str] = None) -> str:
    """Generate an opaque identifier for a live transport session."""
    base = uuid4().hex
    return f"{prefix}-{base}" if prefix else base


def utc_timestamp_ms() -> int:
    """Current UTC timestamp in milliseconds, the unit browser clients use."""
    return int(time.time() * 1000)


__all__ = ["generate_connection_id", "utc_timestamp_ms"]
