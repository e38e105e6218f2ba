from .common import generate_connection_id, utc_timestamp_ms

__all__ = ["generate_connection_id", "utc_timestamp_ms"]
