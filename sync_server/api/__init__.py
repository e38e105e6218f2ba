from .routes import router
from .snapshot import SnapshotAPI

__all__ = ["router", "SnapshotAPI"]
