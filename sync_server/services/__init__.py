from .canvas_service import CanvasService
from .chat_service import ChatService
from .noise_service import NoiseService

__all__ = ["CanvasService", "ChatService", "NoiseService"]
