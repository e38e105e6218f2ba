from .memory import Message, SharedStateStore, SoundClip, StateSnapshot

__all__ = ["Message", "SharedStateStore", "SoundClip", "StateSnapshot"]
