from .memory_store import InMemoryRealtimeStore

__all__ = ["InMemoryRealtimeStore"]
