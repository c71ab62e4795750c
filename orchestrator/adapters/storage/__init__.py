from orchestrator.adapters.storage.json_store import JsonStorage, MemoryStorage

__all__ = ["JsonStorage", "MemoryStorage"]
