# Persistence Package
from .json_store import JsonFileStore, MemoryStore

__all__ = ["JsonFileStore", "MemoryStore"]
