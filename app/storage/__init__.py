"""
Override storage exports.
"""

from app.storage.base import KeyValueStore, ManualInputStorageError
from app.storage.json_file_store import JsonFileStore
from app.storage.memory_store import MemoryStore

__all__ = ["JsonFileStore", "KeyValueStore", "ManualInputStorageError", "MemoryStore"]
