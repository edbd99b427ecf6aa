# Infrastructure Storage Package
from .key_value import JsonFileStorage, MemoryStorage
from .storage_manager import StorageManager

__all__ = ["JsonFileStorage", "MemoryStorage", "StorageManager"]
