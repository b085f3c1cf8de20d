"""Storage layers - quota-limited key-value storage, loading and debounced sync."""

from .database import KeyValueStorage, MemoryStorage
from .loader import STORAGE_KEY, load_state
from .synchronizer import PersistenceSynchronizer, SyncStatus

__all__ = ["KeyValueStorage", "MemoryStorage", "STORAGE_KEY", "load_state", "PersistenceSynchronizer", "SyncStatus"]
