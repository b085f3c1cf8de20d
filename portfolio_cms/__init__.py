"""Portfolio CMS - manage an agency portfolio dataset inside a storage quota.

Package structure:
    portfolio_cms/
    ├── cli.py              # Command-line interface
    ├── config.py           # YAML + environment settings
    ├── context.py          # Wires storage, store, synchronizer and media queue
    ├── auth.py             # Passcode gate
    ├── core/               # Domain model
    │   ├── models.py       # Project, ArchiveItem, Service, AppState
    │   ├── defaults.py     # Built-in dataset
    │   └── store.py        # Pure mutators and StateStore
    ├── storage/            # Persistence
    │   ├── database.py     # SQLite key-value storage with a quota
    │   ├── loader.py       # Startup loading with fallback
    │   ├── synchronizer.py # Debounced writes
    │   └── backup.py       # JSON export / import
    └── media/              # Image handling
        ├── codec.py        # Decode, resize, re-encode to JPEG data URLs
        └── ingest.py       # Sequential upload queue
"""

from .core.models import AppState, ArchiveItem, Category, Project, ProjectStatus, Service
from .core.store import StateStore
from .storage.database import KeyValueStorage, MemoryStorage
from .storage.loader import load_state
from .storage.synchronizer import PersistenceSynchronizer, SyncStatus
from .media.codec import GALLERY_PRESET, THUMBNAIL_PRESET, CodecPreset, encode
from .media.ingest import MediaIngestionQueue, IngestReport, IngestStatus
from .errors import CMSError, StorageError, QuotaExceededError, BackupError, DuplicateIdError

__all__ = [
    # Core
    "AppState",
    "ArchiveItem",
    "Category",
    "Project",
    "ProjectStatus",
    "Service",
    "StateStore",
    # Storage
    "KeyValueStorage",
    "MemoryStorage",
    "load_state",
    "PersistenceSynchronizer",
    "SyncStatus",
    # Media
    "CodecPreset",
    "GALLERY_PRESET",
    "THUMBNAIL_PRESET",
    "encode",
    "MediaIngestionQueue",
    "IngestReport",
    "IngestStatus",
    # Errors
    "CMSError",
    "StorageError",
    "QuotaExceededError",
    "BackupError",
    "DuplicateIdError",
]
