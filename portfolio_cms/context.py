"""Wiring of storage, store, synchronizer and ingestion queue for one session."""

from dataclasses import dataclass
from typing import Callable, Optional

from .config import Settings
from .core.store import StateStore
from .media.codec import CodecPreset
from .media.ingest import MediaIngestionQueue
from .storage.database import KeyValueStorage
from .storage.loader import load_state
from .storage.synchronizer import PersistenceSynchronizer


@dataclass
class CMSContext:
    """Everything a front end needs, passed around explicitly."""

    settings: Settings
    storage: KeyValueStorage
    store: StateStore
    synchronizer: PersistenceSynchronizer
    media: MediaIngestionQueue

    @classmethod
    def open(
        cls,
        settings: Settings,
        storage: Optional[KeyValueStorage] = None,
        on_warning: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> "CMSContext":
        """Load state from storage and subscribe the synchronizer to the store."""
        if storage is None:
            storage = KeyValueStorage(settings.database, quota_bytes=settings.quota_bytes)
        store = StateStore(load_state(storage, settings.storage_key))
        synchronizer = PersistenceSynchronizer(
            storage,
            key=settings.storage_key,
            delay=settings.debounce_seconds,
            on_error=on_error,
        )
        store.subscribe(synchronizer.notify)
        media = MediaIngestionQueue(
            preset=settings.gallery_preset,
            max_file_size=settings.max_upload_bytes,
            on_warning=on_warning,
        )
        return cls(settings, storage, store, synchronizer, media)

    @property
    def gallery_preset(self) -> CodecPreset:
        return self.settings.gallery_preset

    @property
    def thumbnail_preset(self) -> CodecPreset:
        return self.settings.thumbnail_preset

    def reload(self) -> None:
        """Replace the in-memory state with what is in storage (after an import).

        Any pending write is dropped and the synchronizer is not notified:
        storage already holds this data.
        """
        self.synchronizer.cancel()
        self.store.replace(load_state(self.storage, self.settings.storage_key), notify=False)

    async def close(self) -> bool:
        """Flush pending changes. Returns False if the final write failed."""
        return await self.synchronizer.flush()
