"""Debounced persistence of state snapshots.

State machine::

    IDLE --change--> PENDING --timer--> WRITING --done--> IDLE
                      ^   |                |
                      +---+ change         +--change--> PENDING once the write is done

A change while PENDING cancels the timer and starts a new window. A change
while WRITING never interrupts the write; it arms a new timer and the
synchronizer goes back to PENDING when the write finishes. Only the latest
snapshot is ever serialized.
"""

import asyncio
import json
import sqlite3
from enum import Enum
from typing import Callable, Optional

from ..core.models import AppState
from ..errors import StorageError
from ..logger import get_logger
from .database import KeyValueStorage
from .loader import STORAGE_KEY

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5


class SyncStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    WRITING = "writing"


def serialize_state(state: AppState) -> str:
    return json.dumps(state.to_dict(), ensure_ascii=False)


class PersistenceSynchronizer:
    """Writes the latest AppState to storage after a quiet period.

    Subscribe ``notify`` to a StateStore. ``notify`` must be called with an
    event loop running.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = STORAGE_KEY,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        """Initialize the synchronizer.

        Args:
            storage: Where snapshots are written
            key: Storage slot for the serialized state
            delay: Debounce window in seconds
            on_error: Called with the error when a write fails (quota
                exceeded, database unavailable)
        """
        self.storage = storage
        self.key = key
        self.delay = delay
        self.on_error = on_error
        self.status = SyncStatus.IDLE
        self.last_error: Optional[Exception] = None
        self.writes = 0
        self._latest: Optional[AppState] = None
        self._timer: Optional[asyncio.Task] = None
        self._tasks: set[asyncio.Task] = set()
        self._queued = 0
        self._write_lock = asyncio.Lock()

    @property
    def syncing(self) -> bool:
        """True while a write is pending or in progress."""
        return self.status is not SyncStatus.IDLE

    def notify(self, state: AppState) -> None:
        """Record a new snapshot and restart the debounce window."""
        self._latest = state
        if self._timer is not None:
            self._timer.cancel()
        task = asyncio.get_running_loop().create_task(self._debounce())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._timer = task
        if self.status is SyncStatus.IDLE:
            self.status = SyncStatus.PENDING

    async def _debounce(self) -> None:
        await asyncio.sleep(self.delay)
        # The write below is never cancelled
        self._timer = None
        await self._write_latest()

    async def _write_latest(self) -> bool:
        self._queued += 1
        try:
            await self._write_lock.acquire()
        finally:
            self._queued -= 1
        try:
            state = self._latest
            if state is None:
                return True
            self.status = SyncStatus.WRITING
            try:
                payload = serialize_state(state)
                await asyncio.to_thread(self.storage.set_item, self.key, payload)
            except (StorageError, sqlite3.Error, OSError, TypeError, ValueError) as e:
                # Keep the in-memory state; the next change retries
                self.last_error = e
                logger.warning("Persist failed: %s", e)
                if self.on_error is not None:
                    self.on_error(e)
                return False
            self.last_error = None
            self.writes += 1
            if self._latest is state:
                self._latest = None
            logger.debug("Persisted state (%d bytes)", len(payload))
            return True
        finally:
            busy = self._timer is not None or self._queued > 0
            self.status = SyncStatus.PENDING if busy else SyncStatus.IDLE
            self._write_lock.release()

    async def wait_idle(self) -> None:
        """Wait until every armed timer has fired or been cancelled and its write finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def cancel(self) -> None:
        """Drop the pending snapshot without writing it. A write already running still completes."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._latest = None
        if self.status is SyncStatus.PENDING:
            self.status = SyncStatus.IDLE

    async def flush(self) -> bool:
        """Write the latest snapshot now, skipping the rest of the debounce window.

        Returns:
            False if the last write failed, True otherwise
        """
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        await self._write_latest()
        await self.wait_idle()
        return self.last_error is None
