"""Pure mutators over AppState snapshots and the store that owns the current one.

Mutators never edit their argument: each one returns a new snapshot built
with ``dataclasses.replace`` so untouched collections are shared with the
previous snapshot. They never touch storage; persistence is the
synchronizer's job.

Id policy:
    - adding an item whose id already exists raises DuplicateIdError
    - updating an unknown id returns the state unchanged
    - an update that renames an item onto another item's id raises DuplicateIdError
"""

from dataclasses import replace
from typing import Callable

from ..errors import DuplicateIdError
from ..logger import get_logger
from .models import AppState, ArchiveItem, Project

logger = get_logger(__name__)


def _check_unique(items: tuple, new_id: str, kind: str, ignore_id: str | None = None) -> None:
    for item in items:
        if item.id == new_id and item.id != ignore_id:
            raise DuplicateIdError(f"{kind} id already exists: {new_id}")


def _replace_item(items: tuple, item_id: str, updated, kind: str) -> tuple | None:
    """Return items with every ``item_id`` match swapped for ``updated``, or None if nothing matched."""
    if not any(item.id == item_id for item in items):
        logger.debug("%s %s not found, update ignored", kind, item_id)
        return None
    _check_unique(items, updated.id, kind, ignore_id=item_id)
    return tuple(updated if item.id == item_id else item for item in items)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

def add_project(state: AppState, project: Project) -> AppState:
    """Prepend a project so it shows up first."""
    _check_unique(state.projects, project.id, "Project")
    return replace(state, projects=(project,) + state.projects)


def update_project(state: AppState, project_id: str, updated: Project) -> AppState:
    projects = _replace_item(state.projects, project_id, updated, "Project")
    if projects is None:
        return state
    return replace(state, projects=projects)


def delete_project(state: AppState, project_id: str) -> AppState:
    projects = tuple(p for p in state.projects if p.id != project_id)
    if len(projects) == len(state.projects):
        return state
    return replace(state, projects=projects)


# ---------------------------------------------------------------------------
# Archive items
# ---------------------------------------------------------------------------

def add_archive_item(state: AppState, item: ArchiveItem) -> AppState:
    """Prepend an archive item so it shows up first."""
    _check_unique(state.archive_items, item.id, "Archive item")
    return replace(state, archive_items=(item,) + state.archive_items)


def update_archive_item(state: AppState, item_id: str, updated: ArchiveItem) -> AppState:
    items = _replace_item(state.archive_items, item_id, updated, "Archive item")
    if items is None:
        return state
    return replace(state, archive_items=items)


def delete_archive_item(state: AppState, item_id: str) -> AppState:
    items = tuple(a for a in state.archive_items if a.id != item_id)
    if len(items) == len(state.archive_items):
        return state
    return replace(state, archive_items=items)


# ---------------------------------------------------------------------------
# Site metadata
# ---------------------------------------------------------------------------

def update_settings(state: AppState, site_title: str, tagline: str) -> AppState:
    return replace(state, site_title=site_title, tagline=tagline)


Listener = Callable[[AppState], None]


class StateStore:
    """Owns the current AppState snapshot and tells subscribers when it changes.

    The store is created once from the loaded state and handed explicitly to
    whatever needs to read or change it.
    """

    def __init__(self, state: AppState):
        self._state = state
        self._listeners: list[Listener] = []

    @property
    def state(self) -> AppState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def dispatch(self, mutator: Callable[..., AppState], *args) -> AppState:
        """Apply ``mutator(state, *args)`` and publish the result if it changed anything."""
        new_state = mutator(self._state, *args)
        if new_state is not self._state:
            self._set(new_state)
        return self._state

    def replace(self, state: AppState, notify: bool = True) -> None:
        """Swap in a whole new snapshot (import / restore)."""
        if notify:
            self._set(state)
        else:
            self._state = state

    def _set(self, state: AppState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    # Convenience wrappers so callers don't have to import the mutators

    def add_project(self, project: Project) -> AppState:
        return self.dispatch(add_project, project)

    def update_project(self, project_id: str, updated: Project) -> AppState:
        return self.dispatch(update_project, project_id, updated)

    def delete_project(self, project_id: str) -> AppState:
        return self.dispatch(delete_project, project_id)

    def add_archive_item(self, item: ArchiveItem) -> AppState:
        return self.dispatch(add_archive_item, item)

    def update_archive_item(self, item_id: str, updated: ArchiveItem) -> AppState:
        return self.dispatch(update_archive_item, item_id, updated)

    def delete_archive_item(self, item_id: str) -> AppState:
        return self.dispatch(delete_archive_item, item_id)

    def update_settings(self, site_title: str, tagline: str) -> AppState:
        return self.dispatch(update_settings, site_title, tagline)
