"""Startup loading of the persisted dataset."""

import json

from ..core.defaults import default_state
from ..core.models import AppState
from ..logger import get_logger
from .database import KeyValueStorage

logger = get_logger(__name__)

STORAGE_KEY = "odemind_archive_v5_final"


def load_state(storage: KeyValueStorage, key: str = STORAGE_KEY) -> AppState:
    """Read the persisted state, falling back to the built-in dataset.

    The persisted mapping is merged over the default one key by key, so a
    payload written before a field existed (e.g. no ``services``) still gets
    the default value for it. A record that cannot be parsed is skipped with
    a warning; the rest of the dataset is kept. A payload that is not JSON or
    has no projects list yields the default dataset. Startup never fails
    because of stored data.
    """
    defaults = default_state()
    raw = storage.get_item(key)
    if raw is None:
        return defaults

    try:
        parsed = json.loads(raw)
    except ValueError as e:
        logger.warning("Failed to load persisted state, using defaults: %s", e)
        return defaults

    if not isinstance(parsed, dict) or not isinstance(parsed.get("projects"), list):
        logger.warning("Persisted state has no projects list, using defaults")
        return defaults

    merged = defaults.to_dict()
    merged.update(parsed)
    try:
        return AppState.from_dict(merged, on_invalid=_skip_record)
    except ValueError as e:
        logger.warning("Persisted state is malformed, using defaults: %s", e)
        return defaults


def _skip_record(collection: str, record, error: Exception) -> None:
    logger.warning("Skipping unreadable entry in %s (%r): %s", collection, record, error)
