"""JSON export and import of the whole dataset.

Import bypasses the store: the document is checked against the models,
then written as-is into the storage slot and the caller reloads from storage.
"""

import json
import re
from datetime import date
from pathlib import Path
from typing import Optional

from ..core.models import AppState
from ..errors import BackupError
from ..logger import get_logger
from .database import KeyValueStorage
from .loader import STORAGE_KEY

logger = get_logger(__name__)


def export_filename(site_title: str, day: Optional[date] = None) -> str:
    """Name of an export file, e.g. ``ODEMIND_DATABASE_2024-05-01.json``."""
    day = day or date.today()
    prefix = re.sub(r"[^A-Z0-9]+", "_", site_title.upper()).strip("_") or "SITE"
    return f"{prefix}_DATABASE_{day.isoformat()}.json"


def export_state(state: AppState, directory: str | Path = ".", day: Optional[date] = None) -> Path:
    """Write the state as indented JSON into directory and return the file path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(state.site_title, day)
    path.write_text(json.dumps(state.to_dict(), ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    logger.info("Exported dataset to %s", path)
    return path


def parse_backup(text: str) -> dict:
    """Parse a backup document, requiring only a ``projects`` field.

    Raises:
        BackupError: If the text is not JSON or has no projects field
    """
    try:
        data = json.loads(text)
    except ValueError as e:
        raise BackupError(f"Invalid data structure: {e}") from e
    if not isinstance(data, dict) or "projects" not in data:
        raise BackupError("Invalid data structure: missing 'projects'")
    return data


def import_backup(
    source: str | Path,
    storage: KeyValueStorage,
    key: str = STORAGE_KEY,
) -> dict:
    """Overwrite the storage slot with a backup file.

    The caller must reload state from storage afterwards.

    Raises:
        BackupError: If the file is unreadable or any record is invalid; the
            slot is not touched
        QuotaExceededError: If the document does not fit in storage
    """
    path = Path(source)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise BackupError(f"Could not read {path}: {e}") from e

    data = parse_backup(text)
    try:
        state = AppState.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise BackupError(f"Invalid data structure: {e}") from e

    storage.set_item(key, json.dumps(data, ensure_ascii=False))
    logger.info("Imported backup from %s (%d projects)", path, len(state.projects))
    return data
