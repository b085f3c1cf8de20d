"""Shared fixtures for portfolio_cms tests."""

import base64
import io
import sys
from pathlib import Path
from typing import Callable

import pytest
from PIL import Image

root = Path(__file__).parent.parent
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

from portfolio_cms.core.defaults import default_state
from portfolio_cms.core.models import AppState, ArchiveItem, Project
from portfolio_cms.storage.database import KeyValueStorage, MemoryStorage


def make_image_bytes(width: int, height: int, fmt: str = "PNG", mode: str = "RGB", color=(200, 30, 30)) -> bytes:
    """Render a solid-colour image in memory."""
    img = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def decode_data_url(data_url: str) -> Image.Image:
    """Open a ``data:image/jpeg;base64,...`` string as a PIL image."""
    header, encoded = data_url.split(",", 1)
    assert header == "data:image/jpeg;base64"
    img = Image.open(io.BytesIO(base64.b64decode(encoded)))
    img.load()
    return img


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    return make_image_bytes


@pytest.fixture
def image_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing an image of the given size to tmp_path."""

    def _factory(name: str, width: int = 64, height: int = 48, fmt: str = "PNG") -> Path:
        path = tmp_path / name
        path.write_bytes(make_image_bytes(width, height, fmt))
        return path

    return _factory


@pytest.fixture
def storage(tmp_path: Path) -> KeyValueStorage:
    return KeyValueStorage(tmp_path / "portfolio.db")


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def state() -> AppState:
    return default_state()


@pytest.fixture
def project() -> Project:
    return Project(
        id="ODM-PRJ-2024-001",
        title="NIGHT MARKET IDENTITY",
        client="HARBOUR FOODS",
        date="2024-05-01",
        description="Signage and packaging for a night market.",
    )


@pytest.fixture
def archive_item() -> ArchiveItem:
    return ArchiveItem(id="a1b2c3", year="2021", company="Aesop", category="Retail", project="Store launch")


@pytest.fixture
def decode_image() -> Callable[[str], Image.Image]:
    return decode_data_url
