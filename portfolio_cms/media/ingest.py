"""Sequential ingestion of uploaded image files.

Files go through the codec one at a time: that keeps at most one decoded
image in memory and makes the output order match the input order.
"""

import asyncio
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Optional, Union

from ..logger import get_logger
from .codec import GALLERY_PRESET, CodecPreset, encode_with_preset

logger = get_logger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB

MediaFile = Union[str, Path, BinaryIO]


class IngestStatus(str, Enum):
    ENCODED = "encoded"
    TOO_LARGE = "too_large"
    READ_FAILED = "read_failed"
    DECODE_FAILED = "decode_failed"


@dataclass
class IngestOutcome:
    """What happened to one input file."""

    filename: str
    status: IngestStatus
    size: int = 0
    data_url: str = ""
    error: str = ""


@dataclass
class IngestReport:
    """Per-file outcomes of one batch, in input order."""

    outcomes: list[IngestOutcome] = field(default_factory=list)

    @property
    def encoded(self) -> list[str]:
        return [o.data_url for o in self.outcomes if o.status is IngestStatus.ENCODED]

    @property
    def skipped(self) -> list[IngestOutcome]:
        return [o for o in self.outcomes if o.status is not IngestStatus.ENCODED]

    def __str__(self) -> str:
        lines = [f"Images encoded: {len(self.encoded)}"]
        for outcome in self.skipped:
            lines.append(f"Skipped {outcome.filename}: {outcome.status.value}")
        return "\n".join(lines)


def _file_name(media: MediaFile) -> str:
    if isinstance(media, (str, Path)):
        return Path(media).name
    return Path(getattr(media, "name", "") or "upload").name


def _file_size(media: MediaFile) -> int:
    if isinstance(media, (str, Path)):
        return Path(media).stat().st_size
    size = getattr(media, "size", None)
    if size is not None:
        return int(size)
    position = media.tell()
    media.seek(0, os.SEEK_END)
    size = media.tell()
    media.seek(position)
    return size


def _read_bytes(media: MediaFile) -> bytes:
    if isinstance(media, (str, Path)):
        return Path(media).read_bytes()
    media.seek(0)
    return media.read()


class MediaIngestionQueue:
    """Runs selected files through the image codec, one file at a time."""

    def __init__(
        self,
        preset: CodecPreset = GALLERY_PRESET,
        max_file_size: int = MAX_FILE_SIZE,
        on_warning: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the queue.

        Args:
            preset: Codec preset used when ingest() is not given one
            max_file_size: Files larger than this (bytes) are skipped unread
            on_warning: Called with a user-facing message for every skipped file
        """
        self.preset = preset
        self.max_file_size = max_file_size
        self.on_warning = on_warning
        self.processing = False

    def _warn(self, message: str) -> None:
        logger.warning(message)
        if self.on_warning is not None:
            self.on_warning(message)

    async def _process_one(self, media: MediaFile, preset: CodecPreset) -> IngestOutcome:
        filename = _file_name(media)
        try:
            size = await asyncio.to_thread(_file_size, media)
        except OSError as e:
            self._warn(f"Could not read {filename}: {e}")
            return IngestOutcome(filename, IngestStatus.READ_FAILED, error=str(e))

        if size > self.max_file_size:
            limit_mb = self.max_file_size // (1024 * 1024)
            self._warn(f"Skipped {filename}: file too large (>{limit_mb}MB)")
            return IngestOutcome(filename, IngestStatus.TOO_LARGE, size=size)

        try:
            raw = await asyncio.to_thread(_read_bytes, media)
        except OSError as e:
            self._warn(f"Could not read {filename}: {e}")
            return IngestOutcome(filename, IngestStatus.READ_FAILED, size=size, error=str(e))

        data_url = await asyncio.to_thread(encode_with_preset, raw, preset)
        if not data_url:
            return IngestOutcome(filename, IngestStatus.DECODE_FAILED, size=size)
        return IngestOutcome(filename, IngestStatus.ENCODED, size=size, data_url=data_url)

    async def process(
        self,
        files: Iterable[MediaFile],
        preset: Optional[CodecPreset] = None,
        progress: Optional[Callable[[IngestOutcome], None]] = None,
    ) -> IngestReport:
        """Ingest files in order and report the outcome of each one.

        Args:
            files: Paths or binary file objects
            preset: Codec preset (defaults to the queue's preset)
            progress: Called after each file with its outcome

        Returns:
            IngestReport with one outcome per input file
        """
        preset = preset or self.preset
        report = IngestReport()
        self.processing = True
        try:
            for media in files:
                outcome = await self._process_one(media, preset)
                report.outcomes.append(outcome)
                if progress is not None:
                    progress(outcome)
        finally:
            self.processing = False
        return report

    async def ingest(
        self,
        files: Iterable[MediaFile],
        preset: Optional[CodecPreset] = None,
    ) -> list[str]:
        """Ingest files and return the encoded data URLs in input order."""
        report = await self.process(files, preset)
        return report.encoded

    async def ingest_one(self, media: MediaFile, preset: Optional[CodecPreset] = None) -> str:
        """Ingest a single file; returns "" if it was skipped or could not be decoded."""
        encoded = await self.ingest([media], preset)
        return encoded[0] if encoded else ""
