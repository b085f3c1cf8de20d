"""Image handling - codec and sequential ingestion queue."""

from .codec import (
    CodecPreset,
    GALLERY_PRESET,
    THUMBNAIL_PRESET,
    encode,
    encode_with_preset,
    format_image_data_url,
    scale_to_width,
)
from .ingest import MAX_FILE_SIZE, IngestOutcome, IngestReport, IngestStatus, MediaIngestionQueue

__all__ = [
    "CodecPreset",
    "GALLERY_PRESET",
    "THUMBNAIL_PRESET",
    "encode",
    "encode_with_preset",
    "format_image_data_url",
    "scale_to_width",
    "MAX_FILE_SIZE",
    "IngestOutcome",
    "IngestReport",
    "IngestStatus",
    "MediaIngestionQueue",
]
