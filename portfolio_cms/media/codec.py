"""Image codec: turns uploaded image bytes into small embeddable JPEG data URLs.

Everything the site stores lives inside one quota-limited storage slot, so
every uploaded image is shrunk to a bounded width and re-encoded as a lossy
JPEG before it is embedded in the dataset.
"""

import base64
import io
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from ..logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CodecPreset:
    """Width bound and JPEG quality (0.0-1.0) used for one kind of upload."""

    name: str
    max_width: int
    quality: float


# Project galleries show several large images
GALLERY_PRESET = CodecPreset("gallery", max_width=1000, quality=0.6)
# Archive rows only show a small thumbnail
THUMBNAIL_PRESET = CodecPreset("thumbnail", max_width=600, quality=0.4)


def scale_to_width(img: Image.Image, max_width: int) -> Image.Image:
    """Downscale image so its width is at most max_width.

    Maintains aspect ratio. Only downscales; never upscales images.

    Args:
        img: PIL Image object
        max_width: Maximum allowed width in pixels

    Returns:
        PIL Image object (downscaled if necessary, unchanged otherwise)
    """
    width, height = img.size
    if width <= max_width:
        return img

    # Half-up rounding, matching how browsers size the canvas
    new_height = max(1, int(height * max_width / width + 0.5))
    return img.resize((max_width, new_height), Image.Resampling.LANCZOS)


def flatten_on_white(img: Image.Image) -> Image.Image:
    """Paint image onto an opaque white background (JPEG has no alpha channel)."""
    rgba = img.convert("RGBA")
    background = Image.new("RGB", rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def jpeg_quality(quality: float) -> int:
    """Map a 0.0-1.0 quality factor onto Pillow's 1-95 JPEG scale."""
    return max(1, min(95, round(quality * 100)))


def format_image_data_url(jpeg_base64: str) -> str:
    """Format JPEG base64 data as a data URL."""
    return f"data:image/jpeg;base64,{jpeg_base64}"


def encode(image_data: bytes, max_width: int, quality: float) -> str:
    """Decode, shrink and re-encode an image as a JPEG data URL.

    Args:
        image_data: Raw image bytes (any format Pillow can read)
        max_width: Width bound in pixels
        quality: JPEG quality factor between 0.0 and 1.0

    Returns:
        A ``data:image/jpeg;base64,...`` string, or "" if the bytes could not
        be decoded.
    """
    try:
        img = Image.open(io.BytesIO(image_data))
        img.load()
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        logger.info("Could not decode image: %s", e)
        return ""

    img = flatten_on_white(scale_to_width(img, max_width))

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=jpeg_quality(quality))
    return format_image_data_url(base64.b64encode(buffer.getvalue()).decode("ascii"))


def encode_with_preset(image_data: bytes, preset: CodecPreset) -> str:
    return encode(image_data, preset.max_width, preset.quality)
