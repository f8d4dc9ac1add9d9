"""Image encoding helpers built on Pillow.

Images travel through the studio as ``data:`` URLs so that they can be
persisted in the JSON history record and sent to the backend unchanged.
"""

import base64
import binascii
import io
import logging
import math
from pathlib import Path

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

PLACEHOLDER_COLOR = "#808080"

# Placeholder side length per ratio unit (a 16:9 placeholder is 1600x900)
_PLACEHOLDER_UNIT = 100

_MIME_BY_SUFFIX: dict[str, str] = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".gif": "image/gif",
}

_SUFFIX_BY_MIME: dict[str, str] = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
    "video/mp4": ".mp4",
}

# Pillow refuses oversized images with the bomb error (or the warning, when
# warnings are escalated)
_DECODE_ERRORS = (
    UnidentifiedImageError,
    OSError,
    Image.DecompressionBombError,
    Image.DecompressionBombWarning,
)


class ImageDecodeError(ValueError):
    """Raised when a data URL does not hold a decodable image."""


def parse_ratio(ratio: str) -> tuple[int, int]:
    """Split an ``"W:H"`` ratio string into integers."""
    try:
        w, h = (int(part) for part in ratio.split(":"))
    except ValueError as exc:
        raise ValueError(f"Invalid aspect ratio: {ratio!r}") from exc
    if w <= 0 or h <= 0:
        raise ValueError(f"Invalid aspect ratio: {ratio!r}")
    return w, h


def to_data_url(data: bytes, mime_type: str = "image/png") -> str:
    """Encode raw bytes as a base64 data URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def split_data_url(src: str) -> tuple[str, str]:
    """Return ``(mime_type, base64_payload)`` for a data URL.

    Bare base64 strings are accepted and assumed to be PNG.
    """
    if src.startswith("data:"):
        header, _, payload = src.partition(",")
        mime_type = header[5:].split(";")[0] or "application/octet-stream"
        return mime_type, payload
    return "image/png", src


def data_url_to_bytes(src: str) -> bytes:
    """Decode the payload of a data URL."""
    _, payload = split_data_url(src)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ImageDecodeError("Image payload is not valid base64") from exc


def estimate_size_from_base64(src: str) -> int:
    """Estimate the decoded byte size of a data URL from its payload length."""
    _, payload = split_data_url(src)
    padding = len(payload) - len(payload.rstrip("="))
    return max(0, len(payload) * 3 // 4 - padding)


def get_image_dimensions(src: str) -> tuple[int, int]:
    """Decode a data URL and return its pixel ``(width, height)``.

    Raises:
        ImageDecodeError: If the payload cannot be decoded as an image.
    """
    data = data_url_to_bytes(src)
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except _DECODE_ERRORS as exc:
        raise ImageDecodeError("Could not decode image dimensions") from exc


def aspect_ratio_from_dimensions(width: int, height: int) -> str:
    """Reduce pixel dimensions to a ``"W:H"`` ratio string."""
    divisor = math.gcd(width, height) or 1
    return f"{width // divisor}:{height // divisor}"


def create_placeholder(ratio: str, color: str = PLACEHOLDER_COLOR) -> tuple[str, int, int]:
    """Render a solid neutral-fill PNG that pins the output aspect ratio.

    Returns:
        ``(data_url, width, height)``.
    """
    w, h = parse_ratio(ratio)
    width, height = w * _PLACEHOLDER_UNIT, h * _PLACEHOLDER_UNIT
    image = Image.new("RGB", (width, height), color)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return to_data_url(buffer.getvalue(), "image/png"), width, height


def crop_to_aspect_ratio(src: str, ratio: str) -> str:
    """Center-crop an image to the given ratio and re-encode it as PNG."""
    w, h = parse_ratio(ratio)
    data = data_url_to_bytes(src)
    try:
        with Image.open(io.BytesIO(data)) as image:
            width, height = image.size
            target = w / h
            if width / height > target:
                new_width = round(height * target)
                left = (width - new_width) // 2
                box = (left, 0, left + new_width, height)
            else:
                new_height = round(width / target)
                top = (height - new_height) // 2
                box = (0, top, width, top + new_height)
            cropped = image.crop(box)
            buffer = io.BytesIO()
            cropped.save(buffer, format="PNG")
    except _DECODE_ERRORS as exc:
        raise ImageDecodeError("Could not decode image for cropping") from exc
    return to_data_url(buffer.getvalue(), "image/png")


def mime_type_for_path(path: Path) -> str:
    """Guess an image MIME type from a file suffix (PNG when unknown)."""
    return _MIME_BY_SUFFIX.get(path.suffix.lower(), "image/png")


def suffix_for_mime(mime_type: str) -> str:
    return _SUFFIX_BY_MIME.get(mime_type, ".bin")


def read_image_file(path: Path) -> str:
    """Read an image file from disk as a data URL."""
    return to_data_url(path.read_bytes(), mime_type_for_path(path))


def save_data_url(src: str, path: Path) -> Path:
    """Write a data URL's payload to ``path``, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data_url_to_bytes(src))
    logger.debug("Saved %s", path)
    return path
