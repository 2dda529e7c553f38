from __future__ import annotations

import io
import mimetypes
from pathlib import Path

from PIL import Image, ImageOps

from config import ALLOWED_MIME_TYPES, MAX_DIMENSION, MAX_UPLOAD_BYTES
from errors import UploadRejected
from models import SourceBitmap


def validate_upload(data: bytes, content_type: str | None) -> None:
    """Reject uploads by type and byte size before decoding anything."""
    if (content_type or "").lower() not in ALLOWED_MIME_TYPES:
        raise UploadRejected("Please upload a valid image file (PNG or JPG).")
    if len(data) > MAX_UPLOAD_BYTES:
        raise UploadRejected(f"File size must be less than {MAX_UPLOAD_BYTES // (1024 * 1024)}MB.")


def decode_upload(data: bytes, content_type: str | None) -> SourceBitmap:
    """Validate and decode an uploaded photo.

    Raises:
        UploadRejected: with a message fit for the user
    """
    validate_upload(data, content_type)

    try:
        pil = Image.open(io.BytesIO(data))
    except (OSError, Image.DecompressionBombError) as e:
        raise UploadRejected("Failed to load image. Please try another file.") from e

    # header only so far; refuse oversized photos before decoding any pixels
    width, height = pil.size
    if width > MAX_DIMENSION or height > MAX_DIMENSION:
        pil.close()
        raise UploadRejected(f"Image dimensions must be less than {MAX_DIMENSION}x{MAX_DIMENSION}px.")

    try:
        pil.load()
    except (OSError, Image.DecompressionBombError) as e:
        raise UploadRejected("Failed to load image. Please try another file.") from e

    # Phones store portrait shots rotated + an EXIF flag
    pil = ImageOps.exif_transpose(pil)
    return SourceBitmap.from_pil(pil)


def load_path(path: str | Path) -> SourceBitmap:
    path = Path(path)
    content_type, _ = mimetypes.guess_type(path.name)
    return decode_upload(path.read_bytes(), content_type)
