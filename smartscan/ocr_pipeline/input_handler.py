"""Input handling utilities for preparing images for extraction."""
from __future__ import annotations

import io
from pathlib import Path
from typing import Iterable, List, Union

from PIL import Image, UnidentifiedImageError

from .models import ImagePayload

_FORMAT_TO_MIME = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}


def detect_mime_type(data: bytes) -> str:
    """Return the MIME type of ``data`` as identified by Pillow.

    Raises ``ValueError`` for unreadable images and for formats other than
    PNG, JPEG and WEBP.
    """

    try:
        with Image.open(io.BytesIO(data)) as image:
            image_format = (image.format or "").upper()
    except UnidentifiedImageError as exc:
        raise ValueError("Unreadable image data") from exc

    mime_type = _FORMAT_TO_MIME.get(image_format)
    if mime_type is None:
        raise ValueError(f"Unsupported image format {image_format or 'unknown'!s}; use PNG, JPEG or WEBP")
    return mime_type


class BasicInputHandler:
    """Load image files into :class:`ImagePayload` objects, in order.

    The MIME type is taken from the decoded image rather than the file
    suffix, so a mislabelled ``.jpg`` that is really a PNG is still sent with
    the right type.
    """

    def load_bytes(self, data: bytes) -> ImagePayload:
        return ImagePayload(data=data, mime_type=detect_mime_type(data))

    def load(self, paths: Iterable[Union[str, Path]]) -> List[ImagePayload]:
        payloads: List[ImagePayload] = []
        for raw_path in paths:
            path = Path(raw_path)
            try:
                payloads.append(self.load_bytes(path.read_bytes()))
            except ValueError as exc:
                raise ValueError(f"{path}: {exc}") from exc
        return payloads


__all__ = ["BasicInputHandler", "detect_mime_type"]
