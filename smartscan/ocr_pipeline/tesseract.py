"""On-device text detection backed by pytesseract.

This module provides the ``TextDetector`` used by the on-device engine. It
runs Tesseract's LSTM engine (``--oem 3``) and reports every recognised word
with its bounding box so the line reconstructor can rebuild rows. The
blocking Tesseract call runs in a worker thread.

Acquiring the detector goes through a process-wide :class:`LazyDetector`
(see :func:`shared_tesseract_detector`), which waits for the ``tesseract``
binary to answer before handing out a detector.
"""
from __future__ import annotations

import io
import logging
import os
from typing import Dict, List, Tuple

import anyio
import pytesseract
from PIL import Image
from pytesseract import Output

from .detector import DEFAULT_POLL_INTERVAL_SEC, DEFAULT_TIMEOUT_SEC, LazyDetector
from .interfaces import TextDetector
from .models import BoundingBox, PositionedFragment

logger = logging.getLogger(__name__)


def _pytesseract_allowed() -> bool:
    raw = os.environ.get("SMARTSCAN_ALLOW_PYTESSERACT")
    if raw is None:
        return True
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def tesseract_available() -> bool:
    """Return ``True`` when the tesseract binary can be executed."""

    if not _pytesseract_allowed():
        return False
    try:
        pytesseract.get_tesseract_version()
    except (pytesseract.TesseractNotFoundError, OSError) as exc:
        logger.debug("tesseract not available yet: %s", exc)
        return False
    return True


class TesseractTextDetector(TextDetector):
    """Detect words on an image using pytesseract.

    Args:
        lang: Language hint passed to Tesseract (e.g., ``"eng"``).
        oem: OCR Engine Mode. The default ``3`` enables the LSTM engine.
        psm: Page segmentation mode. The default ``6`` treats the sheet as a
            uniform block of text, which keeps table rows together.
        extra_config: Additional custom flags forwarded to pytesseract.
    """

    def __init__(self, lang: str = "eng", oem: int = 3, psm: int = 6, extra_config: str = "") -> None:
        if not _pytesseract_allowed():
            raise RuntimeError(
                "pytesseract is disabled by SMARTSCAN_ALLOW_PYTESSERACT; set it to 1/true to enable"
            )
        self.lang = lang
        base_config = f"--oem {oem} --psm {psm}"
        self.config = f"{base_config} {extra_config}".strip()

    def detect_sync(self, image: bytes, mime_type: str) -> List[PositionedFragment]:
        with Image.open(io.BytesIO(image)) as pil_image:
            pil_image.load()
            data = pytesseract.image_to_data(
                pil_image,
                lang=self.lang,
                config=self.config,
                output_type=Output.DICT,
            )

        fragments: List[PositionedFragment] = []
        for text, conf_str, left, top, width, height in zip(
            data.get("text", []),
            data.get("conf", []),
            data.get("left", []),
            data.get("top", []),
            data.get("width", []),
            data.get("height", []),
        ):
            if not text or not str(text).strip() or conf_str is None or str(conf_str) == "-1":
                continue
            box = BoundingBox(x=float(left), y=float(top), width=float(width), height=float(height))
            fragments.append(PositionedFragment(text=str(text), bounding_box=box))

        logger.debug("Tesseract detected %d fragments in %s image", len(fragments), mime_type)
        return fragments

    async def detect(self, image: bytes, mime_type: str) -> List[PositionedFragment]:
        return await anyio.to_thread.run_sync(self.detect_sync, image, mime_type)


_SHARED: Dict[Tuple[str, float, float], LazyDetector] = {}


def shared_tesseract_detector(
    lang: str = "eng",
    timeout: float = DEFAULT_TIMEOUT_SEC,
    poll_interval: float = DEFAULT_POLL_INTERVAL_SEC,
) -> LazyDetector:
    """Return the process-wide lazy Tesseract detector for ``lang``."""

    key = (lang, timeout, poll_interval)
    lazy = _SHARED.get(key)
    if lazy is None:
        lazy = LazyDetector(
            lambda: TesseractTextDetector(lang=lang),
            probe=tesseract_available,
            timeout=timeout,
            poll_interval=poll_interval,
        )
        _SHARED[key] = lazy
    return lazy


__all__ = ["TesseractTextDetector", "shared_tesseract_detector", "tesseract_available"]
