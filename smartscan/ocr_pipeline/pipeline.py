# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 smartscan-ocr contributors

"""Batch extraction over a configured mark extractor."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Sequence

from .gemini import GeminiMarkExtractor
from .interfaces import MarkExtractor
from .models import ImagePayload, MarkCandidate, StudentMark
from .on_device import OnDeviceMarkExtractor
from .tesseract import shared_tesseract_detector

if TYPE_CHECKING:  # pragma: no cover
    from ..config import Settings

logger = logging.getLogger(__name__)


class OcrEngine(str, Enum):
    GEMINI = "gemini"
    ON_DEVICE = "on_device"


def build_extractor(settings: "Settings") -> MarkExtractor:
    """Return the extractor selected by ``settings.ocr_engine``."""

    try:
        engine = OcrEngine(settings.ocr_engine)
    except ValueError as exc:
        choices = ", ".join(e.value for e in OcrEngine)
        raise ValueError(f"Unknown OCR engine {settings.ocr_engine!r}; expected one of: {choices}") from exc

    if engine == OcrEngine.GEMINI:
        return GeminiMarkExtractor(api_key=settings.gemini_api_key, model=settings.gemini_model)
    detector = shared_tesseract_detector(
        lang=settings.tesseract_lang,
        timeout=settings.detector_timeout_sec,
        poll_interval=settings.detector_poll_interval_sec,
    )
    return OnDeviceMarkExtractor(detector)


@dataclass
class BatchExtractionPipeline:
    """Extract marks from several images concurrently.

    Images are extracted as independent tasks and joined once all finish.
    Results are concatenated in submission order. If any image fails the
    whole batch fails with that error.
    """

    extractor: MarkExtractor

    async def extract(self, images: Sequence[ImagePayload], max_mark: float) -> List[MarkCandidate]:
        if not images:
            raise ValueError("At least one image is required")
        if max_mark <= 0:
            raise ValueError("max_mark must be positive")

        logger.info(
            "Extracting marks from %d image(s) with the %s engine",
            len(images),
            getattr(self.extractor, "engine", "unknown"),
        )
        results = await asyncio.gather(
            *(self.extractor.extract(image.data, image.mime_type, max_mark) for image in images)
        )
        candidates = [candidate for result in results for candidate in result]
        if not candidates:
            logger.info("No marks were found in %d image(s)", len(images))
        return candidates

    async def extract_for_review(self, images: Sequence[ImagePayload], max_mark: float) -> List[StudentMark]:
        """Extract and tag each candidate with a fresh id for the review table."""

        candidates = await self.extract(images, max_mark)
        return [StudentMark(student_id=c.student_id, mark=c.mark) for c in candidates]


__all__ = ["BatchExtractionPipeline", "OcrEngine", "build_extractor"]
