"""On-device mark extraction: detect words, rebuild rows, read marks."""
from __future__ import annotations

import logging
from typing import List

from .detector import LazyDetector
from .interfaces import MarkExtractor
from .lines import reconstruct_lines
from .models import MarkCandidate
from .records import extract_records

logger = logging.getLogger(__name__)


class OnDeviceMarkExtractor(MarkExtractor):
    """Run the shared text detector and parse its fragments into marks.

    Unlike the cloud engine this path cannot tell an unreadable mark from a
    line that is not a data row, so it only reports rows with an in-range
    numeric mark.
    """

    engine = "on_device"

    def __init__(self, detector: LazyDetector) -> None:
        self.detector = detector

    async def extract(self, image: bytes, mime_type: str, max_mark: float) -> List[MarkCandidate]:
        detector = await self.detector.get()
        fragments = await detector.detect(image, mime_type)
        lines = reconstruct_lines(fragments)
        records = extract_records(lines, max_mark)
        logger.debug(
            "On-device extraction: %d fragments, %d lines, %d records",
            len(fragments),
            len(lines),
            len(records),
        )
        return records


__all__ = ["OnDeviceMarkExtractor"]
