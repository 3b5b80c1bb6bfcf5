"""Mock implementations of extraction components for testing."""
from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Sequence, Tuple

from .interfaces import MarkExtractor, TextDetector
from .models import BoundingBox, MarkCandidate, PositionedFragment


def fragment(text: str, x: float, y: float, width: float = 40, height: float = 20) -> PositionedFragment:
    return PositionedFragment(text=text, bounding_box=BoundingBox(x=x, y=y, width=width, height=height))


def sheet_fragments(rows: Sequence[Sequence[str]], row_height: float = 20, row_gap: float = 30) -> List[PositionedFragment]:
    """Lay ``rows`` of tokens out as fragments on an evenly spaced grid."""

    fragments: List[PositionedFragment] = []
    for row_index, row in enumerate(rows):
        y = 10 + row_index * (row_height + row_gap)
        for col_index, text in enumerate(row):
            fragments.append(fragment(text, x=10 + col_index * 150, y=y, height=row_height))
    return fragments


class MockTextDetector(TextDetector):
    def __init__(self, fragments: Optional[List[PositionedFragment]] = None) -> None:
        self.fragments = fragments if fragments is not None else sheet_fragments(
            [
                ["Student ID", "Mark"],
                ["T/UDOM/2021/001", "78"],
                ["T/UDOM/2021/002", "64.5"],
                ["T/UDOM/2021/003", "91"],
            ]
        )
        self.calls: List[Tuple[bytes, str]] = []

    async def detect(self, image: bytes, mime_type: str) -> List[PositionedFragment]:
        self.calls.append((image, mime_type))
        return list(self.fragments)


class MockMarkExtractor(MarkExtractor):
    """Return canned candidates keyed by image bytes.

    ``delays`` lets a test make some images finish later than others;
    ``errors`` makes the matching image raise.
    """

    engine = "mock"

    def __init__(
        self,
        results: Optional[Dict[bytes, List[MarkCandidate]]] = None,
        *,
        delays: Optional[Dict[bytes, float]] = None,
        errors: Optional[Dict[bytes, Exception]] = None,
    ) -> None:
        self.results = results or {}
        self.delays = delays or {}
        self.errors = errors or {}
        self.calls: List[Tuple[bytes, str, float]] = []

    async def extract(self, image: bytes, mime_type: str, max_mark: float) -> List[MarkCandidate]:
        self.calls.append((image, mime_type, max_mark))
        delay = self.delays.get(image)
        if delay:
            await asyncio.sleep(delay)
        error = self.errors.get(image)
        if error is not None:
            raise error
        if image in self.results:
            return list(self.results[image])
        return [
            MarkCandidate(student_id="T/UDOM/2021/001", mark=min(78, max_mark)),
            MarkCandidate(student_id="T/UDOM/2021/002", mark=None),
        ]


__all__ = ["MockMarkExtractor", "MockTextDetector", "fragment", "sheet_fragments"]
