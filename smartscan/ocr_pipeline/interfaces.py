# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (C) 2024 smartscan-ocr contributors

"""Interfaces for mark extraction components."""
from __future__ import annotations

from typing import List, Protocol

from .models import MarkCandidate, PositionedFragment


class TextDetector(Protocol):
    async def detect(self, image: bytes, mime_type: str) -> List[PositionedFragment]:
        ...


class MarkExtractor(Protocol):
    engine: str

    async def extract(self, image: bytes, mime_type: str, max_mark: float) -> List[MarkCandidate]:
        ...
