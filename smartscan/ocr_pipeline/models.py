"""Data models for the mark-sheet OCR pipeline.

These models keep the values exchanged between the engines, the record
extractor and the reconciler explicit so engine implementations can be
swapped without changing data exchange formats. Field names are snake_case;
the camelCase names used on the wire (``studentId``, ``maxMark``,
``createdAt``) are accepted and emitted as aliases.
"""
from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

MarkValue = Union[int, float]

SUPPORTED_MIME_TYPES = ("image/png", "image/jpeg", "image/webp")


def new_record_id() -> str:
    return uuid.uuid4().hex


class BoundingBox(BaseModel):
    """Axis-aligned bounding box in image pixel coordinates."""

    x: float = Field(..., ge=0)
    y: float = Field(..., ge=0)
    width: float = Field(..., ge=0)
    height: float = Field(..., ge=0)

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2


class PositionedFragment(BaseModel):
    """One recognised text span and where it sits on the image."""

    text: str
    bounding_box: BoundingBox


class Line(BaseModel):
    """Fragments judged to lie on one physical row, ordered left to right."""

    fragments: List[PositionedFragment]

    @property
    def texts(self) -> List[str]:
        return [fragment.text for fragment in self.fragments]


class MarkCandidate(BaseModel):
    """An extracted, not yet committed (student id, mark) pair."""

    model_config = ConfigDict(populate_by_name=True)

    student_id: str = Field(..., alias="studentId")
    mark: Optional[MarkValue] = None

    @field_validator("student_id")
    @classmethod
    def _non_blank_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("studentId cannot be blank")
        return value

    @field_validator("mark")
    @classmethod
    def _finite_mark(cls, value: Optional[MarkValue]) -> Optional[MarkValue]:
        if value is None:
            return value
        if not math.isfinite(value):
            raise ValueError("mark must be a finite number")
        if value < 0:
            raise ValueError("mark cannot be negative")
        return value


class StudentMark(MarkCandidate):
    """A candidate accepted into a session, with an identity for edits."""

    id: str = Field(default_factory=new_record_id)


class Session(BaseModel):
    """A named collection of committed marks sharing one maximum mark."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_record_id)
    name: str
    max_mark: MarkValue = Field(..., alias="maxMark")
    marks: List[StudentMark] = Field(default_factory=list)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="createdAt"
    )

    @field_validator("max_mark")
    @classmethod
    def _positive_max_mark(cls, value: MarkValue) -> MarkValue:
        if not math.isfinite(value) or value <= 0:
            raise ValueError("maxMark must be a positive number")
        return value


class ImagePayload(BaseModel):
    """Raw image bytes submitted for extraction."""

    data: bytes
    mime_type: Literal["image/png", "image/jpeg", "image/webp"]


class ReconcileResult(BaseModel):
    accepted: List[StudentMark]
    duplicate_count: int = Field(..., ge=0)
