"""Range and null validation shared by every engine.

A mark survives only when it is a real number in ``[0, max_mark]``; anything
else becomes ``None``. A candidate whose student id is blank is dropped.
Student ids are never rewritten, only checked.
"""
from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping, Optional

from .models import MarkCandidate, MarkValue

logger = logging.getLogger(__name__)


def coerce_mark(value: Any, max_mark: float) -> Optional[MarkValue]:
    # bool is an int subclass but never a mark
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    if 0 <= value <= max_mark:
        return value
    return None


def validate_candidate(raw: Any, max_mark: float) -> Optional[MarkCandidate]:
    """Validate one decoded response item.

    ``raw`` may carry either ``studentId`` or ``student_id``. Returns ``None``
    when the item is not a mapping or its student id is blank.
    """

    if isinstance(raw, MarkCandidate):
        raw = raw.model_dump(by_alias=True)
    if not isinstance(raw, Mapping):
        return None

    student_id = raw.get("studentId", raw.get("student_id"))
    if not isinstance(student_id, str) or not student_id.strip():
        return None

    return MarkCandidate(student_id=student_id, mark=coerce_mark(raw.get("mark"), max_mark))


def validate_candidates(raw: Any, max_mark: float) -> List[MarkCandidate]:
    """Validate a decoded response, degrading malformed shapes to ``[]``."""

    if not isinstance(raw, list):
        logger.warning("Discarding non-array extraction payload of type %s", type(raw).__name__)
        return []

    candidates: List[MarkCandidate] = []
    for item in raw:
        candidate = validate_candidate(item, max_mark)
        if candidate is not None:
            candidates.append(candidate)
    dropped = len(raw) - len(candidates)
    if dropped:
        logger.debug("Dropped %d extraction items without a student id", dropped)
    return candidates


__all__ = ["coerce_mark", "validate_candidate", "validate_candidates"]
