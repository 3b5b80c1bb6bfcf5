"""Merge reviewed candidates into a session's records.

Reconciliation only ever appends: a candidate whose student id is already in
the session is discarded whole, even when the existing record has no mark.
Ids are compared exactly, without case folding or whitespace trimming.
"""
from __future__ import annotations

import logging
from typing import Iterable, Sequence, Tuple

from .models import MarkCandidate, ReconcileResult, Session, StudentMark

logger = logging.getLogger(__name__)


def _as_student_mark(candidate: MarkCandidate) -> StudentMark:
    # Review rows already carry the id the caller has been editing them by.
    if isinstance(candidate, StudentMark):
        return candidate.model_copy()
    return StudentMark(student_id=candidate.student_id, mark=candidate.mark)


def reconcile(existing: Iterable[StudentMark], candidates: Sequence[MarkCandidate]) -> ReconcileResult:
    """Return the candidates that are new to ``existing``, in input order."""

    existing_ids = {record.student_id for record in existing}
    accepted = [
        _as_student_mark(candidate)
        for candidate in candidates
        if candidate.student_id not in existing_ids
    ]
    return ReconcileResult(accepted=accepted, duplicate_count=len(candidates) - len(accepted))


def commit(session: Session, reviewed: Sequence[MarkCandidate]) -> Tuple[Session, ReconcileResult]:
    """Append the reviewed candidates that are new to ``session``.

    Reconciliation is repeated against the session as it is now, so records
    added since the review started are still respected. The input session is
    left untouched; the updated copy is returned.
    """

    result = reconcile(session.marks, reviewed)
    updated = session.model_copy(update={"marks": [*session.marks, *result.accepted]})
    logger.info(
        "Committed %d record(s) to session %s, ignored %d duplicate(s)",
        len(result.accepted),
        session.id,
        result.duplicate_count,
    )
    return updated, result


__all__ = ["commit", "reconcile"]
