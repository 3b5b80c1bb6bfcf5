"""Tabular shape of an exported session."""
from __future__ import annotations

from typing import List, Union

from .models import Session

EXPORT_HEADERS = ["Student ID", "Mark"]
EXPORT_SHEET_NAME = "Student Marks"

Cell = Union[str, int, float]


def session_rows(session: Session) -> List[List[Cell]]:
    """Return the header row followed by one row per record.

    A missing mark is exported as an empty cell.
    """

    rows: List[List[Cell]] = [list(EXPORT_HEADERS)]
    for record in session.marks:
        rows.append([record.student_id, "" if record.mark is None else record.mark])
    return rows


def export_basename(session: Session) -> str:
    return f"{session.name.replace(' ', '_')}_marks"


__all__ = ["EXPORT_HEADERS", "EXPORT_SHEET_NAME", "export_basename", "session_rows"]
