"""Turn reconstructed lines into (student id, mark) candidates.

The on-device engine has no notion of columns, so each line is read from the
right: the first token that looks like a mark and fits the range is the mark,
everything else is the student id. Lines without such a token are not data
rows and yield nothing, not even a candidate with an empty mark.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from .models import Line, MarkCandidate, MarkValue
from .validation import validate_candidate

# Up to three integer digits with an optional one or two digit fraction.
MARK_PATTERN = re.compile(r"^[0-9]{1,3}(\.[0-9]{1,2})?$")

MIN_LINE_FRAGMENTS = 2


def parse_mark(text: str, max_mark: float) -> Optional[MarkValue]:
    """Parse ``text`` as an in-range mark, or return ``None``.

    Alphanumeric ids such as ``2021A`` or ``001/2020`` are rejected by the
    lexical check even though a prefix of them is numeric.
    """

    token = text.strip()
    match = MARK_PATTERN.match(token)
    if match is None:
        return None
    value: MarkValue = float(token) if match.group(1) else int(token)
    if 0 <= value <= max_mark:
        return value
    return None


def extract_record(line: Line, max_mark: float) -> Optional[MarkCandidate]:
    if len(line.fragments) < MIN_LINE_FRAGMENTS:
        return None

    id_parts: List[str] = []
    mark: Optional[MarkValue] = None
    for fragment in reversed(line.fragments):
        text = fragment.text.strip()
        if mark is None:
            value = parse_mark(text, max_mark)
            if value is not None:
                mark = value
                continue
        id_parts.insert(0, text)

    if mark is None or not id_parts:
        return None
    return validate_candidate(
        {"studentId": " ".join(id_parts).strip(), "mark": mark}, max_mark
    )


def extract_records(lines: Iterable[Line], max_mark: float) -> List[MarkCandidate]:
    records: List[MarkCandidate] = []
    for line in lines:
        record = extract_record(line, max_mark)
        if record is not None:
            records.append(record)
    return records


__all__ = ["MARK_PATTERN", "MIN_LINE_FRAGMENTS", "extract_record", "extract_records", "parse_mark"]
