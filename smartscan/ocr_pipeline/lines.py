"""Group positioned text fragments into physical rows.

Rows on a photographed mark sheet are rarely pixel aligned, so two fragments
share a row when their vertical centres are closer than a fraction of their
mean height rather than within a fixed pixel distance. Each fragment is
compared with the fragment placed just before it, which lets a row follow a
gentle skew across the page.
"""
from __future__ import annotations

from typing import Iterable, List

from .models import Line, PositionedFragment

SAME_LINE_HEIGHT_RATIO = 0.7


def _close_line(fragments: List[PositionedFragment]) -> Line:
    return Line(fragments=sorted(fragments, key=lambda f: f.bounding_box.x))


def same_line(
    previous: PositionedFragment,
    current: PositionedFragment,
    ratio: float = SAME_LINE_HEIGHT_RATIO,
) -> bool:
    avg_height = (previous.bounding_box.height + current.bounding_box.height) / 2
    distance = abs(previous.bounding_box.center_y - current.bounding_box.center_y)
    return distance < avg_height * ratio


def reconstruct_lines(
    fragments: Iterable[PositionedFragment],
    ratio: float = SAME_LINE_HEIGHT_RATIO,
) -> List[Line]:
    """Return the fragments grouped into lines, top to bottom.

    Every input fragment appears in exactly one line and every line is
    non-empty. Fragments inside a line are ordered by ``x``.
    """

    ordered = sorted(fragments, key=lambda f: f.bounding_box.y)
    if not ordered:
        return []

    lines: List[Line] = []
    current: List[PositionedFragment] = [ordered[0]]
    for fragment in ordered[1:]:
        if same_line(current[-1], fragment, ratio):
            current.append(fragment)
        else:
            lines.append(_close_line(current))
            current = [fragment]
    lines.append(_close_line(current))
    return lines


__all__ = ["SAME_LINE_HEIGHT_RATIO", "reconstruct_lines", "same_line"]
