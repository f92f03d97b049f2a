"""
Offset helpers shared by the buffer and the session.

Offsets are Python string indices. Positions are 1-based line/column pairs;
lines are separated by '\\n' and a '\\r' before it stays part of the line.
"""

import bisect
from typing import List, Sequence

from epochlens.errors import OverlappingEditsError
from epochlens.models import EditOperation, Position, PositionRange


def line_starts(text: str) -> List[int]:
    starts = [0]
    idx = text.find("\n")
    while idx != -1:
        starts.append(idx + 1)
        idx = text.find("\n", idx + 1)
    return starts


def _clamp(offset: int, text: str) -> int:
    return max(0, min(offset, len(text)))


def position_at(text: str, offset: int, starts: Sequence[int] = ()) -> Position:
    """Translates a flat offset into a Position, clamping to the text."""
    offset = _clamp(offset, text)
    starts = starts or line_starts(text)
    line_idx = bisect.bisect_right(starts, offset) - 1
    return Position(line=line_idx + 1, column=offset - starts[line_idx] + 1)


def offset_at(text: str, position: Position, starts: Sequence[int] = ()) -> int:
    starts = starts or line_starts(text)
    line_idx = min(position.line, len(starts)) - 1
    line_start = starts[line_idx]
    if line_idx + 1 < len(starts):
        line_end = starts[line_idx + 1] - 1
    else:
        line_end = len(text)
    return min(line_start + position.column - 1, line_end)


def to_position_range(text: str, start: int, end: int, starts: Sequence[int] = ()) -> PositionRange:
    starts = starts or line_starts(text)
    return PositionRange(start=position_at(text, start, starts), end=position_at(text, end, starts))


def validate_edits(text: str, edits: Sequence[EditOperation]) -> None:
    """
    Checks that `edits` form one simultaneously valid batch against `text`:
    ascending by start, non-overlapping, inside the text.
    """
    cursor = 0
    for i, edit in enumerate(edits):
        if edit.range_end < edit.range_start:
            raise OverlappingEditsError(f"Edit {i} ends before it starts", index=i)
        if edit.range_end > len(text):
            raise OverlappingEditsError(f"Edit {i} reaches past the end of the text ({len(text)})", index=i)
        if edit.range_start < cursor:
            raise OverlappingEditsError(f"Edit {i} overlaps or precedes the previous edit", index=i)
        cursor = edit.range_end


def apply_text_edits(text: str, edits: Sequence[EditOperation]) -> str:
    """Applies a batch of edits given in coordinates of `text`."""
    validate_edits(text, edits)

    parts = []
    cursor = 0
    for edit in edits:
        parts.append(text[cursor : edit.range_start])
        parts.append(edit.replacement)
        cursor = edit.range_end
    parts.append(text[cursor:])
    return "".join(parts)
