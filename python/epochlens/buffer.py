from typing import Callable, List, Optional, Sequence

import structlog
from pydantic import BaseModel

from epochlens.models import EditOperation, HighlightRange, Position, PositionRange
from epochlens.ranges import apply_text_edits, line_starts, offset_at, position_at, to_position_range

logger = structlog.get_logger(__name__)

DEFAULT_HIGHLIGHT_STYLE = "timestamp-highlight"


class Decoration(BaseModel):
    range: PositionRange
    style: str = DEFAULT_HIGHLIGHT_STYLE


ChangeListener = Callable[[Sequence[EditOperation]], None]


class TextBuffer:
    """
    Headless stand-in for an editor model.

    Edits arrive as a batch in coordinates of the current text and are
    applied all-or-nothing: an invalid batch raises before anything changes.
    Highlights are a replace-all set of decorations.
    """

    def __init__(self, text: str = ""):
        self._text = text
        self._starts = line_starts(text)
        self._decorations: List[Decoration] = []
        self._listeners: List[ChangeListener] = []
        self.version = 0

    @property
    def text(self) -> str:
        return self._text

    @property
    def highlights(self) -> List[Decoration]:
        return list(self._decorations)

    def on_change(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def _replace_text(self, text: str, edits: Sequence[EditOperation]) -> None:
        self._text = text
        self._starts = line_starts(text)
        self.version += 1
        for listener in self._listeners:
            listener(edits)

    def set_value(self, text: str) -> None:
        """Replaces the whole content. Loses cursor anchoring; use for initial load only."""
        if text == self._text:
            return
        edit = EditOperation(range_start=0, range_end=len(self._text), replacement=text)
        self._replace_text(text, [edit])

    def apply_edits(self, edits: Sequence[EditOperation]) -> None:
        if not edits:
            return
        new_text = apply_text_edits(self._text, edits)
        logger.debug("Applying edit batch", edits=len(edits), version=self.version + 1)
        self._replace_text(new_text, edits)

    def position_at(self, offset: int) -> Position:
        return position_at(self._text, offset, self._starts)

    def offset_at(self, position: Position) -> int:
        return offset_at(self._text, position, self._starts)

    def to_position_range(self, start: int, end: int) -> PositionRange:
        return to_position_range(self._text, start, end, self._starts)

    def set_highlights(
        self, ranges: Sequence[HighlightRange], style: Optional[str] = None
    ) -> List[Decoration]:
        """Replaces every current highlight with `ranges`."""
        style = style or DEFAULT_HIGHLIGHT_STYLE
        self._decorations = [
            Decoration(range=self.to_position_range(r.start, r.end), style=style) for r in ranges
        ]
        return self.highlights

    def clear_highlights(self) -> None:
        self._decorations = []
