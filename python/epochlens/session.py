import time
from typing import Callable, List, Optional

import structlog

from epochlens.buffer import TextBuffer
from epochlens.diff import compute_text_edits
from epochlens.models import AppState, EditOperation, HighlightRange, Timezone
from epochlens.scanner import convert_timestamps

logger = structlog.get_logger(__name__)

StateListener = Callable[[AppState], None]


def current_timestamps_block(previous: str = "", now_ms: Optional[int] = None) -> str:
    """Appends the current epoch in milliseconds and seconds to `previous`."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    block = f"Current Timestamps:\nMilliseconds: {now_ms}\nSeconds: {now_ms // 1000}"
    if previous:
        return f"{previous}\n\n{block}"
    return block


class LiveSession:
    """
    Keeps an output buffer in sync with the input text.

    Each refresh rewrites the input, diffs the displayed output against the
    desired output and applies the difference as a single batch, so text
    outside the changed regions keeps its offsets.
    """

    def __init__(
        self,
        state: Optional[AppState] = None,
        buffer: Optional[TextBuffer] = None,
        on_state_change: Optional[StateListener] = None,
        granularity: str = "char",
    ):
        self.state = state or AppState()
        self.buffer = buffer or TextBuffer()
        self.ranges: List[HighlightRange] = []
        self.granularity = granularity
        self._on_state_change = on_state_change
        self.refresh()

    @property
    def output_text(self) -> str:
        return self.buffer.text

    def _update(self, **changes) -> List[EditOperation]:
        self.state = self.state.model_copy(update=changes)
        if self._on_state_change:
            self._on_state_change(self.state)
        return self.refresh()

    def set_input(self, text: str) -> List[EditOperation]:
        return self._update(input_text=text or "")

    def set_timezone(self, timezone: Timezone) -> List[EditOperation]:
        return self._update(selected_timezone=Timezone(timezone))

    def set_replace_timestamp(self, enabled: bool) -> List[EditOperation]:
        return self._update(replace_timestamp=bool(enabled))

    def set_use_java_format(self, enabled: bool) -> List[EditOperation]:
        return self._update(use_java_format=bool(enabled))

    def clear(self) -> List[EditOperation]:
        return self.set_input("")

    def insert_current_timestamp(self, now_ms: Optional[int] = None) -> List[EditOperation]:
        return self.set_input(current_timestamps_block(self.state.input_text, now_ms))

    def refresh(self) -> List[EditOperation]:
        result = convert_timestamps(self.state.input_text, self.state.to_config())

        edits = compute_text_edits(self.buffer.text, result.text, self.granularity)
        self.buffer.apply_edits(edits)

        self.ranges = result.ranges
        if result.ranges:
            self.buffer.set_highlights(result.ranges)
        else:
            self.buffer.clear_highlights()

        logger.debug("Session refreshed", edits=len(edits), highlights=len(result.ranges))
        return edits
