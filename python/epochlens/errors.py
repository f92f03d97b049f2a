from typing import Optional


class EpochlensError(Exception):
    """Base class for all errors raised by epochlens."""


class ConversionFailure(EpochlensError):
    """
    A candidate's digits do not form a valid, in-range calendar date.
    Recovered inside the scanner; the candidate passes through unchanged.
    """

    def __init__(self, raw: str, reason: str):
        super().__init__(f"Cannot convert '{raw}': {reason}")
        self.raw = raw
        self.reason = reason


class OverlappingEditsError(EpochlensError, ValueError):
    """An edit batch is unordered, overlapping, or reaches outside the text."""

    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


class PersistenceFailure(EpochlensError):
    """The preference store could not be read or written."""
