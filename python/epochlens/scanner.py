import datetime as dt
import re
from typing import List, Optional

import structlog

from epochlens.errors import ConversionFailure
from epochlens.formatting import STANDARD_PATTERN, alternate_pattern, format_instant, instant_from_epoch_millis
from epochlens.models import ConversionConfig, ConversionResult, HighlightRange, Match, TimestampKind

logger = structlog.get_logger(__name__)

MIN_YEAR = 1975
MAX_YEAR = 2050

# ASCII word boundaries: a 13-digit run never yields a nested 10-digit match.
# Order matters: the millisecond pass is discovered first.
_PATTERNS = (
    (re.compile(r"\b\d{13}\b", re.ASCII), TimestampKind.MILLISECONDS),
    (re.compile(r"\b\d{10}\b", re.ASCII), TimestampKind.SECONDS),
)


def find_candidates(text: str) -> List[Match]:
    """
    Scans `text` for 13-digit (milliseconds) and 10-digit (seconds) runs.
    Both passes run against the original text; results are ordered by start
    offset, keeping discovery order on ties.
    """
    candidates = []
    for pattern, kind in _PATTERNS:
        for m in pattern.finditer(text):
            candidates.append(Match(start=m.start(), raw=m.group(0), kind=kind))

    # sorted() is stable, so the millisecond pass wins ties
    return sorted(candidates, key=lambda c: c.start)


def format_timestamp(date: dt.datetime, config: ConversionConfig) -> str:
    timezone = config.timezone.value
    if config.use_alternate_format:
        return format_instant(date, alternate_pattern(timezone), timezone)
    return format_instant(date, STANDARD_PATTERN, timezone)


def _to_instant(match: Match) -> dt.datetime:
    try:
        date = instant_from_epoch_millis(match.epoch_millis)
    except ValueError as e:
        raise ConversionFailure(match.raw, str(e)) from e

    if not MIN_YEAR <= date.year <= MAX_YEAR:
        raise ConversionFailure(match.raw, f"year {date.year} outside [{MIN_YEAR}, {MAX_YEAR}]")
    return date


def convert_match(match: Match, config: ConversionConfig) -> str:
    """
    Returns the replacement text for one candidate.
    Candidates that are not valid in-range dates come back as their raw digits.
    """
    try:
        date = _to_instant(match)
        formatted = format_timestamp(date, config)
    except (ConversionFailure, ValueError, OverflowError, OSError) as e:
        logger.debug("Leaving timestamp unconverted", raw=match.raw, start=match.start, reason=str(e))
        return match.raw

    if config.replace_in_place:
        return formatted
    return f"{match.raw} [{formatted}]"


def convert_timestamps(text: str, config: Optional[ConversionConfig] = None) -> ConversionResult:
    """
    Rewrites every convertible timestamp in `text`.

    Returns the rewritten text together with the [start, end) span of each
    replacement, expressed in coordinates of the rewritten text.
    """
    if not text:
        return ConversionResult(text="", ranges=[])

    if config is None:
        config = ConversionConfig()

    parts = []
    ranges = []
    last_idx = 0
    offset = 0

    for match in find_candidates(text):
        converted = convert_match(match, config)
        if converted == match.raw:
            continue

        parts.append(text[last_idx : match.start])
        parts.append(converted)
        last_idx = match.end

        start = match.start + offset
        ranges.append(HighlightRange(start=start, end=start + len(converted)))
        offset += len(converted) - len(match.raw)

    parts.append(text[last_idx:])
    result = ConversionResult(text="".join(parts), ranges=ranges)

    logger.debug("Converted timestamps", converted=len(ranges), length=len(result.text))
    return result
