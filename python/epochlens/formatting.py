"""
Minimal date formatter for the pattern syntax used by the converter.

Supported tokens: yyyy, MM, dd, HH, mm, ss and XXX (UTC offset as +HH:MM).
Text inside single quotes is copied literally ('' is a literal quote).
Any other ASCII letter is rejected so a typo in a pattern fails loudly
instead of leaking into the output.
"""

import datetime as dt
import re
from typing import Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

STANDARD_PATTERN = "yyyy-MM-dd HH:mm:ssXXX"

# Group 1: quoted literal body
# Group 2: first letter of a repeated-letter token
_TOKEN_RE = re.compile(r"'((?:[^']|'')*)'|([A-Za-z])\2*")

_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)


def alternate_pattern(timezone: str) -> str:
    """java.time style pattern: 2023-11-14T16:13:20-06:00[America/Chicago]"""
    return "yyyy-MM-dd'T'HH:mm:ssXXX'[" + timezone.replace("'", "''") + "]'"


def resolve_zone(timezone: str) -> dt.tzinfo:
    if timezone == "UTC":
        return dt.timezone.utc
    try:
        return ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as ex:
        raise ValueError(f"Invalid timezone identifier: {timezone!r}") from ex


def instant_from_epoch_millis(millis: int) -> dt.datetime:
    """Returns the aware UTC datetime for an epoch-milliseconds value."""
    try:
        return _EPOCH + dt.timedelta(milliseconds=millis)
    except OverflowError as ex:
        raise ValueError(f"Epoch value out of range: {millis}") from ex


def _format_offset(moment: dt.datetime) -> str:
    offset = moment.utcoffset() or dt.timedelta(0)
    total_minutes = int(offset.total_seconds()) // 60
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


def _render_token(token: str, moment: dt.datetime) -> str:
    if token == "yyyy":
        return f"{moment.year:04d}"
    if token == "MM":
        return f"{moment.month:02d}"
    if token == "dd":
        return f"{moment.day:02d}"
    if token == "HH":
        return f"{moment.hour:02d}"
    if token == "mm":
        return f"{moment.minute:02d}"
    if token == "ss":
        return f"{moment.second:02d}"
    if token == "XXX":
        return _format_offset(moment)
    raise ValueError(f"Unsupported pattern token: {token!r}")


def format_instant(date: dt.datetime, pattern: str, timezone: Union[str, dt.tzinfo]) -> str:
    """
    Renders `date` in `timezone` following `pattern`.

    Naive datetimes are taken to be UTC.
    Raises ValueError for unknown timezones or unsupported tokens.
    """
    tzinfo = resolve_zone(timezone) if isinstance(timezone, str) else timezone
    if date.tzinfo is None:
        date = date.replace(tzinfo=dt.timezone.utc)
    moment = date.astimezone(tzinfo)

    parts = []
    last_idx = 0
    for match in _TOKEN_RE.finditer(pattern):
        parts.append(pattern[last_idx : match.start()])

        quoted, letter = match.groups()
        if letter is not None:
            parts.append(_render_token(match.group(0), moment))
        elif quoted:
            parts.append(quoted.replace("''", "'"))
        else:
            # '' outside a quoted section
            parts.append("'")

        last_idx = match.end()

    parts.append(pattern[last_idx:])
    return "".join(parts)
