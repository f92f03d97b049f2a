import json
import logging
import sys

import structlog
from mcp.server.fastmcp import FastMCP
from pydantic import ValidationError

from epochlens.diff import compute_text_edits
from epochlens.models import ConversionConfig
from epochlens.scanner import convert_timestamps

# --- LOGGING CONFIGURATION ---
# MCP communicates over stdio. All logs must go to stderr.
logging.basicConfig(stream=sys.stderr, level=logging.INFO, force=True)

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
)

mcp = FastMCP("Epochlens Timestamp Service")


@mcp.tool()
def convert_text(
    text: str,
    timezone: str = "America/Chicago",
    replace_timestamp: bool = False,
    use_java_format: bool = False,
) -> str:
    """
    Finds Unix timestamps (10-digit seconds, 13-digit milliseconds) in text and
    converts them to readable dates.

    Args:
        text: Free-form text containing timestamps.
        timezone: One of 'UTC', 'America/Chicago', 'Europe/Amsterdam'.
        replace_timestamp: If True the digits are replaced by the date.
                           If False (default) the date is appended: '1700000000 [2023-11-14 16:13:20-06:00]'.
        use_java_format: If True, dates look like '2023-11-14T16:13:20-06:00[America/Chicago]'.

    Returns:
        JSON object with 'text' (the rewritten text) and 'ranges'
        (start/end offsets of every converted date in 'text').
    """
    try:
        config = ConversionConfig(
            timezone=timezone,
            replace_in_place=replace_timestamp,
            use_alternate_format=use_java_format,
        )
    except ValidationError as e:
        return f"Error: invalid options: {e.errors()[0]['msg']}"

    try:
        return convert_timestamps(text, config).model_dump_json()
    except Exception as e:
        return f"Error converting text: {str(e)}"


@mcp.tool()
def compute_edits(old_text: str, new_text: str, word_level: bool = False) -> str:
    """
    Computes the minimal edit operations that turn old_text into new_text.

    Every operation is {range_start, range_end, replacement} with offsets into
    old_text; apply them together as one batch.
    """
    try:
        edits = compute_text_edits(old_text, new_text, granularity="word" if word_level else "char")
        return json.dumps([e.model_dump() for e in edits])
    except Exception as e:
        return f"Error computing edits: {str(e)}"


def main():
    mcp.run()


if __name__ == "__main__":
    main()
