import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from epochlens import __version__
from epochlens.diff import compute_text_edits
from epochlens.models import SUPPORTED_TIMEZONES, ConversionConfig, Timezone
from epochlens.scanner import convert_timestamps
from epochlens.session import current_timestamps_block


def _configure_logging(verbose: bool):
    # stdout carries the converted text; diagnostics go to stderr
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _read_text(path: Optional[Path]) -> str:
    if path is None or str(path) == "-":
        return sys.stdin.read()
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def handle_convert(args):
    text = _read_text(args.input)
    config = ConversionConfig(
        timezone=Timezone(args.tz),
        replace_in_place=args.replace,
        use_alternate_format=args.java,
    )
    result = convert_timestamps(text, config)

    if args.ranges:
        output = json.dumps(result.model_dump(), indent=2)
    else:
        output = result.text

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"✅ Saved to {args.output}", file=sys.stderr)
        print(f"Stats: {len(result.ranges)} timestamps converted.", file=sys.stderr)
    else:
        sys.stdout.write(output)
        if args.ranges:
            sys.stdout.write("\n")


def handle_diff(args):
    text_old = _read_text(args.old)
    text_new = _read_text(args.new)

    edits = compute_text_edits(text_old, text_new, granularity="word" if args.word else "char")

    if args.json:
        print(json.dumps([e.model_dump() for e in edits], indent=2))
        return

    print(f"Found {len(edits)} changes:", file=sys.stderr)
    for e in edits:
        if e.is_insertion:
            print(f"[+] @{e.range_start} {e.replacement!r}")
        elif e.is_deletion:
            print(f"[-] @{e.range_start}:{e.range_end} {text_old[e.range_start : e.range_end]!r}")
        else:
            print(f"[~] @{e.range_start}:{e.range_end} {text_old[e.range_start : e.range_end]!r} -> {e.replacement!r}")


def handle_now(args):
    print(current_timestamps_block())


def main(argv=None):
    parser = argparse.ArgumentParser(prog="epochlens", description="Epochlens: Unix timestamp annotator")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--verbose", action="store_true", help="Log debug events to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Subcommands")

    p_convert = subparsers.add_parser("convert", help="Annotate or replace timestamps in a text file")
    p_convert.add_argument("input", type=Path, nargs="?", help="Input text file (default: stdin)")
    p_convert.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    p_convert.add_argument(
        "--tz",
        choices=[tz.value for tz in SUPPORTED_TIMEZONES],
        default=Timezone.CHICAGO.value,
        help="Timezone for converted dates (default: %(default)s)",
    )
    p_convert.add_argument("--replace", action="store_true", help="Replace the digits instead of annotating them")
    p_convert.add_argument("--java", action="store_true", help="Use Java datetime format (2023-11-14T16:13:20-06:00[Zone])")
    p_convert.add_argument("--ranges", action="store_true", help="Output JSON with text and highlight ranges")
    p_convert.set_defaults(func=handle_convert)

    p_diff = subparsers.add_parser("diff", help="Show the edit operations turning one text file into another")
    p_diff.add_argument("old", type=Path, help="Original text file")
    p_diff.add_argument("new", type=Path, help="Modified text file")
    p_diff.add_argument("--json", action="store_true", help="Output raw JSON edit operations")
    p_diff.add_argument("--word", action="store_true", help="Diff at word granularity")
    p_diff.set_defaults(func=handle_diff)

    p_now = subparsers.add_parser("now", help="Print the current timestamp in milliseconds and seconds")
    p_now.set_defaults(func=handle_now)

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
