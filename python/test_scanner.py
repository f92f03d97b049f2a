"""
Tests for timestamp detection, formatting and rewriting.

Run: python3 test_scanner.py
From: python/
"""

import datetime as dt
import sys

sys.path.insert(0, '.')

from epochlens.formatting import alternate_pattern, format_instant, instant_from_epoch_millis
from epochlens.models import ConversionConfig, Match, TimestampKind, Timezone
from epochlens.scanner import convert_match, convert_timestamps, find_candidates

CHICAGO = ConversionConfig(timezone=Timezone.CHICAGO)
UTC_REPLACE = ConversionConfig(timezone=Timezone.UTC, replace_in_place=True)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def test_format_standard_pattern_in_each_zone():
    date = instant_from_epoch_millis(1700000000000)
    assert format_instant(date, "yyyy-MM-dd HH:mm:ssXXX", "UTC") == "2023-11-14 22:13:20+00:00"
    assert format_instant(date, "yyyy-MM-dd HH:mm:ssXXX", "America/Chicago") == "2023-11-14 16:13:20-06:00"
    assert format_instant(date, "yyyy-MM-dd HH:mm:ssXXX", "Europe/Amsterdam") == "2023-11-14 23:13:20+01:00"
    print("PASS: standard pattern in each zone")


def test_format_follows_daylight_saving():
    # 2023-07-22 04:26:40 UTC
    date = instant_from_epoch_millis(1690000000000)
    assert format_instant(date, "yyyy-MM-dd HH:mm:ssXXX", "America/Chicago") == "2023-07-21 23:26:40-05:00"
    assert format_instant(date, "yyyy-MM-dd HH:mm:ssXXX", "Europe/Amsterdam") == "2023-07-22 06:26:40+02:00"
    print("PASS: daylight saving offsets")


def test_format_quoted_literals():
    date = instant_from_epoch_millis(1700000000000)
    pattern = alternate_pattern("America/Chicago")
    assert format_instant(date, pattern, "America/Chicago") == "2023-11-14T16:13:20-06:00[America/Chicago]"
    assert format_instant(date, "yyyy 'o''clock' ''", "UTC") == "2023 o'clock '"
    print("PASS: quoted literals")


def test_format_naive_datetime_is_utc():
    naive = dt.datetime(2023, 11, 14, 22, 13, 20)
    assert format_instant(naive, "HH:mm:ssXXX", "UTC") == "22:13:20+00:00"
    print("PASS: naive datetime treated as UTC")


def test_format_rejects_bad_input():
    date = instant_from_epoch_millis(0)
    for pattern in ("yyyy-Q", "yy", "EEE"):
        try:
            format_instant(date, pattern, "UTC")
        except ValueError:
            pass
        else:
            raise AssertionError(f"pattern {pattern!r} should be rejected")

    try:
        format_instant(date, "yyyy", "Mars/Olympus_Mons")
    except ValueError:
        pass
    else:
        raise AssertionError("unknown timezone should be rejected")
    print("PASS: bad patterns and zones rejected")


def test_instant_out_of_range():
    try:
        instant_from_epoch_millis(10**20)
    except ValueError:
        pass
    else:
        raise AssertionError("huge epoch should raise ValueError")
    print("PASS: out-of-range instant")


# ---------------------------------------------------------------------------
# Candidate scanning
# ---------------------------------------------------------------------------

def test_find_candidates_kinds_and_order():
    text = "ms 1700000000000 then s 1690000000, again 1700000000."
    found = find_candidates(text)
    assert [(c.raw, c.kind) for c in found] == [
        ("1700000000000", TimestampKind.MILLISECONDS),
        ("1690000000", TimestampKind.SECONDS),
        ("1700000000", TimestampKind.SECONDS),
    ]
    assert [c.start for c in found] == sorted(c.start for c in found)
    for c in found:
        assert text[c.start : c.end] == c.raw
    print("PASS: candidate kinds and order")


def test_find_candidates_respects_word_boundaries():
    assert find_candidates("99999999999") == []  # 11 digits
    assert find_candidates("170000000000") == []  # 12 digits
    assert find_candidates("17000000000000") == []  # 14 digits
    assert find_candidates("x1700000000") == []
    assert find_candidates("1700000000_x") == []
    assert find_candidates("17000000001700000000") == []
    # Non-ASCII digits are not timestamps
    assert find_candidates("١٧٠٠٠٠٠٠٠٠") == []

    found = find_candidates("[1700000000]")
    assert len(found) == 1 and found[0].start == 1
    print("PASS: word boundaries")


def test_match_epoch_millis():
    assert Match(start=0, raw="1700000000", kind=TimestampKind.SECONDS).epoch_millis == 1700000000000
    assert Match(start=0, raw="1700000000123", kind=TimestampKind.MILLISECONDS).epoch_millis == 1700000000123
    print("PASS: epoch millis")


# ---------------------------------------------------------------------------
# Rewriting
# ---------------------------------------------------------------------------

def test_example_annotate_seconds_chicago():
    result = convert_timestamps("event at 1700000000 happened", CHICAGO)
    assert result.text == "event at 1700000000 [2023-11-14 16:13:20-06:00] happened"
    assert len(result.ranges) == 1
    r = result.ranges[0]
    assert result.text[r.start : r.end] == "1700000000 [2023-11-14 16:13:20-06:00]"
    assert (r.start, r.end) == (9, 47)
    print("PASS: annotate seconds (Chicago)")


def test_example_replace_milliseconds_utc():
    result = convert_timestamps("1700000000000", UTC_REPLACE)
    assert result.text == "2023-11-14 22:13:20+00:00"
    assert [(r.start, r.end) for r in result.ranges] == [(0, 25)]
    print("PASS: replace milliseconds (UTC)")


def test_java_format():
    config = ConversionConfig(timezone=Timezone.AMSTERDAM, use_alternate_format=True)
    result = convert_timestamps("t=1700000000", config)
    assert result.text == "t=1700000000 [2023-11-14T23:13:20+01:00[Europe/Amsterdam]]"

    config = ConversionConfig(timezone=Timezone.UTC, use_alternate_format=True, replace_in_place=True)
    assert convert_timestamps("1700000000", config).text == "2023-11-14T22:13:20+00:00[UTC]"
    print("PASS: java format")


def test_no_candidates_passes_through():
    for text in ["", "plain text", "version 1.2.3", "12345", "99999999999", "line\nwith 123456789 digits"]:
        result = convert_timestamps(text, CHICAGO)
        assert result.text == text
        assert result.ranges == []
    print("PASS: text without timestamps unchanged")


def test_out_of_range_years_pass_through():
    # 1973, 2052 and 2286 are outside [1975, 2050]
    text = "a 0100000000 b 2600000000 c 9999999999999 d 9999999999"
    result = convert_timestamps(text, CHICAGO)
    assert result.text == text
    assert result.ranges == []
    print("PASS: out-of-range years")


def test_year_window_is_inclusive():
    config = ConversionConfig(timezone=Timezone.UTC, replace_in_place=True)
    # 1975-01-01T00:00:00Z and one second before
    assert convert_timestamps("0157766400", config).text == "1975-01-01 00:00:00+00:00"
    assert convert_timestamps("0157766399", config).text == "0157766399"
    # 2050-12-31T23:59:59Z and one second after
    assert convert_timestamps("2556143999", config).text == "2050-12-31 23:59:59+00:00"
    assert convert_timestamps("2556144000", config).text == "2556144000"
    print("PASS: inclusive year window")


def test_offsets_track_multiple_replacements():
    text = "a 1700000000 b 0100000000 c 1700000000000 d"
    result = convert_timestamps(text, CHICAGO)

    first = "1700000000 [2023-11-14 16:13:20-06:00]"
    second = "1700000000000 [2023-11-14 16:13:20-06:00]"
    assert result.text == f"a {first} b 0100000000 c {second} d"
    assert len(result.ranges) == 2
    assert [result.text[r.start : r.end] for r in result.ranges] == [first, second]

    # Disjoint and ascending
    assert result.ranges[0].end <= result.ranges[1].start
    print("PASS: running offsets")


def test_replace_mode_shrinks_text():
    config = ConversionConfig(timezone=Timezone.UTC, replace_in_place=True)
    result = convert_timestamps("x 1700000000 y 1700000000 z", config)
    date = "2023-11-14 22:13:20+00:00"
    assert result.text == f"x {date} y {date} z"
    assert [result.text[r.start : r.end] for r in result.ranges] == [date, date]
    print("PASS: replace mode ranges")


def test_convert_match_failure_returns_raw():
    match = Match(start=0, raw="9999999999", kind=TimestampKind.SECONDS)
    assert convert_match(match, CHICAGO) == "9999999999"
    print("PASS: convert_match failure")


def test_rescanning_output_only_finds_original_digits():
    result = convert_timestamps("at 1700000000 and 1700000000000", CHICAGO)
    again = find_candidates(result.text)
    assert [c.raw for c in again] == ["1700000000", "1700000000000"]

    replaced = convert_timestamps("at 1700000000", UTC_REPLACE)
    assert find_candidates(replaced.text) == []
    assert convert_timestamps(replaced.text, UTC_REPLACE).text == replaced.text
    print("PASS: rescanning output")


def test_default_config_is_chicago_annotate():
    assert convert_timestamps("1700000000").text == "1700000000 [2023-11-14 16:13:20-06:00]"
    print("PASS: default config")


def test_unknown_timezone_rejected():
    from pydantic import ValidationError

    try:
        ConversionConfig(timezone="Asia/Tokyo")
    except ValidationError:
        pass
    else:
        raise AssertionError("timezones outside the supported list must be rejected")
    print("PASS: unknown timezone rejected")


if __name__ == "__main__":
    tests = [v for k, v in sorted(globals().items()) if k.startswith("test_") and callable(v)]

    passed = 0
    failed = 0
    for test in tests:
        try:
            test()
            passed += 1
        except Exception as e:
            print(f"FAIL: {test.__name__}: {e}")
            import traceback
            traceback.print_exc()
            failed += 1

    print(f"\n{'='*60}")
    print(f"Results: {passed} passed, {failed} failed out of {len(tests)} tests")
    if failed:
        sys.exit(1)
