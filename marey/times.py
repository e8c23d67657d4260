"""
Durations and times of day.

Both are whole seconds, but they are tagged separately: a `Duration` is
elapsed time, a `TimeOfDay` is an offset from a schedule's day origin (and may
exceed 24h for runs that continue past midnight).
"""

from typing import NewType, TypeVar
import re

from marey.parse.error import Err, Ok, Result

Duration = NewType("Duration", int)
TimeOfDay = NewType("TimeOfDay", int)

Seconds = TypeVar("Seconds", Duration, TimeOfDay)

CLOCK_RE = re.compile(r"^([0-9]{1,2}):([0-9]{2})(?::([0-9]{2}))?$")
SPACED_CLOCK_RE = re.compile(r"^[0-9]{1,2}\s+[0-9]{1,2}(?:\s+[0-9]{1,2})?$")

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600


def add(a: Duration, b: Duration) -> Duration:
    return Duration(a + b)


def shift(t: TimeOfDay, d: Duration) -> TimeOfDay:
    """
    Move a time of day forward by a duration.
    """

    return TimeOfDay(t + d)


def elapsed(start: TimeOfDay, end: TimeOfDay) -> Duration:
    return Duration(end - start)


def compare(a: Seconds, b: Seconds) -> int:
    """
    Three-way comparison of two values carrying the same unit.
    """

    if a == b:
        return 0
    return -1 if a < b else 1


def _clock_parts(text: str) -> tuple[int, int, int | None] | None:
    match = CLOCK_RE.match(text)
    if match is None:
        return None

    third = int(match[3]) if match[3] is not None else None
    return (int(match[1]), int(match[2]), third)


def parse_duration(text: str) -> Result[Duration, str]:
    """
    Parse `MM:SS` or `HH:MM:SS` into elapsed seconds.
    """

    parts = _clock_parts(text.strip())
    if parts is None:
        return Err(f"Invalid duration format: {text}")

    first, second, third = parts

    if third is None:
        if first >= 60 or second >= 60:
            return Err(f"Minutes/seconds must be < 60 in MM:SS: {text}")
        return Ok(Duration(first * SECONDS_PER_MINUTE + second))

    if second >= 60 or third >= 60:
        return Err(f"Minutes/seconds must be < 60 in HH:MM:SS: {text}")

    return Ok(Duration(first * SECONDS_PER_HOUR + second * SECONDS_PER_MINUTE + third))


def parse_time_of_day(text: str) -> Result[TimeOfDay, str]:
    """
    Parse `HH:MM` or `HH:MM:SS` into seconds since the day origin.

    Hours are not capped at 24. A leading `-` (left over from list-item
    syntax) is dropped, and the space-separated form `HH MM[ SS]` is accepted.
    """

    normalized = text.strip()
    if normalized.startswith("-"):
        normalized = normalized[1:].strip()

    if SPACED_CLOCK_RE.match(normalized) is not None:
        normalized = re.sub(r"\s+", ":", normalized)

    parts = _clock_parts(normalized)
    if parts is None:
        return Err(f"Invalid time of day format: {text}")

    hours, minutes, seconds = parts

    if seconds is None:
        if minutes >= 60:
            return Err(f"Minutes must be < 60 in HH:MM: {text}")
        return Ok(TimeOfDay(hours * SECONDS_PER_HOUR + minutes * SECONDS_PER_MINUTE))

    if minutes >= 60 or seconds >= 60:
        return Err(f"Minutes/seconds must be < 60 in HH:MM:SS: {text}")

    return Ok(
        TimeOfDay(hours * SECONDS_PER_HOUR + minutes * SECONDS_PER_MINUTE + seconds)
    )


def _clock(total: int) -> str:
    total = max(0, total)

    hours, rest = divmod(total, SECONDS_PER_HOUR)
    minutes, seconds = divmod(rest, SECONDS_PER_MINUTE)

    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_time_of_day(t: TimeOfDay) -> str:
    """
    Format as `HH:MM:SS`; hours keep counting past 23.
    """

    return _clock(t)


def format_duration(d: Duration) -> str:
    return _clock(d)
