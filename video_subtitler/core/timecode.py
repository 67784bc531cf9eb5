"""Seconds-offset to caption timestamp conversion."""

from __future__ import annotations


def format_time(seconds: float, separator: str = ".") -> str:
    """Format a seconds offset as a fixed-width ``HH:MM:SS.mmm`` string.

    The offset is rounded to whole milliseconds first, so 1.9996 becomes
    ``00:00:02.000`` rather than carrying 1000 into the millisecond field.
    Negative offsets clamp to zero. ``separator`` is "." for WebVTT and
    "," for SRT.

    >>> format_time(3661.25)
    '01:01:01.250'
    """
    total_ms = max(0, int(round(seconds * 1000)))
    hours, remainder = divmod(total_ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(hours, minutes, secs, separator, millis)
