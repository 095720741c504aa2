"""Parsers for the date and time strings found in GTFS schedule rows."""

import re
from datetime import date, datetime, timedelta

from .errors import MalformedDateError, MalformedTimeError

DATE_FORMATS = ("%Y%m%d", "%Y-%m-%d")

# Hours are unbounded: trips running past midnight use 24:xx:xx, 25:xx:xx, ...
TIME_REGEX = re.compile(r"(?P<hours>\d+):(?P<minutes>[0-5]\d):(?P<seconds>[0-5]\d)")


def str_to_date(value: str) -> date:
    """Parse a calendar date (GTFS ``YYYYMMDD`` or ISO ``YYYY-MM-DD``)."""
    if isinstance(value, str):
        text = value.strip()
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
    raise MalformedDateError(f"Invalid date: {value!r}", value)


def str_to_duration(value: str) -> timedelta:
    """Parse an ``HH:MM:SS`` offset from midnight of the service day."""
    match = TIME_REGEX.fullmatch(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise MalformedTimeError(f"Invalid time: {value!r}", value)

    return timedelta(
        hours=int(match.group("hours")),
        minutes=int(match.group("minutes")),
        seconds=int(match.group("seconds")),
    )
