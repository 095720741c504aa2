"""Data models for the stop board."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

from .errors import InvalidServiceError, ParseError


WEEKDAY_NAMES = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


@dataclass(frozen=True)
class WeekdayPattern:
    """Days of the week a service nominally operates, Monday first."""
    flags: Tuple[bool, bool, bool, bool, bool, bool, bool]

    def __post_init__(self):
        if len(self.flags) != 7:
            raise ValueError(f"Expected 7 weekday flags, got {len(self.flags)}")

    @classmethod
    def from_flags(cls, monday, tuesday, wednesday, thursday, friday, saturday, sunday) -> "WeekdayPattern":
        """Build a pattern from raw calendar flags (1/0, "1"/"0" or booleans)."""
        raw = (monday, tuesday, wednesday, thursday, friday, saturday, sunday)
        return cls(tuple(_flag(value) for value in raw))

    def __contains__(self, weekday: int) -> bool:
        """Check a ``date.weekday()`` value (0 = Monday) against the pattern."""
        return self.flags[weekday]


def _flag(value) -> bool:
    if isinstance(value, str):
        return value.strip() not in ("", "0")
    return bool(value)


class ExceptionType(IntEnum):
    """calendar_dates exception codes."""
    ADDED = 1
    REMOVED = 2

    @classmethod
    def parse(cls, value) -> "ExceptionType":
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            raise ParseError(f"Invalid exception type: {value!r}", value) from None


@dataclass(frozen=True)
class ServiceException:
    """Date-specific override of a service's weekly pattern."""
    date: date
    exception_type: ExceptionType


@dataclass(frozen=True)
class Service:
    """A weekly service pattern with its validity window and exceptions."""
    start_date: date
    end_date: date  # Inclusive
    weekdays: WeekdayPattern
    exceptions: Tuple[ServiceException, ...] = ()

    def __post_init__(self):
        if self.start_date > self.end_date:
            raise InvalidServiceError(f"Service starts {self.start_date} after it ends {self.end_date}")

    def is_available(self, day: date) -> bool:
        """
        Check whether the service runs on a calendar date.

        An exception for the date always wins, even outside the validity
        window. If a feed lists the same date twice, the later entry counts.
        Otherwise the date must lie within [start_date, end_date] and fall on
        one of the service's weekdays.
        """
        for exception in reversed(self.exceptions):
            if exception.date == day:
                return exception.exception_type == ExceptionType.ADDED

        return self.start_date <= day <= self.end_date and day.weekday() in self.weekdays


class BoardType(Enum):
    """Selects which stop time drives a board."""
    ARRIVAL = "arrival"
    DEPARTURE = "departure"

    @classmethod
    def parse(cls, name: str) -> "BoardType":
        if isinstance(name, cls):
            return name
        try:
            return cls(name.strip().lower())
        except (AttributeError, ValueError):
            raise ValueError(f"Unknown board type '{name}'") from None


@dataclass(frozen=True)
class StopEvent:
    """A scheduled visit of a trip at a stop."""
    trip_id: str
    service_id: int
    arrival_time: timedelta  # Offset from midnight of the service day, may exceed 24h
    departure_time: timedelta
    short_name: str
    head_sign: str

    def offset(self, board_type: BoardType) -> timedelta:
        if board_type is BoardType.ARRIVAL:
            return self.arrival_time
        return self.departure_time


@dataclass
class Station:
    """Represents a named stop."""
    stop_id: str
    name: str


@dataclass(frozen=True)
class TripStop:
    """One row of a trip's timetable."""
    stop_id: str
    stop_name: str
    arrival_time: timedelta
    departure_time: timedelta
    stop_sequence: int


@dataclass
class BoardData:
    """Complete board for a station at a reference time."""
    station: Optional[Station]  # None when no station was requested
    board_type: BoardType
    reference_time: datetime
    stops: List[StopEvent] = field(default_factory=list)
    last_updated: datetime = field(default_factory=datetime.now)
