"""stopboard - Scheduled arrival and departure boards from static GTFS data."""

__version__ = "0.1.0"

from .models import (
    BoardData,
    BoardType,
    ExceptionType,
    Service,
    ServiceException,
    Station,
    StopEvent,
    TripStop,
    WeekdayPattern,
)
from .errors import (
    FeedReadError,
    InvalidServiceError,
    MalformedDateError,
    MalformedTimeError,
    ParseError,
    ServiceNotFoundError,
    StopBoardError,
)
from .calendar_index import ServiceCalendarIndex
from .adjuster import adjusted_timestamp, is_after_adjusted_time, service_day_of
from .board import board
from .gtfs_database import GTFSDatabase
from .gtfs_loader import GTFSLoader
from .stop_board import StopBoard

__all__ = [
    "StopBoard",
    "GTFSDatabase",
    "GTFSLoader",
    "ServiceCalendarIndex",
    "board",
    "service_day_of",
    "adjusted_timestamp",
    "is_after_adjusted_time",
    "BoardData",
    "BoardType",
    "ExceptionType",
    "Service",
    "ServiceException",
    "Station",
    "StopEvent",
    "TripStop",
    "WeekdayPattern",
    "StopBoardError",
    "ParseError",
    "MalformedDateError",
    "MalformedTimeError",
    "ServiceNotFoundError",
    "FeedReadError",
    "InvalidServiceError",
]
