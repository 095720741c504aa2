"""Convert stop time offsets into absolute timestamps around a reference moment."""

from datetime import date, datetime, time, timedelta

from .models import BoardType, StopEvent


def service_day_of(stop: StopEvent, reference_date: date, board_type: BoardType) -> date:
    """
    Service day a stop event belongs to when seen from ``reference_date``.

    Offsets of 24h or more continue the previous day's service, so a
    departure at 25:30:00 belongs to the day before the one it happens on.
    """
    return reference_date - timedelta(days=stop.offset(board_type).days)


def adjusted_timestamp(stop: StopEvent, reference_date: date, board_type: BoardType) -> datetime:
    """Midnight of the stop's service day plus its arrival or departure offset."""
    service_day = service_day_of(stop, reference_date, board_type)
    return datetime.combine(service_day, time.min) + stop.offset(board_type)


def is_after_adjusted_time(stop: StopEvent, board_type: BoardType, reference_time: datetime) -> bool:
    """True if the stop event happens at or after ``reference_time``."""
    return adjusted_timestamp(stop, reference_time.date(), board_type) >= reference_time
