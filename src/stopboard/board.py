"""Filter and order stop events into a board."""

import logging
from datetime import datetime
from typing import Iterable, List, Mapping

from .adjuster import adjusted_timestamp, is_after_adjusted_time, service_day_of
from .errors import ServiceNotFoundError
from .models import BoardType, Service, StopEvent

logger = logging.getLogger(__name__)


def board(
    stops: Iterable[StopEvent],
    reference_time: datetime,
    board_type: BoardType,
    calendar_index: Mapping[int, Service],
) -> List[StopEvent]:
    """
    Build the board for ``reference_time``.

    Drops events whose service does not run on their service day and events
    before ``reference_time``, then sorts the rest by adjusted timestamp.
    Events with equal timestamps keep their input order.

    Raises:
        ServiceNotFoundError: If an event's service is missing from the index.
    """
    reference_date = reference_time.date()

    available = [stop for stop in stops if _runs_on_service_day(stop, reference_date, board_type, calendar_index)]
    upcoming = [stop for stop in available if is_after_adjusted_time(stop, board_type, reference_time)]
    upcoming.sort(key=lambda stop: adjusted_timestamp(stop, reference_date, board_type))

    logger.debug(
        f"Board at {reference_time.isoformat()}: {len(upcoming)} of {len(available)} "
        f"available events upcoming"
    )
    return upcoming


def _runs_on_service_day(
    stop: StopEvent, reference_date, board_type: BoardType, calendar_index: Mapping[int, Service]
) -> bool:
    try:
        service = calendar_index[stop.service_id]
    except KeyError:
        raise ServiceNotFoundError(stop.service_id) from None
    return service.is_available(service_day_of(stop, reference_date, board_type))
