"""Tests for stop time adjustment and board ordering."""

import unittest
from datetime import date, datetime, timedelta
import sys
from pathlib import Path

# Add src to path so we can import stopboard
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stopboard.adjuster import adjusted_timestamp, is_after_adjusted_time, service_day_of
from stopboard.board import board
from stopboard.errors import ServiceNotFoundError
from stopboard.models import BoardType, ExceptionType, Service, ServiceException, StopEvent, WeekdayPattern

DAILY = 1
MONDAYS = 2
SATURDAY_EXTRA = 3

CALENDAR = {
    DAILY: Service(date(2024, 1, 1), date(2024, 12, 31), WeekdayPattern.from_flags(1, 1, 1, 1, 1, 1, 1)),
    MONDAYS: Service(date(2024, 1, 1), date(2024, 12, 31), WeekdayPattern.from_flags(1, 0, 0, 0, 0, 0, 0)),
    SATURDAY_EXTRA: Service(
        date(2024, 1, 1),
        date(2024, 12, 31),
        WeekdayPattern.from_flags(1, 1, 1, 1, 1, 0, 0),
        (ServiceException(date(2024, 6, 15), ExceptionType.ADDED),),
    ),
}


def stop(trip_id, departure, arrival=None, service_id=DAILY):
    """Create a stop event from HH:MM offsets given as (hours, minutes)."""
    departure_time = timedelta(hours=departure[0], minutes=departure[1])
    arrival_time = timedelta(hours=arrival[0], minutes=arrival[1]) if arrival else departure_time
    return StopEvent(
        trip_id=trip_id,
        service_id=service_id,
        arrival_time=arrival_time,
        departure_time=departure_time,
        short_name=f"RE {trip_id}",
        head_sign="Stuttgart Hbf",
    )


class TestAdjuster(unittest.TestCase):
    """Test service day and adjusted timestamp arithmetic."""

    def test_same_day_offset(self):
        event = stop("1", (9, 15))
        self.assertEqual(service_day_of(event, date(2024, 6, 10), BoardType.DEPARTURE), date(2024, 6, 10))
        self.assertEqual(
            adjusted_timestamp(event, date(2024, 6, 10), BoardType.DEPARTURE),
            datetime(2024, 6, 10, 9, 15),
        )

    def test_offset_past_midnight_belongs_to_previous_day(self):
        event = stop("1", (25, 30))
        self.assertEqual(service_day_of(event, date(2024, 6, 10), BoardType.DEPARTURE), date(2024, 6, 9))
        self.assertEqual(
            adjusted_timestamp(event, date(2024, 6, 10), BoardType.DEPARTURE),
            datetime(2024, 6, 10, 1, 30),
        )

    def test_offset_of_exactly_one_day(self):
        event = stop("1", (24, 0))
        self.assertEqual(service_day_of(event, date(2024, 6, 10), BoardType.DEPARTURE), date(2024, 6, 9))
        self.assertEqual(
            adjusted_timestamp(event, date(2024, 6, 10), BoardType.DEPARTURE),
            datetime(2024, 6, 10, 0, 0),
        )

    def test_multi_day_offset(self):
        event = stop("1", (49, 0))
        self.assertEqual(service_day_of(event, date(2024, 6, 10), BoardType.DEPARTURE), date(2024, 6, 8))

    def test_board_type_selects_offset(self):
        event = stop("1", departure=(24, 5), arrival=(23, 55))
        self.assertEqual(service_day_of(event, date(2024, 6, 10), BoardType.ARRIVAL), date(2024, 6, 10))
        self.assertEqual(service_day_of(event, date(2024, 6, 10), BoardType.DEPARTURE), date(2024, 6, 9))
        self.assertEqual(
            adjusted_timestamp(event, date(2024, 6, 10), BoardType.ARRIVAL),
            datetime(2024, 6, 10, 23, 55),
        )

    def test_is_after_adjusted_time_includes_reference(self):
        event = stop("1", (8, 0))
        self.assertTrue(is_after_adjusted_time(event, BoardType.DEPARTURE, datetime(2024, 6, 10, 8, 0)))
        self.assertFalse(is_after_adjusted_time(event, BoardType.DEPARTURE, datetime(2024, 6, 10, 8, 0, 1)))


class TestBoard(unittest.TestCase):
    """Test filtering and ordering of stop events."""

    def test_past_events_are_dropped(self):
        early = stop("1", (7, 0))
        later = stop("2", (9, 15))

        result = board([early, later], datetime(2024, 6, 10, 8, 0), BoardType.DEPARTURE, CALENDAR)

        self.assertEqual(result, [later])

    def test_sorted_by_adjusted_time(self):
        events = [stop("1", (12, 0)), stop("2", (24, 30)), stop("3", (8, 30)), stop("4", (10, 0))]

        result = board(events, datetime(2024, 6, 10, 0, 10), BoardType.DEPARTURE, CALENDAR)

        # 24:30 of the previous service day is 00:30 today
        self.assertEqual([s.trip_id for s in result], ["2", "3", "4", "1"])

    def test_ties_keep_input_order(self):
        events = [stop("b", (9, 0)), stop("a", (9, 0)), stop("c", (8, 0)), stop("d", (9, 0))]

        result = board(events, datetime(2024, 6, 10, 6, 0), BoardType.DEPARTURE, CALENDAR)

        self.assertEqual([s.trip_id for s in result], ["c", "b", "a", "d"])

    def test_unavailable_service_is_dropped(self):
        monday_only = stop("1", (9, 0), service_id=MONDAYS)
        daily = stop("2", (9, 30))

        tuesday = board([monday_only, daily], datetime(2024, 6, 11, 6, 0), BoardType.DEPARTURE, CALENDAR)
        monday = board([monday_only, daily], datetime(2024, 6, 10, 6, 0), BoardType.DEPARTURE, CALENDAR)

        self.assertEqual(tuesday, [daily])
        self.assertEqual(monday, [monday_only, daily])

    def test_night_trip_checked_against_previous_service_day(self):
        # Monday's trip running past midnight is shown early on Tuesday
        night = stop("night", (24, 45), service_id=MONDAYS)
        early = stop("early", (0, 50), service_id=MONDAYS)

        result = board([early, night], datetime(2024, 6, 11, 0, 30), BoardType.DEPARTURE, CALENDAR)

        self.assertEqual(result, [night])

    def test_added_exception_enables_service(self):
        extra = stop("1", (10, 0), service_id=SATURDAY_EXTRA)

        added = board([extra], datetime(2024, 6, 15, 8, 0), BoardType.DEPARTURE, CALENDAR)
        regular_saturday = board([extra], datetime(2024, 6, 22, 8, 0), BoardType.DEPARTURE, CALENDAR)

        self.assertEqual(added, [extra])
        self.assertEqual(regular_saturday, [])

    def test_arrival_board_uses_arrival_times(self):
        first = stop("1", departure=(8, 10), arrival=(7, 55))
        second = stop("2", departure=(8, 5), arrival=(8, 0))

        arrivals = board([first, second], datetime(2024, 6, 10, 7, 58), BoardType.ARRIVAL, CALENDAR)
        departures = board([first, second], datetime(2024, 6, 10, 7, 58), BoardType.DEPARTURE, CALENDAR)

        self.assertEqual(arrivals, [second])
        self.assertEqual(departures, [second, first])

    def test_unknown_service_raises(self):
        orphan = stop("1", (9, 0), service_id=42)

        with self.assertRaises(ServiceNotFoundError) as ctx:
            board([orphan], datetime(2024, 6, 10, 8, 0), BoardType.DEPARTURE, CALENDAR)
        self.assertEqual(ctx.exception.service_id, 42)
        self.assertIsInstance(ctx.exception, LookupError)

    def test_unknown_service_raises_after_earlier_events(self):
        # Events before the orphan pass the filter; the orphan still fails the whole board
        events = [stop("1", (9, 0)), stop("2", (9, 30), service_id=42)]

        with self.assertRaises(ServiceNotFoundError):
            board(events, datetime(2024, 6, 10, 8, 0), BoardType.DEPARTURE, CALENDAR)

    def test_empty_input(self):
        self.assertEqual(board([], datetime(2024, 6, 10, 8, 0), BoardType.DEPARTURE, CALENDAR), [])

    def test_output_invariants(self):
        reference = datetime(2024, 6, 10, 23, 0)
        events = [
            stop(str(n), (hours, minutes), service_id=service_id)
            for n, (hours, minutes, service_id) in enumerate(
                [(22, 0, DAILY), (23, 0, MONDAYS), (23, 30, DAILY), (24, 10, DAILY), (25, 0, MONDAYS), (6, 0, DAILY)]
            )
        ]

        result = board(events, reference, BoardType.DEPARTURE, CALENDAR)
        times = [adjusted_timestamp(s, reference.date(), BoardType.DEPARTURE) for s in result]

        self.assertEqual(times, sorted(times))
        self.assertTrue(all(t >= reference for t in times))
        for s in result:
            service_day = service_day_of(s, reference.date(), BoardType.DEPARTURE)
            self.assertTrue(CALENDAR[s.service_id].is_available(service_day))


if __name__ == "__main__":
    unittest.main()
