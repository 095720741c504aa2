"""SQLite-backed access to imported GTFS schedule data."""

import logging
import sqlite3
from datetime import datetime
from typing import List, Optional

from .board import board
from .calendar_index import ServiceCalendarIndex
from .models import BoardType, Station, StopEvent, TripStop
from .parsing import str_to_duration

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "gtfs.sqlite"

SERVICE_QUERY = """
    SELECT s.service_id, s.monday, s.tuesday, s.wednesday, s.thursday, s.friday,
           s.saturday, s.sunday, s.start_date, s.end_date,
           se.service_date AS exception_date, se.exception_type
    FROM service s
    LEFT JOIN service_exception se ON se.service_id = s.service_id
    ORDER BY s.service_id, se.rowid
"""

# Trip short names are optional in GTFS; fall back to the route's.
STOP_QUERY = """
    SELECT st.arrival_time, st.departure_time, t.trip_id, t.service_id,
           COALESCE(NULLIF(t.short_name, ''), r.short_name, '') AS short_name,
           COALESCE(t.headsign, '') AS head_sign
    FROM stop_time st
    INNER JOIN trip t ON t.trip_id = st.trip_id
    LEFT JOIN route r ON r.route_id = t.route_id
    WHERE st.stop_id LIKE ? ESCAPE '\\'
"""

TRIP_QUERY = """
    SELECT st.stop_id, s.name AS stop_name, st.arrival_time, st.departure_time, st.stop_sequence
    FROM stop_time st
    INNER JOIN stop s ON s.stop_id = st.stop_id
    WHERE st.trip_id = ?
    ORDER BY st.stop_sequence
"""

STATION_QUERY = """
    SELECT MIN(stop_id) AS stop_id, name
    FROM stop
    WHERE name LIKE ? ESCAPE '\\'
    GROUP BY name
    ORDER BY name
"""

STATION_BY_ID_QUERY = "SELECT stop_id, name FROM stop WHERE stop_id = ?"

MAIN_STATION_QUERY = """
    SELECT MIN(stop_id) AS stop_id, name
    FROM stop
    WHERE name LIKE '%Hbf' OR name LIKE '%Hauptbahnhof'
    GROUP BY name
    ORDER BY name
"""


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class GTFSDatabase:
    """
    Schedule queries over a GTFS SQLite database.

    The service calendar is read once when the database is opened and is
    never modified afterwards.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """
        Open the database and build the service calendar.

        Args:
            db_path: Path to a database written by GTFSLoader.

        Raises:
            MalformedDateError: If a calendar date cannot be parsed.
        """
        logger.info(f"Opening GTFS database {db_path}")
        self.db = sqlite3.connect(db_path)
        self.db.row_factory = sqlite3.Row
        try:
            self.services = ServiceCalendarIndex.build(self.db.execute(SERVICE_QUERY))
        except Exception as e:
            logger.error(f"Failed to map services from {db_path}: {e}")
            self.db.close()
            raise

    def fetch_stations(self, text: str) -> List[Station]:
        """
        Find stations whose name contains ``text``.

        An empty ``text`` lists the main stations (Hbf/Hauptbahnhof).
        """
        if text:
            rows = self.db.execute(STATION_QUERY, (f"%{_escape_like(text)}%",))
        else:
            rows = self.db.execute(MAIN_STATION_QUERY)
        return [Station(stop_id=row["stop_id"], name=row["name"]) for row in rows]

    def fetch_station(self, stop_id: str) -> Optional[Station]:
        """Get a single stop by its exact id."""
        row = self.db.execute(STATION_BY_ID_QUERY, (stop_id,)).fetchone()
        if row is None:
            return None
        return Station(stop_id=row["stop_id"], name=row["name"])

    def fetch_stops(self, stop_id: str, board_type: BoardType, date_time: datetime) -> List[StopEvent]:
        """
        Get the board for every stop whose id starts with ``stop_id``.

        Args:
            stop_id: Stop id or stop id prefix (a parent station matches its platforms).
            board_type: Whether arrival or departure times drive the board.
            date_time: Reference moment; earlier events are left out.

        Returns:
            Stop events ordered by adjusted time.

        Raises:
            MalformedTimeError: If a stop time cannot be parsed.
            ServiceNotFoundError: If a trip references an unknown service.
        """
        if not stop_id:
            return []

        rows = self.db.execute(STOP_QUERY, (f"{_escape_like(stop_id)}%",))
        stops = [self._map_stop(row) for row in rows]
        logger.debug(f"Fetched {len(stops)} stop events for {stop_id}")
        return board(stops, date_time, board_type, self.services)

    def fetch_trip(self, trip_id: str) -> List[TripStop]:
        """Get a trip's stops in sequence order."""
        rows = self.db.execute(TRIP_QUERY, (trip_id,))
        return [
            TripStop(
                stop_id=row["stop_id"],
                stop_name=row["stop_name"],
                arrival_time=str_to_duration(row["arrival_time"]),
                departure_time=str_to_duration(row["departure_time"]),
                stop_sequence=int(row["stop_sequence"]),
            )
            for row in rows
        ]

    @staticmethod
    def _map_stop(row: sqlite3.Row) -> StopEvent:
        return StopEvent(
            trip_id=row["trip_id"],
            service_id=row["service_id"],
            arrival_time=str_to_duration(row["arrival_time"]),
            departure_time=str_to_duration(row["departure_time"]),
            short_name=row["short_name"],
            head_sign=row["head_sign"],
        )

    def close(self) -> None:
        """Close the database connection."""
        self.db.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
