"""Main StopBoard class."""

import logging
from datetime import datetime
from typing import List, Optional

from .gtfs_database import DEFAULT_DB_PATH, GTFSDatabase
from .models import BoardData, BoardType, Station, TripStop

logger = logging.getLogger(__name__)


class StopBoard:
    """
    Arrival and departure boards for stations in a GTFS database.

    This class provides methods to:
    - Find stations by name or ID
    - Get the upcoming arrivals or departures at a station
    - Get the timetable of a single trip
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH, database: Optional[GTFSDatabase] = None):
        """
        Initialize the board.

        Args:
            db_path: Path to a database written by GTFSLoader.
            database: An already opened database; ``db_path`` is ignored when given.
        """
        self.database = database if database is not None else GTFSDatabase(db_path)

    def get_station(self, station_input: str) -> Station:
        """
        Get a station by ID or name.

        Args:
            station_input: Either a stop ID (e.g., "8000105") or station name (e.g., "Frankfurt").

        Returns:
            Station object.

        Raises:
            ValueError: If station not found.
        """
        # Try as stop ID first
        station = self.database.fetch_station(station_input)
        if station is not None:
            return station

        # Try as name
        stations = self.database.fetch_stations(station_input)
        if not stations:
            raise ValueError(f"No station found matching '{station_input}'")

        return stations[0]

    def find_stations_by_name(self, name: str) -> List[Station]:
        """
        Find all stations matching a name (partial match).

        Args:
            name: Station name or partial name. Empty lists the main stations.

        Returns:
            List of matching Station objects.
        """
        return self.database.fetch_stations(name)

    def get_board(
        self,
        station_input: str,
        board_type: BoardType = BoardType.DEPARTURE,
        when: Optional[datetime] = None,
    ) -> BoardData:
        """
        Get the board for a station.

        Args:
            station_input: Station ID or name.
            board_type: Show arrivals or departures.
            when: Reference time, defaults to now.

        Returns:
            BoardData with the station and its upcoming stop events. An empty
            ``station_input`` gives an empty board without querying the database.
        """
        reference_time = when if when is not None else datetime.now()

        # An empty stop identifier never reaches the database
        if not station_input:
            return BoardData(station=None, board_type=board_type, reference_time=reference_time)

        station = self.get_station(station_input)
        stops = self.database.fetch_stops(station.stop_id, board_type, reference_time)
        logger.debug(f"{len(stops)} {board_type.value}s at {station.name} after {reference_time}")

        return BoardData(
            station=station,
            board_type=board_type,
            reference_time=reference_time,
            stops=stops,
        )

    def get_trip(self, trip_id: str) -> List[TripStop]:
        """Get the stops of a trip in order."""
        return self.database.fetch_trip(trip_id)

    def close(self) -> None:
        """Release the database connection."""
        self.database.close()
        logger.info("Closed stop board")
