"""Import a static GTFS feed into the SQLite schema used by GTFSDatabase."""

import io
import logging
import os
import sqlite3
import zipfile
from typing import Dict, Optional

import pandas as pd
import requests

from .errors import FeedReadError
from .gtfs_database import DEFAULT_DB_PATH
from .models import WEEKDAY_NAMES

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 60  # Seconds

REQUIRED_FILES = ("stops.txt", "routes.txt", "trips.txt", "stop_times.txt")
OPTIONAL_FILES = ("agency.txt", "calendar.txt", "calendar_dates.txt")

SCHEMA = """
CREATE TABLE agency (agency_id TEXT PRIMARY KEY, name TEXT);
CREATE TABLE route (route_id TEXT PRIMARY KEY, agency_id TEXT, short_name TEXT);
CREATE TABLE stop (stop_id TEXT PRIMARY KEY, name TEXT);
CREATE TABLE service (
    service_id INTEGER PRIMARY KEY, gtfs_service_id TEXT UNIQUE,
    monday INTEGER, tuesday INTEGER, wednesday INTEGER, thursday INTEGER,
    friday INTEGER, saturday INTEGER, sunday INTEGER,
    start_date TEXT, end_date TEXT
);
CREATE TABLE service_exception (service_id INTEGER, service_date TEXT, exception_type INTEGER);
CREATE TABLE trip (trip_id TEXT PRIMARY KEY, route_id TEXT, service_id INTEGER, short_name TEXT, headsign TEXT);
CREATE TABLE stop_time (
    trip_id TEXT, arrival_time TEXT, departure_time TEXT, stop_id TEXT, stop_sequence INTEGER
);
CREATE INDEX stop_time_stop ON stop_time (stop_id);
CREATE INDEX stop_time_trip ON stop_time (trip_id);
"""


class GTFSLoader:
    """Loads a GTFS zip and writes it to a SQLite database."""

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """
        Initialize the loader.

        Args:
            db_path: Database to create. Existing schedule tables are replaced.
        """
        self.db_path = db_path

    def load_from_url(self, url: str) -> None:
        """Download a GTFS zip and import it."""
        logger.info(f"Downloading GTFS data from {url}")
        try:
            response = requests.get(url, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to download GTFS data: {e}")
            raise FeedReadError(f"Failed to download {url}: {e}") from e

        with zipfile.ZipFile(io.BytesIO(response.content)) as zip_file:
            self._load_zip(zip_file)

    def load_from_zip(self, path: str) -> None:
        """Import a GTFS zip from disk."""
        logger.info(f"Loading GTFS data from {path}")
        try:
            zip_file = zipfile.ZipFile(path)
        except (OSError, zipfile.BadZipFile) as e:
            logger.error(f"Failed to open GTFS zip {path}: {e}")
            raise FeedReadError(f"Cannot open GTFS zip {path}: {e}") from e

        with zip_file:
            self._load_zip(zip_file)

    def _load_zip(self, zip_file: zipfile.ZipFile) -> None:
        names = set(REQUIRED_FILES + OPTIONAL_FILES)
        tables = {name: self._read_table(zip_file, name) for name in zip_file.namelist() if name in names}

        missing = [name for name in REQUIRED_FILES if name not in tables]
        if missing:
            raise FeedReadError(f"GTFS feed is missing {', '.join(missing)}")
        if "calendar.txt" not in tables and "calendar_dates.txt" not in tables:
            raise FeedReadError("GTFS feed has neither calendar.txt nor calendar_dates.txt")

        try:
            frames = self._build_frames(tables)
        except (KeyError, ValueError) as e:
            logger.error(f"Failed to read GTFS tables: {e!r}")
            raise FeedReadError(f"Malformed GTFS feed: {e!r}") from e

        self._write(frames)

    @staticmethod
    def _read_table(zip_file: zipfile.ZipFile, name: str) -> pd.DataFrame:
        try:
            with zip_file.open(name) as f:
                frame = pd.read_csv(f, dtype=str, keep_default_na=False, encoding="utf-8-sig")
        except (ValueError, pd.errors.ParserError) as e:
            logger.error(f"Failed to parse {name}: {e}")
            raise FeedReadError(f"Cannot parse {name}: {e}") from e
        frame.columns = [column.strip() for column in frame.columns]
        return frame

    @staticmethod
    def _build_frames(tables: Dict[str, pd.DataFrame]) -> Dict[str, pd.DataFrame]:
        service, service_exception, service_ids = build_service_tables(
            tables.get("calendar.txt"), tables.get("calendar_dates.txt")
        )
        return {
            "agency": _agency_table(tables.get("agency.txt")),
            "route": _route_table(tables["routes.txt"]),
            "stop": _column(tables["stops.txt"], stop_id="stop_id", name="stop_name"),
            "service": service,
            "service_exception": service_exception,
            "trip": _trip_table(tables["trips.txt"], service_ids),
            "stop_time": _stop_time_table(tables["stop_times.txt"]),
        }

    def _write(self, frames: Dict[str, pd.DataFrame]) -> None:
        """
        Write the tables to a fresh database next to ``db_path``, then move it
        into place. A failed import leaves the previous database untouched.
        """
        partial_path = f"{self.db_path}.partial"
        if os.path.exists(partial_path):
            os.remove(partial_path)

        db = sqlite3.connect(partial_path)
        try:
            db.executescript(SCHEMA)
            for table, frame in frames.items():
                frame.to_sql(table, db, if_exists="append", index=False)
                logger.info(f"Imported {len(frame)} rows into {table}")
            db.commit()
        except (sqlite3.Error, ValueError) as e:
            db.close()
            os.remove(partial_path)
            logger.error(f"Failed to write GTFS database: {e}")
            raise FeedReadError(f"Cannot write GTFS tables: {e}") from e
        db.close()

        os.replace(partial_path, self.db_path)


def build_service_tables(calendar: Optional[pd.DataFrame], calendar_dates: Optional[pd.DataFrame]):
    """
    Build the service and service_exception tables.

    GTFS service ids are strings; each gets an integer id in order of first
    appearance (calendar.txt, then calendar_dates.txt). Services defined only
    by calendar_dates.txt get a base row with no weekdays whose window spans
    their exception dates.

    Returns:
        Tuple of (service frame, service_exception frame, {gtfs id: integer id}).
    """
    if calendar is None:
        calendar = pd.DataFrame(columns=["service_id", *WEEKDAY_NAMES, "start_date", "end_date"])
    if calendar_dates is None:
        calendar_dates = pd.DataFrame(columns=["service_id", "date", "exception_type"])

    calendar = calendar.drop_duplicates("service_id", keep="first")
    gtfs_ids = pd.unique(pd.concat([calendar["service_id"], calendar_dates["service_id"]], ignore_index=True))
    service_ids = {gtfs_id: number for number, gtfs_id in enumerate(gtfs_ids, start=1)}

    base = calendar[["service_id", *WEEKDAY_NAMES, "start_date", "end_date"]].copy()
    for name in WEEKDAY_NAMES:
        base[name] = (base[name].str.strip() == "1").astype(int)

    dates_only = calendar_dates[~calendar_dates["service_id"].isin(base["service_id"])]
    if not dates_only.empty:
        synthetic = dates_only.groupby("service_id", sort=False)["date"].agg(["min", "max"]).reset_index()
        synthetic = synthetic.rename(columns={"min": "start_date", "max": "end_date"})
        for name in WEEKDAY_NAMES:
            synthetic[name] = 0
        logger.info(f"Added base rows for {len(synthetic)} services defined only by calendar_dates")
        base = pd.concat([base, synthetic[base.columns]], ignore_index=True)

    base = base.rename(columns={"service_id": "gtfs_service_id"})
    base.insert(0, "service_id", base["gtfs_service_id"].map(service_ids))

    exceptions = pd.DataFrame(
        {
            "service_id": calendar_dates["service_id"].map(service_ids),
            "service_date": calendar_dates["date"],
            "exception_type": calendar_dates["exception_type"],
        }
    )
    return base, exceptions, service_ids


def _column(frame: pd.DataFrame, **columns: str) -> pd.DataFrame:
    """Select and rename columns, filling optional ones with empty strings."""
    return pd.DataFrame(
        {target: frame[source] if source in frame else "" for target, source in columns.items()},
        index=frame.index,
    )


def _agency_table(agency: Optional[pd.DataFrame]) -> pd.DataFrame:
    if agency is None:
        return pd.DataFrame(columns=["agency_id", "name"])
    return _column(agency, agency_id="agency_id", name="agency_name")


def _route_table(routes: pd.DataFrame) -> pd.DataFrame:
    route = _column(routes, route_id="route_id", agency_id="agency_id", short_name="route_short_name")
    if "route_long_name" in routes:
        route["short_name"] = route["short_name"].where(route["short_name"] != "", routes["route_long_name"])
    return route


def _trip_table(trips: pd.DataFrame, service_ids: Dict[str, int]) -> pd.DataFrame:
    trip = _column(
        trips,
        trip_id="trip_id",
        route_id="route_id",
        service_id="service_id",
        short_name="trip_short_name",
        headsign="trip_headsign",
    )
    # Unknown services stay NULL so the board reports them instead of hiding the trip.
    trip["service_id"] = trip["service_id"].map(service_ids)
    return trip


def _stop_time_table(stop_times: pd.DataFrame) -> pd.DataFrame:
    stop_time = _column(
        stop_times,
        trip_id="trip_id",
        arrival_time="arrival_time",
        departure_time="departure_time",
        stop_id="stop_id",
        stop_sequence="stop_sequence",
    )
    arrival = stop_time["arrival_time"].str.strip()
    departure = stop_time["departure_time"].str.strip()
    stop_time["arrival_time"] = arrival.where(arrival != "", departure)
    stop_time["departure_time"] = departure.where(departure != "", arrival)

    untimed = stop_time["arrival_time"] == ""
    if untimed.any():
        logger.info(f"Skipping {int(untimed.sum())} stop times without arrival or departure time")
    stop_time = stop_time[~untimed].copy()
    stop_time["stop_sequence"] = stop_time["stop_sequence"].astype(int)
    return stop_time
