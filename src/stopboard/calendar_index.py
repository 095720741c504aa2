"""Service calendar index, built once from calendar and exception rows."""

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping

from .errors import ServiceNotFoundError
from .models import WEEKDAY_NAMES, ExceptionType, Service, ServiceException, WeekdayPattern
from .parsing import str_to_date

logger = logging.getLogger(__name__)


class ServiceCalendarIndex(Mapping):
    """
    Read-only mapping of service id to Service.

    Build it once with ``ServiceCalendarIndex.build(rows)``; it has no write
    path afterwards, so it can be shared between threads.
    """

    def __init__(self, services: Mapping[int, Service]):
        self._services = MappingProxyType(dict(services))

    @classmethod
    def build(cls, rows: Iterable[Mapping]) -> "ServiceCalendarIndex":
        """
        Map services from joined calendar/exception rows.

        Each row carries the service's base fields (service_id, monday..sunday,
        start_date, end_date) and at most one exception (exception_date,
        exception_type, both None when the service has none). The first row
        seen for a service supplies its base pattern.

        Raises:
            MalformedDateError: If any date cannot be parsed.
        """
        logger.info("Mapping services...")
        bases: Dict[int, tuple] = {}
        exceptions: Dict[int, List[ServiceException]] = {}

        for row in rows:
            service_id = row["service_id"]

            if service_id not in bases:
                weekdays = WeekdayPattern.from_flags(*(row[name] for name in WEEKDAY_NAMES))
                bases[service_id] = (str_to_date(row["start_date"]), str_to_date(row["end_date"]), weekdays)
                exceptions[service_id] = []

            if row["exception_date"] is not None:
                exceptions[service_id].append(
                    ServiceException(
                        date=str_to_date(row["exception_date"]),
                        exception_type=ExceptionType.parse(row["exception_type"]),
                    )
                )

        services = {
            service_id: Service(start, end, weekdays, tuple(exceptions[service_id]))
            for service_id, (start, end, weekdays) in bases.items()
        }
        exception_count = sum(len(e) for e in exceptions.values())
        logger.info(f"Mapped {len(services)} services with {exception_count} exceptions")
        return cls(services)

    def __getitem__(self, service_id) -> Service:
        try:
            return self._services[service_id]
        except KeyError:
            raise ServiceNotFoundError(service_id) from None

    def __iter__(self) -> Iterator[int]:
        return iter(self._services)

    def __len__(self) -> int:
        return len(self._services)
