"""Exceptions raised by stopboard."""


class StopBoardError(Exception):
    """Base class for stopboard errors."""


class ParseError(StopBoardError, ValueError):
    """Raised when a raw schedule value cannot be parsed."""

    def __init__(self, message: str, value):
        super().__init__(message)
        self.value = value


class MalformedDateError(ParseError):
    """Raised when a date string is not in YYYYMMDD or YYYY-MM-DD format."""


class MalformedTimeError(ParseError):
    """Raised when a stop time is not in HH:MM:SS format."""


class ServiceNotFoundError(StopBoardError, KeyError):
    """Raised when a stop event references a service missing from the calendar."""

    def __init__(self, service_id):
        super().__init__(service_id)
        self.service_id = service_id

    def __str__(self):
        return f"Service {self.service_id!r} not found in service calendar"


class FeedReadError(StopBoardError):
    """Raised when a GTFS feed cannot be read."""


class InvalidServiceError(StopBoardError, ValueError):
    """Raised when a service's validity window starts after it ends."""
