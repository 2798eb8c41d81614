"""
Domain-specific exception hierarchy for the meeting scheduler.
"""


class SchedulerError(Exception):
    """Base class for all application-level errors."""


class DataSourceError(SchedulerError):
    """Raised when schedule data cannot be loaded or parsed."""


class UnknownEntityError(SchedulerError):
    """Raised when an attendee or location identifier cannot be resolved."""

    def __init__(self, kind: str, identifier: object):
        super().__init__(f"{kind.capitalize()} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier
