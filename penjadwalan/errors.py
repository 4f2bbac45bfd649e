class SchedulingError(Exception):
    """Base class for errors raised by the scheduling engine."""


class InvalidArgument(SchedulingError, ValueError):
    """Input has the wrong shape (unknown day, malformed academic year, ...). Never retried."""


class StoreError(SchedulingError):
    """The data store could not be reached or refused a read/write."""
