"""Errors raised by the scheduling core.

Nothing here is recovered from locally; callers decide how to surface or
retry each error (see app.core.errors for the HTTP mapping).
"""

from __future__ import annotations


class SchedulingError(Exception):
    """Base class for scheduling failures."""

    code = "SCHEDULING_ERROR"


class UnsupportedFrequency(SchedulingError):
    """A frequency code or label outside the supported table."""

    code = "UNSUPPORTED_FREQUENCY"

    def __init__(self, frequency: object):
        self.frequency = frequency
        super().__init__(f"Unsupported frequency: {frequency!r}")


class InvalidScheduleParameters(SchedulingError):
    """Bad generator input (missing start date, bad horizon, bad weekday)."""

    code = "INVALID_SCHEDULE_PARAMETERS"


class PersistenceError(SchedulingError):
    """The job store could not be read or written."""

    code = "PERSISTENCE_UNAVAILABLE"
