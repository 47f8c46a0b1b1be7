"""
Service date generation.

Expands a start date and a cadence into the ordered dates of upcoming visits.
Pure: no I/O, no clock reads. The same inputs always yield the same dates,
which is what makes job regeneration idempotent.

Weekdays are numbered 0 = Sunday ... 6 = Saturday.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Union

from dateutil.relativedelta import relativedelta

from scoopops_shared.schemas.common import Frequency

from .errors import InvalidScheduleParameters
from .frequency import FrequencyDefinition, FrequencyResolver, default_resolver


@dataclass(frozen=True)
class Horizon:
    """How far ahead to generate: a number of days or a number of visits."""

    days: Optional[int] = None
    occurrences: Optional[int] = None

    def __post_init__(self):
        if (self.days is None) == (self.occurrences is None):
            raise InvalidScheduleParameters(
                "Horizon needs exactly one of days or occurrences"
            )
        bound = self.days if self.days is not None else self.occurrences
        if isinstance(bound, bool) or not isinstance(bound, int) or bound <= 0:
            raise InvalidScheduleParameters(f"Horizon must be a positive integer, got {bound!r}")

    @classmethod
    def of_days(cls, days: int) -> "Horizon":
        return cls(days=days)

    @classmethod
    def of_occurrences(cls, occurrences: int) -> "Horizon":
        return cls(occurrences=occurrences)


def weekday_index(day: date) -> int:
    """Weekday of ``day`` with Sunday as 0."""
    return day.isoweekday() % 7


def shift_to_weekday(day: date, weekday: int) -> date:
    """Move ``day`` forward (never backward) to the given weekday."""
    return day + timedelta(days=(weekday - weekday_index(day)) % 7)


def _months_between(earlier: date, later: date) -> int:
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


class ServiceSchedule:
    """A lazy, finite, restartable sequence of service dates.

    Every ``iter()`` recomputes from the stored inputs, so a schedule can be
    walked any number of times with identical results.
    """

    def __init__(
        self,
        definition: FrequencyDefinition,
        start_date: date,
        horizon: Horizon,
        preferred_day: Optional[int] = None,
        window_start: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        self.definition = definition
        self.start_date = start_date
        self.horizon = horizon
        self.preferred_day = preferred_day
        self.window_start = window_start or start_date
        self.end_date = end_date

    @property
    def first_date(self) -> date:
        """The anchor all later visits are counted from."""
        if not self.definition.is_recurring or self.preferred_day is None:
            return self.start_date
        return shift_to_weekday(self.start_date, self.preferred_day)

    def __iter__(self) -> Iterator[date]:
        if not self.definition.is_recurring:
            return iter((self.start_date,))
        return self._bounded()

    def dates(self) -> list[date]:
        return list(self)

    def _bounded(self) -> Iterator[date]:
        limit = None
        if self.horizon.days is not None:
            limit = self.window_start + timedelta(days=self.horizon.days)

        emitted = 0
        for occurrence in self._occurrences():
            if self.end_date is not None and occurrence > self.end_date:
                return
            if limit is not None and occurrence >= limit:
                return
            if occurrence < self.window_start:
                continue
            yield occurrence
            emitted += 1
            if self.horizon.occurrences is not None and emitted >= self.horizon.occurrences:
                return

    def _occurrences(self) -> Iterator[date]:
        """Unbounded visit dates from the anchor, skipping whole periods
        that end before the window opens."""
        definition = self.definition
        if definition.calendar_months:
            lag = _months_between(self.start_date, self.window_start)
            first_period = max(0, lag // definition.calendar_months - 1)
            for k in itertools.count(first_period):
                day = self.start_date + relativedelta(months=k * definition.calendar_months)
                if self.preferred_day is not None:
                    day = shift_to_weekday(day, self.preferred_day)
                for offset in definition.day_offsets:
                    yield day + timedelta(days=offset)
            return

        anchor = self.first_date
        period = definition.interval_days
        lag = (self.window_start - anchor).days
        first_period = max(0, lag // period)
        for k in itertools.count(first_period):
            period_start = anchor + timedelta(days=k * period)
            for offset in definition.day_offsets:
                yield period_start + timedelta(days=offset)


class ScheduleGenerator:
    """Builds ServiceSchedules, validating inputs before anything is iterated."""

    def __init__(self, resolver: Optional[FrequencyResolver] = None):
        self.resolver = resolver or default_resolver

    def generate(
        self,
        start_date: Optional[date],
        frequency: Union[FrequencyDefinition, Frequency, str],
        preferred_day_of_week: Optional[int] = None,
        horizon: Optional[Horizon] = None,
        *,
        from_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ServiceSchedule:
        """Return the visit dates for a cadence.

        ``from_date`` drops visits before it without moving the cadence
        anchor; a day horizon is counted from ``from_date`` when given,
        otherwise from ``start_date``. ONETIME always yields ``[start_date]``.

        Raises UnsupportedFrequency or InvalidScheduleParameters.
        """
        if start_date is None:
            raise InvalidScheduleParameters("start_date is required")
        start_date = _as_date(start_date, "start_date")
        if from_date is not None:
            from_date = _as_date(from_date, "from_date")
        if end_date is not None:
            end_date = _as_date(end_date, "end_date")
            if end_date < start_date:
                raise InvalidScheduleParameters("end_date is before start_date")
        if horizon is None:
            raise InvalidScheduleParameters("A horizon (days or occurrences) is required")
        if preferred_day_of_week is not None and (
            isinstance(preferred_day_of_week, bool)
            or not isinstance(preferred_day_of_week, int)
            or not 0 <= preferred_day_of_week <= 6
        ):
            raise InvalidScheduleParameters(
                f"preferred_day_of_week must be 0-6, got {preferred_day_of_week!r}"
            )

        definition = (
            frequency
            if isinstance(frequency, FrequencyDefinition)
            else self.resolver.resolve(frequency)
        )
        window_start = max(start_date, from_date) if from_date else start_date

        return ServiceSchedule(
            definition,
            start_date,
            horizon,
            preferred_day=preferred_day_of_week,
            window_start=window_start,
            end_date=end_date,
        )


def _as_date(value: object, name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidScheduleParameters(f"{name} must be a date, got {value!r}")


default_generator = ScheduleGenerator()
