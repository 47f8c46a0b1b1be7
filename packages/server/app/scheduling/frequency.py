"""
Frequency resolution: cadence code -> FrequencyDefinition.

The supported cadences live in one immutable table. Codes outside it are
rejected with UnsupportedFrequency; onboarding labels ("every three weeks",
"two times a week") must go through ``normalize`` first.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Union

from scoopops_shared.schemas.common import Frequency

from .errors import UnsupportedFrequency


@dataclass(frozen=True)
class FrequencyDefinition:
    code: Frequency
    label: str
    interval_days: int  # length of one period; 0 for ONETIME
    occurrences_per_period: int = 1
    # Visit offsets (days) inside each period, relative to the period start
    day_offsets: tuple[int, ...] = (0,)
    # Non-zero when the period is calendar months rather than days
    calendar_months: int = 0

    @property
    def is_recurring(self) -> bool:
        return self.code != Frequency.ONETIME


DEFAULT_FREQUENCIES: Mapping[Frequency, FrequencyDefinition] = MappingProxyType({
    Frequency.ONETIME: FrequencyDefinition(Frequency.ONETIME, "One time", 0),
    Frequency.WEEKLY: FrequencyDefinition(Frequency.WEEKLY, "Weekly", 7),
    Frequency.DAILY: FrequencyDefinition(
        Frequency.DAILY, "Every day", 7,
        occurrences_per_period=7, day_offsets=(0, 1, 2, 3, 4, 5, 6),
    ),
    Frequency.SIX_TIMES_WEEKLY: FrequencyDefinition(
        Frequency.SIX_TIMES_WEEKLY, "Six times a week", 7,
        occurrences_per_period=6, day_offsets=(0, 1, 2, 3, 4, 5),
    ),
    Frequency.FIVE_TIMES_WEEKLY: FrequencyDefinition(
        Frequency.FIVE_TIMES_WEEKLY, "Five times a week", 7,
        occurrences_per_period=5, day_offsets=(0, 1, 2, 3, 4),
    ),
    Frequency.FOUR_TIMES_WEEKLY: FrequencyDefinition(
        Frequency.FOUR_TIMES_WEEKLY, "Four times a week", 7,
        occurrences_per_period=4, day_offsets=(0, 1, 3, 4),
    ),
    Frequency.THREE_TIMES_WEEKLY: FrequencyDefinition(
        Frequency.THREE_TIMES_WEEKLY, "Three times a week", 7,
        occurrences_per_period=3, day_offsets=(0, 2, 4),
    ),
    Frequency.TWICE_WEEKLY: FrequencyDefinition(
        Frequency.TWICE_WEEKLY, "Twice a week", 7,
        occurrences_per_period=2, day_offsets=(0, 3),
    ),
    Frequency.BIWEEKLY: FrequencyDefinition(Frequency.BIWEEKLY, "Every two weeks", 14),
    # Second visit two weeks after the first, inside each calendar month
    Frequency.SEMIMONTHLY: FrequencyDefinition(
        Frequency.SEMIMONTHLY, "Twice a month", 30,
        occurrences_per_period=2, day_offsets=(0, 14), calendar_months=1,
    ),
    Frequency.EVERY_THREE_WEEKS: FrequencyDefinition(
        Frequency.EVERY_THREE_WEEKS, "Every three weeks", 21
    ),
    Frequency.EVERY_FOUR_WEEKS: FrequencyDefinition(
        Frequency.EVERY_FOUR_WEEKS, "Every four weeks", 28
    ),
    Frequency.MONTHLY: FrequencyDefinition(
        Frequency.MONTHLY, "Monthly", 30, calendar_months=1
    ),
})

# Normalized onboarding/billing labels -> supported code
DEFAULT_ALIASES: Mapping[str, Frequency] = MappingProxyType({
    "one time": Frequency.ONETIME,
    "onetime": Frequency.ONETIME,
    "once": Frequency.ONETIME,
    "weekly": Frequency.WEEKLY,
    "once a week": Frequency.WEEKLY,
    "daily": Frequency.DAILY,
    "every day": Frequency.DAILY,
    "seven times a week": Frequency.DAILY,
    "7 times a week": Frequency.DAILY,
    "six times a week": Frequency.SIX_TIMES_WEEKLY,
    "6 times a week": Frequency.SIX_TIMES_WEEKLY,
    "five times a week": Frequency.FIVE_TIMES_WEEKLY,
    "5 times a week": Frequency.FIVE_TIMES_WEEKLY,
    "four times a week": Frequency.FOUR_TIMES_WEEKLY,
    "4 times a week": Frequency.FOUR_TIMES_WEEKLY,
    "three times a week": Frequency.THREE_TIMES_WEEKLY,
    "3 times a week": Frequency.THREE_TIMES_WEEKLY,
    "twice a week": Frequency.TWICE_WEEKLY,
    "twice weekly": Frequency.TWICE_WEEKLY,
    "two times a week": Frequency.TWICE_WEEKLY,
    "biweekly": Frequency.BIWEEKLY,
    "bi weekly": Frequency.BIWEEKLY,
    "every other week": Frequency.BIWEEKLY,
    "every two weeks": Frequency.BIWEEKLY,
    "every 2 weeks": Frequency.BIWEEKLY,
    "twice per month": Frequency.SEMIMONTHLY,
    "twice a month": Frequency.SEMIMONTHLY,
    "two times a month": Frequency.SEMIMONTHLY,
    "semimonthly": Frequency.SEMIMONTHLY,
    "semi monthly": Frequency.SEMIMONTHLY,
    "every three weeks": Frequency.EVERY_THREE_WEEKS,
    "every 3 weeks": Frequency.EVERY_THREE_WEEKS,
    "every four weeks": Frequency.EVERY_FOUR_WEEKS,
    "every 4 weeks": Frequency.EVERY_FOUR_WEEKS,
    "monthly": Frequency.MONTHLY,
    "once a month": Frequency.MONTHLY,
})

_SEPARATORS = re.compile(r"[\s_\-]+")


def _normalize_label(label: str) -> str:
    return _SEPARATORS.sub(" ", label.strip().lower())


class FrequencyResolver:
    """Looks up cadences in an injected, read-only table."""

    def __init__(
        self,
        table: Optional[Mapping[Frequency, FrequencyDefinition]] = None,
        aliases: Optional[Mapping[str, Frequency]] = None,
    ):
        self._table = MappingProxyType(dict(table if table is not None else DEFAULT_FREQUENCIES))
        self._aliases = MappingProxyType(dict(aliases if aliases is not None else DEFAULT_ALIASES))

    @property
    def supported(self) -> tuple[Frequency, ...]:
        return tuple(self._table)

    def resolve(self, code: Union[Frequency, str]) -> FrequencyDefinition:
        """Return the definition for a canonical code, e.g. ``"WEEKLY"``."""
        try:
            key = Frequency(code)
        except ValueError:
            raise UnsupportedFrequency(code) from None
        definition = self._table.get(key)
        if definition is None:
            raise UnsupportedFrequency(code)
        return definition

    def normalize(self, label: str) -> Frequency:
        """Map a code or a human label to a supported code.

        Unmapped labels are an error, never passed through as-is.
        """
        if not isinstance(label, str) or not label.strip():
            raise UnsupportedFrequency(label)
        candidate = label.strip().upper()
        if candidate in Frequency.__members__ and Frequency(candidate) in self._table:
            return Frequency(candidate)
        alias = self._aliases.get(_normalize_label(label))
        if alias is None or alias not in self._table:
            raise UnsupportedFrequency(label)
        return alias

    def resolve_label(self, label: str) -> FrequencyDefinition:
        return self.resolve(self.normalize(label))


default_resolver = FrequencyResolver()
