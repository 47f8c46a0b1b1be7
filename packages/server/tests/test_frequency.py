"""
Frequency resolution tests.

Covers:
- The supported cadence table
- Fail-fast on unknown codes (no silent fallback)
- Label normalization for onboarding and billing inputs
- Injected tables
"""

from __future__ import annotations

import pytest

from app.scheduling.errors import UnsupportedFrequency
from app.scheduling.frequency import (
    DEFAULT_FREQUENCIES,
    FrequencyDefinition,
    FrequencyResolver,
    default_resolver,
)
from scoopops_shared.schemas.common import Frequency


class TestResolve:
    @pytest.mark.parametrize(
        "code, interval, per_period",
        [
            ("DAILY", 7, 7),
            ("SIX_TIMES_WEEKLY", 7, 6),
            ("FIVE_TIMES_WEEKLY", 7, 5),
            ("FOUR_TIMES_WEEKLY", 7, 4),
            ("THREE_TIMES_WEEKLY", 7, 3),
            ("WEEKLY", 7, 1),
            ("TWICE_WEEKLY", 7, 2),
            ("BIWEEKLY", 14, 1),
            ("SEMIMONTHLY", 30, 2),
            ("EVERY_THREE_WEEKS", 21, 1),
            ("EVERY_FOUR_WEEKS", 28, 1),
            ("MONTHLY", 30, 1),
        ],
    )
    def test_recurring_codes(self, code, interval, per_period):
        definition = default_resolver.resolve(code)
        assert definition.code == Frequency(code)
        assert definition.interval_days == interval
        assert definition.occurrences_per_period == per_period
        assert definition.is_recurring
        assert definition.label

    def test_onetime_is_not_recurring(self):
        definition = default_resolver.resolve(Frequency.ONETIME)
        assert definition.interval_days == 0
        assert not definition.is_recurring

    def test_twice_weekly_offsets(self):
        assert default_resolver.resolve("TWICE_WEEKLY").day_offsets == (0, 3)

    def test_monthly_steps_by_calendar_month(self):
        assert default_resolver.resolve("MONTHLY").calendar_months == 1

    def test_semimonthly_is_two_visits_per_calendar_month(self):
        definition = default_resolver.resolve("SEMIMONTHLY")
        assert definition.calendar_months == 1
        assert definition.day_offsets == (0, 14)

    def test_offsets_match_visits_per_period(self):
        for definition in DEFAULT_FREQUENCIES.values():
            assert len(definition.day_offsets) == definition.occurrences_per_period
            assert list(definition.day_offsets) == sorted(set(definition.day_offsets))

    def test_raw_onboarding_code_is_rejected(self):
        with pytest.raises(UnsupportedFrequency) as exc_info:
            default_resolver.resolve("SEVEN_TIMES_A_WEEK")
        assert exc_info.value.frequency == "SEVEN_TIMES_A_WEEK"
        assert exc_info.value.code == "UNSUPPORTED_FREQUENCY"

    def test_lowercase_code_is_rejected(self):
        """resolve() takes canonical codes only; labels go through normalize()."""
        with pytest.raises(UnsupportedFrequency):
            default_resolver.resolve("weekly")

    def test_same_input_same_definition(self):
        assert default_resolver.resolve("BIWEEKLY") is default_resolver.resolve("BIWEEKLY")

    def test_supported_lists_whole_table(self):
        assert set(default_resolver.supported) == set(Frequency)


class TestNormalize:
    @pytest.mark.parametrize(
        "label, expected",
        [
            ("WEEKLY", Frequency.WEEKLY),
            ("weekly", Frequency.WEEKLY),
            ("  Every Three Weeks ", Frequency.EVERY_THREE_WEEKS),
            ("two times a week", Frequency.TWICE_WEEKLY),
            ("bi-weekly", Frequency.BIWEEKLY),
            ("biweekly", Frequency.BIWEEKLY),
            ("every_4_weeks", Frequency.EVERY_FOUR_WEEKS),
            ("one-time", Frequency.ONETIME),
            ("monthly", Frequency.MONTHLY),
            ("daily", Frequency.DAILY),
            ("Twice Per Month", Frequency.SEMIMONTHLY),
            ("3 times a week", Frequency.THREE_TIMES_WEEKLY),
        ],
    )
    def test_known_labels(self, label, expected):
        assert default_resolver.normalize(label) == expected

    @pytest.mark.parametrize(
        "code, expected",
        [
            ("SEVEN_TIMES_A_WEEK", Frequency.DAILY),
            ("SIX_TIMES_A_WEEK", Frequency.SIX_TIMES_WEEKLY),
            ("FIVE_TIMES_A_WEEK", Frequency.FIVE_TIMES_WEEKLY),
            ("FOUR_TIMES_A_WEEK", Frequency.FOUR_TIMES_WEEKLY),
            ("THREE_TIMES_A_WEEK", Frequency.THREE_TIMES_WEEKLY),
            ("TWO_TIMES_A_WEEK", Frequency.TWICE_WEEKLY),
            ("ONCE_A_WEEK", Frequency.WEEKLY),
            ("BI_WEEKLY", Frequency.BIWEEKLY),
            ("TWICE_PER_MONTH", Frequency.SEMIMONTHLY),
            ("EVERY_THREE_WEEKS", Frequency.EVERY_THREE_WEEKS),
            ("EVERY_FOUR_WEEKS", Frequency.EVERY_FOUR_WEEKS),
            ("ONCE_A_MONTH", Frequency.MONTHLY),
            ("ONE_TIME", Frequency.ONETIME),
        ],
    )
    def test_onboarding_codes(self, code, expected):
        assert default_resolver.normalize(code) == expected
        assert default_resolver.resolve_label(code).code == expected

    @pytest.mark.parametrize("label", ["every other day", "hourly", "", "   "])
    def test_unknown_labels_raise(self, label):
        with pytest.raises(UnsupportedFrequency):
            default_resolver.normalize(label)

    def test_non_string_raises(self):
        with pytest.raises(UnsupportedFrequency):
            default_resolver.normalize(None)

    def test_resolve_label(self):
        assert default_resolver.resolve_label("every other week").interval_days == 14


class TestInjectedTable:
    def test_restricted_table(self):
        resolver = FrequencyResolver(
            table={Frequency.WEEKLY: DEFAULT_FREQUENCIES[Frequency.WEEKLY]},
            aliases={},
        )
        assert resolver.resolve("WEEKLY").interval_days == 7
        with pytest.raises(UnsupportedFrequency):
            resolver.resolve("BIWEEKLY")
        with pytest.raises(UnsupportedFrequency):
            resolver.normalize("every other week")

    def test_table_is_read_only(self):
        resolver = FrequencyResolver()
        with pytest.raises(TypeError):
            resolver._table[Frequency.WEEKLY] = FrequencyDefinition(Frequency.WEEKLY, "x", 1)

    def test_definitions_are_frozen(self):
        definition = default_resolver.resolve("WEEKLY")
        with pytest.raises(Exception):
            definition.interval_days = 3
