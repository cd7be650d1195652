"""Unit tests for the Duration value type and iCal DURATION codec."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
from dateutil.relativedelta import relativedelta

from icalformat.codec.duration import (
    Duration,
    format_duration,
    is_duration_text,
    parse_duration,
)
from icalformat.exceptions import ICalFormatError, ICalUnrepresentableError

# =============================================================================
# Test Constants - Duplicated from src for test isolation
# =============================================================================

TEST_ZERO_DURATION = "+PT0S"

# =============================================================================
# Duration Value Tests
# =============================================================================


@pytest.mark.unit
class TestDurationValue:
    """Tests for Duration construction and accessors."""

    def test_of_folds_without_carrying(self) -> None:
        """Test that components fold into their own delta only."""
        duration = Duration.of(weeks=3, days=1, hours=4, minutes=25, seconds=75)
        assert duration.delta_days == 22
        assert duration.delta_minutes == 265
        assert duration.delta_seconds == 75
        assert duration.delta_months == 0

    def test_years_fold_into_months(self) -> None:
        """Test that years are expressed as months."""
        assert Duration.of(years=1, months=2).delta_months == 14

    def test_carried_view(self) -> None:
        """Test that accessors decompose days into weeks and hours into minutes."""
        duration = Duration(delta_days=22, delta_minutes=265, delta_seconds=3)
        assert (duration.weeks, duration.days) == (3, 1)
        assert (duration.hours, duration.minutes, duration.seconds) == (4, 25, 3)

    def test_seconds_never_carry(self) -> None:
        """Test that seconds above a minute stay in seconds."""
        duration = Duration.of(seconds=3600)
        assert duration.seconds == 3600
        assert duration.hours == 0
        assert duration.minutes == 0

    def test_negative_magnitudes(self) -> None:
        """Test that accessors are magnitudes and the sign is separate."""
        duration = Duration.of(weeks=1, days=2, hours=3, negative=True)
        assert duration.delta_days == -9
        assert duration.delta_minutes == -180
        assert (duration.weeks, duration.days, duration.hours) == (1, 2, 3)
        assert duration.is_negative
        assert not duration.is_positive

    def test_sign_predicates(self) -> None:
        """Test is_positive, is_negative and is_zero."""
        assert Duration.of(seconds=1).is_positive
        assert not Duration.of(seconds=1).is_negative
        assert Duration().is_zero
        assert not Duration().is_positive
        assert not Duration().is_negative
        assert not Duration()
        assert Duration.of(days=1)

    def test_mixed_signs_rejected(self) -> None:
        """Test that components of different signs raise ValueError."""
        with pytest.raises(ValueError, match="share one sign"):
            Duration(delta_days=1, delta_minutes=-5)

    def test_negation(self) -> None:
        """Test unary minus."""
        assert -Duration.of(days=2, seconds=4) == Duration.of(days=2, seconds=4, negative=True)

    def test_sum(self) -> None:
        """Test adding two durations."""
        assert Duration.of(days=1) + Duration.of(hours=2) == Duration(delta_days=1, delta_minutes=120)

    def test_is_hashable(self) -> None:
        """Test that durations can be used as dictionary keys."""
        assert {Duration.of(days=1): "a"}[Duration(delta_days=1)] == "a"


@pytest.mark.unit
class TestDurationConversion:
    """Tests for converting to and from datetime and dateutil types."""

    def test_from_timedelta(self) -> None:
        """Test that elapsed time is carried into days, minutes and seconds."""
        duration = Duration.from_timedelta(timedelta(days=10, hours=5, minutes=3, seconds=7))
        assert duration == Duration(delta_days=10, delta_minutes=303, delta_seconds=7)

    def test_from_negative_timedelta(self) -> None:
        """Test that negative elapsed time keeps one sign across components."""
        duration = Duration.from_timedelta(-timedelta(days=1, seconds=90))
        assert duration == Duration(delta_days=-1, delta_minutes=-1, delta_seconds=-30)

    def test_from_timedelta_truncates_microseconds(self) -> None:
        """Test that sub-second precision is dropped."""
        assert Duration.from_timedelta(timedelta(seconds=5, microseconds=999_999)) == Duration.of(seconds=5)
        assert Duration.from_timedelta(-timedelta(seconds=5, microseconds=999_999)) == Duration.of(
            seconds=5, negative=True
        )

    def test_from_relativedelta(self) -> None:
        """Test conversion from a relative relativedelta."""
        duration = Duration.from_relativedelta(relativedelta(years=1, months=1, weeks=1, hours=2, seconds=3))
        assert duration == Duration(delta_months=13, delta_days=7, delta_minutes=120, delta_seconds=3)

    def test_from_absolute_relativedelta_raises(self) -> None:
        """Test that absolute relativedelta fields are rejected."""
        with pytest.raises(ValueError, match="absolute fields"):
            Duration.from_relativedelta(relativedelta(day=1))

    def test_as_timedelta(self) -> None:
        """Test exact elapsed time conversion."""
        assert Duration.of(weeks=1, hours=1, seconds=1).as_timedelta() == timedelta(days=7, seconds=3601)

    def test_as_timedelta_with_months_raises(self) -> None:
        """Test that months have no exact elapsed time."""
        with pytest.raises(ICalUnrepresentableError):
            Duration.of(months=1).as_timedelta()

    def test_add_to_datetime(self) -> None:
        """Test that adding to a datetime uses calendar arithmetic."""
        start = datetime(2003, 1, 31, 12, 0, 0)
        assert start + Duration.of(months=1) == datetime(2003, 2, 28, 12, 0, 0)
        assert start + Duration.of(days=1, hours=13) == datetime(2003, 2, 2, 1, 0, 0)
        assert Duration.of(days=1) + start == datetime(2003, 2, 1, 12, 0, 0)

    def test_subtract_from_datetime(self) -> None:
        """Test subtracting a duration from a datetime."""
        assert datetime(2003, 1, 1) - Duration.of(seconds=1) == datetime(2002, 12, 31, 23, 59, 59)

    def test_time_part_is_elapsed_time_in_zone(self) -> None:
        """Test that hours cross a DST change as real time and days as calendar days."""
        new_york = ZoneInfo("America/New_York")
        start = datetime(2003, 4, 6, 1, 30, tzinfo=new_york)
        assert start + Duration.of(hours=1) == datetime(2003, 4, 6, 3, 30, tzinfo=new_york)
        assert start + Duration.of(days=1) == datetime(2003, 4, 7, 1, 30, tzinfo=new_york)
        assert datetime(2003, 4, 6, 3, 30, tzinfo=new_york) - Duration.of(minutes=60) == start

    def test_add_to_date(self) -> None:
        """Test that a plain date moves by calendar days."""
        assert date(2003, 1, 31) + Duration.of(weeks=1) == date(2003, 2, 7)

    def test_unsupported_operand(self) -> None:
        """Test that adding unrelated types raises TypeError."""
        with pytest.raises(TypeError):
            Duration.of(days=1) + 5  # type: ignore[operator]


# =============================================================================
# Parsing Tests
# =============================================================================


@pytest.mark.unit
class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("+P3WT4H55S", Duration.of(weeks=3, hours=4, seconds=55)),
            ("P22DT4H25M3S", Duration.of(days=22, hours=4, minutes=25, seconds=3)),
            ("P15DT5H0M20S", Duration.of(days=15, hours=5, seconds=20)),
            ("P7W", Duration.of(weeks=7)),
            ("-PT15M", Duration.of(minutes=15, negative=True)),
            ("PT1S", Duration.of(seconds=1)),
            ("P1W2D", Duration.of(weeks=1, days=2)),
            ("PT90M", Duration.of(minutes=90)),
            ("P0D", Duration()),
            ("-PT0S", Duration()),
        ],
        ids=[
            "weeks_hours_seconds",
            "days_over_a_week",
            "rfc_example",
            "weeks_only",
            "negative_minutes",
            "seconds_only",
            "weeks_and_days",
            "minutes_over_an_hour",
            "zero_days",
            "negative_zero",
        ],
    )
    def test_valid(self, text: str, expected: Duration) -> None:
        """Test parsing valid duration strings."""
        assert parse_duration(text) == expected

    def test_days_over_a_week_are_carried_in_view(self) -> None:
        """Test that P22DT4H25M3S reads as 3 weeks 1 day 4 hours 25 minutes 3 seconds."""
        duration = parse_duration("P22DT4H25M3S")
        assert (duration.weeks, duration.days) == (3, 1)
        assert (duration.hours, duration.minutes, duration.seconds) == (4, 25, 3)

    def test_negative_sign_applies_to_all(self) -> None:
        """Test that a minus sign negates every component."""
        duration = parse_duration("-P1W2DT3H4M5S")
        assert duration == Duration(delta_days=-9, delta_minutes=-184, delta_seconds=-5)

    @pytest.mark.parametrize(
        "text",
        ["P", "+P", "-P", "PT", "+PT", ""],
        ids=["bare_p", "plus_p", "minus_p", "bare_pt", "plus_pt", "empty"],
    )
    def test_no_components_raises(self, text: str) -> None:
        """Test that at least one numeric group is required."""
        with pytest.raises(ICalFormatError, match="Invalid ICal duration string"):
            parse_duration(text)

    @pytest.mark.parametrize(
        "text",
        ["P1H", "PT1D", "P1Y", "P1M", "P1D2W", "PT1S2M", "XP1D", "P1DX", "p1d", "P1.5D", "++P1D"],
        ids=[
            "hours_without_t",
            "days_after_t",
            "years",
            "months",
            "days_before_weeks",
            "seconds_before_minutes",
            "leading_garbage",
            "trailing_garbage",
            "lowercase",
            "fraction",
            "double_sign",
        ],
    )
    def test_malformed_raises(self, text: str) -> None:
        """Test that text outside the grammar is rejected."""
        with pytest.raises(ICalFormatError) as exc_info:
            parse_duration(text)
        assert exc_info.value.text == text


@pytest.mark.unit
class TestIsDurationText:
    """Tests for is_duration_text shape check."""

    @pytest.mark.parametrize("text", ["P1D", "+PT5H", "-P1W", "pt5h"])
    def test_duration_shapes(self, text: str) -> None:
        """Test that optionally signed P prefixes are durations."""
        assert is_duration_text(text)

    @pytest.mark.parametrize("text", ["19970101T180000Z", "TZID=Europe/Paris:19970101", ""])
    def test_datetime_shapes(self, text: str) -> None:
        """Test that date-times are not durations."""
        assert not is_duration_text(text)


# =============================================================================
# Formatting Tests
# =============================================================================


@pytest.mark.unit
class TestFormatDuration:
    """Tests for format_duration."""

    @pytest.mark.parametrize(
        ("duration", "expected"),
        [
            (Duration.of(weeks=3, hours=4, seconds=55), "+P3WT4H55S"),
            (Duration.of(days=22, hours=4, minutes=25, seconds=3), "+P3W1DT4H25M3S"),
            (Duration.of(days=10), "+P1W3D"),
            (Duration.of(days=6), "+P6D"),
            (Duration.of(weeks=2), "+P2W"),
            (Duration.of(minutes=90), "+PT1H30M"),
            (Duration.of(hours=1), "+PT1H"),
            (Duration.of(seconds=3600), "+PT3600S"),
            (Duration.of(minutes=15, negative=True), "-PT15M"),
            (Duration.of(days=1, seconds=1, negative=True), "-P1DT1S"),
        ],
        ids=[
            "weeks_hours_seconds",
            "carried_weeks",
            "ten_days",
            "six_days",
            "whole_weeks",
            "carried_hours",
            "hour_only",
            "seconds_not_carried",
            "negative",
            "negative_days_seconds",
        ],
    )
    def test_format(self, duration: Duration, expected: str) -> None:
        """Test formatting durations."""
        assert format_duration(duration) == expected

    def test_zero(self) -> None:
        """Test that the zero duration is the canonical literal."""
        assert format_duration(Duration.of()) == TEST_ZERO_DURATION

    def test_negative_zero(self) -> None:
        """Test that zero has no sign."""
        assert format_duration(Duration.of(negative=True)) == TEST_ZERO_DURATION

    @pytest.mark.parametrize(
        "duration",
        [Duration.of(months=1), Duration.of(years=1, days=3), Duration.of(months=2, negative=True)],
        ids=["month", "year_and_days", "negative_months"],
    )
    def test_months_raise(self, duration: Duration) -> None:
        """Test that months and years cannot be formatted."""
        with pytest.raises(ICalUnrepresentableError, match="years or months"):
            format_duration(duration)


# =============================================================================
# Round-trip Tests
# =============================================================================


@pytest.mark.unit
class TestDurationRoundTrip:
    """Tests that parse(format(d)) keeps sign and magnitudes."""

    @pytest.mark.parametrize(
        "duration",
        [
            Duration.of(weeks=3, hours=4, seconds=55),
            Duration.of(days=22, hours=4, minutes=25, seconds=3),
            Duration.of(minutes=61, negative=True),
            Duration.of(seconds=86_400),
            Duration.of(days=365, negative=True),
        ],
        ids=["mixed", "carried", "negative_minutes", "seconds_day", "negative_year_of_days"],
    )
    def test_round_trip(self, duration: Duration) -> None:
        """Test that deltas and sign survive formatting and parsing."""
        parsed = parse_duration(format_duration(duration))
        assert parsed == duration
        assert parsed.is_negative == duration.is_negative

    def test_text_round_trip(self) -> None:
        """Test that canonical text is stable."""
        assert format_duration(parse_duration("+P3WT4H55S")) == "+P3WT4H55S"
