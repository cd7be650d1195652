"""iCal DURATION value type, parsing and formatting.

Text form:

    [+|-]P[<n>W][<n>D][T[<n>H][<n>M][<n>S]]

Every numeric group is optional, but at least one must be present. The zero
duration is always written as ``+PT0S``.

A Duration keeps the signed deltas the way calendar arithmetic consumes
them (months, days, minutes, seconds). Parsed tokens are folded into their
own delta only (weeks into days, hours into minutes) and seconds never
carry into minutes. The week/day/hour/minute/second accessors give the
carried, non-negative view used for display:

    P22DT4H25M3S  ->  weeks=3, days=1, hours=4, minutes=25, seconds=3

Reference: RFC 2445, section 4.3.6
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from dateutil.relativedelta import relativedelta

from ..exceptions import ICalFormatError, ICalUnrepresentableError
from .common import to_utc

# =============================================================================
# Duration Constants (RFC 2445)
# =============================================================================

ZERO_DURATION = "+PT0S"  # Canonical text for a zero-length duration

DAYS_PER_WEEK = 7
MINUTES_PER_HOUR = 60
MONTHS_PER_YEAR = 12
SECONDS_PER_MINUTE = 60
SECONDS_PER_DAY = 86400
MICROSECONDS_PER_SECOND = 1_000_000

_DURATION_PATTERN = re.compile(
    r"""
    (?P<sign>[+-])?
    P
    (?:(?P<weeks>[0-9]+)W)?
    (?:(?P<days>[0-9]+)D)?
    (?:T
        (?:(?P<hours>[0-9]+)H)?
        (?:(?P<minutes>[0-9]+)M)?
        (?:(?P<seconds>[0-9]+)S)?
    )?
    """,
    re.VERBOSE,
)

# An optionally signed P at the start marks duration text (used by period parsing)
_DURATION_SHAPE_PATTERN = re.compile(r"^[+-]?P", re.IGNORECASE)

_UNITS = ("weeks", "days", "hours", "minutes", "seconds")

# relativedelta attributes holding absolute (replace-style) values
_RELATIVEDELTA_ABSOLUTE_FIELDS = ("year", "month", "day", "weekday", "hour", "minute", "second", "microsecond")


# =============================================================================
# Duration Value
# =============================================================================


@dataclass(frozen=True)
class Duration:
    """Signed duration with iCal's units.

    All four deltas share one sign. Months exist so calendar durations can be
    represented and rejected on output; iCal text cannot express them.
    """

    delta_months: int = 0
    delta_days: int = 0
    delta_minutes: int = 0
    delta_seconds: int = 0

    def __post_init__(self) -> None:
        deltas = self._deltas()
        if any(delta > 0 for delta in deltas) and any(delta < 0 for delta in deltas):
            raise ValueError(f"Duration components must share one sign, got {deltas}")

    @classmethod
    def of(
        cls,
        *,
        years: int = 0,
        months: int = 0,
        weeks: int = 0,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        seconds: int = 0,
        negative: bool = False,
    ) -> Duration:
        """Build a duration from calendar components.

        Each component folds into its own delta only: years into months,
        weeks into days, hours into minutes. Seconds are kept as given.

        Args:
            negative: Negate every component after folding
        """
        sign = -1 if negative else 1
        return cls(
            delta_months=sign * (years * MONTHS_PER_YEAR + months),
            delta_days=sign * (weeks * DAYS_PER_WEEK + days),
            delta_minutes=sign * (hours * MINUTES_PER_HOUR + minutes),
            delta_seconds=sign * seconds,
        )

    @classmethod
    def from_timedelta(cls, value: timedelta) -> Duration:
        """Build a duration from an exact elapsed time.

        The elapsed seconds are carried into days, minutes and seconds.
        Sub-second precision is truncated toward zero.
        """
        total_microseconds = (
            (value.days * SECONDS_PER_DAY + value.seconds) * MICROSECONDS_PER_SECOND + value.microseconds
        )
        sign = -1 if total_microseconds < 0 else 1
        total_seconds = abs(total_microseconds) // MICROSECONDS_PER_SECOND

        days, remainder = divmod(total_seconds, SECONDS_PER_DAY)
        minutes, seconds = divmod(remainder, SECONDS_PER_MINUTE)
        return cls(delta_days=sign * days, delta_minutes=sign * minutes, delta_seconds=sign * seconds)

    @classmethod
    def from_relativedelta(cls, value: relativedelta) -> Duration:
        """Build a duration from a relative (not absolute) relativedelta.

        Raises:
            ValueError: If the relativedelta holds absolute fields, leap days
                or components of mixed sign
        """
        absolute = [name for name in _RELATIVEDELTA_ABSOLUTE_FIELDS if getattr(value, name) is not None]
        if absolute or value.leapdays:
            raise ValueError(f"Cannot convert relativedelta with absolute fields {absolute} to a duration")

        return cls(
            delta_months=value.years * MONTHS_PER_YEAR + value.months,
            delta_days=value.days,
            delta_minutes=value.hours * MINUTES_PER_HOUR + value.minutes,
            delta_seconds=value.seconds,
        )

    def _deltas(self) -> tuple[int, int, int, int]:
        return (self.delta_months, self.delta_days, self.delta_minutes, self.delta_seconds)

    # -------------------------------------------------------------------------
    # Sign
    # -------------------------------------------------------------------------

    @property
    def is_positive(self) -> bool:
        return any(delta > 0 for delta in self._deltas())

    @property
    def is_negative(self) -> bool:
        return any(delta < 0 for delta in self._deltas())

    @property
    def is_zero(self) -> bool:
        return not any(self._deltas())

    # -------------------------------------------------------------------------
    # Carried magnitudes
    # -------------------------------------------------------------------------

    @property
    def weeks(self) -> int:
        return abs(self.delta_days) // DAYS_PER_WEEK

    @property
    def days(self) -> int:
        """Days left over after whole weeks (0-6)."""
        return abs(self.delta_days) % DAYS_PER_WEEK

    @property
    def hours(self) -> int:
        return abs(self.delta_minutes) // MINUTES_PER_HOUR

    @property
    def minutes(self) -> int:
        """Minutes left over after whole hours (0-59)."""
        return abs(self.delta_minutes) % MINUTES_PER_HOUR

    @property
    def seconds(self) -> int:
        return abs(self.delta_seconds)

    # -------------------------------------------------------------------------
    # Conversion and arithmetic
    # -------------------------------------------------------------------------

    def as_relativedelta(self) -> relativedelta:
        """Calendar-aware delta for adding to dates and datetimes."""
        return relativedelta(
            months=self.delta_months,
            days=self.delta_days,
            minutes=self.delta_minutes,
            seconds=self.delta_seconds,
        )

    def as_timedelta(self) -> timedelta:
        """Exact elapsed time.

        Raises:
            ICalUnrepresentableError: If the duration has a month component
        """
        if self.delta_months:
            raise ICalUnrepresentableError("Cannot represent months as an exact timedelta")
        return timedelta(days=self.delta_days, minutes=self.delta_minutes, seconds=self.delta_seconds)

    def __neg__(self) -> Duration:
        return Duration(-self.delta_months, -self.delta_days, -self.delta_minutes, -self.delta_seconds)

    def __bool__(self) -> bool:
        return not self.is_zero

    def __add__(self, other: Any) -> Any:
        if isinstance(other, Duration):
            return Duration(
                self.delta_months + other.delta_months,
                self.delta_days + other.delta_days,
                self.delta_minutes + other.delta_minutes,
                self.delta_seconds + other.delta_seconds,
            )
        if isinstance(other, date):
            return self._shift(other, 1)
        return NotImplemented

    __radd__ = __add__

    def __rsub__(self, other: Any) -> Any:
        if isinstance(other, date):
            return self._shift(other, -1)
        return NotImplemented

    def _shift(self, value: date, sign: int) -> date:
        """Move a date or datetime by this duration.

        Months and days move the local calendar date. Minutes and seconds are
        exact elapsed time: an aware datetime takes them in UTC and is then
        converted back to its own zone, so ``01:30 EDT + PT1H`` is
        ``01:30 EST`` on the fall-back night.
        """
        if not isinstance(value, datetime):
            return value + self.as_relativedelta() if sign > 0 else value - self.as_relativedelta()

        shifted = value + relativedelta(months=sign * self.delta_months, days=sign * self.delta_days)
        elapsed = timedelta(minutes=sign * self.delta_minutes, seconds=sign * self.delta_seconds)
        if shifted.tzinfo is None:
            return shifted + elapsed
        return (to_utc(shifted) + elapsed).astimezone(shifted.tzinfo)


# =============================================================================
# Parsing
# =============================================================================


def is_duration_text(text: str) -> bool:
    """Check whether text looks like a duration rather than a date-time."""
    return _DURATION_SHAPE_PATTERN.match(text) is not None


def parse_duration(text: str) -> Duration:
    """Parse an iCal DURATION string.

    Args:
        text: iCal text such as ``+P3WT4H55S`` or ``-PT15M``

    Returns:
        Duration with each token folded into its own unit

    Raises:
        ICalFormatError: If the text does not match the grammar or has no
            numeric component at all (``P``, ``+PT``)
    """
    match = _DURATION_PATTERN.fullmatch(text)
    if match is None:
        raise ICalFormatError("Invalid ICal duration string", text)

    units = {unit: int(match.group(unit)) for unit in _UNITS if match.group(unit) is not None}
    if not units:
        raise ICalFormatError("Invalid ICal duration string", text)

    return Duration.of(negative=match.group("sign") == "-", **units)


# =============================================================================
# Formatting
# =============================================================================


def format_duration(duration: Duration) -> str:
    """Format a duration as iCal text.

    Weeks and days are written from the carried view, so 10 days become
    ``P1W3D``.

    Raises:
        ICalUnrepresentableError: If the duration has a month component
    """
    if duration.delta_months:
        raise ICalUnrepresentableError("Cannot represent years or months in an iCal duration")

    # Months are excluded here on purpose; they were rejected above
    if not (duration.delta_days or duration.delta_minutes or duration.delta_seconds):
        return ZERO_DURATION

    ical = "+" if duration.is_positive else "-"
    ical += "P"

    if duration.delta_days:
        if duration.weeks:
            ical += f"{duration.weeks}W"
        if duration.days:
            ical += f"{duration.days}D"

    if duration.delta_minutes or duration.delta_seconds:
        ical += "T"
        if duration.hours:
            ical += f"{duration.hours}H"
        if duration.minutes:
            ical += f"{duration.minutes}M"
        if duration.seconds:
            ical += f"{duration.seconds}S"

    return ical
