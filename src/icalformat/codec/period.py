"""iCal PERIOD value type, parsing and formatting.

Text forms:

    <date-time>/<date-time>     explicit start and end
    <date-time>/<duration>      start and length

The start may carry a ``TZID=<name>:`` prefix; since zone names contain
``/``, the separator is the first ``/`` after that prefix.

Reference: RFC 2445, section 4.3.9
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from ..exceptions import ICalFormatError, ICalOrderingError
from .common import to_utc
from .duration import Duration, format_duration, is_duration_text, parse_duration
from .instant import format_datetime, parse_datetime

_PERIOD_PATTERN = re.compile(r"^((?:TZID=[^:]+:)?.*?)/(.*)$", re.DOTALL)

PERIOD_SEPARATOR = "/"


def _comparable(value: datetime, other: datetime) -> datetime:
    """Interpret a floating datetime in the zone of the other endpoint.

    Aware and naive datetimes cannot be ordered directly; a floating endpoint
    takes on its partner's zone for comparison and subtraction only.
    """
    if value.tzinfo is None and other.tzinfo is not None:
        return value.replace(tzinfo=other.tzinfo)
    return value


@dataclass(frozen=True)
class Period:
    """Span of time between two datetimes, start <= end."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if _comparable(self.end, self.start) < _comparable(self.start, self.end):
            raise ICalOrderingError(
                f"Invalid ICal period: end {self.end.isoformat()} before start {self.start.isoformat()}"
            )

    @classmethod
    def from_duration(cls, start: datetime, duration: Duration) -> Period:
        """Build a period from its start and length."""
        return cls(start, start + duration)

    @property
    def duration(self) -> Duration:
        """Exact elapsed time from start to end."""
        start = _comparable(self.start, self.end)
        end = _comparable(self.end, self.start)
        # Same-zone subtraction is wall-clock; go through UTC to count DST shifts
        if start.tzinfo is not None:
            start, end = to_utc(start), to_utc(end)
        return Duration.from_timedelta(end - start)


# =============================================================================
# Parsing
# =============================================================================


def parse_period(text: str) -> Period:
    """Parse an iCal PERIOD string.

    Args:
        text: iCal text such as ``19970101T180000Z/19970102T070000Z`` or
            ``19970101T180000Z/+PT5H30M``

    Returns:
        Period; a duration end is resolved by adding it to the start

    Raises:
        ICalFormatError: If the separator is missing, either side is empty,
            either side is not a valid date-time or duration, or the
            duration carries the end out of the supported date range
        ICalOrderingError: If the end precedes the start
    """
    match = _PERIOD_PATTERN.match(text)
    if match is None or not match.group(1) or not match.group(2):
        raise ICalFormatError("Invalid ICal period string", text)

    start_text, end_text = match.groups()

    start = parse_datetime(start_text)

    if is_duration_text(end_text):
        duration = parse_duration(end_text)
        try:
            end = start + duration
        except (OverflowError, ValueError) as e:
            raise ICalFormatError(f"Invalid ICal period: end out of range: {e}", text) from e
    else:
        end = parse_datetime(end_text)

    try:
        return Period(start, end)
    except ICalOrderingError as e:
        raise ICalOrderingError(f"Invalid ICal period: end before start ({text})") from e


# =============================================================================
# Formatting
# =============================================================================


def format_period(period: Period) -> str:
    """Format a period as ``<start>/<end>``."""
    return format_datetime(period.start) + PERIOD_SEPARATOR + format_datetime(period.end)


def format_period_with_duration(period: Period) -> str:
    """Format a period as ``<start>/<duration>``."""
    return format_datetime(period.start) + PERIOD_SEPARATOR + format_duration(period.duration)
