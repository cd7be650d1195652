"""
icalformat: Parse and format iCalendar (RFC 2445) date-time, duration,
period and recurrence strings.

This library converts between iCal value text and Python temporal values
(datetime, Duration, Period) and feeds RRULE values into dateutil's
recurrence engine.
"""

from __future__ import annotations

from .codec import (
    Duration,
    Period,
    RecurrenceParams,
    format_datetime,
    format_duration,
    format_period,
    format_period_with_duration,
    format_recurrence,
    parse_datetime,
    parse_duration,
    parse_period,
    parse_recurrence_params,
)
from .exceptions import ICalError, ICalFormatError, ICalOrderingError, ICalUnrepresentableError
from .recur import Recurrence, parse_recurrence

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Values
    "Duration",
    "Period",
    "Recurrence",
    "RecurrenceParams",
    # Parsing
    "parse_datetime",
    "parse_duration",
    "parse_period",
    "parse_recurrence",
    "parse_recurrence_params",
    # Formatting
    "format_datetime",
    "format_duration",
    "format_period",
    "format_period_with_duration",
    "format_recurrence",
    # Exceptions
    "ICalError",
    "ICalFormatError",
    "ICalOrderingError",
    "ICalUnrepresentableError",
]
