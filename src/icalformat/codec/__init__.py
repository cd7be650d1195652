"""Codec components for iCal value text.

This package contains the parsers and formatters for the iCal DATE-TIME,
DURATION, PERIOD and RECUR value types.

Reference: RFC 2445, section 4.3
"""

from .common import TimeZoneKind, time_zone_kind
from .duration import Duration, format_duration, parse_duration
from .instant import format_datetime, parse_datetime
from .period import Period, format_period, format_period_with_duration, parse_period
from .recurrence import RecurrenceParams, format_recurrence, parse_recurrence_params

__all__ = [
    # Common types
    "TimeZoneKind",
    "time_zone_kind",
    # Date-time
    "format_datetime",
    "parse_datetime",
    # Duration
    "Duration",
    "format_duration",
    "parse_duration",
    # Period
    "Period",
    "format_period",
    "format_period_with_duration",
    "parse_period",
    # Recurrence
    "RecurrenceParams",
    "format_recurrence",
    "parse_recurrence_params",
]
