"""iCal DATE and DATE-TIME parsing and formatting.

Supported text forms (after stripping the zone designator):

    YYYYMMDD            8 characters, date only
    YYYYMMDDThh         11 characters
    YYYYMMDDThhmm       13 characters
    YYYYMMDDThhmmss     15 characters

The zone designator is one of:
    - ``TZID=<name>:`` prefix for a named (Olson) zone
    - ``Z`` suffix for UTC
    - nothing, for floating local time

Reference: RFC 2445, sections 4.3.4 and 4.3.5
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfoNotFoundError

from ..exceptions import ICalFormatError
from .common import (
    ICAL_TZID_PREFIX,
    ICAL_TZID_SEPARATOR,
    ICAL_UTC_SUFFIX,
    TimeZoneKind,
    resolve_time_zone,
    time_zone_kind,
    time_zone_name,
    to_utc,
)

# =============================================================================
# Format Descriptors
# =============================================================================

_TZID_PATTERN = re.compile(rf"^{ICAL_TZID_PREFIX}([^{ICAL_TZID_SEPARATOR}]+){ICAL_TZID_SEPARATOR}")


@dataclass(frozen=True, kw_only=True)
class _DateTimeFormat:
    length: int  # Length of the text once the zone designator is stripped
    fields: tuple[str, ...]  # datetime keyword per capture group, in order
    pattern: re.Pattern[str]


_FormatTable: tuple[_DateTimeFormat, ...] = (
    # Full date-time (15)
    _DateTimeFormat(
        length=15,
        fields=("year", "month", "day", "hour", "minute", "second"),
        pattern=re.compile(r"^([0-9]{4})([0-9]{2})([0-9]{2})T([0-9]{2})([0-9]{2})([0-9]{2})$"),
    ),
    # Date-time without seconds (13)
    _DateTimeFormat(
        length=13,
        fields=("year", "month", "day", "hour", "minute"),
        pattern=re.compile(r"^([0-9]{4})([0-9]{2})([0-9]{2})T([0-9]{2})([0-9]{2})$"),
    ),
    # Date-time with hour only (11)
    _DateTimeFormat(
        length=11,
        fields=("year", "month", "day", "hour"),
        pattern=re.compile(r"^([0-9]{4})([0-9]{2})([0-9]{2})T([0-9]{2})$"),
    ),
    # Date only (8)
    _DateTimeFormat(
        length=8,
        fields=("year", "month", "day"),
        pattern=re.compile(r"^([0-9]{4})([0-9]{2})([0-9]{2})$"),
    ),
)


@lru_cache(maxsize=8)
def _find_format(length: int) -> _DateTimeFormat | None:
    """Find the format descriptor for a stripped text length."""
    for descriptor in _FormatTable:
        if descriptor.length == length:
            return descriptor
    return None


# =============================================================================
# Parsing
# =============================================================================


def _split_time_zone(text: str) -> tuple[str, str | None, bool]:
    """Strip the zone designator from a date-time string.

    Returns:
        Tuple (remaining text, TZID name or None, is UTC)
    """
    match = _TZID_PATTERN.match(text)
    if match:
        return text[match.end() :], match.group(1), False

    if text.endswith(ICAL_UTC_SUFFIX):
        return text[: -len(ICAL_UTC_SUFFIX)], None, True

    return text, None, False


def parse_datetime(text: str) -> datetime:
    """Parse an iCal DATE or DATE-TIME string.

    Args:
        text: iCal text such as ``20030117T032900Z`` or
            ``TZID=America/Chicago:20030117``

    Returns:
        Datetime; naive for floating time, aware otherwise. Date-only
        strings produce midnight.

    Raises:
        ICalFormatError: If the text has an unsupported length or shape,
            names an unknown zone, or is not a real calendar date
    """
    original = text

    text, tzid, is_utc = _split_time_zone(text)

    descriptor = _find_format(len(text))
    if descriptor is None:
        raise ICalFormatError("Invalid ICal datetime string", original)

    match = descriptor.pattern.match(text)
    if match is None:
        raise ICalFormatError("Invalid ICal datetime string", original)

    fields = {name: int(value) for name, value in zip(descriptor.fields, match.groups(), strict=True)}

    tz: tzinfo | None = None
    if tzid is not None:
        try:
            tz = resolve_time_zone(tzid)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ICalFormatError(f"Unknown time zone {tzid!r} in ICal datetime string", original) from e
    elif is_utc:
        tz = UTC

    try:
        return datetime(tzinfo=tz, **fields)
    except ValueError as e:
        raise ICalFormatError(f"Invalid date in ICal datetime string: {e}", original) from e


# =============================================================================
# Formatting
# =============================================================================


def format_datetime(value: datetime | date) -> str:
    """Format a datetime (or date) as iCal text.

    Datetimes with a bare fixed offset are converted to UTC first, since an
    offset has no iCal spelling. Midnight values are written date-only.

    Args:
        value: Datetime or date to format

    Returns:
        iCal DATE or DATE-TIME string
    """
    if not isinstance(value, datetime):
        return f"{value.year:04d}{value.month:02d}{value.day:02d}"

    kind = time_zone_kind(value)
    if kind is TimeZoneKind.OFFSET:
        value = to_utc(value)
        kind = TimeZoneKind.UTC

    if value.hour or value.minute or value.second:
        base = (
            f"{value.year:04d}{value.month:02d}{value.day:02d}"
            f"T{value.hour:02d}{value.minute:02d}{value.second:02d}"
        )
    else:
        base = f"{value.year:04d}{value.month:02d}{value.day:02d}"

    if kind is TimeZoneKind.FLOATING:
        return base

    if kind is TimeZoneKind.UTC:
        return base + ICAL_UTC_SUFFIX

    return f"{ICAL_TZID_PREFIX}{time_zone_name(value)}{ICAL_TZID_SEPARATOR}{base}"
