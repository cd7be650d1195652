"""Time zone classification shared across codec components.

iCal text can only carry three kinds of zone: none at all (floating time),
UTC (``Z`` suffix) or a named zone (``TZID=`` prefix). Python ``tzinfo``
objects are mapped onto those kinds here, with a fourth kind for bare
fixed offsets that have no iCal spelling.

Named zones come from ``zoneinfo.ZoneInfo`` or from ``dateutil.tz.gettz``;
a dateutil zone is named by the path of its zone file below the zone
database root.

Reference: RFC 2445, section 4.3.5
"""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta, tzinfo
from enum import Enum, auto
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import tz as dateutil_tz
from dateutil.tz.tz import TZPATHS

# =============================================================================
# Zone Constants (RFC 2445)
# =============================================================================

ICAL_UTC_SUFFIX = "Z"  # Trailing designator for UTC date-times
ICAL_TZID_PREFIX = "TZID="  # Leading parameter naming the zone
ICAL_TZID_SEPARATOR = ":"  # Ends the TZID parameter

UTC_ZONE_KEYS = frozenset({"UTC", "Etc/UTC", "Etc/Universal", "Universal", "Zulu", "Etc/Zulu"})


class TimeZoneKind(Enum):
    """How a datetime's zone is written in iCal text."""

    FLOATING = auto()  # No tzinfo, bare local time
    UTC = auto()  # Written with Z suffix
    NAMED = auto()  # Written with TZID=<name>: prefix
    OFFSET = auto()  # Fixed offset, must be converted to UTC before writing


def _dateutil_zone_name(tz: dateutil_tz.tzfile) -> str | None:
    """Olson name of a dateutil zone file, or None outside the database.

    ``gettz`` loads system zones by absolute path and falls back to its
    bundled database by bare name.
    """
    filename = getattr(tz, "_filename", None)
    if not isinstance(filename, str) or not filename:
        return None

    if not os.path.isabs(filename):
        return filename

    for root in TZPATHS:
        relative = os.path.relpath(filename, root)
        if not relative.startswith(os.pardir):
            return relative.replace(os.sep, "/")
    return None


def _olson_name(tz: tzinfo) -> str | None:
    if isinstance(tz, ZoneInfo):
        return tz.key
    if isinstance(tz, dateutil_tz.tzfile):
        return _dateutil_zone_name(tz)
    return None


def time_zone_kind(value: datetime) -> TimeZoneKind:
    """Classify the zone of a datetime.

    Args:
        value: Datetime to classify

    Returns:
        The TimeZoneKind describing how the zone is written
    """
    tz = value.tzinfo
    if tz is None:
        return TimeZoneKind.FLOATING

    name = _olson_name(tz)
    if name is not None:
        return TimeZoneKind.UTC if name in UTC_ZONE_KEYS else TimeZoneKind.NAMED

    # datetime.UTC, dateutil's tzutc and zero fixed offsets all mean UTC
    if value.utcoffset() == timedelta(0):
        return TimeZoneKind.UTC

    return TimeZoneKind.OFFSET


def time_zone_name(value: datetime) -> str:
    """Get the TZID name of a datetime with a named zone.

    Raises:
        ValueError: If the datetime's zone is not a named zone
    """
    name = _olson_name(value.tzinfo) if value.tzinfo is not None else None
    if name is None or name in UTC_ZONE_KEYS:
        raise ValueError(f"Datetime {value.isoformat()} does not carry a named time zone")
    return name


@lru_cache(maxsize=128)
def resolve_time_zone(name: str) -> tzinfo:
    """Look up a TZID name in the system zone database.

    Raises:
        ZoneInfoNotFoundError: If the zone is unknown
    """
    if not name:
        raise ZoneInfoNotFoundError("Empty time zone name")
    return ZoneInfo(name)


def to_utc(value: datetime) -> datetime:
    """Convert an aware datetime to UTC."""
    return value.astimezone(UTC)
