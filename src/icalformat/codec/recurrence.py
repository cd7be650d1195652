"""iCal RECUR value translation to and from recurrence parameters.

An RRULE value is a ``;`` separated list of ``NAME=VALUE`` parts:

    FREQ=MONTHLY;COUNT=10;BYDAY=1FR

It is translated into a parameter mapping keyed by lower-cased name:

    {"freq": "monthly", "count": "10", "byday": ["1fr"]}

Values are lower-cased except ``until``, which is a date-time and is parsed
into a datetime. Every ``by*`` value is a list. Names are not validated
here; the recurrence engine owns the keyword vocabulary.

Reference: RFC 2445, section 4.3.10
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from ..exceptions import ICalFormatError
from .common import TimeZoneKind, time_zone_kind, to_utc
from .instant import format_datetime, parse_datetime

# =============================================================================
# Recurrence Constants (RFC 2445)
# =============================================================================

RRULE_PROPERTY_PREFIX = "RRULE:"  # Content line name, tolerated in front of the value
RRULE_PART_SEPARATOR = ";"
RRULE_VALUE_SEPARATOR = "="
RRULE_LIST_SEPARATOR = ","

LIST_PARAM_PREFIX = "by"  # by* parameters hold lists
UNTIL_PARAM = "until"
FREQ_PARAM = "freq"

RRULE_PARAMS = frozenset(
    {
        "freq",
        "until",
        "count",
        "interval",
        "bysecond",
        "byminute",
        "byhour",
        "byday",
        "bymonthday",
        "byyearday",
        "byweekno",
        "bymonth",
        "bysetpos",
        "wkst",
    }
)

RecurrenceParams = dict[str, Any]


def _is_list_param(name: str) -> bool:
    return name.startswith(LIST_PARAM_PREFIX)


# =============================================================================
# Parsing
# =============================================================================


def parse_recurrence_params(recurrence: str, **extra: Any) -> RecurrenceParams:
    """Translate an RRULE value into recurrence parameters.

    Args:
        recurrence: RRULE value such as ``FREQ=DAILY;INTERVAL=2``
        **extra: Additional parameters (e.g. ``dtstart``) merged in as given;
            parts of the RRULE value take precedence

    Returns:
        Mapping from lower-cased parameter name to a string, a list of
        strings (``by*`` parameters) or a datetime (``until``)

    Raises:
        ICalFormatError: If a part has no ``=`` or ``until`` is not a valid
            date-time
    """
    params: RecurrenceParams = dict(extra)

    text = recurrence
    if text[: len(RRULE_PROPERTY_PREFIX)].upper() == RRULE_PROPERTY_PREFIX:
        text = text[len(RRULE_PROPERTY_PREFIX) :]

    for part in text.split(RRULE_PART_SEPARATOR):
        if not part:
            continue

        name, separator, value = part.partition(RRULE_VALUE_SEPARATOR)
        if not separator:
            raise ICalFormatError(f"Invalid ICal recurrence part {part!r}", recurrence)

        name = name.lower()
        if name != UNTIL_PARAM:
            value = value.lower()

        if _is_list_param(name):
            params[name] = value.split(RRULE_LIST_SEPARATOR)
        else:
            params[name] = value

    until = params.get(UNTIL_PARAM)
    if isinstance(until, str):
        params[UNTIL_PARAM] = parse_datetime(until)

    return params


# =============================================================================
# Formatting
# =============================================================================


def _format_until(value: Any) -> str:
    if isinstance(value, str):
        return value
    # An RRULE part cannot carry a TZID prefix, so named zones are written in UTC
    if isinstance(value, datetime) and time_zone_kind(value) is TimeZoneKind.NAMED:
        value = to_utc(value)
    return format_datetime(value)


def format_recurrence(params: Mapping[str, Any]) -> str:
    """Format recurrence parameters as an RRULE value.

    ``freq`` is written first, the remaining RRULE parameters follow in
    mapping order. Parameters that are not part of an RRULE value (such as
    ``dtstart``) are skipped.

    Args:
        params: Mapping as produced by parse_recurrence_params

    Returns:
        RRULE value such as ``FREQ=MONTHLY;COUNT=10;BYDAY=1FR``
    """
    names = sorted(
        (name for name in params if name.lower() in RRULE_PARAMS),
        key=lambda name: name.lower() != FREQ_PARAM,
    )

    parts = []
    for name in names:
        value = params[name]
        key = name.lower()

        if key == UNTIL_PARAM:
            text = _format_until(value)
        elif _is_list_param(key) and not isinstance(value, str):
            text = RRULE_LIST_SEPARATOR.join(str(item) for item in value).upper()
        else:
            text = str(value).upper()

        parts.append(f"{key.upper()}{RRULE_VALUE_SEPARATOR}{text}")

    return RRULE_PART_SEPARATOR.join(parts)
