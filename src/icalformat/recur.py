"""Recurrence expansion through dateutil.

Recurrence parameters produced by the RRULE translator are converted into
``dateutil.rrule.rrule`` arguments. The resulting Recurrence is lazy,
restartable and yields strictly increasing datetimes.

As with iCal EXRULE handling, ``dtstart`` is not forced into the set: it is
only an occurrence when it matches the rule.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from datetime import datetime
from typing import Any

from dateutil import rrule as _rrule

from .codec.common import to_utc
from .codec.recurrence import RecurrenceParams, parse_recurrence_params
from .exceptions import ICalFormatError

logger = logging.getLogger(__name__)

# =============================================================================
# RRULE Value Maps (RFC 2445, section 4.3.10)
# =============================================================================

FREQUENCIES: dict[str, int] = {
    "yearly": _rrule.YEARLY,
    "monthly": _rrule.MONTHLY,
    "weekly": _rrule.WEEKLY,
    "daily": _rrule.DAILY,
    "hourly": _rrule.HOURLY,
    "minutely": _rrule.MINUTELY,
    "secondly": _rrule.SECONDLY,
}

WEEKDAYS: dict[str, _rrule.weekday] = {
    "mo": _rrule.MO,
    "tu": _rrule.TU,
    "we": _rrule.WE,
    "th": _rrule.TH,
    "fr": _rrule.FR,
    "sa": _rrule.SA,
    "su": _rrule.SU,
}

_ORDINAL_CHARS = "+-0123456789"


# =============================================================================
# Parameter Handlers
# =============================================================================


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, str):
        return value.split(",")
    return list(value)


def _to_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ICalFormatError(f"Invalid integer for recurrence parameter {name!r}", str(value)) from e


def _handle_int(kwargs: dict[str, Any], name: str, value: Any) -> None:
    kwargs[name] = _to_int(name, value)


def _handle_int_list(kwargs: dict[str, Any], name: str, value: Any) -> None:
    kwargs[name] = [_to_int(name, item) for item in _as_list(value)]


def _handle_freq(kwargs: dict[str, Any], name: str, value: Any) -> None:
    try:
        kwargs["freq"] = FREQUENCIES[str(value).lower()]
    except KeyError as e:
        raise ICalFormatError("Unknown recurrence frequency", str(value)) from e


def _weekday(value: str) -> _rrule.weekday:
    try:
        return WEEKDAYS[value.lower()]
    except KeyError as e:
        raise ICalFormatError("Unknown recurrence weekday", value) from e


def _handle_wkst(kwargs: dict[str, Any], name: str, value: Any) -> None:
    kwargs["wkst"] = _weekday(str(value))


def _handle_byday(kwargs: dict[str, Any], name: str, value: Any) -> None:
    weekdays = []
    for item in _as_list(value):
        item = str(item)
        day = item.lstrip(_ORDINAL_CHARS)
        ordinal = item[: len(item) - len(day)]
        weekday = _weekday(day)
        if not ordinal:
            weekdays.append(weekday)
            continue
        try:
            weekdays.append(weekday(_to_int(name, ordinal)))
        except ValueError as e:
            raise ICalFormatError("Invalid recurrence weekday ordinal", item) from e
    kwargs["byweekday"] = weekdays


def _handle_until(kwargs: dict[str, Any], name: str, value: Any) -> None:
    if not isinstance(value, datetime):
        raise ICalFormatError("Recurrence until must be a datetime", str(value))
    kwargs["until"] = value


_HANDLERS: dict[str, Callable[[dict[str, Any], str, Any], None]] = {
    "freq": _handle_freq,
    "interval": _handle_int,
    "count": _handle_int,
    "until": _handle_until,
    "wkst": _handle_wkst,
    "byday": _handle_byday,
    "bymonth": _handle_int_list,
    "bymonthday": _handle_int_list,
    "byyearday": _handle_int_list,
    "byweekno": _handle_int_list,
    "byhour": _handle_int_list,
    "byminute": _handle_int_list,
    "bysecond": _handle_int_list,
    "bysetpos": _handle_int_list,
}


def _reconcile(name: str, value: datetime, dtstart: datetime | None) -> datetime:
    """Match the zone awareness of a bound to dtstart.

    A floating bound takes dtstart's zone. A zoned bound against a floating
    (or missing) dtstart is expressed in UTC and made floating.
    """
    start_aware = dtstart is not None and dtstart.tzinfo is not None
    value_aware = value.tzinfo is not None

    if start_aware and not value_aware:
        logger.debug(f"Interpreting floating {name} {value.isoformat()} in dtstart's zone")
        return value.replace(tzinfo=dtstart.tzinfo)  # type: ignore[union-attr]

    if value_aware and not start_aware:
        logger.debug(f"Dropping zone from {name} {value.isoformat()} to match floating dtstart")
        return to_utc(value).replace(tzinfo=None)

    return value


# =============================================================================
# Recurrence
# =============================================================================


class Recurrence:
    """Lazy recurrence set backed by dateutil's rrule.

    Accepts the parameter mapping produced by parse_recurrence_params, plus
    optional ``dtstart`` (first candidate instant) and ``dtend`` (inclusive
    upper bound on occurrences).
    """

    # Public attributes
    params: RecurrenceParams
    dtstart: datetime | None
    dtend: datetime | None
    rule: _rrule.rrule

    def __init__(
        self,
        dtstart: datetime | None = None,
        dtend: datetime | None = None,
        **params: Any,
    ) -> None:
        """Build the recurrence rule.

        Args:
            dtstart: Start of the recurrence (defaults to now, as dateutil does)
            dtend: Inclusive upper bound for occurrences
            **params: Recurrence parameters (freq, interval, count, until, by*, wkst)

        Raises:
            ICalFormatError: If freq is missing, a parameter is unknown, or a
                value cannot be interpreted
        """
        if "freq" not in params:
            raise ICalFormatError("Recurrence has no frequency", repr(params))

        for name, bound in (("dtstart", dtstart), ("dtend", dtend)):
            if bound is not None and not isinstance(bound, datetime):
                raise ICalFormatError(f"Recurrence {name} must be a datetime", str(bound))

        self.params = dict(params)
        self.dtstart = dtstart
        self.dtend = _reconcile("dtend", dtend, dtstart) if dtend is not None else None

        kwargs: dict[str, Any] = {}
        for name, value in params.items():
            handler = _HANDLERS.get(name)
            if handler is None:
                raise ICalFormatError("Unsupported recurrence parameter", name)
            handler(kwargs, name, value)

        if "until" in kwargs:
            kwargs["until"] = _reconcile("until", kwargs["until"], dtstart)

        logger.debug(f"Building rrule from {kwargs} starting {dtstart}")

        try:
            self.rule = _rrule.rrule(dtstart=dtstart, **kwargs)
        except ValueError as e:
            raise ICalFormatError(f"Invalid recurrence: {e}", repr(params)) from e

    def _within_bound(self, value: datetime | None) -> datetime | None:
        if value is None or self.dtend is None or value <= self.dtend:
            return value
        return None

    def __iter__(self) -> Iterator[datetime]:
        for occurrence in self.rule:
            if self.dtend is not None and occurrence > self.dtend:
                return
            yield occurrence

    def after(self, value: datetime, inc: bool = False) -> datetime | None:
        """First occurrence after value (or at it, when inc is true)."""
        return self._within_bound(self.rule.after(value, inc=inc))

    def before(self, value: datetime, inc: bool = False) -> datetime | None:
        """Last occurrence before value (or at it, when inc is true)."""
        if self.dtend is not None and value > self.dtend:
            value, inc = self.dtend, True
        return self.rule.before(value, inc=inc)

    def between(self, after: datetime, before: datetime, inc: bool = False) -> list[datetime]:
        """All occurrences between two instants."""
        return [
            occurrence
            for occurrence in self.rule.between(after, before, inc=inc)
            if self._within_bound(occurrence) is not None
        ]

    def __repr__(self) -> str:
        return f"Recurrence(dtstart={self.dtstart!r}, dtend={self.dtend!r}, params={self.params!r})"


def parse_recurrence(recurrence: str, **extra: Any) -> Recurrence:
    """Parse an RRULE value into a recurrence set.

    Args:
        recurrence: RRULE value such as ``FREQ=MONTHLY;COUNT=10;BYDAY=1FR``
        **extra: Additional parameters, typically ``dtstart`` and ``dtend``

    Returns:
        Recurrence yielding the occurrences

    Raises:
        ICalFormatError: If the RRULE value or any parameter is invalid
    """
    return Recurrence(**parse_recurrence_params(recurrence, **extra))
