"""iCal codec exception classes."""

from __future__ import annotations


class ICalError(Exception):
    """Base exception for all iCal codec errors."""


class ICalFormatError(ICalError, ValueError):
    """Text does not match the iCal grammar for its value type.

    The offending input is kept on ``text`` and always quoted in the message.
    """

    text: str

    def __init__(self, message: str, text: str) -> None:
        super().__init__(f"{message} ({text})")
        self.text = text


class ICalOrderingError(ICalError, ValueError):
    """Period end precedes its start."""


class ICalUnrepresentableError(ICalError, ValueError):
    """Value cannot be expressed in the iCal grammar (e.g. months in a duration)."""
