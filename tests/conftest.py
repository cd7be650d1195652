"""Shared test fixtures for icalformat tests."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

import pytest


@pytest.fixture
def chicago() -> ZoneInfo:
    """Named zone used for TZID tests."""
    return ZoneInfo("America/Chicago")


@pytest.fixture
def new_york() -> ZoneInfo:
    """Named zone with DST transitions used for period tests."""
    return ZoneInfo("America/New_York")


@pytest.fixture
def rfc_dtstart() -> datetime:
    """DTSTART used throughout the RFC 2445 recurrence examples (floating)."""
    return datetime(1997, 9, 2, 9, 0, 0)


@pytest.fixture
def sample_ical_values() -> dict[str, str]:
    """Sample iCal value strings taken from RFC 2445."""
    return {
        "datetime_utc": "19980119T070000Z",
        "datetime_floating": "19980118T230000",
        "datetime_tzid": "TZID=US-Eastern:19980119T020000",
        "date": "19970714",
        "duration": "P15DT5H0M20S",
        "duration_weeks": "P7W",
        "period_explicit": "19970101T180000Z/19970102T070000Z",
        "period_duration": "19970101T180000Z/PT5H30M",
        "recur": "FREQ=MONTHLY;BYDAY=MO,TU,WE,TH,FR;BYSETPOS=-1",
    }


# Test markers for different test types
def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast, pure codec)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (expands rules through dateutil)"
    )
