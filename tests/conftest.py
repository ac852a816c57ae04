"""
Global test configuration fixtures for branchtime tests.

This module provides reusable pytest fixtures for timezone settings,
configuration objects and calendar contexts. Calendar fixtures are pinned to
fixed IANA zones so results do not depend on the host timezone.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from branchtime.config.schema import BranchTimeConfig, TimezoneSettings
from branchtime.utils.time.calendar import MONDAY, CalendarContext


HO_CHI_MINH = ZoneInfo("Asia/Ho_Chi_Minh")
TOKYO = ZoneInfo("Asia/Tokyo")
NEW_YORK = ZoneInfo("America/New_York")
UTC_ZONE = ZoneInfo("UTC")


@pytest.fixture
def single_timezone_settings() -> TimezoneSettings:
    """
    Settings with multi-timezone mode off but identifiers configured.

    Returns:
        TimezoneSettings: Identifiers present that must be ignored
    """
    return TimezoneSettings(
        multi_timezone_enabled=False,
        retailer_timezone_id="Asia/Tokyo",
        branch_timezone_id="Europe/London",
    )


@pytest.fixture
def multi_timezone_settings() -> TimezoneSettings:
    """
    Settings with multi-timezone mode on and a Tokyo branch.

    Returns:
        TimezoneSettings: Branch zone Asia/Tokyo, retailer zone Asia/Bangkok
    """
    return TimezoneSettings(
        multi_timezone_enabled=True,
        retailer_timezone_id="Asia/Bangkok",
        branch_timezone_id="Asia/Tokyo",
    )


@pytest.fixture
def base_config(multi_timezone_settings: TimezoneSettings) -> BranchTimeConfig:
    """
    Create a complete configuration for manager tests.

    Returns:
        BranchTimeConfig: Multi-timezone configuration
    """
    return BranchTimeConfig(timezone=multi_timezone_settings)


@pytest.fixture
def vietnam_calendar() -> CalendarContext:
    """Sunday-first calendar in Asia/Ho_Chi_Minh (UTC+7, no DST)."""
    return CalendarContext(timezone=HO_CHI_MINH)


@pytest.fixture
def vietnam_monday_calendar() -> CalendarContext:
    """Monday-first calendar in Asia/Ho_Chi_Minh."""
    return CalendarContext(timezone=HO_CHI_MINH, first_weekday=MONDAY)


@pytest.fixture
def utc_calendar() -> CalendarContext:
    """Sunday-first calendar in UTC."""
    return CalendarContext(timezone=UTC_ZONE)


@pytest.fixture
def new_york_calendar() -> CalendarContext:
    """Sunday-first calendar in America/New_York, used for DST cases."""
    return CalendarContext(timezone=NEW_YORK)


@pytest.fixture
def fixed_now() -> datetime:
    """Wednesday 15 May 2024, 14:30:00 in Asia/Ho_Chi_Minh."""
    return datetime(2024, 5, 15, 14, 30, 0, tzinfo=HO_CHI_MINH)
