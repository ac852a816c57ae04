"""
Calendar contexts for branch-aware component arithmetic.

A CalendarContext bundles the timezone, first weekday and locale that every
component extraction runs against. Contexts are rebuilt from the settings
on each call instead of being cached, so a branch switch takes effect
immediately.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from ...config.schema import TimezoneSettings
from .timezone import (
    VIETNAM,
    ensure_timezone_aware,
    get_system_timezone,
    resolve_effective_timezone,
)


logger = logging.getLogger(__name__)

# Weekday numbering follows the Gregorian calendar convention: 1 = Sunday.
SUNDAY = 1
MONDAY = 2
SATURDAY = 7

POSIX_LOCALE = "en_US_POSIX"


@dataclass(frozen=True)
class CalendarContext:
    """Timezone, first weekday and locale used for calendar computations."""

    timezone: ZoneInfo
    first_weekday: int = SUNDAY
    locale: str = POSIX_LOCALE

    def __post_init__(self) -> None:
        if not SUNDAY <= self.first_weekday <= SATURDAY:
            raise ValueError(f"first_weekday must be within 1..7, got {self.first_weekday}")

    def localize(self, ts: datetime) -> datetime:
        """Express an instant as wall-clock time in this calendar's zone."""
        return ensure_timezone_aware(ts).astimezone(self.timezone)

    def from_wall(self, wall: datetime) -> datetime:
        """
        Attach this calendar's zone to a wall-clock time.

        The result is normalized, so a wall time that falls into a DST gap is
        shifted to the instant the zone actually reaches.
        """
        return wall.replace(tzinfo=self.timezone).astimezone(self.timezone)

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def weekday(self, ts: datetime) -> int:
        """Weekday of the instant, 1 = Sunday ... 7 = Saturday."""
        return self.localize(ts).isoweekday() % 7 + 1

    def days_since_week_start(self, ts: datetime) -> int:
        return (self.weekday(ts) - self.first_weekday) % 7

    def start_of_day(self, ts: datetime) -> datetime:
        local = self.localize(ts)
        return self.from_wall(
            local.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)
        )

    def start_of_week(self, ts: datetime) -> datetime:
        local = self.localize(ts).replace(tzinfo=None)
        first = local - timedelta(days=self.days_since_week_start(ts))
        return self.from_wall(first.replace(hour=0, minute=0, second=0, microsecond=0))


def host_calendar() -> CalendarContext:
    """Calendar of the host device: system timezone, Sunday-first weeks."""
    return CalendarContext(timezone=get_system_timezone())


def resolve_calendar(settings: TimezoneSettings) -> CalendarContext:
    """
    Build the calendar used for branch-facing computations.

    Args:
        settings: Branch timezone settings

    Returns:
        Calendar in the resolved branch timezone when multi-timezone mode is
        on, otherwise the host calendar

    Examples:
        >>> resolve_calendar(TimezoneSettings()).timezone == get_system_timezone()
        True
    """
    if not settings.multi_timezone_enabled:
        return host_calendar()
    zone = resolve_effective_timezone(settings)
    return CalendarContext(timezone=zone.zone)


def resolve_vietnam_calendar(settings: TimezoneSettings) -> CalendarContext:
    """
    Build the calendar used for API request timestamps.

    In multi-timezone mode this is always Asia/Ho_Chi_Minh regardless of the
    branch or retailer identifiers, so outbound requests carry one regional
    offset even while the UI shows branch time.

    Args:
        settings: Branch timezone settings

    Returns:
        Vietnam calendar in multi-timezone mode, otherwise the host calendar
    """
    if not settings.multi_timezone_enabled:
        return host_calendar()
    return CalendarContext(timezone=VIETNAM.zone)


def monday_first(context: CalendarContext) -> CalendarContext:
    """Same calendar with ISO weeks starting on Monday."""
    return replace(context, first_weekday=MONDAY)
