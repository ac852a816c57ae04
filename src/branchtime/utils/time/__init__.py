"""
Branch-aware time utilities for branchtime.

This package resolves the effective branch timezone and provides consistent
formatting, parsing and calendar arithmetic against it.
"""

from .timezone import (
    get_system_timezone,
    get_system_now,
    ensure_timezone_aware,
    to_system_timezone,
    is_available,
    resolve_effective_timezone,
    TimeZoneRef,
    VIETNAM_TIMEZONE_ID,
)
from .calendar import (
    CalendarContext,
    host_calendar,
    resolve_calendar,
    resolve_vietnam_calendar,
    monday_first,
)
from .formats import DateTimeFormat, DEFAULT_FORMAT
from .formatting import (
    to_string_utc,
    to_string,
    iso8601_request_api,
    iso8601_string,
    convert_timezone,
    parse_date,
    parse_iso8601,
    is_iso8601_format,
)
from .arithmetic import (
    CalendarUnit,
    adding,
    beginning_of,
    end_of,
    set_component,
    changing,
    make_datetime,
)
from .relative import (
    time_ago_string,
    dif_days,
    week_of_month_for_promotion,
)

__all__ = [
    "get_system_timezone",
    "get_system_now",
    "ensure_timezone_aware",
    "to_system_timezone",
    "is_available",
    "resolve_effective_timezone",
    "TimeZoneRef",
    "VIETNAM_TIMEZONE_ID",
    "CalendarContext",
    "host_calendar",
    "resolve_calendar",
    "resolve_vietnam_calendar",
    "monday_first",
    "DateTimeFormat",
    "DEFAULT_FORMAT",
    "to_string_utc",
    "to_string",
    "iso8601_request_api",
    "iso8601_string",
    "convert_timezone",
    "parse_date",
    "parse_iso8601",
    "is_iso8601_format",
    "CalendarUnit",
    "adding",
    "beginning_of",
    "end_of",
    "set_component",
    "changing",
    "make_datetime",
    "time_ago_string",
    "dif_days",
    "week_of_month_for_promotion",
]
