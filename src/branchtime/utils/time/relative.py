"""
Relative and human-readable date descriptions.

Vietnamese "time ago" strings, weekday labels and the week numbering used by
promotion scheduling. Callers pass the CalendarContext to compute in;
``now`` can be injected so the output is deterministic.
"""

from datetime import datetime

from .arithmetic import (
    CalendarUnit,
    adding,
    days_from,
    end_of_month,
    hours_from,
    is_in_today,
    is_in_yesterday,
    minutes_from,
    month,
    months_from,
    seconds_from,
    seconds_since,
    start_of_day,
    week_of_month,
    weekday,
    weeks_from,
    years_from,
)
from .calendar import CalendarContext, monday_first
from .formats import DateTimeFormat
from .formatting import format_datetime

# Indexed by weekday - 1 (1 = Sunday)
WEEKDAY_NAMES = (
    "Chủ nhật",
    "Thứ Hai",
    "Thứ Ba",
    "Thứ Tư",
    "Thứ Năm",
    "Thứ Sáu",
    "Thứ Bảy",
)
WEEKDAY_LABELS = (
    "Chủ nhật",
    "Thứ hai",
    "Thứ ba",
    "Thứ tư",
    "Thứ năm",
    "Thứ sáu",
    "Thứ bảy",
)

TODAY_LABEL = "Hôm nay"
YESTERDAY_LABEL = "Hôm qua"
FIRST_PROMOTION_WEEK = 1
LAST_PROMOTION_WEEK = 6


def time_ago_string(
    ts: datetime, context: CalendarContext, now: datetime | None = None
) -> str:
    """
    Describe how long ago a timestamp was, in Vietnamese.

    Same day of month and less than 24 hours ago:
    ``"{H} giờ trước"``, ``"{M} phút trước"`` or ``"vài giây trước"``.
    One calendar day earlier: ``"Hôm qua lúc HH:mm"``. Two to six calendar
    days earlier: the weekday name, e.g. ``"Thứ Hai lúc HH:mm"``.
    Anything else, future dates included: ``"{d} tháng {M} lúc HH:mm"``.

    Args:
        ts: Timestamp to describe
        context: Calendar the day boundaries and clock time are read in
        now: Reference instant, defaults to the current time

    Returns:
        Vietnamese description

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> ctx = CalendarContext(ZoneInfo("Asia/Ho_Chi_Minh"))
        >>> now = datetime(2024, 5, 10, 12, 0, tzinfo=ctx.timezone)
        >>> time_ago_string(datetime(2024, 5, 10, 9, 30, tzinfo=ctx.timezone), ctx, now)
        '2 giờ trước'
    """
    current = context.localize(now if now is not None else context.now())
    local = context.localize(ts)
    clock = format_datetime(local, DateTimeFormat.HH_MM, context.timezone)

    elapsed_seconds = int(seconds_since(current, local))
    sign = -1 if elapsed_seconds < 0 else 1
    hours = sign * (abs(elapsed_seconds) // 3600)
    minutes = sign * (abs(elapsed_seconds) % 3600 // 60)

    if hours < 24 and local.day == current.day:
        if hours >= 1:
            return f"{hours} giờ trước"
        if minutes >= 1:
            return f"{minutes} phút trước"
        return "vài giây trước"

    distance = (current.date() - local.date()).days
    if distance == 1:
        return f"{YESTERDAY_LABEL} lúc {clock}"
    if 2 <= distance <= 6:
        return f"{WEEKDAY_NAMES[weekday(local, context) - 1]} lúc {clock}"
    return f"{local.day} tháng {local.month} lúc {clock}"


def weekday_string(ts: datetime, context: CalendarContext) -> str:
    """Vietnamese weekday label, e.g. ``"Thứ hai"``."""
    return WEEKDAY_LABELS[weekday(ts, context) - 1]


def weekday_formatted_string(
    ts: datetime, context: CalendarContext, now: datetime | None = None
) -> str:
    """
    Label a date relative to today.

    Returns:
        ``"Hôm nay, dd/MM/yyyy"``, ``"Hôm qua, dd/MM/yyyy"`` or the weekday
        label for other days
    """
    text = format_datetime(ts, DateTimeFormat.DD_MM_YYYY, context.timezone)
    if is_in_today(ts, context, now):
        return f"{TODAY_LABEL}, {text}"
    if is_in_yesterday(ts, context, now):
        return f"{YESTERDAY_LABEL}, {text}"
    return weekday_string(ts, context)


def dif_days(start: datetime, end: datetime, context: CalendarContext) -> int:
    """
    Calendar days from ``start`` to ``end``, ignoring the time of day.

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> ctx = CalendarContext(ZoneInfo("UTC"))
        >>> dif_days(datetime(2024, 1, 1, 23, 59, tzinfo=ctx.timezone),
        ...          datetime(2024, 1, 2, 0, 1, tzinfo=ctx.timezone), ctx)
        1
    """
    return days_from(start_of_day(end, context), start_of_day(start, context), context)


def offset_string(ts: datetime, other: datetime, context: CalendarContext) -> str:
    """
    Largest non-zero unit between two timestamps as a compact string.

    Returns:
        ``"2y"``, ``"3M"``, ``"1w"``, ``"4d"``, ``"5h"``, ``"6m"``, ``"7s"``,
        or an empty string when they are less than a second apart
    """
    for measure, suffix in (
        (years_from, "y"),
        (months_from, "M"),
        (weeks_from, "w"),
        (days_from, "d"),
        (hours_from, "h"),
        (minutes_from, "m"),
        (seconds_from, "s"),
    ):
        amount = measure(ts, other, context)
        if amount > 0:
            return f"{amount}{suffix}"
    return ""


def total_week_in_month(ts: datetime, context: CalendarContext) -> int:
    """Number of (possibly partial) weeks the month of ``ts`` spans."""
    return week_of_month(end_of_month(ts, context), context)


def week_of_month_starting_monday(ts: datetime, context: CalendarContext) -> int:
    """Week of the month with weeks starting on Monday."""
    return week_of_month(ts, monday_first(context))


def is_in_first_week(ts: datetime, context: CalendarContext) -> bool:
    """Whether the date seven days earlier falls in another month."""
    return month(adding(ts, CalendarUnit.DAY, -7, context), context) != month(ts, context)


def is_in_last_week(ts: datetime, context: CalendarContext) -> bool:
    """Whether the date seven days later falls in another month."""
    return month(adding(ts, CalendarUnit.DAY, 7, context), context) != month(ts, context)


def week_of_month_for_promotion(ts: datetime, context: CalendarContext) -> int:
    """
    Week number used by promotion schedules.

    The first seven days of a month are always week 1 and the last seven days
    always week 6; days in between use Monday-first week of month.

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> ctx = CalendarContext(ZoneInfo("UTC"))
        >>> week_of_month_for_promotion(datetime(2024, 5, 7, tzinfo=ctx.timezone), ctx)
        1
        >>> week_of_month_for_promotion(datetime(2024, 5, 25, tzinfo=ctx.timezone), ctx)
        6
    """
    if is_in_first_week(ts, context):
        return FIRST_PROMOTION_WEEK
    if is_in_last_week(ts, context):
        return LAST_PROMOTION_WEEK
    return week_of_month_starting_monday(ts, context)


__all__ = [
    "WEEKDAY_NAMES",
    "WEEKDAY_LABELS",
    "time_ago_string",
    "weekday_string",
    "weekday_formatted_string",
    "dif_days",
    "offset_string",
    "total_week_in_month",
    "week_of_month_starting_monday",
    "is_in_first_week",
    "is_in_last_week",
    "week_of_month_for_promotion",
]
