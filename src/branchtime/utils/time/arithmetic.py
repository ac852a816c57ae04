"""
Calendar component arithmetic on branch calendars.

All functions are pure: they take an aware timestamp and a CalendarContext
and return a new timestamp expressed in the context's timezone. Calendar
units (day, week, month, year) move the wall clock; clock units (hour,
minute, second) move elapsed time.
"""

import calendar as _gregorian
import math
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

from ..core.exceptions import InvalidComponentError
from .calendar import SATURDAY, SUNDAY, CalendarContext
from .timezone import UTC, ensure_timezone_aware


class CalendarUnit(str, Enum):
    """Calendar components understood by the arithmetic helpers."""

    ERA = "era"
    YEAR = "year"
    QUARTER = "quarter"
    MONTH = "month"
    WEEK_OF_YEAR = "week_of_year"
    WEEK_OF_MONTH = "week_of_month"
    WEEKDAY = "weekday"
    DAY = "day"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"
    MILLISECOND = "millisecond"
    NANOSECOND = "nanosecond"


WEEK_UNITS = frozenset({CalendarUnit.WEEK_OF_YEAR, CalendarUnit.WEEK_OF_MONTH})

_ONE_SECOND = timedelta(seconds=1)


def _wall(ts: datetime, context: CalendarContext) -> datetime:
    """Naive wall clock of the instant in the context zone."""
    return context.localize(ts).replace(tzinfo=None)


def _utc(ts: datetime) -> datetime:
    return ensure_timezone_aware(ts).astimezone(UTC)


def _weekday_number(day: date) -> int:
    return day.isoweekday() % 7 + 1


def _first_invalid_field(fields: dict[str, int]) -> tuple[str, int]:
    year, month = fields["year"], fields["month"]
    if not MINYEAR <= year <= MAXYEAR:
        return "year", year
    if not 1 <= month <= 12:
        return "month", month
    if not 1 <= fields["day"] <= _gregorian.monthrange(year, month)[1]:
        return "day", fields["day"]
    for name, upper in (("hour", 23), ("minute", 59), ("second", 59), ("microsecond", 999_999)):
        if not 0 <= fields[name] <= upper:
            return name, fields[name]
    return "date", fields["day"]


def _build(fields: dict[str, int], context: CalendarContext) -> datetime:
    try:
        wall = datetime(**fields)
    except (ValueError, OverflowError) as e:
        unit, value = _first_invalid_field(fields)
        raise InvalidComponentError(unit, value, context=fields) from e
    return context.from_wall(wall)


def _fields(wall: datetime) -> dict[str, int]:
    return {
        "year": wall.year,
        "month": wall.month,
        "day": wall.day,
        "hour": wall.hour,
        "minute": wall.minute,
        "second": wall.second,
        "microsecond": wall.microsecond,
    }


def _truncating_div(delta: timedelta, unit: timedelta) -> int:
    whole = abs(delta) // unit
    return whole if delta >= timedelta(0) else -whole


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def make_datetime(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: int = 0,
    nanosecond: int = 0,
    *,
    context: CalendarContext,
) -> datetime:
    """
    Build a timestamp from wall-clock components in the context zone.

    Args:
        year: Gregorian year
        month: Month 1-12
        day: Day of month
        hour: Hour 0-23
        minute: Minute 0-59
        second: Second 0-59
        nanosecond: Nanoseconds, kept to microsecond precision
        context: Calendar whose zone the components are in

    Returns:
        Timezone-aware timestamp

    Raises:
        InvalidComponentError: If the components do not name a real date/time
    """
    if not 0 <= nanosecond < 1_000_000_000:
        raise InvalidComponentError("nanosecond", nanosecond)
    return _build(
        {
            "year": year,
            "month": month,
            "day": day,
            "hour": hour,
            "minute": minute,
            "second": second,
            "microsecond": nanosecond // 1000,
        },
        context,
    )


def from_unix_timestamp(value: float, context: CalendarContext | None = None) -> datetime:
    """Timestamp from seconds since the Unix epoch."""
    ts = datetime.fromtimestamp(value, tz=UTC)
    return context.localize(ts) if context is not None else ts


def unix_timestamp(ts: datetime) -> float:
    """Seconds since the Unix epoch."""
    return ensure_timezone_aware(ts).timestamp()


# ---------------------------------------------------------------------------
# Component getters
# ---------------------------------------------------------------------------


def era(ts: datetime, context: CalendarContext) -> int:
    """Gregorian era, 1 (AD) for every representable timestamp."""
    return 1


def year(ts: datetime, context: CalendarContext) -> int:
    return context.localize(ts).year


def quarter(ts: datetime, context: CalendarContext) -> int:
    return (context.localize(ts).month - 1) // 3 + 1


def month(ts: datetime, context: CalendarContext) -> int:
    return context.localize(ts).month


def day(ts: datetime, context: CalendarContext) -> int:
    return context.localize(ts).day


def weekday(ts: datetime, context: CalendarContext) -> int:
    """Weekday, 1 = Sunday ... 7 = Saturday."""
    return context.weekday(ts)


def hour(ts: datetime, context: CalendarContext) -> int:
    return context.localize(ts).hour


def minute(ts: datetime, context: CalendarContext) -> int:
    return context.localize(ts).minute


def second(ts: datetime, context: CalendarContext) -> int:
    return context.localize(ts).second


def nanosecond(ts: datetime, context: CalendarContext) -> int:
    return context.localize(ts).microsecond * 1000


def millisecond(ts: datetime, context: CalendarContext) -> int:
    return context.localize(ts).microsecond // 1000


def week_of_month(ts: datetime, context: CalendarContext) -> int:
    """
    Week of the month, counting from the context's first weekday.

    The first week is the one holding day 1, however few days it has.

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> ctx = CalendarContext(ZoneInfo("UTC"))
        >>> week_of_month(datetime(2024, 5, 5, tzinfo=ZoneInfo("UTC")), ctx)  # Wed 1st, Sun 5th
        2
    """
    local = context.localize(ts)
    first = local.date().replace(day=1)
    lead = (_weekday_number(first) - context.first_weekday) % 7
    return (local.day - 1 + lead) // 7 + 1


def week_of_year(ts: datetime, context: CalendarContext) -> int:
    """
    Week of the year, counting from the context's first weekday.

    Week 1 is the week holding January 1st, so the last days of December
    can belong to week 1 of the following year.
    """
    local = context.localize(ts).date()
    week_start = local - timedelta(days=(_weekday_number(local) - context.first_weekday) % 7)
    next_new_year = date(local.year + 1, 1, 1) if local.year < MAXYEAR else None
    if next_new_year is not None and week_start + timedelta(days=7) > next_new_year:
        return 1
    new_year = date(local.year, 1, 1)
    lead = (_weekday_number(new_year) - context.first_weekday) % 7
    return (local.timetuple().tm_yday - 1 + lead) // 7 + 1


_GETTERS = {
    CalendarUnit.ERA: era,
    CalendarUnit.YEAR: year,
    CalendarUnit.QUARTER: quarter,
    CalendarUnit.MONTH: month,
    CalendarUnit.WEEK_OF_YEAR: week_of_year,
    CalendarUnit.WEEK_OF_MONTH: week_of_month,
    CalendarUnit.WEEKDAY: weekday,
    CalendarUnit.DAY: day,
    CalendarUnit.HOUR: hour,
    CalendarUnit.MINUTE: minute,
    CalendarUnit.SECOND: second,
    CalendarUnit.MILLISECOND: millisecond,
    CalendarUnit.NANOSECOND: nanosecond,
}


def component(ts: datetime, unit: CalendarUnit, context: CalendarContext) -> int:
    """Read one calendar component of a timestamp."""
    return _GETTERS[unit](ts, context)


# ---------------------------------------------------------------------------
# Component setters
# ---------------------------------------------------------------------------


def set_component(
    ts: datetime, unit: CalendarUnit, value: int, context: CalendarContext
) -> datetime:
    """
    Return a timestamp with one component replaced, keeping the others.

    Args:
        ts: Source timestamp, never modified
        unit: Component to replace
        value: New component value
        context: Calendar the components are read in

    Returns:
        New timestamp in the context zone

    Raises:
        InvalidComponentError: If the resulting date does not exist (e.g. 30 February)
        ValueError: If the unit cannot be set directly

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> ctx = CalendarContext(ZoneInfo("UTC"))
        >>> set_component(datetime(2024, 1, 31, tzinfo=ZoneInfo("UTC")), CalendarUnit.MONTH, 2, ctx)
        Traceback (most recent call last):
        ...
        branchtime.utils.core.exceptions.InvalidComponentError: Invalid value 31 for calendar component 'day'
    """
    wall = _wall(ts, context)
    fields = _fields(wall)
    match unit:
        case (
            CalendarUnit.YEAR
            | CalendarUnit.MONTH
            | CalendarUnit.DAY
            | CalendarUnit.HOUR
            | CalendarUnit.MINUTE
            | CalendarUnit.SECOND
        ):
            fields[unit.value] = value
        case CalendarUnit.MILLISECOND:
            if not 0 <= value <= 999:
                raise InvalidComponentError(unit.value, value)
            fields["microsecond"] = value * 1000
        case CalendarUnit.NANOSECOND:
            if not 0 <= value < 1_000_000_000:
                raise InvalidComponentError(unit.value, value)
            fields["microsecond"] = value // 1000
        case CalendarUnit.WEEKDAY:
            if not SUNDAY <= value <= SATURDAY:
                raise InvalidComponentError(unit.value, value)
            return changed_weekday(ts, value, context)
        case _:
            raise ValueError(f"Calendar unit {unit.value} cannot be set directly")
    return _build(fields, context)


def changing(
    ts: datetime, unit: CalendarUnit, value: int, context: CalendarContext
) -> datetime | None:
    """Nullable variant of set_component: None when the date would not exist."""
    try:
        return set_component(ts, unit, value, context)
    except InvalidComponentError:
        return None


def changed(
    ts: datetime,
    context: CalendarContext,
    *,
    year: int | None = None,
    month: int | None = None,
    day: int | None = None,
    hour: int | None = None,
    minute: int | None = None,
    second: int | None = None,
    nanosecond: int | None = None,
) -> datetime | None:
    """
    Replace several wall-clock components at once.

    Returns:
        New timestamp, or None when the combination is not a real date/time
    """
    fields = _fields(_wall(ts, context))
    for name, value in (
        ("year", year),
        ("month", month),
        ("day", day),
        ("hour", hour),
        ("minute", minute),
        ("second", second),
    ):
        if value is not None:
            fields[name] = value
    if nanosecond is not None:
        if not 0 <= nanosecond < 1_000_000_000:
            return None
        fields["microsecond"] = nanosecond // 1000
    try:
        return _build(fields, context)
    except InvalidComponentError:
        return None


def changed_weekday(ts: datetime, weekday_value: int, context: CalendarContext) -> datetime:
    """Move to another weekday of the same Sunday-based week, keeping the time."""
    return adding(ts, CalendarUnit.DAY, weekday_value - weekday(ts, context), context)


# ---------------------------------------------------------------------------
# Adding
# ---------------------------------------------------------------------------


def adding(ts: datetime, unit: CalendarUnit, value: int, context: CalendarContext) -> datetime:
    """
    Add an amount of a calendar unit.

    Day, week, month and year steps keep the wall-clock time, with month ends
    clamped (31 January + 1 month = 29 February in a leap year). Hour,
    minute, second and sub-second steps add elapsed time.

    Raises:
        ValueError: If the unit cannot be added
    """
    ts = ensure_timezone_aware(ts)
    match unit:
        case CalendarUnit.NANOSECOND:
            return context.localize(_utc(ts) + timedelta(microseconds=value // 1000))
        case CalendarUnit.MILLISECOND:
            return context.localize(_utc(ts) + timedelta(milliseconds=value))
        case CalendarUnit.SECOND:
            return context.localize(_utc(ts) + timedelta(seconds=value))
        case CalendarUnit.MINUTE:
            return context.localize(_utc(ts) + timedelta(minutes=value))
        case CalendarUnit.HOUR:
            return context.localize(_utc(ts) + timedelta(hours=value))
        case CalendarUnit.DAY | CalendarUnit.WEEKDAY:
            step = relativedelta(days=value)
        case CalendarUnit.WEEK_OF_YEAR | CalendarUnit.WEEK_OF_MONTH:
            step = relativedelta(weeks=value)
        case CalendarUnit.MONTH:
            step = relativedelta(months=value)
        case CalendarUnit.QUARTER:
            step = relativedelta(months=3 * value)
        case CalendarUnit.YEAR:
            step = relativedelta(years=value)
        case _:
            raise ValueError(f"Calendar unit {unit.value} cannot be added")
    return context.from_wall(_wall(ts, context) + step)


def day_after(ts: datetime, context: CalendarContext) -> datetime:
    return adding(ts, CalendarUnit.DAY, 1, context)


def day_before(ts: datetime, context: CalendarContext) -> datetime:
    return adding(ts, CalendarUnit.DAY, -1, context)


def today(context: CalendarContext, now: datetime | None = None) -> datetime:
    """Midnight of the current day in the context zone."""
    return start_of_day(now if now is not None else context.now(), context)


def yesterday(context: CalendarContext, now: datetime | None = None) -> datetime:
    return day_before(today(context, now), context)


def tomorrow(context: CalendarContext, now: datetime | None = None) -> datetime:
    return day_after(today(context, now), context)


# ---------------------------------------------------------------------------
# Differences
# ---------------------------------------------------------------------------


def years_from(ts: datetime, other: datetime, context: CalendarContext) -> int:
    """Signed whole calendar years from ``other`` to ``ts``."""
    return relativedelta(_wall(ts, context), _wall(other, context)).years


def months_from(ts: datetime, other: datetime, context: CalendarContext) -> int:
    """
    Signed whole calendar months from ``other`` to ``ts``.

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> ctx = CalendarContext(ZoneInfo("UTC"))
        >>> utc = ZoneInfo("UTC")
        >>> months_from(datetime(2023, 2, 28, tzinfo=utc), datetime(2023, 1, 31, tzinfo=utc), ctx)
        0
    """
    delta = relativedelta(_wall(ts, context), _wall(other, context))
    return delta.years * 12 + delta.months


def weeks_from(ts: datetime, other: datetime, context: CalendarContext) -> int:
    """Signed whole weeks from ``other`` to ``ts``."""
    return _truncating_div(_wall(ts, context) - _wall(other, context), timedelta(weeks=1))


def days_from(ts: datetime, other: datetime, context: CalendarContext) -> int:
    """Signed whole days from ``other`` to ``ts``, measured on the wall clock."""
    return _truncating_div(_wall(ts, context) - _wall(other, context), timedelta(days=1))


def hours_from(ts: datetime, other: datetime, context: CalendarContext) -> int:
    """Signed whole hours of elapsed time from ``other`` to ``ts``."""
    return _truncating_div(_elapsed(ts, other), timedelta(hours=1))


def minutes_from(ts: datetime, other: datetime, context: CalendarContext) -> int:
    return _truncating_div(_elapsed(ts, other), timedelta(minutes=1))


def seconds_from(ts: datetime, other: datetime, context: CalendarContext) -> int:
    return _truncating_div(_elapsed(ts, other), _ONE_SECOND)


def milliseconds_from(ts: datetime, other: datetime) -> int:
    """Milliseconds in the sub-second remainder of the elapsed time, sign kept."""
    return int(math.fmod(_elapsed(ts, other).total_seconds(), 1) * 1000)


def _elapsed(ts: datetime, other: datetime) -> timedelta:
    return _utc(ts) - _utc(other)


def seconds_since(ts: datetime, other: datetime) -> float:
    return _elapsed(ts, other).total_seconds()


def minutes_since(ts: datetime, other: datetime) -> float:
    return seconds_since(ts, other) / 60


def hours_since(ts: datetime, other: datetime) -> float:
    return seconds_since(ts, other) / 3600


def days_since(ts: datetime, other: datetime) -> float:
    return seconds_since(ts, other) / (3600 * 24)


# ---------------------------------------------------------------------------
# Period boundaries
# ---------------------------------------------------------------------------


def beginning_of(ts: datetime, unit: CalendarUnit, context: CalendarContext) -> datetime:
    """
    First instant of the second, minute, hour, day, week, month or year holding ``ts``.

    Raises:
        ValueError: For units without a period (e.g. weekday)
    """
    wall = _wall(ts, context)
    match unit:
        case CalendarUnit.SECOND:
            return context.from_wall(wall.replace(microsecond=0))
        case CalendarUnit.MINUTE:
            return context.from_wall(wall.replace(second=0, microsecond=0))
        case CalendarUnit.HOUR:
            return context.from_wall(wall.replace(minute=0, second=0, microsecond=0))
        case CalendarUnit.DAY:
            return context.start_of_day(ts)
        case CalendarUnit.WEEK_OF_YEAR | CalendarUnit.WEEK_OF_MONTH:
            return context.start_of_week(ts)
        case CalendarUnit.MONTH:
            return context.from_wall(
                wall.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
            )
        case CalendarUnit.YEAR:
            return context.from_wall(
                wall.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
            )
        case _:
            raise ValueError(f"Calendar unit {unit.value} has no period boundary")


def end_of(ts: datetime, unit: CalendarUnit, context: CalendarContext) -> datetime:
    """
    Last whole second of the period holding ``ts``.

    Computed as the start of the period one unit later minus one second. The
    week is the exception: its start plus seven days minus one second.

    Raises:
        ValueError: For units without a period (e.g. weekday)
    """
    if unit in WEEK_UNITS:
        week_start = beginning_of(ts, unit, context)
        return adding(adding(week_start, CalendarUnit.DAY, 7, context), CalendarUnit.SECOND, -1, context)
    if unit not in (
        CalendarUnit.SECOND,
        CalendarUnit.MINUTE,
        CalendarUnit.HOUR,
        CalendarUnit.DAY,
        CalendarUnit.MONTH,
        CalendarUnit.YEAR,
    ):
        raise ValueError(f"Calendar unit {unit.value} has no period boundary")
    following = beginning_of(adding(ts, unit, 1, context), unit, context)
    return adding(following, CalendarUnit.SECOND, -1, context)


_TRUNCATION_ORDER = (
    CalendarUnit.MONTH,
    CalendarUnit.DAY,
    CalendarUnit.HOUR,
    CalendarUnit.MINUTE,
    CalendarUnit.SECOND,
    CalendarUnit.NANOSECOND,
)


def truncated(
    ts: datetime, units: list[CalendarUnit], context: CalendarContext
) -> datetime:
    """Reset the listed components to their minimum (month/day to 1, clock fields to 0)."""
    fields = _fields(_wall(ts, context))
    for unit in units:
        match unit:
            case CalendarUnit.MONTH:
                fields["month"] = 1
            case CalendarUnit.DAY:
                fields["day"] = 1
            case CalendarUnit.HOUR:
                fields["hour"] = 0
            case CalendarUnit.MINUTE:
                fields["minute"] = 0
            case CalendarUnit.SECOND:
                fields["second"] = 0
            case CalendarUnit.NANOSECOND | CalendarUnit.MILLISECOND:
                fields["microsecond"] = 0
            case _:
                continue
    return _build(fields, context)


def truncated_from(ts: datetime, unit: CalendarUnit, context: CalendarContext) -> datetime:
    """Reset ``unit`` and every smaller component; other units return ``ts`` unchanged."""
    if unit not in _TRUNCATION_ORDER:
        return context.localize(ts)
    index = _TRUNCATION_ORDER.index(unit)
    return truncated(ts, list(_TRUNCATION_ORDER[index:]), context)


def start_of_day(ts: datetime, context: CalendarContext) -> datetime:
    return context.start_of_day(ts)


def end_of_day(ts: datetime, context: CalendarContext) -> datetime:
    """23:59:59 on the same day."""
    wall = _wall(ts, context)
    return context.from_wall(wall.replace(hour=23, minute=59, second=59, microsecond=0))


def start_of_month(ts: datetime, context: CalendarContext) -> datetime:
    return beginning_of(ts, CalendarUnit.MONTH, context)


def end_of_month(ts: datetime, context: CalendarContext) -> datetime:
    """23:59:59 on the last day of the month."""
    first = _wall(start_of_month(ts, context), context)
    return end_of_day(context.from_wall(first + relativedelta(months=1, days=-1)), context)


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


def _nearest(ts: datetime, context: CalendarContext, step: int, round_up_from: int) -> datetime:
    wall = _wall(ts, context)
    remainder = wall.minute % step
    if remainder < round_up_from:
        rounded = wall.minute - remainder
    else:
        rounded = wall.minute + step - remainder
    top_of_hour = wall.replace(minute=0, second=0, microsecond=0)
    return context.from_wall(top_of_hour + timedelta(minutes=rounded))


def nearest_five_minutes(ts: datetime, context: CalendarContext) -> datetime:
    """Round to a multiple of 5 minutes; remainders from 3 round up."""
    return _nearest(ts, context, 5, 3)


def nearest_ten_minutes(ts: datetime, context: CalendarContext) -> datetime:
    """Round to a multiple of 10 minutes; remainders from 6 round up."""
    return _nearest(ts, context, 10, 6)


def nearest_quarter_hour(ts: datetime, context: CalendarContext) -> datetime:
    """Round to a multiple of 15 minutes; remainders from 8 round up."""
    return _nearest(ts, context, 15, 8)


def nearest_half_hour(ts: datetime, context: CalendarContext) -> datetime:
    """Round to a multiple of 30 minutes; remainders from 15 round up."""
    return _nearest(ts, context, 30, 15)


def nearest_hour(ts: datetime, context: CalendarContext) -> datetime:
    """Round to the hour; minute 30 and later round up."""
    top = beginning_of(ts, CalendarUnit.HOUR, context)
    if minute(ts, context) >= 30:
        return adding(top, CalendarUnit.HOUR, 1, context)
    return top


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def _now(context: CalendarContext, now: datetime | None) -> datetime:
    return now if now is not None else context.now()


def is_in_future(ts: datetime, now: datetime | None = None) -> bool:
    return _utc(ts) > _utc(now if now is not None else datetime.now(UTC))


def is_in_past(ts: datetime, now: datetime | None = None) -> bool:
    return _utc(ts) < _utc(now if now is not None else datetime.now(UTC))


def is_in_current(
    ts: datetime, unit: CalendarUnit, context: CalendarContext, now: datetime | None = None
) -> bool:
    """Whether ``ts`` falls in the same day/week/month/... period as now."""
    return beginning_of(ts, unit, context) == beginning_of(_now(context, now), unit, context)


def is_in_today(ts: datetime, context: CalendarContext, now: datetime | None = None) -> bool:
    return is_in_current(ts, CalendarUnit.DAY, context, now)


def is_in_yesterday(ts: datetime, context: CalendarContext, now: datetime | None = None) -> bool:
    return start_of_day(ts, context) == yesterday(context, now)


def is_in_tomorrow(ts: datetime, context: CalendarContext, now: datetime | None = None) -> bool:
    return start_of_day(ts, context) == tomorrow(context, now)


def is_in_weekend(ts: datetime, context: CalendarContext) -> bool:
    return weekday(ts, context) in (SUNDAY, SATURDAY)


def is_in_weekday(ts: datetime, context: CalendarContext) -> bool:
    return not is_in_weekend(ts, context)


def is_in_this_week(ts: datetime, context: CalendarContext, now: datetime | None = None) -> bool:
    return is_in_current(ts, CalendarUnit.WEEK_OF_YEAR, context, now)


def is_in_this_month(ts: datetime, context: CalendarContext, now: datetime | None = None) -> bool:
    return is_in_current(ts, CalendarUnit.MONTH, context, now)


def is_in_this_year(ts: datetime, context: CalendarContext, now: datetime | None = None) -> bool:
    return is_in_current(ts, CalendarUnit.YEAR, context, now)


def is_in_same_day(ts: datetime, other: datetime, context: CalendarContext) -> bool:
    return start_of_day(ts, context) == start_of_day(other, context)


def is_in_same_month(ts: datetime, other: datetime, context: CalendarContext) -> bool:
    """Compares the month number only; January 2023 matches January 2024."""
    return month(ts, context) == month(other, context)
