"""
Timestamp formatting and parsing against branch timezones.

Every function here fixes the locale to POSIX. The timezone precedence is
deliberately different per call site (UTC-only, branch, request API and
cross-timezone conversion) and each has its own named function; they are not
interchangeable.
"""

import logging
import re
from datetime import datetime, tzinfo

from ...config.schema import TimezoneSettings
from . import pattern as engine
from .calendar import resolve_calendar, resolve_vietnam_calendar
from .formats import DEFAULT_FORMAT, DateTimeFormat
from .timezone import (
    GMT,
    UTC,
    TimeZoneRef,
    ensure_timezone_aware,
    get_system_timezone,
    resolve_effective_timezone,
)


logger = logging.getLogger(__name__)

ISO8601_PATTERN = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})([.]\d{1,10})?(Z|(\+\d{2}:\d{2})|(\+\d{4}))"
)
# Offset appended to ISO strings that arrive without one
DEFAULT_ISO_OFFSET = "+07:00"

TimezoneLike = TimeZoneRef | tzinfo


def _zone(value: TimezoneLike | None, default: tzinfo) -> tzinfo:
    if value is None:
        return default
    if isinstance(value, TimeZoneRef):
        return value.zone
    return value


def format_datetime(ts: datetime, fmt: DateTimeFormat, zone: tzinfo) -> str:
    """Render a timestamp with a catalog format in an explicit zone."""
    return engine.render(fmt.value, ensure_timezone_aware(ts), zone)


def parse_datetime(text: str, fmt: DateTimeFormat, zone: tzinfo) -> datetime | None:
    """Parse text with a catalog format in an explicit zone, None on failure."""
    return engine.parse(fmt.value, text, zone)


# ---------------------------------------------------------------------------
# Formatting call sites
# ---------------------------------------------------------------------------


def to_string_utc(ts: datetime, fmt: DateTimeFormat | None = None) -> str:
    """
    Format a timestamp at zero offset.

    Args:
        ts: Timestamp to format
        fmt: Catalog format, defaults to ``yyyy-MM-dd'T'HH:mm:ss.SSSXXX``

    Returns:
        Formatted text in UTC

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> to_string_utc(datetime(2024, 1, 1, 7, 0, tzinfo=ZoneInfo("Asia/Ho_Chi_Minh")))
        '2024-01-01T00:00:00.000Z'
    """
    return format_datetime(ts, fmt or DEFAULT_FORMAT, UTC)


def to_string(
    ts: datetime,
    fmt: DateTimeFormat | None = None,
    timezone: TimezoneLike | None = None,
    *,
    settings: TimezoneSettings,
) -> str:
    """
    Format a timestamp in the branch timezone or an explicit override.

    Args:
        ts: Timestamp to format
        fmt: Catalog format, defaults to ``yyyy-MM-dd'T'HH:mm:ss.SSSXXX``
        timezone: Explicit zone, wins over the resolved calendar zone
        settings: Branch timezone settings

    Returns:
        Formatted text
    """
    zone = _zone(timezone, resolve_calendar(settings).timezone)
    return format_datetime(ts, fmt or DEFAULT_FORMAT, zone)


def iso8601_request_api(ts: datetime, *, settings: TimezoneSettings) -> str:
    """
    Format a timestamp for outbound API requests.

    In multi-timezone mode the Vietnam zone is used with a full offset. In
    single-timezone mode the GMT wall clock is rendered without an offset
    field and a literal ``Z`` is appended; consumers rely on that suffix.

    Args:
        ts: Timestamp to format
        settings: Branch timezone settings

    Returns:
        ISO-8601 text, e.g. ``2024-01-01T07:00:00.000+07:00`` or
        ``2024-01-01T00:00:00.000Z``
    """
    if settings.multi_timezone_enabled:
        zone = resolve_vietnam_calendar(settings).timezone
        return format_datetime(ts, DateTimeFormat.ISO_FRACTION_3_OFFSET, zone)
    return format_datetime(ts, DateTimeFormat.ISO_FRACTION_3, GMT) + "Z"


def iso8601_string(ts: datetime, *, settings: TimezoneSettings) -> str:
    """
    Format a timestamp as ISO-8601 for display-side payloads.

    Branch timezone with offset in multi-timezone mode, otherwise GMT with a
    literal ``Z`` appended.
    """
    if settings.multi_timezone_enabled:
        zone = resolve_effective_timezone(settings).zone
        logger.debug(f"Formatting ISO-8601 string in branch timezone {zone}")
        return format_datetime(ts, DateTimeFormat.ISO_FRACTION_3_OFFSET, zone)
    logger.debug("Formatting ISO-8601 string in device timezone")
    return format_datetime(ts, DateTimeFormat.ISO_FRACTION_3, GMT) + "Z"


def iso8601_with_host_timezone_string(ts: datetime) -> str:
    """Host wall clock with millisecond precision and a literal ``Z`` suffix."""
    return format_datetime(ts, DateTimeFormat.ISO_FRACTION_3, get_system_timezone()) + "Z"


def time_string_gmt(ts: datetime) -> str:
    """Host wall clock with a numeric offset that is never ``Z``."""
    return format_datetime(
        ts, DateTimeFormat.ISO_FRACTION_3_OFFSET_NO_Z, get_system_timezone()
    )


def convert_timezone(
    ts: datetime,
    fmt: DateTimeFormat | None = None,
    from_timezone: TimezoneLike | None = None,
    to_timezone: TimezoneLike | None = None,
) -> datetime | None:
    """
    Shift a timestamp by rendering it in one zone and re-reading it in another.

    The wall clock of ``from_timezone`` is kept and reinterpreted in
    ``to_timezone``. Fields the format lacks are lost, and a format that
    carries an offset makes the conversion a no-op.

    Args:
        ts: Timestamp to convert
        fmt: Catalog format used for the round trip
        from_timezone: Source zone, host zone when None
        to_timezone: Target zone, host zone when None

    Returns:
        Converted timestamp, or None if the rendered text does not parse back

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> ts = datetime(2024, 1, 1, 10, 0, tzinfo=ZoneInfo("Asia/Ho_Chi_Minh"))
        >>> convert_timezone(ts, DateTimeFormat.ISO_FRACTION_3,
        ...                  ZoneInfo("Asia/Ho_Chi_Minh"), ZoneInfo("Asia/Tokyo")).hour
        10
    """
    fmt = fmt or DEFAULT_FORMAT
    host = get_system_timezone()
    text = format_datetime(ts, fmt, _zone(from_timezone, host))
    return parse_datetime(text, fmt, _zone(to_timezone, host))


def date_filter_display(ts: datetime, timezone: TimezoneLike) -> str:
    """``dd/MM/yyyy`` in the zone picked by a date filter."""
    return format_datetime(ts, DateTimeFormat.DD_MM_YYYY, _zone(timezone, UTC))


def date_time_string(ts: datetime, *, settings: TimezoneSettings) -> str:
    """``dd/MM/yyyy HH:mm`` in the branch calendar zone."""
    zone = resolve_calendar(settings).timezone
    return format_datetime(ts, DateTimeFormat.DD_MM_YYYY_HH_MM, zone)


def simple_date_string(ts: datetime, *, settings: TimezoneSettings) -> str:
    """``dd/MM/yyyy`` in the branch calendar zone."""
    zone = resolve_calendar(settings).timezone
    return format_datetime(ts, DateTimeFormat.DD_MM_YYYY, zone)


birthday_string = simple_date_string


def time_string(ts: datetime, *, settings: TimezoneSettings) -> str:
    """``HH:mm`` in the branch calendar zone."""
    zone = resolve_calendar(settings).timezone
    return format_datetime(ts, DateTimeFormat.HH_MM, zone)


def time_with_seconds_string(ts: datetime, *, settings: TimezoneSettings) -> str:
    """``HH:mm:ss`` in the branch calendar zone."""
    zone = resolve_calendar(settings).timezone
    return format_datetime(ts, DateTimeFormat.HH_MM_SS, zone)


def is_same_date_utc(first: datetime, second: datetime) -> bool:
    """Whether both timestamps render identically in UTC to the millisecond."""
    return to_string_utc(first) == to_string_utc(second)


# ---------------------------------------------------------------------------
# Parsing call sites
# ---------------------------------------------------------------------------


def parse_date(
    text: str,
    fmt: DateTimeFormat | None = None,
    timezone: TimezoneLike | None = None,
    *,
    settings: TimezoneSettings,
) -> datetime | None:
    """
    Parse text with a catalog format.

    Args:
        text: Text to parse
        fmt: Catalog format, defaults to ``yyyy-MM-dd'T'HH:mm:ss.SSSXXX``
        timezone: Zone for wall clocks without offset; only honoured in
            multi-timezone mode (host zone when omitted), UTC otherwise
        settings: Branch timezone settings

    Returns:
        Parsed timestamp or None
    """
    if settings.multi_timezone_enabled:
        zone = _zone(timezone, get_system_timezone())
    else:
        zone = UTC
    return parse_datetime(text, fmt or DEFAULT_FORMAT, zone)


def parse_iso8601(text: str, *, settings: TimezoneSettings) -> datetime | None:
    """
    Parse an ISO-8601 timestamp with fractional seconds or whole seconds.

    ``yyyy-MM-dd'T'HH:mm:ss.SSSXXX`` is tried first, then
    ``yyyy-MM-dd'T'HH:mm:ssZ``.

    Args:
        text: ISO-8601 text
        settings: Branch timezone settings

    Returns:
        Parsed timestamp in the branch zone (multi-timezone) or UTC, or None
    """
    if settings.multi_timezone_enabled:
        zone = resolve_effective_timezone(settings).zone
    else:
        zone = UTC
    for fmt in (DateTimeFormat.ISO_FRACTION_3_OFFSET, DateTimeFormat.ISO_OFFSET):
        result = parse_datetime(text, fmt, zone)
        if result is not None:
            return result
    return None


def is_iso8601_format(text: str) -> bool:
    """
    Check whether text looks like and parses as an ISO-8601 timestamp.

    Both checks must pass: the broad regex (which accepts ``Z``, ``+HH:MM``
    and ``+HHMM`` with 0-10 fractional digits) and a parse with
    ``yyyy-MM-dd'T'HH:mm:ss.SSSSSSSSSSXXX``. The parse side is stricter than
    the regex; for instance ``+0700`` or a missing fraction fails it.

    Args:
        text: Text to check

    Returns:
        True when both the regex and the parse succeed

    Examples:
        >>> is_iso8601_format("2023-10-01T10:00:00.1234567+07:00")
        True
        >>> is_iso8601_format("2023-10-01T10:00:00+0700")
        False
    """
    if not text:
        return False
    passes_regex = ISO8601_PATTERN.search(text) is not None
    parsed = parse_datetime(text, DateTimeFormat.ISO_FRACTION_10_OFFSET, get_system_timezone())
    return passes_regex and parsed is not None


def date_with_iso8601_format(text: str, *, settings: TimezoneSettings) -> datetime | None:
    """
    Parse ISO-8601 text, assuming ``+07:00`` when it carries no offset.

    Args:
        text: ISO-8601 text, with or without offset
        settings: Branch timezone settings

    Returns:
        Parsed timestamp or None
    """
    if not text:
        return None
    if "+" not in text and "z" not in text.lower():
        text = text + DEFAULT_ISO_OFFSET
    return parse_iso8601(text, settings=settings)


def date_with_ict_string(text: str) -> datetime | None:
    """
    Parse a JavaScript ``Date.toString()`` value in Indochina Time.

    Examples:
        >>> date_with_ict_string("Mon Oct 02 2023 10:00:00 GMT+0700 (Indochina Time)").astimezone(UTC).hour
        3
    """
    if not text:
        return None
    return parse_datetime(text, DateTimeFormat.ICT_FULL, get_system_timezone())


def date_from_day_month_year(text: str) -> datetime | None:
    """Parse ``dd/MM/yyyy`` as midnight in the host zone."""
    return parse_datetime(text, DateTimeFormat.DD_MM_YYYY, get_system_timezone())


__all__ = [
    "format_datetime",
    "parse_datetime",
    "to_string_utc",
    "to_string",
    "iso8601_request_api",
    "iso8601_string",
    "iso8601_with_host_timezone_string",
    "time_string_gmt",
    "convert_timezone",
    "date_filter_display",
    "date_time_string",
    "simple_date_string",
    "birthday_string",
    "time_string",
    "time_with_seconds_string",
    "is_same_date_utc",
    "parse_date",
    "parse_iso8601",
    "is_iso8601_format",
    "date_with_iso8601_format",
    "date_with_ict_string",
    "date_from_day_month_year",
]
