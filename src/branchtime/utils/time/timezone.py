"""
Timezone handling and branch timezone resolution for branchtime.

This module owns the host timezone helpers and the resolver that turns the
branch/retailer settings into the effective timezone every formatter and
calendar computation uses.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from ...config.schema import TimezoneSettings


logger = logging.getLogger(__name__)

VIETNAM_TIMEZONE_ID = "Asia/Ho_Chi_Minh"
UTC = ZoneInfo("UTC")
GMT = ZoneInfo("GMT")


def get_system_timezone() -> ZoneInfo:
    """
    Get the system's local timezone.

    This function provides a consistent way to get the system timezone
    across different platforms (Linux/WSL, macOS, Windows).

    Returns:
        ZoneInfo object representing the local timezone

    Examples:
        >>> tz = get_system_timezone()
        >>> isinstance(tz, ZoneInfo)
        True
    """
    try:
        # Try "localtime" first (works on Linux/WSL)
        return ZoneInfo("localtime")
    except (ZoneInfoNotFoundError, ValueError):
        # Fall back to getting the key from datetime for macOS/Windows
        local_tz = datetime.now().astimezone().tzinfo
        if hasattr(local_tz, "key"):
            key = getattr(local_tz, "key")
            if isinstance(key, str):
                return ZoneInfo(key)
        return UTC


def get_system_now() -> datetime:
    """
    Get the current datetime in the system's local timezone.

    Returns:
        Current datetime in the system's local timezone (timezone-aware)
    """
    return datetime.now(get_system_timezone())


def ensure_timezone_aware(dt: datetime) -> datetime:
    """
    Ensure a datetime object is timezone-aware.

    If the datetime is naive (no timezone info), it will be assumed to be
    in the system's local timezone. If it's already timezone-aware, it
    will be returned unchanged.

    Args:
        dt: Datetime object that may be naive or timezone-aware

    Returns:
        Timezone-aware datetime object

    Examples:
        >>> naive_dt = datetime(2025, 7, 25, 14, 30, 0)
        >>> ensure_timezone_aware(naive_dt).tzinfo is not None
        True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=get_system_timezone())
    return dt


def to_system_timezone(dt: datetime) -> datetime:
    """
    Convert a datetime to the system's local timezone.

    Args:
        dt: Datetime object to convert, naive values are taken as local time

    Returns:
        Datetime object in the system's local timezone
    """
    return ensure_timezone_aware(dt).astimezone(get_system_timezone())


@lru_cache(maxsize=1)
def _known_timezone_identifiers() -> frozenset[str]:
    return frozenset(available_timezones())


def is_available(identifier: str) -> bool:
    """
    Check whether the platform timezone database knows an identifier.

    Args:
        identifier: IANA timezone identifier to check

    Returns:
        True if the identifier is in the known timezone list

    Examples:
        >>> is_available("Asia/Ho_Chi_Minh")
        True
        >>> is_available("Mars/Olympus_Mons")
        False
    """
    return identifier in _known_timezone_identifiers()


@dataclass(frozen=True)
class TimeZoneRef:
    """
    An IANA timezone identifier plus its offset from GMT.

    The offset is always derived at query time, two references are only
    "the same" for a given instant.
    """

    zone: ZoneInfo

    @classmethod
    def named(cls, identifier: str) -> "TimeZoneRef":
        """Build a reference from an IANA identifier."""
        return cls(ZoneInfo(identifier))

    @property
    def identifier(self) -> str:
        return self.zone.key

    def utc_offset(self, at: datetime | None = None) -> timedelta:
        """Offset from UTC at the given instant (now when omitted)."""
        moment = datetime.now(UTC) if at is None else ensure_timezone_aware(at)
        offset = moment.astimezone(self.zone).utcoffset()
        return offset if offset is not None else timedelta(0)

    def seconds_from_gmt(self, at: datetime | None = None) -> int:
        """Offset from GMT in whole seconds at the given instant."""
        return int(self.utc_offset(at).total_seconds())

    def is_same_offset(self, other: "TimeZoneRef", at: datetime | None = None) -> bool:
        """
        Check if both zones currently share the same offset from GMT.

        Args:
            other: Timezone to compare with
            at: Instant of the comparison, defaults to now

        Returns:
            True when the offsets at that instant are equal
        """
        if at is None:
            at = datetime.now(UTC)
        return self.seconds_from_gmt(at) == other.seconds_from_gmt(at)

    def __str__(self) -> str:
        return self.identifier


VIETNAM = TimeZoneRef.named(VIETNAM_TIMEZONE_ID)


def resolve_effective_timezone(settings: TimezoneSettings) -> TimeZoneRef:
    """
    Resolve the timezone of the current branch.

    The branch identifier wins, then the retailer identifier; each is only
    taken when multi-timezone mode is on and the identifier is known to the
    timezone database. Everything else falls back to Asia/Ho_Chi_Minh.

    Args:
        settings: Branch timezone settings

    Returns:
        The effective branch timezone, never None

    Examples:
        >>> settings = TimezoneSettings(multi_timezone_enabled=True, branch_timezone_id="Asia/Tokyo")
        >>> resolve_effective_timezone(settings).identifier
        'Asia/Tokyo'
        >>> resolve_effective_timezone(TimezoneSettings()).identifier
        'Asia/Ho_Chi_Minh'
    """
    branch_id = settings.branch_timezone_id
    if branch_id and settings.multi_timezone_enabled and is_available(branch_id):
        logger.debug(f"Using branch timezone {branch_id}")
        return TimeZoneRef.named(branch_id)

    retailer_id = settings.retailer_timezone_id
    if retailer_id and settings.multi_timezone_enabled and is_available(retailer_id):
        logger.debug(f"Using retailer timezone {retailer_id}")
        return TimeZoneRef.named(retailer_id)

    logger.debug(f"Falling back to {VIETNAM_TIMEZONE_ID}")
    return VIETNAM
