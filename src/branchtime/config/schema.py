"""Configuration schema for branchtime using nested Pydantic models."""

from collections.abc import Mapping
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TimezoneSettings(BaseModel):
    """
    Branch timezone settings read by the resolvers.

    The three values mirror what the retail client persists in its settings
    store: the multi-timezone toggle plus the retailer and branch IANA
    timezone identifiers.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    MULTI_TIMEZONE_KEY: ClassVar[str] = "net.citigo.userdefault.isUsingMultiTimezone"
    RETAILER_TIMEZONE_KEY: ClassVar[str] = (
        "net.citigo.userdefault.retailerTimeZoneIdentifier"
    )
    BRANCH_TIMEZONE_KEY: ClassVar[str] = (
        "net.citigo.userdefault.currentBranchTimezoneIdentifier"
    )

    multi_timezone_enabled: bool = Field(
        default=False,
        description="Whether branch times are displayed in the branch timezone instead of the device timezone",
    )
    retailer_timezone_id: str | None = Field(
        default=None,
        description="IANA timezone identifier of the retailer (e.g., Asia/Ho_Chi_Minh)",
    )
    branch_timezone_id: str | None = Field(
        default=None,
        description="IANA timezone identifier of the current branch",
    )

    @field_validator("retailer_timezone_id", "branch_timezone_id")
    @classmethod
    def normalize_timezone_id(cls, v: str | None) -> str | None:
        """Strip whitespace and treat blank identifiers as unset."""
        if v is None:
            return None
        v = v.strip()
        return v or None

    @classmethod
    def from_user_defaults(cls, values: Mapping[str, object]) -> "TimezoneSettings":
        """
        Build settings from a flat key/value settings store.

        Args:
            values: Mapping keyed by the ``net.citigo.userdefault.*`` keys

        Returns:
            TimezoneSettings populated from the mapping, missing keys use defaults

        Examples:
            >>> settings = TimezoneSettings.from_user_defaults({
            ...     "net.citigo.userdefault.isUsingMultiTimezone": True,
            ...     "net.citigo.userdefault.currentBranchTimezoneIdentifier": "Asia/Bangkok",
            ... })
            >>> settings.branch_timezone_id
            'Asia/Bangkok'
        """
        return cls(
            multi_timezone_enabled=bool(values.get(cls.MULTI_TIMEZONE_KEY, False)),
            retailer_timezone_id=_optional_str(values.get(cls.RETAILER_TIMEZONE_KEY)),
            branch_timezone_id=_optional_str(values.get(cls.BRANCH_TIMEZONE_KEY)),
        )

    def to_user_defaults(self) -> dict[str, object]:
        """Return the settings keyed the way the settings store expects."""
        return {
            self.MULTI_TIMEZONE_KEY: self.multi_timezone_enabled,
            self.RETAILER_TIMEZONE_KEY: self.retailer_timezone_id,
            self.BRANCH_TIMEZONE_KEY: self.branch_timezone_id,
        }


class BranchTimeConfig(BaseModel):
    """Root configuration model."""

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    timezone: TimezoneSettings = Field(default_factory=TimezoneSettings)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


__all__ = [
    "TimezoneSettings",
    "BranchTimeConfig",
]
