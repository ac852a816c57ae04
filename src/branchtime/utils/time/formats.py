"""Catalog of the date/time patterns shared across the retail clients."""

from enum import Enum


class DateTimeFormat(str, Enum):
    """Named LDML pattern strings understood by the pattern engine."""

    DD_MM_YYYY_HH_MM = "dd/MM/yyyy HH:mm"
    DD_MM_YYYY = "dd/MM/yyyy"
    YYYY_MM_DD = "yyyy-MM-dd"
    HH_MM_SS = "HH:mm:ss"
    HH_MM = "HH:mm"
    ISO_FRACTION_7 = "yyyy-MM-dd'T'HH:mm:ss.SSSSSSS"
    ISO_FRACTION_3 = "yyyy-MM-dd'T'HH:mm:ss.SSS"
    ISO_OFFSET_COLON = "yyyy-MM-dd'T'HH:mm:ssZZZZZ"
    # JavaScript Date.toString() output, e.g. "Mon Oct 02 2023 10:00:00 GMT+0700 (Indochina Time)"
    ICT_FULL = "E MMM dd yyyy HH:mm:ss 'GMT'z '(Indochina Time)'"
    ISO_FRACTION_3_OFFSET_NO_Z = "yyyy-MM-dd'T'HH:mm:ss.SSSxxx"
    ISO_FRACTION_3_OFFSET = "yyyy-MM-dd'T'HH:mm:ss.SSSXXX"
    ISO_OFFSET = "yyyy-MM-dd'T'HH:mm:ssZ"
    ISO_FRACTION_10_OFFSET = "yyyy-MM-dd'T'HH:mm:ss.SSSSSSSSSSXXX"

    @property
    def pattern(self) -> str:
        return self.value

    @property
    def is_iso8601(self) -> bool:
        """Whether the pattern is one of the machine-oriented ISO-8601 forms."""
        return "'T'" in self.value


DEFAULT_FORMAT = DateTimeFormat.ISO_FRACTION_3_OFFSET


__all__ = ["DateTimeFormat", "DEFAULT_FORMAT"]
