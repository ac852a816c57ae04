"""
LDML date pattern engine.

Renders and parses the ``yyyy-MM-dd'T'HH:mm:ss.SSSXXX`` style patterns used by
the retail clients, always under the POSIX locale (English names, ASCII
digits). Patterns are compiled once and cached.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache

from ..core.exceptions import PatternError


MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
# Indexed by datetime.weekday(): Monday = 0
DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

SUPPORTED_FIELDS = frozenset("yMdHmsSEZXxz")
NUMERIC_FIELDS = frozenset("yMdHmsS")


@dataclass(frozen=True)
class PatternField:
    """A run of one pattern letter, e.g. ``yyyy`` or ``SSS``."""

    letter: str
    count: int

    @property
    def is_numeric(self) -> bool:
        if self.letter == "M":
            return self.count <= 2
        return self.letter in NUMERIC_FIELDS


Token = str | PatternField


@dataclass(frozen=True)
class CompiledPattern:
    """Tokenized pattern with its parsing regex."""

    pattern: str
    tokens: tuple[Token, ...]
    regex: re.Pattern[str]


def tokenize(pattern: str) -> tuple[Token, ...]:
    """
    Split a pattern into literal strings and pattern fields.

    Args:
        pattern: LDML pattern, quoted text is literal and ``''`` is a quote

    Returns:
        Tuple of literal strings and PatternField entries

    Raises:
        PatternError: On unknown pattern letters or an unterminated quote

    Examples:
        >>> tokenize("HH'h'mm")
        (PatternField(letter='H', count=2), 'h', PatternField(letter='m', count=2))
    """
    tokens: list[Token] = []
    literal: list[str] = []
    i = 0
    length = len(pattern)

    def flush_literal() -> None:
        if literal:
            tokens.append("".join(literal))
            literal.clear()

    while i < length:
        char = pattern[i]
        if char == "'":
            if i + 1 < length and pattern[i + 1] == "'":
                literal.append("'")
                i += 2
                continue
            i += 1
            while True:
                if i >= length:
                    raise PatternError(f"Unterminated quote in pattern: {pattern!r}", pattern)
                if pattern[i] == "'":
                    if i + 1 < length and pattern[i + 1] == "'":
                        literal.append("'")
                        i += 2
                        continue
                    i += 1
                    break
                literal.append(pattern[i])
                i += 1
        elif char.isascii() and char.isalpha():
            if char not in SUPPORTED_FIELDS:
                raise PatternError(
                    f"Unsupported pattern letter {char!r} in {pattern!r}", pattern
                )
            end = i
            while end < length and pattern[end] == char:
                end += 1
            flush_literal()
            tokens.append(PatternField(char, end - i))
            i = end
        else:
            literal.append(char)
            i += 1

    flush_literal()
    return tuple(tokens)


@lru_cache(maxsize=64)
def compile_pattern(pattern: str) -> CompiledPattern:
    """Tokenize a pattern and build the regex used to parse it."""
    tokens = tokenize(pattern)
    parts: list[str] = []
    for index, token in enumerate(tokens):
        if isinstance(token, str):
            parts.append(re.escape(token))
            continue
        following = tokens[index + 1] if index + 1 < len(tokens) else None
        fixed_width = isinstance(following, PatternField) and following.is_numeric
        parts.append(f"(?P<f{index}>{_field_regex(token, fixed_width)})")
    return CompiledPattern(pattern, tokens, re.compile("".join(parts)))


def _field_regex(field: PatternField, fixed_width: bool) -> str:
    letter, count = field.letter, field.count
    match letter:
        case "y":
            if count == 2:
                return r"\d{2}"
            return rf"\d{{{count}}}" if fixed_width else r"\d{1,4}"
        case "M" if count >= 3:
            names = MONTH_NAMES if count == 4 else tuple(name[:3] for name in MONTH_NAMES)
            return "(?i:" + "|".join(names) + ")"
        case "M" | "d" | "H" | "m" | "s":
            return rf"\d{{{count}}}" if fixed_width else r"\d{1,2}"
        case "S":
            return rf"\d{{{count}}}" if fixed_width else r"\d+"
        case "E":
            names = DAY_NAMES if count == 4 else tuple(name[:3] for name in DAY_NAMES)
            return "(?i:" + "|".join(names) + ")"
        case "Z":
            if count == 4:
                return r"GMT(?:[+-]\d{2}:\d{2})?"
            if count == 5:
                return r"Z|[+-]\d{2}:\d{2}"
            return r"Z|[+-]\d{2}:?\d{2}"
        case "X" | "x":
            utc = "Z|" if letter == "X" else ""
            if count == 1:
                return utc + r"[+-]\d{2}(?:\d{2})?"
            if count in (2, 4):
                return utc + r"[+-]\d{4}"
            return utc + r"[+-]\d{2}:\d{2}"
        case "z":
            return r"[+-]\d{2}:?\d{2}|[+-]\d{1,2}"
        case _:
            raise PatternError(f"Unsupported pattern letter {letter!r}", letter)


def render(pattern: str, ts: datetime, zone: tzinfo) -> str:
    """
    Render an aware datetime with a pattern in the given zone.

    Args:
        pattern: LDML pattern
        ts: Timezone-aware datetime
        zone: Zone whose wall clock is rendered

    Returns:
        Rendered text

    Raises:
        ValueError: If the instant falls outside the datetime range in ``zone``

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> ts = datetime(2024, 3, 5, 1, 2, 3, 456789, tzinfo=ZoneInfo("UTC"))
        >>> render("yyyy-MM-dd'T'HH:mm:ss.SSSXXX", ts, ZoneInfo("Asia/Ho_Chi_Minh"))
        '2024-03-05T08:02:03.456+07:00'
    """
    compiled = compile_pattern(pattern)
    try:
        local = ts.astimezone(zone)
    except OverflowError as e:
        raise ValueError(f"{ts.isoformat()} cannot be expressed in {zone}") from e
    offset = local.utcoffset() or timedelta(0)
    return "".join(
        token if isinstance(token, str) else _render_field(token, local, offset)
        for token in compiled.tokens
    )


def _render_field(field: PatternField, local: datetime, offset: timedelta) -> str:
    letter, count = field.letter, field.count
    match letter:
        case "y":
            if count == 2:
                return f"{local.year % 100:02d}"
            return f"{local.year:0{count}d}"
        case "M":
            if count == 3:
                return MONTH_NAMES[local.month - 1][:3]
            if count == 4:
                return MONTH_NAMES[local.month - 1]
            if count >= 5:
                return MONTH_NAMES[local.month - 1][0]
            return f"{local.month:0{count}d}"
        case "d":
            return f"{local.day:0{count}d}"
        case "H":
            return f"{local.hour:0{count}d}"
        case "m":
            return f"{local.minute:0{count}d}"
        case "s":
            return f"{local.second:0{count}d}"
        case "S":
            # Truncated to the field width, never rounded
            return f"{local.microsecond:06d}"[:count].ljust(count, "0")
        case "E":
            name = DAY_NAMES[local.weekday()]
            if count == 4:
                return name
            if count >= 5:
                return name[0]
            return name[:3]
        case "Z":
            if count == 4:
                return "GMT" if not offset else "GMT" + _format_offset(offset, colon=True)
            if count == 5:
                return "Z" if not offset else _format_offset(offset, colon=True)
            return _format_offset(offset, colon=False)
        case "X" | "x":
            if letter == "X" and not offset:
                return "Z"
            if count == 1:
                text = _format_offset(offset, colon=False)
                return text[:3] if text.endswith("00") else text
            return _format_offset(offset, colon=count in (3, 5))
        case "z":
            return _format_offset(offset, colon=False)
        case _:
            raise PatternError(f"Unsupported pattern letter {letter!r}", letter)


def _format_offset(offset: timedelta, colon: bool) -> str:
    total_minutes = int(offset.total_seconds()) // 60
    sign = "-" if total_minutes < 0 else "+"
    hours, minutes = divmod(abs(total_minutes), 60)
    separator = ":" if colon else ""
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def _parse_offset(text: str) -> timedelta | None:
    if text.upper().startswith("GMT"):
        text = text[3:]
    if not text or text.upper() == "Z":
        return timedelta(0)
    sign = -1 if text[0] == "-" else 1
    digits = text[1:].replace(":", "")
    if len(digits) <= 2:
        hours, minutes = int(digits), 0
    else:
        hours, minutes = int(digits[:-2]), int(digits[-2:])
    if minutes > 59:
        return None
    return sign * timedelta(hours=hours, minutes=minutes)


def parse(pattern: str, text: str, zone: tzinfo) -> datetime | None:
    """
    Parse text with a pattern.

    Missing fields default to 1970-01-01 00:00:00. When the text carries an
    offset that offset fixes the instant, otherwise the wall clock is taken
    in ``zone``. The result is expressed in ``zone``.

    Args:
        pattern: LDML pattern
        text: Text to parse, must match the whole pattern
        zone: Zone used for wall clocks without an offset

    Returns:
        Aware datetime, or None when the text does not match or names an
        impossible date

    Examples:
        >>> from zoneinfo import ZoneInfo
        >>> parse("dd/MM/yyyy", "31/02/2024", ZoneInfo("UTC")) is None
        True
    """
    compiled = compile_pattern(pattern)
    match = compiled.regex.fullmatch(text)
    if match is None:
        return None

    values: dict[str, int] = {
        "year": 1970,
        "month": 1,
        "day": 1,
        "hour": 0,
        "minute": 0,
        "second": 0,
        "microsecond": 0,
    }
    offset: timedelta | None = None

    for index, token in enumerate(compiled.tokens):
        if isinstance(token, str):
            continue
        raw = match.group(f"f{index}")
        match token.letter:
            case "y":
                values["year"] = 2000 + int(raw) if token.count == 2 else int(raw)
            case "M":
                if token.count >= 3:
                    values["month"] = _name_index(raw, MONTH_NAMES) + 1
                else:
                    values["month"] = int(raw)
            case "d":
                values["day"] = int(raw)
            case "H":
                values["hour"] = int(raw)
            case "m":
                values["minute"] = int(raw)
            case "s":
                values["second"] = int(raw)
            case "S":
                values["microsecond"] = int(raw[:6].ljust(6, "0"))
            case "Z" | "X" | "x" | "z":
                offset = _parse_offset(raw)
                if offset is None:
                    return None
            case _:
                # Weekday names carry no information the date lacks
                pass

    try:
        wall = datetime(**values)
    except ValueError:
        return None

    if offset is not None:
        try:
            fixed = timezone(offset)
        except ValueError:
            return None
        try:
            return wall.replace(tzinfo=fixed).astimezone(zone)
        except OverflowError:
            return None
    return wall.replace(tzinfo=zone)


def _name_index(raw: str, names: tuple[str, ...]) -> int:
    lowered = raw.lower()
    for index, name in enumerate(names):
        if name.lower() == lowered or name[:3].lower() == lowered:
            return index
    raise ValueError(f"Unknown name: {raw}")


__all__ = [
    "PatternField",
    "CompiledPattern",
    "tokenize",
    "compile_pattern",
    "render",
    "parse",
]
