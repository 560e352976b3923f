"""Currency and date normalization for Brazilian bank statement text.

All helpers here are pure and total: malformed input degrades to ``0`` (for
amounts) or to a date string that :func:`is_valid_normalized_date` rejects,
never to an exception. Callers decide whether to keep or drop a candidate.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation

_CURRENCY_MARKER_RE = re.compile(r"[Rr]\s*\$")
_NON_NUMERIC_RE = re.compile(r"[^0-9,.\-]")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$", re.ASCII)
_DATE_SEPARATORS_RE = re.compile(r"[.\-]")

_ZERO = Decimal("0")
# A short date may sit at most this far in the future before it is
# attributed to the previous year.
_FUTURE_TOLERANCE = timedelta(hours=24)


def normalize_for_match(value: str) -> str:
    """Strip diacritics and uppercase ``value`` for keyword comparisons."""

    decomposed = unicodedata.normalize("NFD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.upper()


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def parse_currency_value(raw: str) -> Decimal:
    """Parse a locale-formatted amount and return its magnitude.

    The decimal separator is whichever of ``,`` and ``.`` appears last; the
    other one is treated as a thousands separator. Leading or trailing ``-``
    is accepted and discarded. Empty or non-numeric input yields ``0``.

    >>> parse_currency_value("R$ 1.234,56")
    Decimal('1234.56')
    >>> parse_currency_value("123,45-")
    Decimal('123.45')
    """

    text = unicodedata.normalize("NFKC", raw)
    text = _CURRENCY_MARKER_RE.sub("", text)
    text = "".join(text.split())
    cleaned = _NON_NUMERIC_RE.sub("", text)
    if not cleaned:
        return _ZERO

    last_comma = cleaned.rfind(",")
    last_dot = cleaned.rfind(".")
    if last_comma > last_dot:
        normalized = cleaned.replace(".", "").replace(",", ".")
    elif last_dot > last_comma:
        normalized = cleaned.replace(",", "")
    else:
        normalized = cleaned

    normalized = normalized.replace("-", "")
    if not normalized or normalized == ".":
        return _ZERO
    try:
        value = Decimal(normalized)
    except InvalidOperation:
        return _ZERO
    if not value.is_finite():
        return _ZERO
    return abs(value)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def _split_date(raw: str) -> list[str]:
    return _DATE_SEPARATORS_RE.sub("/", unicodedata.normalize("NFKC", raw).strip()).split("/")


def normalize_date(raw: str) -> str:
    """Convert ``DD/MM/YYYY`` (also ``-``/``.`` separated, 2-digit years) to ISO.

    Two-digit years are expanded with a ``20`` prefix. The output is not
    validated; see :func:`is_valid_normalized_date`.
    """

    parts = _split_date(raw)
    if len(parts) == 2:
        return normalize_date_with_fallback_year(raw)
    if len(parts) < 3:
        return ""
    day, month, year = parts[0], parts[1], parts[2]
    if len(year) == 2:
        year = f"20{year}"
    return f"{year}-{month.zfill(2)}-{day.zfill(2)}"


def normalize_date_with_fallback_year(raw: str, *, today: datetime | None = None) -> str:
    """Normalize a date, inferring the year when only ``DD/MM`` is present.

    The current year is assumed unless that places the date more than 24 hours
    after ``today``; statements processed in January for December entries then
    resolve to the previous year.
    """

    parts = _split_date(raw)
    if len(parts) != 2:
        return normalize_date(raw)

    day, month = parts
    now = today or datetime.now()
    year = now.year
    try:
        inferred = datetime(now.year, int(month), int(day))
    except ValueError:
        # Impossible for this year (e.g. 29/02 in a non-leap year); keep the
        # current year and let validation reject it.
        inferred = None
    if inferred is not None and inferred > now + _FUTURE_TOLERANCE:
        year -= 1
    return f"{year:04d}-{month.zfill(2)}-{day.zfill(2)}"


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


_DAYS_IN_MONTH: tuple[int, ...] = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)


def is_valid_normalized_date(iso: str) -> bool:
    """Return True when ``iso`` is a real ``YYYY-MM-DD`` calendar date."""

    m = _ISO_DATE_RE.match(iso)
    if not m:
        return False
    year, month, day = (int(g) for g in m.groups())
    if not 1 <= month <= 12:
        return False
    days = _DAYS_IN_MONTH[month - 1]
    if month == 2 and is_leap_year(year):
        days = 29
    return 1 <= day <= days


__all__ = [
    "is_leap_year",
    "is_valid_normalized_date",
    "normalize_date",
    "normalize_date_with_fallback_year",
    "normalize_for_match",
    "parse_currency_value",
]
