"""Line-to-transaction parsing for noisy statement text.

A statement line is expected to read roughly ``<date> <description> <amount>``
but text-layer and OCR output are messy: dates lose their year, amounts appear
next to running balances, and a single entry is sometimes split across two
visual lines. Parsing is therefore a chain of small, individually testable
steps:

1. :func:`extract_date` evaluates :data:`DATE_MATCHERS` in priority order and
   returns the first calendar-valid date.
2. :func:`extract_value_candidates` collects every value-shaped token after the
   date; :func:`select_value` applies the tie-break rules (two decimals beat
   one, rightmost wins, implausible magnitudes are dropped).
3. :func:`parse_line` assembles the description between the two tokens and
   rejects noise.
4. :func:`parse_line_combinations` retries each line joined with its
   neighbours.

Rejections are silent (``None``); nothing here raises on malformed input.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from .line_filters import is_statement_boilerplate
from .models import DateToken, RawLine, Transaction, ValueToken
from .normalizers import (
    is_valid_normalized_date,
    normalize_date_with_fallback_year,
    parse_currency_value,
)
from .preview import preview_tag

MIN_LINE_LENGTH = 6
MAX_PLAUSIBLE_AMOUNT = Decimal("1000000")
MIN_DESCRIPTION_LENGTH = 3

_WHITESPACE_RE = re.compile(r"\s+")
_LINE_SPLIT_RE = re.compile(r"\r?\n")
_DESCRIPTION_CLUTTER = " \t-–—"
_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{4}-?[0-9a-f]{12}$", re.IGNORECASE
)

# ---------------------------------------------------------------------------
# Date matchers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class DateMatcher:
    """A named date shape; lower ``priority`` is tried first."""

    name: str
    pattern: re.Pattern[str]
    priority: int


DATE_MATCHERS: tuple[DateMatcher, ...] = (
    DateMatcher(
        name="full",
        pattern=re.compile(r"(?<!\d)\d{2}[/.\-]\d{2}[/.\-]\d{2,4}(?!\d)", re.ASCII),
        priority=0,
    ),
    # DD/MM not followed by another separator+digit, so "12/05" inside
    # "12/05/2024" or a numeric run is not taken for a short date.
    DateMatcher(
        name="short",
        pattern=re.compile(r"(?<![\d/.\-])\d{2}[/.\-]\d{2}(?![/.\-]?\d)", re.ASCII),
        priority=1,
    ),
)


def extract_date(line: str, *, today: datetime | None = None) -> DateToken | None:
    """Return the first calendar-valid date in ``line``.

    Matchers run in priority order; within a matcher, occurrences are tried
    left to right. Impossible dates such as ``31/02/2025`` are skipped.
    """

    for matcher in sorted(DATE_MATCHERS, key=lambda m: m.priority):
        for m in matcher.pattern.finditer(line):
            normalized = normalize_date_with_fallback_year(m.group(0), today=today)
            if is_valid_normalized_date(normalized):
                return DateToken(
                    raw_text=m.group(0),
                    normalized_date=normalized,
                    start=m.start(),
                    end=m.end(),
                )
    return None


# ---------------------------------------------------------------------------
# Value matchers
# ---------------------------------------------------------------------------

# Ordered value shapes; alternation order is match priority at a position.
VALUE_SHAPES: tuple[tuple[str, str], ...] = (
    ("brl_grouped", r"\d{1,3}(?:\.\d{3})+,\d{1,2}"),
    ("intl_grouped", r"\d{1,3}(?:,\d{3})+\.\d{1,2}"),
    ("plain", r"\d+[.,]\d{1,2}"),
)

_VALUE_RE = re.compile(
    r"(?<![\d.,])"
    r"(?:R\$\s?)?-?"
    r"(?:" + "|".join(f"(?P<{name}>{shape})" for name, shape in VALUE_SHAPES) + r")"
    r"(?![.,]?\d)"
    r"-?",
    re.ASCII,
)
_DECIMALS_RE = re.compile(r"[.,](\d{1,2})-?$", re.ASCII)


def extract_value_candidates(line: str, start: int = 0) -> list[ValueToken]:
    """Return every value-shaped token starting at or after ``start``."""

    out: list[ValueToken] = []
    for m in _VALUE_RE.finditer(line, start):
        raw = m.group(0)
        dm = _DECIMALS_RE.search(raw)
        decimals = len(dm.group(1)) if dm else 0
        out.append(
            ValueToken(
                raw_text=raw,
                numeric_value=parse_currency_value(raw),
                start=m.start(),
                end=m.end(),
                decimals=decimals,
            )
        )
    return out


def select_value(candidates: list[ValueToken]) -> ValueToken | None:
    """Pick the amount among ``candidates``.

    Values that are not positive or exceed :data:`MAX_PLAUSIBLE_AMOUNT` are
    discarded (account numbers, references). Two-decimal values are preferred
    over one-decimal ones; among equals the rightmost occurrence wins.
    """

    plausible = [
        c for c in candidates if Decimal("0") < c.numeric_value <= MAX_PLAUSIBLE_AMOUNT
    ]
    if not plausible:
        return None
    return max(plausible, key=lambda c: (c.decimals == 2, c.start))


# ---------------------------------------------------------------------------
# Description checks
# ---------------------------------------------------------------------------


def clean_description(segment: str) -> str:
    return segment.strip(_DESCRIPTION_CLUTTER).strip()


def is_noise_description(description: str) -> bool:
    """True for OCR artifacts that cannot be a merchant/history text."""

    text = description.strip()
    if len(text) < MIN_DESCRIPTION_LENGTH:
        return True
    letters = sum(1 for ch in text if ch.isalpha())
    if letters == 0:
        return True
    if _UUID_RE.match(text):
        return True
    if " " not in text:
        digits = sum(1 for ch in text if ch.isdigit())
        if digits > 2 * letters:
            return True
    return False


# ---------------------------------------------------------------------------
# Line parsing
# ---------------------------------------------------------------------------


def compact_line(line: str) -> str:
    """NFKC-fold (full-width digits become ASCII) and collapse whitespace."""

    return _WHITESPACE_RE.sub(" ", unicodedata.normalize("NFKC", line)).strip()


def parse_line(line: str, *, today: datetime | None = None) -> Transaction | None:
    """Parse a single (possibly joined) line into a transaction candidate."""

    text = compact_line(line)
    if len(text) < MIN_LINE_LENGTH or is_statement_boilerplate(text):
        return None

    date = extract_date(text, today=today)
    if date is None:
        return None

    value = select_value(extract_value_candidates(text, date.end))
    if value is None:
        return None

    description = clean_description(text[date.end : value.start])
    if not description or value.numeric_value <= 0 or is_noise_description(description):
        return None

    preview = preview_tag(description)
    return Transaction(
        date=date.normalized_date,
        description=description,
        amount=value.numeric_value,
        tag=preview.tag,
        category=preview.category,
        confidence=0.5 if preview.category == "reimbursable" else 0.3,
        raw_line=text,
    )


def split_lines(text: str) -> list[RawLine]:
    """Split extracted text into trimmed, non-empty lines with positions."""

    out: list[RawLine] = []
    for chunk in _LINE_SPLIT_RE.split(text):
        stripped = chunk.strip()
        if stripped:
            out.append(RawLine(position=len(out), text=stripped))
    return out


def parse_line_combinations(text: str, *, today: datetime | None = None) -> list[Transaction]:
    """Parse every line of ``text``, retrying with adjacent lines joined.

    For each line the attempts are: the line alone, the line followed by the
    next one, then the previous line followed by this one. The first success
    is kept. Overlapping attempts can yield the same entry twice; callers
    deduplicate afterwards.
    """

    lines = [raw.text for raw in split_lines(text)]
    parsed: list[Transaction] = []
    for i, line in enumerate(lines):
        attempts = [line]
        if i + 1 < len(lines):
            attempts.append(f"{line} {lines[i + 1]}")
        if i > 0:
            attempts.append(f"{lines[i - 1]} {line}")
        for candidate in attempts:
            tx = parse_line(candidate, today=today)
            if tx is not None:
                parsed.append(tx)
                break
    return parsed


__all__ = [
    "DATE_MATCHERS",
    "DateMatcher",
    "MAX_PLAUSIBLE_AMOUNT",
    "VALUE_SHAPES",
    "clean_description",
    "compact_line",
    "extract_date",
    "extract_value_candidates",
    "is_noise_description",
    "parse_line",
    "parse_line_combinations",
    "select_value",
    "split_lines",
]
