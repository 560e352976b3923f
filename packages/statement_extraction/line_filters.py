"""Statement boilerplate detection (column headers, balances and totals).

Both predicates compare accent-stripped, uppercased text so OCR output with or
without diacritics ("SAÍDAS" / "SAIDAS") is treated the same way.
"""

from __future__ import annotations

from .normalizers import normalize_for_match

HEADER_MARKERS: tuple[str, ...] = ("DATA", "DESCR", "HISTOR", "SALDO", "LANCAMENTO")

NON_TRANSACTION_MARKERS: tuple[str, ...] = (
    "SALDO ANTERIOR",
    "SALDO FINAL",
    "SALDO DO DIA",
    "TOTAL DE ENTRADAS",
    "TOTAL DE SAIDAS",
)


def is_likely_header_line(line: str) -> bool:
    upper = normalize_for_match(line)
    return any(marker in upper for marker in HEADER_MARKERS)


def is_likely_non_transaction_line(line: str) -> bool:
    """True for running/opening/closing balances and period totals."""

    upper = normalize_for_match(line)
    return any(marker in upper for marker in NON_TRANSACTION_MARKERS)


def is_statement_boilerplate(line: str) -> bool:
    return is_likely_header_line(line) or is_likely_non_transaction_line(line)


__all__ = [
    "HEADER_MARKERS",
    "NON_TRANSACTION_MARKERS",
    "is_likely_header_line",
    "is_likely_non_transaction_line",
    "is_statement_boilerplate",
]
