"""Public API surface for the ``statement_extraction`` package.

This module is a stable import surface only; implementations live in the
pipeline modules and are re-exported here.
"""

from __future__ import annotations

from .assist import review_upgrade
from .classification import (
    classify_by_keywords,
    classify_transactions,
    classify_transactions_with_assist,
    determine_tag,
)
from .duplicates import deduplicate
from .extraction import extract_transactions, run_extraction
from .line_filters import is_likely_header_line, is_likely_non_transaction_line
from .normalizers import (
    is_valid_normalized_date,
    normalize_date,
    normalize_date_with_fallback_year,
    parse_currency_value,
)
from .parsing import extract_date, parse_line, parse_line_combinations
from .processing import process_statement
from .taxonomy import load_taxonomy

__all__ = [
    "classify_by_keywords",
    "classify_transactions",
    "classify_transactions_with_assist",
    "deduplicate",
    "determine_tag",
    "extract_date",
    "extract_transactions",
    "is_likely_header_line",
    "is_likely_non_transaction_line",
    "is_valid_normalized_date",
    "load_taxonomy",
    "normalize_date",
    "normalize_date_with_fallback_year",
    "parse_currency_value",
    "parse_line",
    "parse_line_combinations",
    "process_statement",
    "review_upgrade",
    "run_extraction",
]
