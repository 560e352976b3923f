"""Public interface for the ``statement_extraction`` package.

Symbol re-exports only; no runtime logic lives here.
"""

from .api import (
    classify_by_keywords,
    classify_transactions,
    classify_transactions_with_assist,
    deduplicate,
    determine_tag,
    extract_date,
    extract_transactions,
    is_likely_header_line,
    is_likely_non_transaction_line,
    is_valid_normalized_date,
    load_taxonomy,
    normalize_date,
    normalize_date_with_fallback_year,
    parse_currency_value,
    parse_line,
    parse_line_combinations,
    process_statement,
    review_upgrade,
    run_extraction,
)
from .models import (
    DateToken,
    ExtractionReport,
    ProcessingResult,
    Transaction,
    ValueToken,
)
from .text_sources import PdfTextSource, StaticTextSource, TextSource, TextSourceError

__all__ = [
    # API
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
    # Models / sources
    "DateToken",
    "ExtractionReport",
    "ProcessingResult",
    "Transaction",
    "ValueToken",
    "PdfTextSource",
    "StaticTextSource",
    "TextSource",
    "TextSourceError",
]
