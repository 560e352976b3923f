"""Upload-level processing: run extraction and summarize for the caller.

This is the boundary where "no transactions found" becomes a user-visible
failure state, and where statement metadata (issuing bank, covered period)
and billing totals are derived for the upload record.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from .extraction import run_extraction
from .logging_setup import get_logger
from .models import ProcessingResult, ProgressCallback, Transaction, UploadStatus
from .taxonomy import KeywordTaxonomy
from .text_sources import TextSource

NO_TRANSACTIONS_ERROR = (
    "Nenhuma transacao encontrada no extrato. "
    "Verifique se o PDF e um extrato bancario valido."
)

# Ordered; the first bank whose pattern appears in the statement text wins.
BANK_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Itau", re.compile(r"\bita[uú]\b", re.IGNORECASE)),
    ("Bradesco", re.compile(r"\bbradesco\b", re.IGNORECASE)),
    ("Banco do Brasil", re.compile(r"\bbanco do brasil\b|\bbb\b", re.IGNORECASE)),
    ("Santander", re.compile(r"\bsantander\b", re.IGNORECASE)),
    ("Caixa", re.compile(r"\bcaixa econ[oô]mica\b|\bcef\b", re.IGNORECASE)),
    ("Nubank", re.compile(r"\bnubank\b|\bnu pagamentos\b", re.IGNORECASE)),
    ("Inter", re.compile(r"\bbanco inter\b", re.IGNORECASE)),
    ("Sicoob", re.compile(r"\bsicoob\b", re.IGNORECASE)),
    ("Sicredi", re.compile(r"\bsicredi\b", re.IGNORECASE)),
)

_logger = get_logger("statement_extraction.processing")


def detect_bank(text: str) -> str | None:
    for name, pattern in BANK_PATTERNS:
        if pattern.search(text):
            return name
    return None


def statement_period(transactions: Sequence[Transaction]) -> tuple[str | None, str | None]:
    """Return the earliest and latest ISO dates, or ``(None, None)``."""

    dates = sorted(tx.date for tx in transactions)
    if not dates:
        return None, None
    return dates[0], dates[-1]


def reimbursable_total(transactions: Sequence[Transaction]) -> Decimal:
    total = sum(
        (abs(tx.amount) for tx in transactions if tx.category == "reimbursable"), Decimal("0")
    )
    return total.quantize(Decimal("0.01"))


def upload_status(transactions: Sequence[Transaction]) -> UploadStatus:
    if any(tx.category == "review" for tx in transactions):
        return "review"
    return "completed"


def summarize(
    transactions: Sequence[Transaction], *, text: str = ""
) -> ProcessingResult:
    """Build a successful :class:`ProcessingResult` for extracted transactions."""

    start, end = statement_period(transactions)
    status = upload_status(transactions)
    return ProcessingResult(
        success=True,
        status=status,
        transaction_count=len(transactions),
        reimbursable_total=reimbursable_total(transactions),
        has_review_items=status == "review",
        bank_name=detect_bank(text) if text else None,
        period_start=start,
        period_end=end,
        transactions=list(transactions),
    )


def process_statement(
    source: TextSource,
    *,
    on_progress: ProgressCallback | None = None,
    today: datetime | None = None,
    taxonomy: KeywordTaxonomy | None = None,
    assist: bool = False,
    client: Any | None = None,
) -> ProcessingResult:
    """Extract, classify and summarize one statement.

    Never raises: zero transactions and unexpected errors are reported as a
    ``failed`` result carrying an error message.
    """

    try:
        report = run_extraction(
            source,
            on_progress=on_progress,
            today=today,
            taxonomy=taxonomy,
            assist=assist,
            client=client,
        )
    except Exception as e:  # noqa: BLE001 - upload processing reports, never raises
        _logger.exception("process:failed error=%s", e.__class__.__name__)
        return ProcessingResult(
            success=False,
            status="failed",
            error=str(e) or "Erro desconhecido ao processar o arquivo",
        )

    if not report.transactions:
        _logger.info(
            "process:no_transactions text_chars=%d ocr_attempted=%s ocr_error=%s",
            len(report.text),
            report.ocr_attempted,
            report.ocr_error,
        )
        return ProcessingResult(
            success=False,
            status="failed",
            bank_name=detect_bank(report.text) if report.text else None,
            error=NO_TRANSACTIONS_ERROR,
        )

    result = summarize(report.transactions, text=report.text)
    _logger.info(
        "process:done status=%s transactions=%d reimbursable_total=%s bank=%s",
        result.status,
        result.transaction_count,
        result.reimbursable_total,
        result.bank_name,
    )
    return result


__all__ = [
    "BANK_PATTERNS",
    "NO_TRANSACTIONS_ERROR",
    "detect_bank",
    "process_statement",
    "reimbursable_total",
    "statement_period",
    "summarize",
    "upload_status",
]
