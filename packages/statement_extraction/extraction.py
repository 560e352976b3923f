"""Single-document extraction orchestrator.

Phases, in order::

    AcquireText -> ParsePreliminary -> (OcrFallback) -> ParseFinal
                -> Deduplicate -> Classify -> Done

- AcquireText reads the source's text layer; a failure leaves the text empty
  so the OCR fallback can still run.
- OCR runs only when the preliminary parse found nothing or the text layer is
  shorter than :data:`MIN_TEXT_LAYER_CHARS`. Its output is appended to the
  text layer, never substituted, and a failure keeps the text-layer result.
- Progress is reported through an optional ``(label, percent)`` callback and
  never goes backwards within one run.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .classification import classify_transactions_with_assist
from .duplicates import deduplicate
from .logging_setup import get_logger
from .models import ExtractionReport, ProgressCallback, Transaction
from .parsing import parse_line_combinations
from .taxonomy import KeywordTaxonomy
from .text_sources import OCR_PAGE_LIMIT, TextSource

MIN_TEXT_LAYER_CHARS = 120

PHASE_READ_TEXT = "Lendo texto interno do PDF..."
PHASE_ANALYZE_TEXT = "Analisando conteúdo textual..."
PHASE_OCR_START = "Executando OCR nas páginas..."
PHASE_OCR_PAGES = "Processando OCR por página..."
PHASE_DONE = "Finalizando análise..."

_logger = get_logger("statement_extraction.extraction")


class ProgressReporter:
    """Monotonic wrapper around a caller-supplied progress callback.

    Percentages are clamped to 0..100 and never decrease. Exceptions raised
    by the callback are logged and otherwise ignored.
    """

    def __init__(self, callback: ProgressCallback | None) -> None:
        self._callback = callback
        self.percent = 0

    def __call__(self, label: str, percent: int) -> None:
        self.percent = max(self.percent, min(100, max(0, int(percent))))
        if self._callback is None:
            return
        try:
            self._callback(label, self.percent)
        except Exception as e:  # noqa: BLE001 - progress is observational only
            _logger.warning("extract:progress_callback_failed error=%s", e.__class__.__name__)


def _ocr_reason(layer_text: str, preliminary: list[Transaction]) -> str | None:
    if not preliminary:
        return "empty_parse"
    if len(layer_text.strip()) < MIN_TEXT_LAYER_CHARS:
        return "short_text"
    return None


def run_extraction(
    source: TextSource,
    *,
    on_progress: ProgressCallback | None = None,
    today: datetime | None = None,
    taxonomy: KeywordTaxonomy | None = None,
    assist: bool = False,
    client: Any | None = None,
    ocr_page_limit: int = OCR_PAGE_LIMIT,
) -> ExtractionReport:
    """Run the full pipeline over one document and return a detailed report."""

    progress = ProgressReporter(on_progress)
    report = ExtractionReport(transactions=[])

    # AcquireText
    progress(PHASE_READ_TEXT, 20)
    try:
        layer_text = source.layer_text(
            on_page=lambda done, total: progress(
                PHASE_ANALYZE_TEXT, 20 + round(done / max(total, 1) * 35)
            )
        )
    except Exception as e:  # noqa: BLE001 - acquisition failures degrade to empty text
        _logger.warning("extract:text_layer_failed error=%s detail=%s", e.__class__.__name__, e)
        layer_text = ""
        report.text_layer_error = str(e) or e.__class__.__name__
    report.text_layer_chars = len(layer_text)

    # ParsePreliminary
    preliminary = parse_line_combinations(layer_text, today=today)
    progress(PHASE_ANALYZE_TEXT, 55)

    candidates = preliminary
    report.text = layer_text
    reason = _ocr_reason(layer_text, preliminary)
    if reason is not None:
        _logger.info(
            "extract:ocr_fallback reason=%s text_chars=%d preliminary=%d",
            reason,
            len(layer_text),
            len(preliminary),
        )
        report.ocr_attempted = True
        progress(PHASE_OCR_START, 60)
        try:
            ocr_text = source.ocr_text(
                ocr_page_limit,
                on_page=lambda done, total: progress(
                    PHASE_OCR_PAGES, 60 + round(done / max(total, 1) * 35)
                ),
            )
        except Exception as e:  # noqa: BLE001 - OCR is best-effort; keep text-layer result
            _logger.warning("extract:ocr_failed error=%s detail=%s", e.__class__.__name__, e)
            ocr_text = ""
            report.ocr_error = str(e) or e.__class__.__name__
        report.ocr_chars = len(ocr_text)

        # ParseFinal over text layer + OCR (appended, not substituted)
        if ocr_text.strip():
            report.text = f"{layer_text}\n{ocr_text}"
            candidates = parse_line_combinations(report.text, today=today)

    unique = deduplicate(candidates)
    report.transactions = classify_transactions_with_assist(
        unique, taxonomy=taxonomy, client=client, enabled=assist
    )
    progress(PHASE_DONE, 100)

    _logger.info(
        "extract:done parsed=%d unique=%d ocr_attempted=%s",
        len(candidates),
        len(report.transactions),
        report.ocr_attempted,
    )
    return report


def extract_transactions(
    source: TextSource,
    *,
    on_progress: ProgressCallback | None = None,
    today: datetime | None = None,
    taxonomy: KeywordTaxonomy | None = None,
    assist: bool = False,
    client: Any | None = None,
) -> list[Transaction]:
    """Return deduplicated, classified transactions for one document."""

    return run_extraction(
        source,
        on_progress=on_progress,
        today=today,
        taxonomy=taxonomy,
        assist=assist,
        client=client,
    ).transactions


__all__ = [
    "MIN_TEXT_LAYER_CHARS",
    "ProgressReporter",
    "extract_transactions",
    "run_extraction",
]
