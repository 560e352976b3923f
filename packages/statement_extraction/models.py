"""Data models and type aliases for ``statement_extraction``.

Tokens and transactions are plain dataclasses; configuration and model
responses are validated with Pydantic elsewhere (``taxonomy``, ``assist``).
Dates are carried as ISO ``YYYY-MM-DD`` strings and amounts as
:class:`~decimal.Decimal` magnitudes; direction (debit/credit) is not modeled.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Literal, NamedTuple, TypeAlias

# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------

Category: TypeAlias = Literal["reimbursable", "not_reimbursable", "review"]
"""Canonical reimbursability category for a transaction."""

CATEGORIES: tuple[str, ...] = ("reimbursable", "not_reimbursable", "review")

PreviewStatus: TypeAlias = Literal["reimbursable", "possible"]
"""Two-state status produced by the fast preview tagger only."""

UploadStatus: TypeAlias = Literal["review", "completed", "failed"]

ProgressCallback: TypeAlias = Callable[[str, int], None]
"""``(phase_label, percent_complete)``; percent is within 0..100."""


# ---------------------------------------------------------------------------
# Line-level tokens
# ---------------------------------------------------------------------------


class RawLine(NamedTuple):
    """A single trimmed, non-empty line of extracted text and its position."""

    position: int
    text: str


@dataclass(frozen=True, slots=True)
class DateToken:
    """A date found in a line.

    ``normalized_date`` is always a calendar-valid ``YYYY-MM-DD`` string;
    ``start``/``end`` are character offsets of ``raw_text`` within the line.
    """

    raw_text: str
    normalized_date: str
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class ValueToken:
    """A currency-shaped value found in a line.

    ``numeric_value`` is the magnitude (never negative). ``decimals`` is the
    number of digits after the decimal separator (1 or 2).
    """

    raw_text: str
    numeric_value: Decimal
    start: int
    end: int
    decimals: int


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def new_transaction_id() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True)
class Transaction:
    """A transaction candidate parsed from one (or two joined) statement lines.

    ``tag``/``category``/``confidence``/``highlight_tokens`` start with the
    preview tagger's provisional values and are replaced by the keyword
    classifier. ``client`` is assigned later by the reviewing user.
    """

    date: str
    description: str
    amount: Decimal
    tag: str | None = None
    category: Category = "review"
    confidence: float = 0.3
    client: str = ""
    highlight_tokens: tuple[str, ...] = ()
    raw_line: str = ""
    id: str = field(default_factory=new_transaction_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "amount": f"{self.amount:.2f}",
            "tag": self.tag,
            "category": self.category,
            "confidence": round(self.confidence, 2),
            "client": self.client,
            "highlight_tokens": list(self.highlight_tokens),
        }


Transactions: TypeAlias = Iterable[Transaction]


@dataclass(frozen=True, slots=True)
class KeywordDecision:
    """Outcome of keyword matching for one description."""

    category: Category
    confidence: float
    highlight_tokens: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class PreviewTag:
    """Provisional tag from the fast preview tagger.

    ``status`` keeps the two-state preview vocabulary; ``category`` is the same
    decision expressed in the canonical three-state vocabulary.
    """

    tag: str
    status: PreviewStatus

    @property
    def category(self) -> Category:
        return "reimbursable" if self.status == "reimbursable" else "review"


# ---------------------------------------------------------------------------
# Pipeline results
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class ExtractionReport:
    """Detailed outcome of one orchestrator run over a single document."""

    transactions: list[Transaction]
    text: str = ""
    text_layer_chars: int = 0
    ocr_chars: int = 0
    ocr_attempted: bool = False
    text_layer_error: str | None = None
    ocr_error: str | None = None


@dataclass(slots=True)
class ProcessingResult:
    """Upload-level summary handed to the calling service."""

    success: bool
    status: UploadStatus
    transaction_count: int = 0
    reimbursable_total: Decimal = Decimal("0.00")
    has_review_items: bool = False
    bank_name: str | None = None
    period_start: str | None = None
    period_end: str | None = None
    error: str | None = None
    transactions: list[Transaction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "status": self.status,
            "transaction_count": self.transaction_count,
            "reimbursable_total": f"{self.reimbursable_total:.2f}",
            "has_review_items": self.has_review_items,
            "bank_name": self.bank_name,
            "period": {"start": self.period_start, "end": self.period_end},
            "error": self.error,
            "transactions": [tx.to_dict() for tx in self.transactions],
        }
