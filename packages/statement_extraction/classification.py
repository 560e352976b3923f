"""Keyword-based reimbursability classification.

Each description is matched (case-insensitive substring) against the
taxonomy's reimbursable and not-reimbursable keyword lists:

- matches only in the reimbursable list: ``reimbursable``
- matches only in the not-reimbursable list: ``not_reimbursable``
- matches in both lists or in neither: ``review``

Decisive categories score ``min(0.9, 0.5 + 0.1 * matches)``; ``review`` is a
flat ``0.3``. Reimbursable items additionally receive a business tag from the
taxonomy's ordered tag rules.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import Any

from .assist import review_upgrade
from .logging_setup import get_logger
from .models import Category, KeywordDecision, Transaction
from .taxonomy import KeywordTaxonomy, default_taxonomy

REVIEW_CONFIDENCE = 0.3
_BASE_CONFIDENCE = 0.5
_PER_MATCH_CONFIDENCE = 0.1
_MAX_CONFIDENCE = 0.9

_logger = get_logger("statement_extraction.classification")


def find_matching_keywords(description: str, keywords: Sequence[str]) -> list[str]:
    desc_lower = description.lower()
    return [kw for kw in keywords if kw.lower() in desc_lower]


def _decisive_confidence(n_matches: int) -> float:
    return min(_MAX_CONFIDENCE, round(_BASE_CONFIDENCE + _PER_MATCH_CONFIDENCE * n_matches, 2))


def classify_by_keywords(
    description: str, taxonomy: KeywordTaxonomy | None = None
) -> KeywordDecision:
    tax = taxonomy or default_taxonomy()
    reimbursable = find_matching_keywords(description, tax.reimbursable)
    not_reimbursable = find_matching_keywords(description, tax.not_reimbursable)

    if reimbursable and not not_reimbursable:
        return KeywordDecision(
            category="reimbursable",
            confidence=_decisive_confidence(len(reimbursable)),
            highlight_tokens=tuple(reimbursable),
        )
    if not_reimbursable and not reimbursable:
        return KeywordDecision(
            category="not_reimbursable",
            confidence=_decisive_confidence(len(not_reimbursable)),
            highlight_tokens=tuple(not_reimbursable),
        )
    return KeywordDecision(
        category="review",
        confidence=REVIEW_CONFIDENCE,
        highlight_tokens=tuple(reimbursable + not_reimbursable),
    )


def determine_tag(
    description: str, category: Category | str, taxonomy: KeywordTaxonomy | None = None
) -> str | None:
    """Return the business tag for a reimbursable description, else ``None``."""

    if category != "reimbursable":
        return None
    tax = taxonomy or default_taxonomy()
    for rule in tax.tag_rules:
        if rule.matches(description):
            return rule.tag
    return tax.default_tag


def classify_transaction(
    tx: Transaction, taxonomy: KeywordTaxonomy | None = None
) -> Transaction:
    decision = classify_by_keywords(tx.description, taxonomy)
    return replace(
        tx,
        category=decision.category,
        confidence=decision.confidence,
        highlight_tokens=decision.highlight_tokens,
        tag=determine_tag(tx.description, decision.category, taxonomy),
    )


def classify_transactions(
    transactions: Iterable[Transaction], taxonomy: KeywordTaxonomy | None = None
) -> list[Transaction]:
    """Classify each transaction by keywords; returns new objects in input order."""

    tax = taxonomy or default_taxonomy()
    out = [classify_transaction(tx, tax) for tx in transactions]
    _logger.debug(
        "classify:keywords taxonomy=%s total=%d reimbursable=%d not_reimbursable=%d review=%d",
        tax.version,
        len(out),
        sum(1 for t in out if t.category == "reimbursable"),
        sum(1 for t in out if t.category == "not_reimbursable"),
        sum(1 for t in out if t.category == "review"),
    )
    return out


def classify_transactions_with_assist(
    transactions: Iterable[Transaction],
    *,
    taxonomy: KeywordTaxonomy | None = None,
    client: Any | None = None,
    enabled: bool = True,
) -> list[Transaction]:
    """Keyword classification followed by the best-effort review upgrade."""

    classified = classify_transactions(transactions, taxonomy)
    if not enabled:
        return classified
    tax = taxonomy or default_taxonomy()
    tags = [rule.tag for rule in tax.tag_rules] + [tax.default_tag]
    return review_upgrade(classified, client, tags=tags)


__all__ = [
    "REVIEW_CONFIDENCE",
    "classify_by_keywords",
    "classify_transaction",
    "classify_transactions",
    "classify_transactions_with_assist",
    "determine_tag",
    "find_matching_keywords",
]
