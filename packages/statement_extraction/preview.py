"""Fast provisional tagging applied at parse time.

This is the quick, upload-screen preview: a fixed ordered list of substring
rules over the uppercased description. Its two-state status
(``reimbursable``/``possible``) is kept for display; the keyword classifier in
:mod:`statement_extraction.classification` replaces the result before anything
is returned from the pipeline.
"""

from __future__ import annotations

from .models import PreviewTag
from .normalizers import normalize_for_match

# (tag, status, substrings) evaluated in order; first hit wins.
_PREVIEW_RULES: tuple[tuple[str, str, tuple[str, ...]], ...] = (
    ("TRANSPORTE", "reimbursable", ("UBER", "99", "TAXI")),
    ("CARTORIO", "reimbursable", ("CARTORIO",)),
    ("GRU", "reimbursable", ("GRU",)),
    ("ESTACIONAMENTO", "reimbursable", ("ESTAC",)),
    ("COMBUSTIVEL", "possible", ("POSTO", "COMBUST")),
    ("OAB", "possible", ("OAB",)),
)

PREVIEW_REIMBURSABLE_KEYWORDS: tuple[str, ...] = (
    "UBER",
    "99",
    "TAXI",
    "CARTORIO",
    "GRU",
    "ESTAC",
    "ESTACIONAMENTO",
    "PEDAGIO",
    "SEDEX",
    "CORREIOS",
    "HOTEL",
    "HOSPEDAGEM",
    "PASSAGEM",
    "AEREA",
    "AZUL",
    "LATAM",
    "GOL",
)

FALLBACK_REIMBURSABLE_TAG = "REEMBOLSAVEL"
NEEDS_REVIEW_TAG = "REVISAR"


def preview_tag(description: str) -> PreviewTag:
    upper = normalize_for_match(description)
    for tag, status, needles in _PREVIEW_RULES:
        if any(n in upper for n in needles):
            return PreviewTag(tag=tag, status=status)  # type: ignore[arg-type]

    if any(keyword in upper for keyword in PREVIEW_REIMBURSABLE_KEYWORDS):
        return PreviewTag(tag=FALLBACK_REIMBURSABLE_TAG, status="reimbursable")
    return PreviewTag(tag=NEEDS_REVIEW_TAG, status="possible")


__all__ = [
    "FALLBACK_REIMBURSABLE_TAG",
    "NEEDS_REVIEW_TAG",
    "PREVIEW_REIMBURSABLE_KEYWORDS",
    "preview_tag",
]
