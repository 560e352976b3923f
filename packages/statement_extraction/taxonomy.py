"""Keyword taxonomy loading (versioned configuration for the classifier).

The reimbursable / not-reimbursable keyword lists and the ordered tag rules
are data, not code. They ship as ``seeds/keywords.<version>.json`` and can be
swapped per call (``load_taxonomy(path)``) or per process via the
``STATEMENT_EXTRACTION_TAXONOMY`` environment variable.

Seed shape::

    {
      "version": "v1",
      "reimbursable": ["custas", "cartorio", ...],
      "not_reimbursable": ["salario", "pix", ...],
      "tag_rules": [{"tag": "Cartorio", "pattern": "cartorio|registro"}, ...],
      "default_tag": "Outros"
    }
"""

from __future__ import annotations

import json
import os
import re
from functools import lru_cache
from os import PathLike
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .logging_setup import get_logger

DEFAULT_TAXONOMY_PATH = Path(__file__).with_name("seeds") / "keywords.v1.json"
_TAXONOMY_ENV = "STATEMENT_EXTRACTION_TAXONOMY"

_logger = get_logger("statement_extraction.taxonomy")


class TagRule(BaseModel):
    """One ordered tag rule; ``pattern`` is a case-insensitive regex."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    tag: str
    pattern: str

    @field_validator("tag")
    @classmethod
    def _tag_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("tag must be a non-empty string")
        return v

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, v: str) -> str:
        if not v:
            raise ValueError("pattern must be a non-empty string")
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"invalid tag pattern {v!r}: {e}") from e
        return v

    def matches(self, description: str) -> bool:
        return re.search(self.pattern, description, flags=re.IGNORECASE) is not None


def _clean_keywords(values: list[str]) -> list[str]:
    # Trim, drop blanks and repeated entries while keeping file order.
    return list(dict.fromkeys(s.strip() for s in values if s.strip()))


class KeywordTaxonomy(BaseModel):
    """Validated keyword taxonomy used by the keyword classifier."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)

    version: str
    reimbursable: tuple[str, ...]
    not_reimbursable: tuple[str, ...]
    tag_rules: tuple[TagRule, ...] = ()
    default_tag: str = "Outros"

    @field_validator("reimbursable", "not_reimbursable", mode="before")
    @classmethod
    def _normalize_keywords(cls, v: object) -> tuple[str, ...]:
        if not isinstance(v, list | tuple):
            raise ValueError("keyword lists must be arrays of strings")
        if not all(isinstance(s, str) for s in v):
            raise ValueError("keyword lists must contain only strings")
        cleaned = _clean_keywords(list(v))
        if not cleaned:
            raise ValueError("keyword lists must contain at least one keyword")
        return tuple(cleaned)


def load_taxonomy(path: str | PathLike[str] | None = None) -> KeywordTaxonomy:
    """Load and validate a taxonomy JSON file.

    ``path`` defaults to ``$STATEMENT_EXTRACTION_TAXONOMY`` when set, otherwise
    the bundled ``keywords.v1.json``. Raises ``ValueError`` for unreadable or
    invalid files.
    """

    if path is None:
        env_path = os.getenv(_TAXONOMY_ENV)
        path = env_path.strip() if env_path and env_path.strip() else DEFAULT_TAXONOMY_PATH
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValueError(f"failed to read taxonomy file {p}: {e}") from e

    try:
        taxonomy = KeywordTaxonomy.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"invalid taxonomy file {p}: {e}") from e

    _logger.debug(
        "taxonomy:loaded version=%s reimbursable=%d not_reimbursable=%d tag_rules=%d",
        taxonomy.version,
        len(taxonomy.reimbursable),
        len(taxonomy.not_reimbursable),
        len(taxonomy.tag_rules),
    )
    return taxonomy


@lru_cache(maxsize=1)
def _bundled_taxonomy() -> KeywordTaxonomy:
    return load_taxonomy(DEFAULT_TAXONOMY_PATH)


def default_taxonomy() -> KeywordTaxonomy:
    """Return the process-wide taxonomy (env override or the bundled seed)."""

    env_path = os.getenv(_TAXONOMY_ENV)
    if env_path and env_path.strip():
        return load_taxonomy(env_path.strip())
    return _bundled_taxonomy()


__all__ = [
    "DEFAULT_TAXONOMY_PATH",
    "KeywordTaxonomy",
    "TagRule",
    "default_taxonomy",
    "load_taxonomy",
]
