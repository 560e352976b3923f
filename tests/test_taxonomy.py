from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from pydantic import ValidationError

from statement_extraction.taxonomy import (
    DEFAULT_TAXONOMY_PATH,
    KeywordTaxonomy,
    TagRule,
    default_taxonomy,
    load_taxonomy,
)


def _write(tmp_path: Path, data: dict[str, Any], name: str = "taxonomy.json") -> Path:
    p = tmp_path / name
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


def _minimal() -> dict[str, Any]:
    return {
        "version": "test",
        "reimbursable": ["uber"],
        "not_reimbursable": ["pix"],
        "tag_rules": [{"tag": "Transporte", "pattern": "uber"}],
    }


def test_bundled_seed_loads() -> None:
    tax = load_taxonomy(DEFAULT_TAXONOMY_PATH)
    assert tax.version == "v1"
    assert "custas" in tax.reimbursable
    assert "pix" in tax.not_reimbursable
    assert [r.tag for r in tax.tag_rules][:3] == ["Cartorio", "Custas Processuais", "Transporte"]
    assert tax.default_tag == "Outros"
    # Keyword lists carry no duplicates after loading.
    assert len(set(tax.reimbursable)) == len(tax.reimbursable)


def test_default_taxonomy_is_bundled_seed() -> None:
    assert default_taxonomy().version == "v1"


def test_env_override_selects_alternate_taxonomy(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    p = _write(tmp_path, _minimal())
    monkeypatch.setenv("STATEMENT_EXTRACTION_TAXONOMY", str(p))
    assert default_taxonomy().version == "test"
    assert load_taxonomy().version == "test"


def test_keywords_are_trimmed_and_deduplicated(tmp_path: Path) -> None:
    data = _minimal()
    data["reimbursable"] = [" uber ", "uber", "", "taxi"]
    tax = load_taxonomy(_write(tmp_path, data))
    assert tax.reimbursable == ("uber", "taxi")
    assert tax.tag_rules == (TagRule(tag="Transporte", pattern="uber"),)


def test_tag_rule_matches_case_insensitively() -> None:
    rule = TagRule(tag="Cartorio", pattern="cartorio|certid")
    assert rule.matches("CERTIDAO NEGATIVA")
    assert not rule.matches("UBER")


@pytest.mark.parametrize(
    "mutate",
    [
        lambda d: d.update(reimbursable=[]),
        lambda d: d.update(not_reimbursable="pix"),
        lambda d: d.update(reimbursable=["uber", 3]),
        lambda d: d.update(tag_rules=[{"tag": "Bad", "pattern": "("}]),
        lambda d: d.update(tag_rules=[{"tag": "", "pattern": "uber"}]),
        lambda d: d.update(unexpected=True),
        lambda d: d.pop("version"),
    ],
)
def test_invalid_taxonomy_raises_value_error(tmp_path: Path, mutate) -> None:
    data = _minimal()
    mutate(data)
    with pytest.raises(ValueError):
        load_taxonomy(_write(tmp_path, data))


def test_unreadable_taxonomy_raises_value_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_taxonomy(tmp_path / "missing.json")
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_taxonomy(bad)


def test_taxonomy_is_immutable() -> None:
    tax = KeywordTaxonomy(version="x", reimbursable=["a"], not_reimbursable=["b"])
    with pytest.raises(ValidationError):
        tax.version = "y"  # type: ignore[misc]
