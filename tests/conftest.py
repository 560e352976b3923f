"""Pytest configuration for test isolation.

Tests import ``statement_extraction`` straight from the workspace
``packages/`` directory, so it is put on ``sys.path`` here.

The pipeline reads a few process-level settings from the environment
(``OPENAI_API_KEY`` enables the model assist, ``STATEMENT_EXTRACTION_TAXONOMY``
swaps the keyword taxonomy). A developer shell that happens to export them
would change results, so every test starts with them unset. The CLI also
configures the package logger once per process; it is reset after each test
so ``caplog`` keeps seeing records.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
_PKG_DIR = _ROOT / "packages"
sys.path[:0] = [p for p in [str(_PKG_DIR), str(_ROOT)] if p not in sys.path]

_ISOLATED_ENV = (
    "OPENAI_API_KEY",
    "STATEMENT_EXTRACTION_MODEL",
    "STATEMENT_EXTRACTION_TAXONOMY",
    "STATEMENT_EXTRACTION_LOG_LEVEL",
    "STATEMENT_EXTRACTION_OCR_LANG",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ISOLATED_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_package_logging() -> Iterator[None]:
    from statement_extraction.logging_setup import reset_logging

    yield
    reset_logging()
