"""Best-effort model assist for transactions left in ``review``.

:func:`review_upgrade` is a post-processing stage over the keyword
classifier's output. It sends only the ``review`` subset to the OpenAI
Responses API and applies the returned decisions to that subset. Every
failure (missing credentials, transport errors, malformed JSON, schema
violations) is logged and the input is returned unchanged; the stage never
raises and never mutates its input.
"""

from __future__ import annotations

import json
import os
import re
import time
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from openai import OpenAI
from openai.types.responses import ResponseTextConfigParam
from pydantic import BaseModel, ConfigDict, field_validator

from . import prompting
from .logging_setup import get_logger
from .models import CATEGORIES, Transaction

_MODEL_ENV = "STATEMENT_EXTRACTION_MODEL"
_DEFAULT_MODEL = "gpt-4o-mini"
_DEFAULT_CONFIDENCE = 0.7
# Per-request ceiling; on expiry the keyword result is kept.
REQUEST_TIMEOUT_S = 30.0
MAX_RETRIES = 1
_DEFAULT_TAGS: tuple[str, ...] = (
    "Custas Processuais",
    "Cartorio",
    "Transporte",
    "Deslocamento",
    "Correios",
    "Copias",
    "Diligencias",
    "Outros",
)

_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

_logger = get_logger("statement_extraction.assist")


class _AssistItem(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    index: int
    category: str | None = None
    tag: str | None = None
    confidence: float | None = None

    @field_validator("category")
    @classmethod
    def _known_category(cls, v: str | None) -> str | None:
        if v is None or not v:
            return None
        # Anything outside the canonical vocabulary stays in review.
        return v if v in CATEGORIES else "review"

    @field_validator("tag")
    @classmethod
    def _blank_tag_is_none(cls, v: str | None) -> str | None:
        return v or None

    @field_validator("confidence")
    @classmethod
    def _confidence_in_range(cls, v: float | None) -> float | None:
        if v is None:
            return None
        if 0.0 <= float(v) <= 1.0:
            return float(v)
        raise ValueError("confidence must be within [0,1]")


class _AssistBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: list[_AssistItem]


def _create_client() -> OpenAI:
    return OpenAI(timeout=REQUEST_TIMEOUT_S, max_retries=MAX_RETRIES)


def _resolve_model(model: str | None) -> str:
    if model:
        return model
    env_model = os.getenv(_MODEL_ENV)
    return env_model.strip() if env_model and env_model.strip() else _DEFAULT_MODEL


def _response_text(resp: Any) -> str:
    """Locate the text output of a Responses API result.

    Prefers ``resp.output_text`` and falls back to
    ``resp.output[0].content[0].text``.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        output = getattr(resp, "output", None)
        if output:
            content = getattr(output[0], "content", None)
            if content:
                txt_obj = getattr(content[0], "text", None)
                if isinstance(txt_obj, str):
                    text = txt_obj
    if not text or not isinstance(text, str):
        raise ValueError("Unexpected Responses API shape; unable to locate text output")
    return text


def parse_assist_response(text: str, *, num_items: int) -> dict[int, _AssistItem]:
    """Decode the model text into decisions keyed by subset index.

    The first ``{...}`` block is decoded so stray prose around the JSON is
    tolerated. Indices outside ``0..num_items-1`` are ignored; the last
    decision for a repeated index wins.
    """

    m = _JSON_OBJECT_RE.search(text)
    if not m:
        raise ValueError("assist response contains no JSON object")
    try:
        decoded: Mapping[str, Any] = json.loads(m.group(0))
    except json.JSONDecodeError as e:
        raise ValueError("assist response is not valid JSON") from e
    body = _AssistBody.model_validate(decoded)
    return {item.index: item for item in body.results if 0 <= item.index < num_items}


def _apply(tx: Transaction, item: _AssistItem) -> Transaction:
    return replace(
        tx,
        category=item.category or "review",  # type: ignore[arg-type]
        tag=item.tag,
        confidence=item.confidence if item.confidence is not None else _DEFAULT_CONFIDENCE,
    )


def review_upgrade(
    transactions: Sequence[Transaction],
    client: Any | None = None,
    *,
    tags: Sequence[str] = _DEFAULT_TAGS,
    model: str | None = None,
) -> list[Transaction]:
    """Re-classify ``review`` items with the model; identity on any failure.

    Parameters
    ----------
    transactions:
        Output of the keyword classifier.
    client:
        An ``openai.OpenAI``-shaped client. When omitted, one is created only if
        ``OPENAI_API_KEY`` is set; otherwise the stage is skipped.
    tags:
        Allowed business tags advertised to the model.
    model:
        Model name; defaults to ``$STATEMENT_EXTRACTION_MODEL`` or
        ``gpt-4o-mini``.
    """

    out = list(transactions)
    positions = [i for i, tx in enumerate(out) if tx.category == "review"]
    if not positions:
        return out

    if client is None:
        if not os.getenv("OPENAI_API_KEY"):
            _logger.warning("assist:skipped reason=missing_api_key review_items=%d", len(positions))
            return out

    subset = [out[i] for i in positions]
    t0 = time.perf_counter()
    try:
        api = client if client is not None else _create_client()
        resp = api.responses.create(
            model=_resolve_model(model),
            instructions=prompting.build_system_instructions(tags),
            input=prompting.build_user_content(subset),
            text=ResponseTextConfigParam(format=prompting.build_response_format(tags)),
            timeout=REQUEST_TIMEOUT_S,
        )
        decisions = parse_assist_response(_response_text(resp), num_items=len(subset))
    except Exception as e:  # noqa: BLE001 - assist failures degrade to identity
        _logger.error(
            "assist:failed review_items=%d latency_ms=%.2f error=%s",
            len(positions),
            (time.perf_counter() - t0) * 1000.0,
            e.__class__.__name__,
        )
        return list(transactions)

    for sub_idx, item in decisions.items():
        abs_idx = positions[sub_idx]
        out[abs_idx] = _apply(out[abs_idx], item)

    _logger.info(
        "assist:done review_items=%d decided=%d latency_ms=%.2f",
        len(positions),
        len(decisions),
        (time.perf_counter() - t0) * 1000.0,
    )
    return out


__all__ = ["parse_assist_response", "review_upgrade"]
