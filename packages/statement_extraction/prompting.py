"""Prompt construction for the review-upgrade assist call.

This module builds:
- the fixed instruction text (Portuguese, matching the product's audience);
- the user content listing only the ambiguous transactions, one per line,
  with a subset-relative ``index``;
- the strict ``response_format`` (JSON Schema) for the OpenAI Responses API.
"""

from __future__ import annotations

from collections.abc import Sequence

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

from .models import CATEGORIES, Transaction

BEGIN = "BEGIN_TRANSACTIONS\n"
END = "\nEND_TRANSACTIONS"


def build_system_instructions(tags: Sequence[str]) -> str:
    tag_list = ", ".join(f'"{t}"' for t in tags)
    return (
        "Voce e um assistente especializado em classificar despesas juridicas brasileiras.\n\n"
        "Para cada transacao, classifique como:\n"
        '- "reimbursable": Despesas que advogados podem cobrar de clientes (custas '
        "processuais, cartorios, diligencias, transporte para audiencias, correios, copias)\n"
        '- "not_reimbursable": Despesas pessoais ou operacionais do escritorio (salarios, '
        "aluguel, contas, alimentacao)\n"
        '- "review": quando nao for possivel decidir\n\n'
        "Responda APENAS com JSON valido no formato:\n"
        '{"results": [{"index": 0, "category": "reimbursable", '
        '"tag": "Custas Processuais", "confidence": 0.85}, ...]}\n\n'
        f"Tags disponiveis: {tag_list}"
    )


def format_transaction_line(index: int, tx: Transaction) -> str:
    return f"{index}. {tx.description} - R$ {abs(tx.amount):.2f}"


def build_user_content(items: Sequence[Transaction]) -> str:
    """List the transactions to classify between BEGIN_/END_ markers."""

    body = "\n".join(format_transaction_line(i, tx) for i, tx in enumerate(items))
    return f"Transacoes para classificar:\n{BEGIN}{body}{END}"


def build_response_format(tags: Sequence[str]) -> ResponseFormatTextJSONSchemaConfigParam:
    """Return the strict JSON Schema response_format object.

    Shape: ``{"results": [{"index", "category", "tag", "confidence"}]}`` with
    ``category`` restricted to the three-state vocabulary and ``tag`` to the
    taxonomy's tags (or null).
    """

    tag_enum: list[str | None] = [t for t in dict.fromkeys(tags) if t]
    if not tag_enum:
        raise ValueError("at least one tag is required to build the response format")

    result: ResponseFormatTextJSONSchemaConfigParam = {
        "type": "json_schema",
        "name": "review_upgrade",
        "schema": {
            "type": "object",
            "properties": {
                "results": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "index": {"type": "integer"},
                            "category": {"type": "string", "enum": list(CATEGORIES)},
                            "tag": {"type": ["string", "null"], "enum": tag_enum + [None]},
                            "confidence": {"type": "number", "minimum": 0, "maximum": 1},
                        },
                        "required": ["index", "category", "tag", "confidence"],
                        "additionalProperties": False,
                    },
                }
            },
            "required": ["results"],
            "additionalProperties": False,
        },
        "strict": True,
    }
    return result


__all__ = [
    "BEGIN",
    "END",
    "build_response_format",
    "build_system_instructions",
    "build_user_content",
    "format_transaction_line",
]
