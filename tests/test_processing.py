from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

import statement_extraction.processing as processing_mod
from statement_extraction.models import Transaction
from statement_extraction.processing import (
    NO_TRANSACTIONS_ERROR,
    detect_bank,
    process_statement,
    reimbursable_total,
    statement_period,
    summarize,
    upload_status,
)
from statement_extraction.text_sources import StaticTextSource

TODAY = datetime(2025, 3, 15)


def _tx(date: str, category: str, amount: str) -> Transaction:
    return Transaction(
        date=date,
        description="X",
        amount=Decimal(amount),
        category=category,  # type: ignore[arg-type]
    )


@pytest.mark.parametrize(
    ("text", "bank"),
    [
        ("Extrato Banco Itaú Unibanco S.A.", "Itau"),
        ("BRADESCO - Extrato mensal", "Bradesco"),
        ("Banco do Brasil S.A.", "Banco do Brasil"),
        ("Caixa Econômica Federal", "Caixa"),
        ("Nu Pagamentos S.A.", "Nubank"),
        ("Banco Inter S.A.", "Inter"),
        ("Cooperativa Sicredi", "Sicredi"),
        ("Extrato de conta corrente", None),
        ("ABBOTT LABORATORIOS", None),
    ],
)
def test_detect_bank(text: str, bank: str | None) -> None:
    assert detect_bank(text) == bank


def test_statement_period() -> None:
    txs = [
        _tx("2024-11-07", "review", "1"),
        _tx("2024-11-05", "review", "1"),
        _tx("2024-11-30", "review", "1"),
    ]
    assert statement_period(txs) == ("2024-11-05", "2024-11-30")
    assert statement_period([]) == (None, None)


def test_reimbursable_total_sums_only_reimbursable() -> None:
    txs = [
        _tx("2024-11-05", "reimbursable", "47.90"),
        _tx("2024-11-06", "not_reimbursable", "150.00"),
        _tx("2024-11-07", "reimbursable", "35.1"),
        _tx("2024-11-08", "review", "89.00"),
    ]
    assert reimbursable_total(txs) == Decimal("83.00")
    assert str(reimbursable_total([])) == "0.00"


def test_upload_status() -> None:
    assert upload_status([_tx("2024-11-05", "reimbursable", "1")]) == "completed"
    assert upload_status([_tx("2024-11-05", "review", "1")]) == "review"


def test_summarize() -> None:
    txs = [_tx("2024-11-05", "reimbursable", "10.00"), _tx("2024-11-06", "review", "5.00")]
    result = summarize(txs, text="Bradesco")
    assert result.success
    assert result.status == "review"
    assert result.has_review_items
    assert result.transaction_count == 2
    assert result.reimbursable_total == Decimal("10.00")
    assert result.bank_name == "Bradesco"
    assert (result.period_start, result.period_end) == ("2024-11-05", "2024-11-06")


def test_process_statement_completed() -> None:
    text = "\n".join(
        [
            "BRADESCO - Extrato de conta corrente",
            "05/11/2024 UBER *TRIP PZXY1234 47,90",
            "06/11/2024 PIX ENVIADO JOAO 150,00",
            "07/11/2024 CARTORIO 2 OFICIO 35,00",
            "Fim do extrato, obrigado por utilizar nossos canais digitais.",
        ]
    )
    result = process_statement(StaticTextSource(text), today=TODAY)
    assert result.success
    assert result.status == "completed"
    assert result.transaction_count == 3
    assert result.reimbursable_total == Decimal("82.90")
    assert result.bank_name == "Bradesco"

    payload = result.to_dict()
    assert payload["reimbursable_total"] == "82.90"
    assert payload["period"] == {"start": "2024-11-05", "end": "2024-11-07"}
    assert payload["transactions"][0]["amount"] == "47.90"
    assert payload["transactions"][0]["tag"] == "Transporte"


def test_process_statement_review_status() -> None:
    text = "05/11/2024 LOJA XYZ CENTRO 89,00\n" + "Texto complementar do extrato. " * 5
    result = process_statement(StaticTextSource(text), today=TODAY)
    assert result.success
    assert result.status == "review"
    assert result.has_review_items


def test_process_statement_without_transactions_fails() -> None:
    result = process_statement(StaticTextSource("SALDO FINAL DO DIA 1.200,00"), today=TODAY)
    assert not result.success
    assert result.status == "failed"
    assert result.error == NO_TRANSACTIONS_ERROR
    assert result.transaction_count == 0


def test_process_statement_reports_unexpected_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    def _boom(*args, **kwargs):
        raise RuntimeError("classifier exploded")

    monkeypatch.setattr(processing_mod, "run_extraction", _boom)
    result = process_statement(StaticTextSource("irrelevant"))
    assert not result.success
    assert result.status == "failed"
    assert result.error == "classifier exploded"
