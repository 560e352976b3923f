"""Structural de-duplication of parsed transaction candidates.

Line-combination parsing deliberately tries overlapping windows, so the same
statement entry can be produced more than once. Two candidates are the same
entry when date, uppercased description and two-decimal amount agree.
"""

from __future__ import annotations

from collections.abc import Iterable

from .models import Transaction


def transaction_signature(tx: Transaction) -> str:
    return f"{tx.date}|{tx.description.upper()}|{tx.amount:.2f}"


def deduplicate(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Return ``transactions`` with later duplicates dropped (stable order)."""

    seen: set[str] = set()
    unique: list[Transaction] = []
    for tx in transactions:
        signature = transaction_signature(tx)
        if signature in seen:
            continue
        seen.add(signature)
        unique.append(tx)
    return unique


__all__ = ["deduplicate", "transaction_signature"]
