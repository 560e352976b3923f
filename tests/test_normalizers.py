from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from statement_extraction.normalizers import (
    is_leap_year,
    is_valid_normalized_date,
    normalize_date,
    normalize_date_with_fallback_year,
    normalize_for_match,
    parse_currency_value,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("47,90", Decimal("47.90")),
        ("R$ 1.234,56", Decimal("1234.56")),
        ("r$10,00", Decimal("10.00")),
        ("1,234.56", Decimal("1234.56")),
        ("123,45-", Decimal("123.45")),
        ("-50,00", Decimal("50.00")),
        ("R$ -1.200,00", Decimal("1200.00")),
        ("1 234,56", Decimal("1234.56")),
        ("1200", Decimal("1200")),
    ],
)
def test_parse_currency_value_locale_formats(raw: str, expected: Decimal) -> None:
    assert parse_currency_value(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "-", "R$", "abc", ",", "."])
def test_parse_currency_value_degrades_to_zero(raw: str) -> None:
    assert parse_currency_value(raw) == Decimal("0")


def test_parse_currency_value_is_never_negative() -> None:
    for raw in ("-1,00", "1,00-", "R$ -0,01"):
        assert parse_currency_value(raw) >= 0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("05/11/2024", "2024-11-05"),
        ("05-11-2024", "2024-11-05"),
        ("05.11.2024", "2024-11-05"),
        ("05/11/24", "2024-11-05"),
        ("5/1/2024", "2024-01-05"),
    ],
)
def test_normalize_date_full_forms(raw: str, expected: str) -> None:
    assert normalize_date(raw) == expected


def test_normalize_date_does_not_validate() -> None:
    # Impossible dates are still rendered; validation is a separate step.
    assert normalize_date("31/02/2025") == "2025-02-31"
    assert not is_valid_normalized_date(normalize_date("31/02/2025"))


def test_normalize_date_single_part_is_empty() -> None:
    assert normalize_date("20241105") == ""


def test_fallback_year_uses_current_year_for_past_dates() -> None:
    today = datetime(2025, 3, 1, 10, 0)
    assert normalize_date_with_fallback_year("07/02", today=today) == "2025-02-07"


def test_fallback_year_rolls_back_for_dates_in_the_future() -> None:
    # A December entry seen in January belongs to the previous year.
    today = datetime(2025, 1, 10, 12, 0)
    assert normalize_date_with_fallback_year("20/12", today=today) == "2024-12-20"


def test_fallback_year_tolerates_one_day_ahead() -> None:
    today = datetime(2025, 1, 10, 12, 0)
    assert normalize_date_with_fallback_year("11/01", today=today) == "2025-01-11"
    assert normalize_date_with_fallback_year("12/01", today=today) == "2024-01-12"


def test_fallback_year_passes_full_dates_through() -> None:
    today = datetime(2025, 1, 10)
    assert normalize_date_with_fallback_year("20/12/2023", today=today) == "2023-12-20"


def test_fallback_year_keeps_impossible_short_dates_invalid() -> None:
    today = datetime(2025, 6, 1)
    iso = normalize_date_with_fallback_year("29/02", today=today)
    assert iso == "2025-02-29"
    assert not is_valid_normalized_date(iso)


@pytest.mark.parametrize(
    ("year", "leap"),
    [(2024, True), (2023, False), (1900, False), (2000, True)],
)
def test_is_leap_year(year: int, leap: bool) -> None:
    assert is_leap_year(year) is leap


@pytest.mark.parametrize(
    ("iso", "valid"),
    [
        ("2024-11-05", True),
        ("2024-02-29", True),
        ("2023-02-29", False),
        ("2000-02-29", True),
        ("1900-02-29", False),
        ("2024-04-31", False),
        ("2024-13-01", False),
        ("2024-00-10", False),
        ("2024-01-00", False),
        ("2024-2-01", False),
        ("", False),
    ],
)
def test_is_valid_normalized_date(iso: str, valid: bool) -> None:
    assert is_valid_normalized_date(iso) is valid


def test_normalize_for_match_strips_accents() -> None:
    assert normalize_for_match("Lançamento Histórico") == "LANCAMENTO HISTORICO"
    assert normalize_for_match("total de saídas") == "TOTAL DE SAIDAS"


def test_full_width_dates_normalize_to_ascii() -> None:
    assert normalize_date("０５/１１/２０２４") == "2024-11-05"
    today = datetime(2025, 1, 10)
    assert normalize_date_with_fallback_year("２０/１２", today=today) == "2024-12-20"


def test_iso_validation_rejects_non_ascii_digits() -> None:
    assert not is_valid_normalized_date("２０２４-１１-０５")
