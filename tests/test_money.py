from decimal import Decimal

from backoffice.services import kpis
from backoffice.services.money import parse_decimal, percent, to_money, to_quantity


def test_to_money_rounds_half_up():
    assert to_money("2.345") == Decimal("2.35")
    assert to_money(Decimal("2.344")) == Decimal("2.34")
    assert to_money(None) == Decimal("0.00")
    assert to_money("abc") == Decimal("0.00")


def test_to_quantity_keeps_three_places():
    assert to_quantity("1.23456") == Decimal("1.235")
    assert to_quantity(5) == Decimal("5.000")


def test_parse_decimal_rejects_non_numbers():
    assert parse_decimal("") is None
    assert parse_decimal(True) is None
    assert parse_decimal("nan") is None
    assert parse_decimal("12.5") == Decimal("12.5")


def test_percent_is_zero_for_zero_whole():
    assert percent(10, 0) == Decimal("0.00")
    assert percent(1, 3) == Decimal("33.33")


def test_compute_cogs_example():
    result = kpis.compute_cogs(100, 50, 30, revenue=200)
    assert result["cogs"] == Decimal("120.00")
    assert result["gross_profit"] == Decimal("80.00")
    assert result["profit_margin"] == Decimal("40.00")


def test_compute_cogs_without_revenue_has_zero_margin():
    result = kpis.compute_cogs(100, 0, 100)
    assert result["cogs"] == Decimal("0.00")
    assert result["profit_margin"] == Decimal("0.00")
