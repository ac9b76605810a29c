from datetime import date
from decimal import Decimal

import pytest

from backoffice.models import StockMovement
from backoffice.services import (
    dashboard_service,
    goods_receiving_service,
    kpis,
    payment_service,
    sale_service,
    stock_service,
)

TODAY = date(2024, 5, 20)


@pytest.fixture
def may_activity(ingredient_factory, recipe_factory, po_factory):
    """Opening stock 10 @10 in April; May buys 5 @10 and sells 8 portions @25."""

    ing = ingredient_factory(name="Chicken", current_stock=0, last_price=10)
    stock_service.post_movement(
        ing.pk, StockMovement.OPENING, 10, movement_date=date(2024, 4, 25)
    )
    po = po_factory([(ing, 5, 10)])
    success, msg, _ = goods_receiving_service.create_grn(
        {"po_id": po.pk, "received_date": "2024-05-10"},
        [{"po_item_id": po.items.get().pk, "quantity_received": 5}],
    )
    assert success, msg
    success, msg, _ = payment_service.create_payment(
        {"po_id": po.pk, "payment_date": "2024-05-11", "amount": 50, "payment_method": "cash"}
    )
    assert success, msg
    recipe = recipe_factory(name="Curry", selling_price=25, lines=[(ing, 1)])
    success, msg, _ = sale_service.create_sale(
        {"sale_date": "2024-05-15"}, [{"recipe_id": recipe.pk, "quantity": 8}]
    )
    assert success, msg
    return ing


@pytest.mark.django_db
def test_mtd_cogs_from_ledger(may_activity):
    result = kpis.mtd_cogs(TODAY)
    assert result["period_start"] == date(2024, 5, 1)
    assert result["opening_stock_value"] == Decimal("100.00")
    assert result["purchases_value"] == Decimal("50.00")
    assert result["closing_stock_value"] == Decimal("70.00")
    assert result["cogs"] == Decimal("80.00")
    assert result["revenue"] == Decimal("200.00")
    assert result["gross_profit"] == Decimal("120.00")
    assert result["profit_margin"] == Decimal("60.00")


@pytest.mark.django_db
def test_cash_ledger_running_balance(may_activity):
    ledger = dashboard_service.cash_ledger(date(2024, 5, 1), date(2024, 5, 31))
    assert [(e["type"], e["balance"]) for e in ledger["entries"]] == [
        ("DEBIT", Decimal("-50.00")),
        ("CREDIT", Decimal("150.00")),
    ]
    assert ledger["summary"]["total_credit"] == Decimal("200.00")
    assert ledger["summary"]["total_debit"] == Decimal("50.00")
    assert ledger["summary"]["closing_balance"] == Decimal("150.00")

    later = dashboard_service.cash_ledger(date(2024, 5, 12), None)
    assert later["summary"]["opening_balance"] == Decimal("-50.00")
    assert len(later["entries"]) == 1


@pytest.mark.django_db
def test_accounts_dashboard_headline(may_activity):
    data = dashboard_service.accounts_dashboard(TODAY)
    assert data["headline"]["revenue"]["current"] == Decimal("200.00")
    assert data["headline"]["cogs"]["current"] == Decimal("80.00")
    assert data["cashFlow"]["month"]["net"] == Decimal("150.00")
    assert data["payables"]["count"] == 0
    assert {e["type"] for e in data["recentActivity"]} == {"payment", "grn", "sale"}


@pytest.mark.django_db
def test_sales_trends_series(may_activity):
    data = dashboard_service.sales_trends(TODAY)
    assert len(data["daily"]) == 7
    day = next(d for d in data["daily"] if d["date"] == "2024-05-15")
    assert day["revenue"] == Decimal("200.00")
    assert data["monthComparison"]["current"]["count"] == 1


@pytest.mark.django_db
def test_main_dashboard_counts(may_activity):
    data = dashboard_service.main_dashboard(TODAY)
    assert data["counts"]["ingredients"] == 1
    assert data["payments"]["total_paid"] == Decimal("50.00")
    assert data["recipes"]["count"] == 1
    assert data["sales"]["overall"]["revenue"] == Decimal("200.00")
