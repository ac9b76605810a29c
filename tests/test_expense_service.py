from decimal import Decimal

import pytest

from backoffice.models import ExpenseCategory, OtherExpense
from backoffice.services import expense_service


@pytest.fixture
def utilities(db):
    return ExpenseCategory.objects.create(name="Utilities", code="UTIL")


@pytest.mark.django_db
def test_expense_paid_in_full(utilities):
    success, msg, expense = expense_service.create_expense(
        {"category_id": utilities.pk, "amount": 1000, "tax_amount": 180}
    )
    assert success, msg
    assert expense.expense_number.startswith("EXP-")
    assert expense.payment_status == OtherExpense.UNPAID
    assert expense.total_amount == Decimal("1180.00")

    success, msg, detail = expense_service.record_expense_payment(
        expense.pk, {"amount": 1180, "method": "upi"}
    )
    assert success, msg
    assert detail["payment_status"] == OtherExpense.PAID
    assert detail["outstanding"] == Decimal("0")
    assert len(detail["payments"]) == 1


@pytest.mark.django_db
def test_expense_partial_and_overpayment(utilities):
    _, _, expense = expense_service.create_expense(
        {"category_code": "UTIL", "amount": 500}
    )
    success, msg, detail = expense_service.record_expense_payment(
        expense.pk, {"amount": 200}
    )
    assert success, msg
    assert detail["payment_status"] == OtherExpense.PARTIAL

    success, msg, result = expense_service.record_expense_payment(
        expense.pk, {"amount": 301}
    )
    assert not success
    assert result["outstandingAmount"] == Decimal("300.00")
    expense.refresh_from_db()
    assert expense.total_paid == Decimal("200.00")


@pytest.mark.django_db
@pytest.mark.parametrize(
    "data, expected",
    [
        ({"amount": 10}, "category"),
        ({"category_code": "UTIL", "amount": 0}, "greater than 0"),
        ({"category_code": "UTIL", "amount": 10, "tax_amount": -1}, "tax_amount"),
        ({"category_code": "UTIL", "amount": 10, "expense_date": "31/12/2024"}, "expense_date"),
    ],
)
def test_create_expense_validation(utilities, data, expected):
    success, msg, _ = expense_service.create_expense(data)
    assert not success
    assert expected in msg


@pytest.mark.django_db
def test_opex_summary_groups_by_month_and_category(utilities):
    rent = ExpenseCategory.objects.create(name="Rent", code="RENT")
    expense_service.create_expense({"category_id": utilities.pk, "amount": 100, "tax_amount": 18})
    expense_service.create_expense({"category_id": rent.pk, "amount": 2000})
    summary = expense_service.opex_summary(months=1)
    assert len(summary) == 1
    assert summary[0]["categories"] == {
        "Rent": Decimal("2000.00"),
        "Utilities": Decimal("118.00"),
    }
    assert summary[0]["total"] == Decimal("2118.00")
