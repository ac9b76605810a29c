import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from backoffice.models import (
    PAYMENT_METHODS,
    ExpenseCategory,
    OtherExpense,
    OtherExpensePayment,
    Vendor,
)
from . import numbering
from .money import ZERO, parse_decimal, to_money

logger = logging.getLogger(__name__)


def payment_status_for(total_paid: Decimal, total_amount: Decimal) -> str:
    if total_amount - total_paid <= 0:
        return OtherExpense.PAID
    if total_paid > 0:
        return OtherExpense.PARTIAL
    return OtherExpense.UNPAID


def _resolve_category(data: Dict[str, Any]) -> Optional[ExpenseCategory]:
    if data.get("category_id"):
        return ExpenseCategory.objects.filter(pk=data["category_id"]).first()
    code = data.get("category_code")
    if code:
        return ExpenseCategory.objects.filter(code__iexact=code).first() or (
            ExpenseCategory.objects.filter(name__iexact=code).first()
        )
    return None


def create_expense(data: Dict[str, Any]) -> Tuple[bool, str, Optional[OtherExpense]]:
    category = _resolve_category(data)
    if category is None:
        return False, "A valid category_id or category_code is required", None
    amount = parse_decimal(data.get("amount"))
    if amount is None or to_money(amount) <= 0:
        return False, "Amount must be greater than 0", None
    tax = parse_decimal(data.get("tax_amount"))
    if data.get("tax_amount") not in (None, "") and (tax is None or tax < 0):
        return False, "tax_amount must be zero or more", None
    vendor_id = data.get("vendor_id") or None
    if vendor_id and not Vendor.objects.filter(pk=vendor_id).exists():
        return False, "Vendor not found", None
    expense_date = timezone.localdate()
    if data.get("expense_date"):
        expense_date = numbering.as_date(data["expense_date"])
        if expense_date is None:
            return False, "expense_date must be a valid date", None

    expense = OtherExpense.objects.create(
        expense_number=numbering.next_number("EXP", expense_date),
        expense_date=expense_date,
        category=category,
        vendor_id=vendor_id,
        amount=to_money(amount),
        tax_amount=to_money(tax),
        notes=data.get("notes") or None,
        attachment_url=data.get("attachment_url") or None,
    )
    logger.info(
        "Created expense %s (%s) for %s",
        expense.expense_number,
        category.code,
        expense.total_amount,
    )
    return True, "Expense created", expense


def record_expense_payment(
    expense_id: int, data: Dict[str, Any]
) -> Tuple[bool, str, Dict[str, Any]]:
    """Pay part or all of an expense; the payment may not exceed what is owed."""

    amount = parse_decimal(data.get("amount"))
    if amount is None or to_money(amount) <= 0:
        return False, "Payment amount must be greater than 0", {}
    amount = to_money(amount)
    method = data.get("method") or "cash"
    if method not in dict(PAYMENT_METHODS):
        return False, f"Invalid method: {method}", {}
    payment_date = timezone.localdate()
    if data.get("payment_date"):
        payment_date = numbering.as_date(data["payment_date"])
        if payment_date is None:
            return False, "payment_date must be a valid date", {}

    with transaction.atomic():
        try:
            expense = OtherExpense.objects.select_for_update().get(pk=expense_id)
        except OtherExpense.DoesNotExist:
            return False, "Expense not found", {}
        if amount > expense.outstanding_amount:
            return (
                False,
                "Payment amount exceeds outstanding amount",
                {
                    "requestedAmount": amount,
                    "outstandingAmount": expense.outstanding_amount,
                },
            )
        OtherExpensePayment.objects.create(
            expense=expense,
            amount=amount,
            payment_date=payment_date,
            method=method,
            reference=data.get("reference") or None,
        )
        paid = expense.payments.aggregate(total=Sum("amount"))["total"]
        expense.total_paid = to_money(paid)
        expense.payment_status = payment_status_for(
            expense.total_paid, expense.total_amount
        )
        expense.save(update_fields=["total_paid", "payment_status"])
    logger.info(
        "Expense %s paid %s, status %s",
        expense.expense_number,
        amount,
        expense.payment_status,
    )
    return True, "Payment recorded", expense_detail(expense)


def expense_detail(expense: OtherExpense) -> Dict[str, Any]:
    return {
        "expense_id": expense.expense_id,
        "expense_number": expense.expense_number,
        "expense_date": expense.expense_date,
        "category_id": expense.category_id,
        "category_name": expense.category.name,
        "vendor_id": expense.vendor_id,
        "amount": expense.amount,
        "tax_amount": expense.tax_amount,
        "total_amount": expense.total_amount,
        "total_paid": expense.total_paid,
        "outstanding": expense.outstanding_amount,
        "payment_status": expense.payment_status,
        "notes": expense.notes,
        "attachment_url": expense.attachment_url,
        "payments": [
            {
                "payment_id": p.payment_id,
                "amount": p.amount,
                "payment_date": p.payment_date,
                "method": p.method,
                "reference": p.reference,
            }
            for p in expense.payments.order_by("payment_date", "payment_id")
        ],
    }


def list_expenses(
    category_id: Optional[Any] = None,
    payment_status: Optional[str] = None,
    date_from: Optional[Any] = None,
    date_to: Optional[Any] = None,
):
    qs = OtherExpense.objects.select_related("category", "vendor").order_by(
        "-expense_date", "-expense_id"
    )
    if category_id:
        qs = qs.filter(category_id=category_id)
    if payment_status:
        qs = qs.filter(payment_status=payment_status)
    if date_from:
        qs = qs.filter(expense_date__gte=date_from)
    if date_to:
        qs = qs.filter(expense_date__lte=date_to)
    return qs


def opex_summary(months: int = 6) -> List[Dict[str, Any]]:
    """Monthly expense totals (amount + tax) broken down by category."""

    today = timezone.localdate()
    year, month = today.year, today.month - (months - 1)
    while month <= 0:
        month += 12
        year -= 1
    start = today.replace(year=year, month=month, day=1)

    rows = (
        OtherExpense.objects.filter(expense_date__gte=start)
        .annotate(month=TruncMonth("expense_date"))
        .order_by()
        .values("month", "category__name")
        .annotate(amount=Sum("amount"), tax=Sum("tax_amount"))
        .order_by("month", "category__name")
    )
    summary: "OrderedDict[str, Dict[str, Any]]" = OrderedDict()
    for row in rows:
        key = row["month"].strftime("%Y-%m")
        bucket = summary.setdefault(key, {"month": key, "total": ZERO, "categories": {}})
        value = to_money((row["amount"] or ZERO) + (row["tax"] or ZERO))
        bucket["categories"][row["category__name"]] = value
        bucket["total"] = to_money(bucket["total"] + value)
    return list(summary.values())
