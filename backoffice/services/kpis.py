from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db.models import Count, F, Sum
from django.utils import timezone

from backoffice.models import (
    GRNItem,
    Ingredient,
    Intend,
    OtherExpensePayment,
    Payment,
    PurchaseOrder,
    Sale,
)
from . import stock_service
from .money import ZERO, percent, to_money


def month_bounds(day: date) -> Tuple[date, date]:
    """First day of ``day``'s month and the last day of the previous month."""
    start = day.replace(day=1)
    return start, start - timedelta(days=1)


def compute_cogs(
    opening: Any, purchases: Any, closing: Any, revenue: Any = ZERO
) -> Dict[str, Decimal]:
    """COGS = opening + purchases - closing, with gross profit and margin."""

    cogs = to_money(to_money(opening) + to_money(purchases) - to_money(closing))
    revenue_d = to_money(revenue)
    gross_profit = revenue_d - cogs
    return {
        "opening_stock_value": to_money(opening),
        "purchases_value": to_money(purchases),
        "closing_stock_value": to_money(closing),
        "cogs": cogs,
        "revenue": revenue_d,
        "gross_profit": gross_profit,
        "profit_margin": percent(gross_profit, revenue_d),
    }


def sales_revenue(start: date, end: date) -> Decimal:
    return to_money(
        Sale.objects.filter(
            status=Sale.PROCESSED, sale_date__gte=start, sale_date__lte=end
        ).aggregate(total=Sum("total_revenue"))["total"]
    )


def purchases_value(start: date, end: date) -> Decimal:
    return to_money(
        GRNItem.objects.filter(
            grn__received_date__gte=start, grn__received_date__lte=end
        ).aggregate(total=Sum("line_total"))["total"]
    )


def period_cogs(start: date, end: date) -> Dict[str, Decimal]:
    """COGS for ``start``..``end`` with stock values rebuilt from the ledger."""

    opening = stock_service.stock_value_at(start - timedelta(days=1))
    closing = stock_service.stock_value_at(end)
    return compute_cogs(
        opening, purchases_value(start, end), closing, sales_revenue(start, end)
    )


def mtd_cogs(today: Optional[date] = None) -> Dict[str, Any]:
    today = today or timezone.localdate()
    start, _ = month_bounds(today)
    result: Dict[str, Any] = period_cogs(start, today)
    result["period_start"] = start
    result["period_end"] = today
    return result


def cash_out(start: Optional[date] = None, end: Optional[date] = None) -> Decimal:
    """Completed vendor payments plus expense payments in the period."""

    payments = Payment.objects.filter(status=Payment.COMPLETED)
    expense_payments = OtherExpensePayment.objects.all()
    if start:
        payments = payments.filter(payment_date__gte=start)
        expense_payments = expense_payments.filter(payment_date__gte=start)
    if end:
        payments = payments.filter(payment_date__lte=end)
        expense_payments = expense_payments.filter(payment_date__lte=end)
    return to_money(
        (payments.aggregate(total=Sum("amount"))["total"] or ZERO)
        + (expense_payments.aggregate(total=Sum("amount"))["total"] or ZERO)
    )


def cash_in(start: Optional[date] = None, end: Optional[date] = None) -> Decimal:
    sales = Sale.objects.filter(status=Sale.PROCESSED)
    if start:
        sales = sales.filter(sale_date__gte=start)
    if end:
        sales = sales.filter(sale_date__lte=end)
    return to_money(sales.aggregate(total=Sum("total_revenue"))["total"])


def low_stock_items(limit: int = 10) -> List[Dict[str, Any]]:
    """Active ingredients at or below their minimum stock."""
    qs = Ingredient.objects.filter(
        is_active=True, current_stock__lte=F("min_stock")
    ).order_by("name")
    return list(
        qs.values("ingredient_id", "name", "unit", "current_stock", "min_stock")[:limit]
    )


def pending_po_status_counts() -> dict:
    """Return counts of purchase orders not yet fully received."""
    statuses = [
        PurchaseOrder.PENDING,
        PurchaseOrder.CONFIRMED,
        PurchaseOrder.PARTIALLY_RECEIVED,
    ]
    counts = {
        row["status"]: row["total"]
        for row in PurchaseOrder.objects.filter(status__in=statuses)
        .order_by()
        .values("status")
        .annotate(total=Count("po_id"))
    }
    return {status: counts.get(status, 0) for status in statuses}


def pending_intend_counts() -> dict:
    """Return counts of intends that are not yet fulfilled."""
    statuses = [
        Intend.PENDING,
        Intend.DRAFT,
        Intend.SUBMITTED,
        Intend.APPROVED,
        Intend.PARTIALLY_FULFILLED,
    ]
    counts = {
        row["status"]: row["total"]
        for row in Intend.objects.filter(status__in=statuses)
        .order_by()
        .values("status")
        .annotate(total=Count("intend_id"))
    }
    return {status: counts.get(status, 0) for status in statuses}


def sales_summary(start: Optional[date] = None, end: Optional[date] = None) -> dict:
    qs = Sale.objects.filter(status=Sale.PROCESSED)
    if start:
        qs = qs.filter(sale_date__gte=start)
    if end:
        qs = qs.filter(sale_date__lte=end)
    totals = qs.aggregate(
        count=Count("sale_id"),
        revenue=Sum("total_revenue"),
        cost=Sum("total_cost"),
        dishes=Sum("total_dishes"),
    )
    revenue = to_money(totals["revenue"])
    cost = to_money(totals["cost"])
    return {
        "count": totals["count"],
        "dishes": totals["dishes"] or ZERO,
        "revenue": revenue,
        "cost": cost,
        "profit": revenue - cost,
        "margin": percent(revenue - cost, revenue),
    }


def sales_trend_last_7_days(today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Daily processed revenue, cost and margin for the past 7 days."""
    today = today or timezone.localdate()
    start = today - timedelta(days=6)
    rows = (
        Sale.objects.filter(
            status=Sale.PROCESSED, sale_date__gte=start, sale_date__lte=today
        )
        .order_by()
        .values("sale_date")
        .annotate(revenue=Sum("total_revenue"), cost=Sum("total_cost"))
    )
    data = {row["sale_date"]: row for row in rows}
    series = []
    for i in range(7):
        day = start + timedelta(days=i)
        row = data.get(day, {})
        revenue = to_money(row.get("revenue"))
        cost = to_money(row.get("cost"))
        series.append(
            {
                "date": day.strftime("%Y-%m-%d"),
                "revenue": revenue,
                "cost": cost,
                "profit": revenue - cost,
                "margin": percent(revenue - cost, revenue),
            }
        )
    return series
