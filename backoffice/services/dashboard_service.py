import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.db.models import F, Sum
from django.utils import timezone

from backoffice.models import (
    ExpenseCategory,
    GoodsReceivedNote,
    Ingredient,
    Intend,
    OtherExpense,
    OtherExpensePayment,
    Payment,
    PurchaseOrder,
    Recipe,
    Sale,
    StockMovement,
    Vendor,
)
from . import kpis, recipe_service
from .money import ZERO, percent, to_money

logger = logging.getLogger(__name__)

OPEN_PO_STATUSES = [
    PurchaseOrder.PENDING,
    PurchaseOrder.CONFIRMED,
    PurchaseOrder.PARTIALLY_RECEIVED,
]


def _recipe_cost_averages() -> Dict[str, Any]:
    costs = []
    margins = []
    for recipe in Recipe.objects.filter(is_active=True).prefetch_related(
        "lines__ingredient"
    ):
        costing = recipe_service.recipe_cost(recipe)
        costs.append(costing["current_cost"])
        margins.append(costing["profit_margin"])
    if not costs:
        return {"count": 0, "average_cost": ZERO, "average_margin": ZERO}
    return {
        "count": len(costs),
        "average_cost": to_money(sum(costs, ZERO) / len(costs)),
        "average_margin": to_money(sum(margins, ZERO) / len(margins)),
    }


def main_dashboard(today: Optional[date] = None) -> Dict[str, Any]:
    today = today or timezone.localdate()
    month_start, _ = kpis.month_bounds(today)
    po_totals = PurchaseOrder.objects.aggregate(
        amount=Sum("total_amount"), paid=Sum("total_paid")
    )
    outstanding = sum(
        (
            po.outstanding_amount
            for po in PurchaseOrder.objects.exclude(payment_status=PurchaseOrder.PAID)
        ),
        ZERO,
    )
    pending_pos = (
        PurchaseOrder.objects.filter(status__in=OPEN_PO_STATUSES)
        .select_related("vendor")
        .order_by("-created_at")
    )
    return {
        "counts": {
            "ingredients": Ingredient.objects.filter(is_active=True).count(),
            "vendors": Vendor.objects.filter(is_active=True).count(),
            "recipes": Recipe.objects.filter(is_active=True).count(),
            "purchase_orders": PurchaseOrder.objects.count(),
            "intends": Intend.objects.count(),
        },
        "low_stock": kpis.low_stock_items(),
        "pending_po_status": kpis.pending_po_status_counts(),
        "pending_pos": [
            {
                "po_id": po.po_id,
                "po_number": po.po_number,
                "vendor_name": po.vendor.name,
                "status": po.status,
                "total_amount": po.total_amount,
                "received_percentage": po.received_percentage,
            }
            for po in pending_pos[:5]
        ],
        "pending_intends": kpis.pending_intend_counts(),
        "recent_movements": [
            {
                "movement_id": m.movement_id,
                "ingredient_name": m.ingredient.name,
                "movement_type": m.movement_type,
                "quantity": m.quantity,
                "balance_after": m.balance_after,
                "movement_date": m.movement_date,
                "remarks": m.remarks,
            }
            for m in StockMovement.objects.select_related("ingredient").order_by(
                "-created_at", "-movement_id"
            )[:10]
        ],
        "payments": {
            "total_po_amount": to_money(po_totals["amount"]),
            "total_paid": to_money(po_totals["paid"]),
            "total_outstanding": to_money(outstanding),
        },
        "recipes": _recipe_cost_averages(),
        "sales": {
            "today": kpis.sales_summary(today, today),
            "month": kpis.sales_summary(month_start, today),
            "overall": kpis.sales_summary(),
        },
    }


def staff_dashboard(today: Optional[date] = None, limit: int = 5) -> Dict[str, Any]:
    """Kitchen/store view: what to reorder, what is expected, what just moved.

    No money figures are included.
    """

    today = today or timezone.localdate()
    low_stock = list(
        Ingredient.objects.filter(
            is_active=True, min_stock__gt=0, current_stock__lt=F("min_stock")
        )
        .order_by("current_stock", "name")
        .values("ingredient_id", "name", "unit", "current_stock", "min_stock")[:limit]
    )
    pending_intends = Intend.objects.filter(status=Intend.PENDING).order_by(
        "-created_at", "-intend_id"
    )
    open_pos = PurchaseOrder.objects.filter(status__in=OPEN_PO_STATUSES).count()
    return {
        "generated_at": today,
        "summary": {
            "totalIngredients": Ingredient.objects.filter(is_active=True).count(),
            "lowStockCount": len(low_stock),
            "activeRecipes": Recipe.objects.filter(is_active=True).count(),
            "openPurchaseOrders": open_pos,
            "pendingIntends": pending_intends.count(),
        },
        "lowStockItems": low_stock,
        "pendingIntends": [
            {
                "intend_id": i.intend_id,
                "intend_number": i.intend_number,
                "created_at": i.created_at,
                "status": i.status,
            }
            for i in pending_intends[:limit]
        ],
        "recentReceipts": [
            {
                "grn_id": g.grn_id,
                "grn_number": g.grn_number,
                "received_date": g.received_date,
                "po_number": g.purchase_order.po_number,
            }
            for g in GoodsReceivedNote.objects.select_related(
                "purchase_order"
            ).order_by("-received_date", "-grn_id")[:limit]
        ],
        "recentMovements": [
            {
                "movement_id": m.movement_id,
                "movement_date": m.movement_date,
                "movement_type": m.movement_type,
                "quantity": m.quantity,
                "ingredient_name": m.ingredient.name,
                "ingredient_unit": m.ingredient.unit,
            }
            for m in StockMovement.objects.select_related("ingredient").order_by(
                "-movement_date", "-movement_id"
            )[:limit]
        ],
    }


def _change(current: Decimal, previous: Decimal) -> Dict[str, Decimal]:
    return {
        "current": current,
        "previous": previous,
        "change": current - previous,
        "changePercent": percent(current - previous, abs(previous)),
    }


def _payables(today: date) -> Dict[str, Any]:
    overdue_days = getattr(settings, "BACKOFFICE_PAYABLES_OVERDUE_DAYS", 15)
    due_soon_days = getattr(settings, "BACKOFFICE_PAYABLES_DUE_SOON_DAYS", 7)
    rows = []
    for po in (
        PurchaseOrder.objects.exclude(payment_status=PurchaseOrder.PAID)
        .select_related("vendor")
    ):
        outstanding = po.outstanding_amount
        if outstanding <= 0:
            continue
        days = (today - po.order_date).days
        rows.append(
            {
                "po_id": po.po_id,
                "po_number": po.po_number,
                "vendor_name": po.vendor.name,
                "outstanding_amount": outstanding,
                "days_outstanding": days,
                "status": po.status,
                "payment_status": po.payment_status,
            }
        )
    overdue = [r for r in rows if r["days_outstanding"] > overdue_days]
    due_soon = [
        r for r in rows if due_soon_days <= r["days_outstanding"] <= overdue_days
    ]
    watchlist = sorted(
        rows, key=lambda r: (r["outstanding_amount"], r["days_outstanding"]), reverse=True
    )[:6]
    return {
        "totalOutstanding": to_money(sum((r["outstanding_amount"] for r in rows), ZERO)),
        "count": len(rows),
        "overdue": {
            "count": len(overdue),
            "amount": to_money(sum((r["outstanding_amount"] for r in overdue), ZERO)),
        },
        "dueSoon": {
            "count": len(due_soon),
            "amount": to_money(sum((r["outstanding_amount"] for r in due_soon), ZERO)),
        },
        "watchlist": watchlist,
    }


def _expenses(month_start: date, today: date) -> Dict[str, Any]:
    month_qs = OtherExpense.objects.filter(
        expense_date__gte=month_start, expense_date__lte=today
    )
    totals = month_qs.aggregate(amount=Sum("amount"), tax=Sum("tax_amount"))
    by_category = []
    for category in ExpenseCategory.objects.all():
        cat_totals = month_qs.filter(category=category).aggregate(
            amount=Sum("amount"), tax=Sum("tax_amount")
        )
        value = to_money((cat_totals["amount"] or ZERO) + (cat_totals["tax"] or ZERO))
        if value > 0:
            by_category.append({"category": category.name, "total": value})
    by_category.sort(key=lambda r: r["total"], reverse=True)
    unpaid = OtherExpense.objects.exclude(payment_status=OtherExpense.PAID)
    return {
        "mtdTotal": to_money((totals["amount"] or ZERO) + (totals["tax"] or ZERO)),
        "topCategories": by_category[:5],
        "outstanding": to_money(sum((e.outstanding_amount for e in unpaid), ZERO)),
        "recent": [
            {
                "expense_id": e.expense_id,
                "expense_number": e.expense_number,
                "expense_date": e.expense_date,
                "category": e.category.name,
                "total_amount": e.total_amount,
                "payment_status": e.payment_status,
            }
            for e in OtherExpense.objects.select_related("category").order_by(
                "-expense_date", "-expense_id"
            )[:5]
        ],
    }


def _recent_activity(limit: int = 10) -> List[Dict[str, Any]]:
    events = []
    for p in Payment.objects.select_related("vendor").order_by("-created_at")[:limit]:
        events.append(
            {
                "type": "payment",
                "reference": p.payment_number,
                "description": f"Paid {p.vendor.name}",
                "amount": p.amount,
                "date": p.payment_date,
                "created_at": p.created_at,
            }
        )
    for g in GoodsReceivedNote.objects.select_related(
        "purchase_order__vendor"
    ).order_by("-created_at")[:limit]:
        events.append(
            {
                "type": "grn",
                "reference": g.grn_number,
                "description": f"Received from {g.purchase_order.vendor.name}",
                "amount": g.total_amount,
                "date": g.received_date,
                "created_at": g.created_at,
            }
        )
    for s in Sale.objects.order_by("-created_at")[:limit]:
        events.append(
            {
                "type": "sale",
                "reference": s.sale_number,
                "description": f"Sale of {s.total_dishes} dishes",
                "amount": s.total_revenue,
                "date": s.sale_date,
                "created_at": s.created_at,
            }
        )
    for e in OtherExpense.objects.select_related("category").order_by("-created_at")[
        :limit
    ]:
        events.append(
            {
                "type": "expense",
                "reference": e.expense_number,
                "description": e.category.name,
                "amount": e.total_amount,
                "date": e.expense_date,
                "created_at": e.created_at,
            }
        )
    events.sort(key=lambda ev: ev["created_at"], reverse=True)
    return events[:limit]


def accounts_dashboard(today: Optional[date] = None) -> Dict[str, Any]:
    """Month-to-date profit, cash flow, payables and expenses in one view."""

    today = today or timezone.localdate()
    month_start, prev_end = kpis.month_bounds(today)
    prev_start = prev_end.replace(day=1)
    current = kpis.period_cogs(month_start, today)
    previous = kpis.period_cogs(prev_start, prev_end)

    month_in = kpis.cash_in(month_start, today)
    month_out = kpis.cash_out(month_start, today)
    life_in = kpis.cash_in()
    life_out = kpis.cash_out()
    return {
        "headline": {
            "revenue": _change(current["revenue"], previous["revenue"]),
            "cogs": _change(current["cogs"], previous["cogs"]),
            "grossProfit": _change(current["gross_profit"], previous["gross_profit"]),
            "margin": _change(current["profit_margin"], previous["profit_margin"]),
        },
        "cashFlow": {
            "month": {"in": month_in, "out": month_out, "net": month_in - month_out},
            "lifetime": {"in": life_in, "out": life_out, "net": life_in - life_out},
        },
        "payables": _payables(today),
        "expenses": _expenses(month_start, today),
        "recentActivity": _recent_activity(),
        "generated_at": timezone.now(),
    }


def sales_trends(today: Optional[date] = None) -> Dict[str, Any]:
    today = today or timezone.localdate()
    month_start, prev_end = kpis.month_bounds(today)
    prev_start = prev_end.replace(day=1)
    daily = kpis.sales_trend_last_7_days(today)
    return {
        "daily": daily,
        "monthComparison": {
            "current": kpis.sales_summary(month_start, today),
            "previous": kpis.sales_summary(prev_start, prev_end),
        },
        "marginTrend": [{"date": d["date"], "margin": d["margin"]} for d in daily],
    }


def cash_ledger(
    date_from: Optional[date] = None, date_to: Optional[date] = None
) -> Dict[str, Any]:
    """Payments out (debit) and processed sales in (credit) with a running balance."""

    opening = ZERO
    if date_from:
        before = date_from - timedelta(days=1)
        opening = kpis.cash_in(end=before) - kpis.cash_out(end=before)

    payments = Payment.objects.filter(status=Payment.COMPLETED).select_related(
        "vendor", "purchase_order"
    )
    expense_payments = OtherExpensePayment.objects.select_related(
        "expense__category"
    )
    sales = Sale.objects.filter(status=Sale.PROCESSED)
    if date_from:
        payments = payments.filter(payment_date__gte=date_from)
        expense_payments = expense_payments.filter(payment_date__gte=date_from)
        sales = sales.filter(sale_date__gte=date_from)
    if date_to:
        payments = payments.filter(payment_date__lte=date_to)
        expense_payments = expense_payments.filter(payment_date__lte=date_to)
        sales = sales.filter(sale_date__lte=date_to)

    entries = []
    for p in payments:
        entries.append(
            {
                "date": p.payment_date,
                "type": "DEBIT",
                "reference": p.payment_number,
                "description": f"{p.vendor.name} - {p.purchase_order.po_number}",
                "amount": p.amount,
            }
        )
    for ep in expense_payments:
        entries.append(
            {
                "date": ep.payment_date,
                "type": "DEBIT",
                "reference": ep.expense.expense_number,
                "description": f"Expense - {ep.expense.category.name}",
                "amount": ep.amount,
            }
        )
    for s in sales:
        entries.append(
            {
                "date": s.sale_date,
                "type": "CREDIT",
                "reference": s.sale_number,
                "description": "Sales",
                "amount": s.total_revenue,
            }
        )
    # Credits before debits on the same day.
    entries.sort(key=lambda e: (e["date"], e["type"] != "CREDIT", e["reference"]))

    balance = opening
    credit = debit = ZERO
    for entry in entries:
        if entry["type"] == "CREDIT":
            credit += entry["amount"]
            balance += entry["amount"]
        else:
            debit += entry["amount"]
            balance -= entry["amount"]
        entry["balance"] = to_money(balance)
    return {
        "entries": entries,
        "summary": {
            "opening_balance": to_money(opening),
            "total_credit": to_money(credit),
            "total_debit": to_money(debit),
            "net": to_money(credit - debit),
            "closing_balance": to_money(balance),
        },
    }
