import logging
from decimal import Decimal
from typing import Any, Dict, Tuple

from django.db.models import Count, Sum

from backoffice.models import GoodsReceivedNote, Payment, PurchaseOrder, Vendor
from .money import ZERO, to_money

logger = logging.getLogger(__name__)


def delete_vendor(vendor: Vendor) -> Tuple[bool, str]:
    if vendor.intends.exists():
        return False, "Cannot delete vendor - it is used by an intend"
    if vendor.purchase_orders.exists():
        return False, "Cannot delete vendor - it has purchase orders"
    vendor.delete()
    logger.info("Deleted vendor %s", vendor.name)
    return True, "Vendor deleted"


def vendor_dashboard(vendor: Vendor) -> Dict[str, Any]:
    """Purchasing and payment summary for one vendor."""

    pos = list(
        PurchaseOrder.objects.filter(vendor=vendor)
        .prefetch_related("grns", "payments")
        .order_by("-created_at")
    )
    status_counts = {
        row["status"]: row["n"]
        for row in PurchaseOrder.objects.filter(vendor=vendor)
        .order_by()
        .values("status")
        .annotate(n=Count("po_id"))
    }
    total_payments = Payment.objects.filter(
        vendor=vendor, status=Payment.COMPLETED
    ).aggregate(total=Sum("amount"))["total"] or ZERO

    orders = []
    outstanding_total = Decimal("0")
    for po in pos:
        outstanding_total += po.outstanding_amount
        orders.append(
            {
                "po_id": po.po_id,
                "po_number": po.po_number,
                "status": po.status,
                "payment_status": po.payment_status,
                "total_amount": po.total_amount,
                "total_paid": po.total_paid,
                "outstanding_amount": po.outstanding_amount,
                "grns": [
                    {
                        "grn_id": g.grn_id,
                        "grn_number": g.grn_number,
                        "received_date": g.received_date,
                        "total_amount": g.total_amount,
                    }
                    for g in po.grns.all()
                ],
                "payments": [
                    {
                        "payment_id": p.payment_id,
                        "payment_number": p.payment_number,
                        "payment_date": p.payment_date,
                        "amount": p.amount,
                        "status": p.status,
                    }
                    for p in po.payments.all()
                ],
            }
        )
    return {
        "vendor": {
            "vendor_id": vendor.vendor_id,
            "name": vendor.name,
            "contact": vendor.contact,
            "email": vendor.email,
            "address": vendor.address,
        },
        "stats": {
            "totalPOs": len(pos),
            "totalPOAmount": to_money(sum((p.total_amount for p in pos), ZERO)),
            "totalGRNs": GoodsReceivedNote.objects.filter(
                purchase_order__vendor=vendor
            ).count(),
            "totalPayments": to_money(total_payments),
            "outstandingAmount": to_money(outstanding_total),
            "poStatusCounts": status_counts,
        },
        "purchase_orders": orders,
    }
