import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import Sum

from backoffice.models import PAYMENT_METHODS, GRNItem, Payment, PurchaseOrder
from . import numbering
from .money import ZERO, parse_decimal, to_money

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("po_id", "payment_date", "amount", "payment_method")
OPTIONAL_FIELDS = ("transaction_reference", "transaction_date", "bank_name", "remarks")


def payment_status_for(total_paid: Decimal, receivable: Decimal) -> str:
    if receivable - total_paid <= 0:
        return PurchaseOrder.PAID
    if total_paid > 0:
        return PurchaseOrder.PARTIAL
    return PurchaseOrder.UNPAID


def outstanding_for(po: PurchaseOrder) -> Dict[str, Decimal]:
    """Receivable, paid and outstanding amounts of a purchase order."""

    return {
        "totalAmount": po.total_amount,
        "receivableAmount": po.receivable_amount,
        "totalPaid": po.total_paid,
        "outstandingAmount": po.outstanding_amount,
    }


def grn_value(po: PurchaseOrder) -> Decimal:
    total = GRNItem.objects.filter(grn__purchase_order=po).aggregate(
        total=Sum("line_total")
    )["total"]
    return to_money(total)


def refresh_payment_totals(po: PurchaseOrder) -> PurchaseOrder:
    paid = po.payments.filter(status=Payment.COMPLETED).aggregate(
        total=Sum("amount")
    )["total"]
    po.total_paid = to_money(paid)
    po.payment_status = payment_status_for(po.total_paid, po.receivable_amount)
    po.save(update_fields=["total_paid", "payment_status", "updated_at"])
    return po


def _validate(data: Dict[str, Any]) -> Tuple[bool, str]:
    missing = [f for f in REQUIRED_FIELDS if data.get(f) in (None, "")]
    if missing:
        return False, f"Missing required fields: {', '.join(missing)}"
    if numbering.as_date(data["payment_date"]) is None:
        return False, "payment_date must be a valid date"
    if data["payment_method"] not in dict(PAYMENT_METHODS):
        return False, f"Invalid payment_method: {data['payment_method']}"
    amount = parse_decimal(data["amount"])
    if amount is None or to_money(amount) <= 0:
        return False, "Payment amount must be greater than 0"
    return True, ""


def create_payment(
    data: Dict[str, Any], user=None
) -> Tuple[bool, str, Dict[str, Any]]:
    """Record a payment against a purchase order.

    The PO row stays locked from the outstanding check until the new totals
    are saved, so concurrent payments cannot jointly overpay. On failure the
    payload carries the amounts the request was checked against.
    """

    valid, msg = _validate(data)
    if not valid:
        return False, msg, {}
    amount = to_money(data["amount"])
    payment_date = numbering.as_date(data["payment_date"])

    with transaction.atomic():
        try:
            po = PurchaseOrder.objects.select_for_update().get(pk=data["po_id"])
        except (PurchaseOrder.DoesNotExist, ValueError, TypeError):
            return False, "Purchase order not found", {}
        amounts = outstanding_for(po)
        if amount > amounts["outstandingAmount"]:
            logger.warning(
                "Rejected payment of %s on %s, outstanding %s",
                amount,
                po.po_number,
                amounts["outstandingAmount"],
            )
            return (
                False,
                "Payment amount exceeds outstanding amount",
                {"requestedAmount": amount, **amounts},
            )
        payment = Payment.objects.create(
            payment_number=numbering.next_number("PAY", payment_date),
            purchase_order=po,
            vendor_id=po.vendor_id,
            payment_date=payment_date,
            amount=amount,
            payment_method=data["payment_method"],
            status=Payment.COMPLETED,
            created_by=user,
            **{f: data.get(f) or None for f in OPTIONAL_FIELDS},
        )
        refresh_payment_totals(po)

    received_value = grn_value(po)
    grn_warning: Optional[str] = None
    if po.total_paid > received_value:
        grn_warning = (
            f"Total payments ({po.total_paid}) exceed the value of goods "
            f"received so far ({received_value}). Please review."
        )
    logger.info(
        "Payment %s of %s recorded on %s, status %s",
        payment.payment_number,
        amount,
        po.po_number,
        po.payment_status,
    )
    return (
        True,
        "Payment recorded",
        {
            "payment_id": payment.payment_id,
            "payment_number": payment.payment_number,
            "payment_status": po.payment_status,
            "total_paid": po.total_paid,
            "outstanding_amount": po.outstanding_amount,
            "grn_warning": grn_warning,
        },
    )


def payment_detail(payment: Payment) -> Dict[str, Any]:
    """A payment with its vendor and the state of the PO it settles."""

    po = payment.purchase_order
    vendor = payment.vendor
    return {
        "payment_id": payment.payment_id,
        "payment_number": payment.payment_number,
        "payment_date": payment.payment_date,
        "amount": payment.amount,
        "payment_method": payment.payment_method,
        "transaction_reference": payment.transaction_reference,
        "transaction_date": payment.transaction_date,
        "bank_name": payment.bank_name,
        "remarks": payment.remarks,
        "status": payment.status,
        "created_at": payment.created_at,
        "vendor": {
            "vendor_id": vendor.vendor_id,
            "name": vendor.name,
            "contact": vendor.contact,
            "email": vendor.email,
            "address": vendor.address,
        },
        "purchase_order": {
            "po_id": po.po_id,
            "po_number": po.po_number,
            "order_date": po.order_date,
            "payment_status": po.payment_status,
            **outstanding_for(po),
        },
    }


def list_payments(
    vendor_id: Optional[Any] = None,
    po_id: Optional[Any] = None,
    status: Optional[str] = None,
):
    qs = Payment.objects.select_related("purchase_order", "vendor").order_by(
        "-payment_date", "-payment_id"
    )
    if vendor_id:
        qs = qs.filter(vendor_id=vendor_id)
    if po_id:
        qs = qs.filter(purchase_order_id=po_id)
    if status:
        qs = qs.filter(status=status)
    return qs


def list_outstanding() -> List[Dict[str, Any]]:
    rows = []
    for po in (
        PurchaseOrder.objects.filter(
            payment_status__in=[PurchaseOrder.UNPAID, PurchaseOrder.PARTIAL]
        )
        .select_related("vendor")
        .order_by("created_at", "po_id")
    ):
        if po.outstanding_amount <= ZERO:
            continue
        rows.append(
            {
                "po_id": po.po_id,
                "po_number": po.po_number,
                "vendor_id": po.vendor_id,
                "vendor_name": po.vendor.name,
                "status": po.status,
                "payment_status": po.payment_status,
                "order_date": po.order_date,
                **outstanding_for(po),
            }
        )
    return rows
