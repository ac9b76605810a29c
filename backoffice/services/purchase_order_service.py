import logging
from typing import Any, Dict, List, Optional, Tuple

from django.db import IntegrityError, transaction

from backoffice.models import (
    Ingredient,
    Intend,
    IntendItem,
    PurchaseOrder,
    PurchaseOrderItem,
    Vendor,
)
from . import intend_service, numbering
from .money import ZERO, parse_decimal, to_money, to_quantity

logger = logging.getLogger(__name__)

# Manual transitions only. partially_received and received are set by GRNs.
STATUS_TRANSITIONS = {
    PurchaseOrder.PENDING: {PurchaseOrder.CONFIRMED},
    PurchaseOrder.CONFIRMED: set(),
    PurchaseOrder.PARTIALLY_RECEIVED: set(),
    PurchaseOrder.RECEIVED: set(),
}


def _validate_lines(
    items: List[Dict[str, Any]], key: str
) -> Tuple[bool, str]:
    if not items:
        return False, "Please select at least one item to create a purchase order"
    seen = set()
    for idx, item in enumerate(items, start=1):
        ref = item.get(key)
        if not ref:
            return False, f"Item {idx}: {key} is required"
        if ref in seen:
            return False, f"Item {idx}: duplicate {key}"
        seen.add(ref)
        qty = parse_decimal(item.get("quantity"))
        if qty is None or qty <= 0:
            return False, f"Item {idx}: quantity must be greater than 0"
        price = parse_decimal(item.get("unit_price"))
        if price is None or price < 0:
            return False, f"Item {idx}: unit_price must be zero or more"
    return True, ""


def _create_header(
    vendor_id: int, data: Dict[str, Any], user, intend: Optional[Intend] = None
) -> PurchaseOrder:
    return PurchaseOrder.objects.create(
        po_number=numbering.next_number("PO"),
        vendor_id=vendor_id,
        intend=intend,
        expected_delivery_date=data.get("expected_delivery_date") or None,
        notes=data.get("notes") or None,
        created_by=user,
    )


def _add_lines(po: PurchaseOrder, lines: List[Dict[str, Any]]) -> None:
    """Create PO lines, refresh ingredient prices and initialize rollups."""

    total = ZERO
    for line in lines:
        qty = to_quantity(line["quantity"])
        price = to_money(line["unit_price"])
        PurchaseOrderItem.objects.create(
            purchase_order=po,
            intend_item_id=line.get("intend_item_id"),
            ingredient_id=line["ingredient_id"],
            quantity_ordered=qty,
            unit_price=price,
        )
        Ingredient.objects.filter(pk=line["ingredient_id"]).update(last_price=price)
        total += qty * price
    po.total_amount = to_money(total)
    po.total_items_count = len(lines)
    po.received_items_count = 0
    po.received_percentage = ZERO
    po.save(
        update_fields=[
            "total_amount",
            "total_items_count",
            "received_items_count",
            "received_percentage",
            "updated_at",
        ]
    )


def generate_from_intend(
    data: Dict[str, Any], user=None
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Raise a purchase order for selected items of an intend."""

    vendor_id = data.get("vendor_id")
    if not vendor_id:
        return False, "Vendor is required to create a purchase order", None
    if not Vendor.objects.filter(pk=vendor_id).exists():
        return False, "Vendor not found", None
    items = data.get("items") or []
    valid, msg = _validate_lines(items, "intend_item_id")
    if not valid:
        return False, msg, None
    try:
        intend = Intend.objects.get(pk=data.get("intend_id"))
    except (Intend.DoesNotExist, ValueError, TypeError):
        return False, "Intend not found", None

    ids = [item["intend_item_id"] for item in items]
    intend_items = {
        i.intend_item_id: i
        for i in IntendItem.objects.filter(intend=intend, pk__in=ids)
    }
    if len(intend_items) != len(ids):
        return False, "Some selected items do not belong to this intend", None

    try:
        with transaction.atomic():
            if PurchaseOrderItem.objects.select_for_update().filter(
                intend_item_id__in=ids
            ).exists():
                return (
                    False,
                    "Some selected items are already part of a purchase order",
                    None,
                )
            po = _create_header(vendor_id, data, user, intend=intend)
            _add_lines(
                po,
                [
                    {
                        "intend_item_id": item["intend_item_id"],
                        "ingredient_id": intend_items[item["intend_item_id"]].ingredient_id,
                        "quantity": item["quantity"],
                        "unit_price": item["unit_price"],
                    }
                    for item in items
                ],
            )
            intend_status = intend_service.refresh_fulfilment_status(intend)
    except IntegrityError:
        # Unique intend_item link lost a race with another request.
        return False, "Some selected items are already part of a purchase order", None
    logger.info(
        "Created PO %s from intend %s (%s items, total %s)",
        po.po_number,
        intend.intend_number,
        len(items),
        po.total_amount,
    )
    return (
        True,
        "Purchase order created",
        {
            "po_id": po.po_id,
            "po_number": po.po_number,
            "total_amount": po.total_amount,
            "intend_status": intend_status,
        },
    )


def create_po(
    data: Dict[str, Any], items: List[Dict[str, Any]], user=None
) -> Tuple[bool, str, Optional[PurchaseOrder]]:
    """Create a purchase order directly from ingredient lines."""

    vendor_id = data.get("vendor_id")
    if not vendor_id:
        return False, "Vendor is required to create a purchase order", None
    if not Vendor.objects.filter(pk=vendor_id).exists():
        return False, "Vendor not found", None
    valid, msg = _validate_lines(items, "ingredient_id")
    if not valid:
        return False, msg, None
    ids = {item["ingredient_id"] for item in items}
    if Ingredient.objects.filter(pk__in=ids).count() != len(ids):
        return False, "Some ingredients were not found", None
    with transaction.atomic():
        po = _create_header(vendor_id, data, user)
        _add_lines(po, items)
    logger.info("Created PO %s (%s items)", po.po_number, len(items))
    return True, "Purchase order created", po


def list_pos(status: Optional[str] = None, vendor_id: Optional[Any] = None):
    qs = PurchaseOrder.objects.select_related("vendor", "intend").order_by(
        "-created_at", "-po_id"
    )
    if status:
        qs = qs.filter(status=status)
    if vendor_id:
        qs = qs.filter(vendor_id=vendor_id)
    return qs


def get_po(po: PurchaseOrder) -> Dict[str, Any]:
    items = [
        {
            "po_item_id": item.po_item_id,
            "intend_item_id": item.intend_item_id,
            "ingredient_id": item.ingredient_id,
            "ingredient_name": item.ingredient.name,
            "unit": item.ingredient.unit,
            "quantity_ordered": item.quantity_ordered,
            "unit_price": item.unit_price,
            "total_price": item.total_price,
            "quantity_received": item.quantity_received,
            "received_percentage": item.received_percentage,
            "item_status": item.item_status,
        }
        for item in po.items.select_related("ingredient").order_by("po_item_id")
    ]
    return {
        "po_id": po.po_id,
        "po_number": po.po_number,
        "vendor_id": po.vendor_id,
        "vendor_name": po.vendor.name,
        "intend_id": po.intend_id,
        "intend_number": po.intend.intend_number if po.intend else None,
        "order_date": po.order_date,
        "expected_delivery_date": po.expected_delivery_date,
        "status": po.status,
        "notes": po.notes,
        "total_amount": po.total_amount,
        "total_items_count": po.total_items_count,
        "received_items_count": po.received_items_count,
        "received_percentage": po.received_percentage,
        "actual_receivable_amount": po.actual_receivable_amount,
        "total_paid": po.total_paid,
        "outstanding_amount": po.outstanding_amount,
        "payment_status": po.payment_status,
        "items": items,
        "grns": [
            {
                "grn_id": g.grn_id,
                "grn_number": g.grn_number,
                "received_date": g.received_date,
                "total_amount": g.total_amount,
            }
            for g in po.grns.order_by("received_date", "grn_id")
        ],
        "payments": [
            {
                "payment_id": p.payment_id,
                "payment_number": p.payment_number,
                "payment_date": p.payment_date,
                "amount": p.amount,
                "payment_method": p.payment_method,
                "status": p.status,
            }
            for p in po.payments.order_by("payment_date", "payment_id")
        ],
    }


def update_po(po: PurchaseOrder, data: Dict[str, Any]) -> Tuple[bool, str]:
    """Apply a manual status transition and/or header edits."""

    updates = []
    new_status = data.get("status")
    if new_status and new_status != po.status:
        if new_status not in STATUS_TRANSITIONS.get(po.status, set()):
            return False, f"Cannot change status from {po.status} to {new_status}"
        po.status = new_status
        updates.append("status")
    if "notes" in data:
        po.notes = data["notes"] or None
        updates.append("notes")
    if "expected_delivery_date" in data:
        po.expected_delivery_date = data["expected_delivery_date"] or None
        updates.append("expected_delivery_date")
    if not updates:
        return False, "No fields to update"
    po.save(update_fields=updates + ["updated_at"])
    logger.info("Updated PO %s: %s", po.po_number, ", ".join(updates))
    return True, "Purchase order updated"


def delete_po(po: PurchaseOrder) -> Tuple[bool, str]:
    if po.status != PurchaseOrder.PENDING:
        return False, "Only pending purchase orders can be deleted"
    if po.payments.exists():
        return False, "Cannot delete a purchase order with payments"
    intend = po.intend
    with transaction.atomic():
        po.delete()
        if intend is not None:
            intend_service.refresh_fulfilment_status(intend)
    logger.info("Deleted PO %s", po.po_number)
    return True, "Purchase order deleted"
