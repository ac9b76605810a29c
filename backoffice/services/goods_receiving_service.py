import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from backoffice.models import (
    GoodsReceivedNote,
    GRNItem,
    Ingredient,
    PurchaseOrder,
    PurchaseOrderItem,
    StockMovement,
)
from . import numbering, payment_service, stock_service
from .money import ZERO, parse_decimal, percent, to_money, to_quantity

logger = logging.getLogger(__name__)


@dataclass
class LineReconciliation:
    total_received: Decimal
    quantity_variance: Decimal
    price_variance: Decimal
    variance_percent: Decimal
    line_total: Decimal


def reconcile_line(
    quantity_ordered: Any,
    unit_price_ordered: Any,
    previously_received: Any,
    receiving_now: Any,
    unit_price_actual: Any,
) -> LineReconciliation:
    """Compare one receipt against its PO line.

    A negative quantity variance is an under-receipt, a positive one an
    over-receipt. ``variance_percent`` is the absolute price variance as a
    share of the ordered price.
    """

    total_received = to_quantity(previously_received) + to_quantity(receiving_now)
    price_variance = to_money(unit_price_actual) - to_money(unit_price_ordered)
    return LineReconciliation(
        total_received=total_received,
        quantity_variance=total_received - to_quantity(quantity_ordered),
        price_variance=price_variance,
        variance_percent=percent(abs(price_variance), unit_price_ordered),
        line_total=to_money(to_quantity(receiving_now) * to_money(unit_price_actual)),
    )


def _validate_inputs(
    grn_data: Dict[str, Any], items: List[Dict[str, Any]]
) -> Tuple[bool, str, List[Dict[str, Any]]]:
    """Check the request and return the lines with integer ``po_item_id``."""

    if not grn_data.get("po_id"):
        return False, "po_id is required", []
    if not items:
        return False, "GRN must contain at least one received item", []
    seen = set()
    cleaned = []
    for idx, item in enumerate(items, start=1):
        if item.get("po_item_id") in (None, ""):
            return False, f"Item {idx}: po_item_id is required", []
        try:
            po_item_id = int(item["po_item_id"])
        except (TypeError, ValueError):
            return False, f"Item {idx}: po_item_id must be a number", []
        if po_item_id in seen:
            return False, f"Item {idx}: duplicate po_item_id", []
        seen.add(po_item_id)
        qty = parse_decimal(item.get("quantity_received"))
        if qty is None or qty < 0:
            return False, f"Item {idx}: quantity_received must be zero or more", []
        if item.get("unit_price_actual") not in (None, ""):
            price = parse_decimal(item.get("unit_price_actual"))
            if price is None or price < 0:
                return False, f"Item {idx}: unit_price_actual must be zero or more", []
        cleaned.append({**item, "po_item_id": po_item_id})
    return True, "", cleaned


def rollup_po(po: PurchaseOrder) -> PurchaseOrder:
    """Recompute receipt counters and status of ``po`` from its items.

    Once every line is fully received the GRN value becomes the PO's
    actual receivable amount. Payment totals and status are recomputed
    against the new receivable.
    """

    items = list(po.items.all())
    total = len(items)
    received = sum(1 for i in items if i.quantity_received >= i.quantity_ordered)
    any_receipt = any(i.quantity_received > 0 for i in items)
    pct = min(max(percent(received, total), ZERO), Decimal("100"))

    po.total_items_count = total
    po.received_items_count = received
    po.received_percentage = pct
    if total and received == total:
        po.status = PurchaseOrder.RECEIVED
        grn_value = GRNItem.objects.filter(grn__purchase_order=po).aggregate(
            total=Sum("line_total")
        )["total"]
        po.actual_receivable_amount = to_money(grn_value)
    elif any_receipt:
        po.status = PurchaseOrder.PARTIALLY_RECEIVED
    po.save(
        update_fields=[
            "total_items_count",
            "received_items_count",
            "received_percentage",
            "status",
            "actual_receivable_amount",
            "updated_at",
        ]
    )
    return payment_service.refresh_payment_totals(po)


def _grn_result(grn: GoodsReceivedNote, po: PurchaseOrder, replayed: bool) -> Dict[str, Any]:
    return {
        "grn_id": grn.grn_id,
        "grn_number": grn.grn_number,
        "po_status": po.status,
        "received_percentage": po.received_percentage,
        "total_amount": grn.total_amount,
        "replayed": replayed,
    }


def create_grn(
    grn_data: Dict[str, Any], items: List[Dict[str, Any]], user=None
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Record goods received against a PO and post them to stock.

    The GRN header, its lines, the PO line counters, ingredient prices, the
    stock ledger and the PO rollup are written in a single transaction.
    Supplying the same ``client_reference`` twice returns the first GRN
    without posting anything again.
    """

    valid, msg, items = _validate_inputs(grn_data, items)
    if not valid:
        return False, msg, None

    client_reference = grn_data.get("client_reference") or None
    received_date = timezone.localdate()
    if grn_data.get("received_date"):
        received_date = numbering.as_date(grn_data["received_date"])
        if received_date is None:
            return False, "received_date must be a valid date", None

    with transaction.atomic():
        try:
            po = PurchaseOrder.objects.select_for_update().get(pk=grn_data["po_id"])
        except (PurchaseOrder.DoesNotExist, ValueError, TypeError):
            return False, "Purchase order not found", None

        if client_reference:
            existing = GoodsReceivedNote.objects.filter(
                client_reference=client_reference
            ).first()
            if existing is not None:
                if existing.purchase_order_id != po.po_id:
                    return False, "client_reference already used for another purchase order", None
                logger.info("GRN %s replayed, nothing posted", existing.grn_number)
                return True, "GRN already recorded", _grn_result(existing, po, True)

        if po.status == PurchaseOrder.RECEIVED:
            return False, "Purchase order is already fully received", None

        po_items = {
            i.po_item_id: i
            for i in PurchaseOrderItem.objects.select_for_update().filter(
                purchase_order=po
            )
        }
        for item in items:
            if item["po_item_id"] not in po_items:
                return (
                    False,
                    f"Item {item['po_item_id']} does not belong to {po.po_number}",
                    None,
                )

        grn = GoodsReceivedNote.objects.create(
            grn_number=numbering.next_number("GRN", received_date),
            purchase_order=po,
            received_date=received_date,
            received_by=grn_data.get("received_by") or None,
            client_reference=client_reference,
            notes=grn_data.get("notes") or None,
            created_by=user,
        )
        grn_total = ZERO
        for item in items:
            po_item = po_items[item["po_item_id"]]
            qty_now = to_quantity(item["quantity_received"])
            actual_price = (
                to_money(item["unit_price_actual"])
                if item.get("unit_price_actual") not in (None, "")
                else po_item.unit_price
            )
            line = reconcile_line(
                po_item.quantity_ordered,
                po_item.unit_price,
                po_item.quantity_received,
                qty_now,
                actual_price,
            )
            grn_item = GRNItem.objects.create(
                grn=grn,
                po_item=po_item,
                ingredient_id=po_item.ingredient_id,
                quantity_ordered=po_item.quantity_ordered,
                quantity_received=qty_now,
                unit_price_ordered=po_item.unit_price,
                unit_price_actual=actual_price,
                quantity_variance=line.quantity_variance,
                price_variance=line.price_variance,
                line_total=line.line_total,
                remarks=item.get("remarks") or None,
            )
            grn_total += line.line_total
            if qty_now == 0:
                continue
            po_item.quantity_received = line.total_received
            po_item.save(update_fields=["quantity_received"])
            Ingredient.objects.filter(pk=po_item.ingredient_id).update(
                last_price=actual_price
            )
            stock_service.post_movement(
                po_item.ingredient_id,
                StockMovement.IN,
                qty_now,
                unit_cost=actual_price,
                reference_type="grn",
                reference_id=grn.grn_id,
                reference_line=grn_item.grn_item_id,
                remarks=f"Purchase: PO {po.po_number}, GRN {grn.grn_number}",
                movement_date=received_date,
                user=user,
            )
        grn.total_amount = to_money(grn_total)
        grn.save(update_fields=["total_amount"])
        rollup_po(po)

    logger.info(
        "GRN %s posted for %s: %s lines, value %s, PO now %s",
        grn.grn_number,
        po.po_number,
        len(items),
        grn.total_amount,
        po.status,
    )
    return True, f"GRN {grn.grn_number} created", _grn_result(grn, po, False)


def list_grns(po_id: Optional[Any] = None):
    qs = GoodsReceivedNote.objects.select_related(
        "purchase_order", "purchase_order__vendor"
    ).order_by("-received_date", "-grn_id")
    if po_id:
        qs = qs.filter(purchase_order_id=po_id)
    return qs


def get_grn(grn: GoodsReceivedNote) -> Dict[str, Any]:
    lines = []
    for item in grn.items.select_related("ingredient").order_by("grn_item_id"):
        lines.append(
            {
                "grn_item_id": item.grn_item_id,
                "po_item_id": item.po_item_id,
                "ingredient_id": item.ingredient_id,
                "ingredient_name": item.ingredient.name,
                "unit": item.ingredient.unit,
                "quantity_ordered": item.quantity_ordered,
                "quantity_received": item.quantity_received,
                "unit_price_ordered": item.unit_price_ordered,
                "unit_price_actual": item.unit_price_actual,
                "quantity_variance": item.quantity_variance,
                "price_variance": item.price_variance,
                "variance_percent": percent(
                    abs(item.price_variance), item.unit_price_ordered
                ),
                "line_total": item.line_total,
                "remarks": item.remarks,
            }
        )
    po = grn.purchase_order
    return {
        "grn_id": grn.grn_id,
        "grn_number": grn.grn_number,
        "po_id": po.po_id,
        "po_number": po.po_number,
        "vendor_name": po.vendor.name,
        "received_date": grn.received_date,
        "received_by": grn.received_by,
        "notes": grn.notes,
        "total_amount": grn.total_amount,
        "items": lines,
    }
