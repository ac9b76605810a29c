import logging
from typing import Any, Dict, List, Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from backoffice.models import Ingredient, Intend, IntendItem, Vendor
from . import numbering
from .money import parse_decimal, to_quantity

logger = logging.getLogger(__name__)

EDITABLE_STATUSES = (Intend.DRAFT, Intend.SUBMITTED, Intend.APPROVED)


def _validate_items(items: List[Dict[str, Any]]) -> Tuple[bool, str]:
    if not items:
        return False, "At least one item is required"
    seen = set()
    for idx, item in enumerate(items, start=1):
        ingredient_id = item.get("ingredient_id")
        if not ingredient_id:
            return False, f"Item {idx}: ingredient_id is required"
        qty = parse_decimal(item.get("quantity"))
        if qty is None or qty <= 0:
            return False, f"Item {idx}: quantity must be greater than 0"
        if ingredient_id in seen:
            return False, f"Duplicate ingredient in item {idx}"
        seen.add(ingredient_id)
    found = set(Ingredient.objects.filter(pk__in=seen).values_list("pk", flat=True))
    missing = sorted(seen - found)
    if missing:
        return False, f"Ingredients not found: {missing}"
    return True, ""


def fulfilment_status(total_items: int, items_in_po: int) -> str:
    if total_items and items_in_po >= total_items:
        return Intend.FULFILLED
    if items_in_po > 0:
        return Intend.PARTIALLY_FULFILLED
    return Intend.PENDING


def refresh_fulfilment_status(intend: Intend) -> str:
    """Recompute and store the intend status from its items on POs.

    Workflow statuses (draft/submitted/approved) are kept while no item has
    been ordered yet.
    """

    counts = intend.items.aggregate(
        total=Count("intend_item_id"),
        in_po=Count("intend_item_id", filter=Q(po_item__isnull=False)),
    )
    status = fulfilment_status(counts["total"], counts["in_po"])
    if status == Intend.PENDING and intend.status in EDITABLE_STATUSES:
        return intend.status
    if intend.status != status:
        intend.status = status
        intend.save(update_fields=["status", "updated_at"])
    return status


def create_intend(
    data: Dict[str, Any], items: List[Dict[str, Any]], user=None
) -> Tuple[bool, str, Optional[Intend]]:
    valid, msg = _validate_items(items)
    if not valid:
        return False, msg, None
    vendor_id = data.get("vendor_id")
    if vendor_id and not Vendor.objects.filter(pk=vendor_id).exists():
        return False, "Vendor not found", None
    with transaction.atomic():
        intend = Intend.objects.create(
            intend_number=numbering.next_number("INT"),
            vendor_id=vendor_id or None,
            notes=data.get("notes") or None,
            created_by=user,
        )
        IntendItem.objects.bulk_create(
            [
                IntendItem(
                    intend=intend,
                    ingredient_id=item["ingredient_id"],
                    quantity_requested=to_quantity(item["quantity"]),
                    remarks=item.get("remarks") or None,
                )
                for item in items
            ]
        )
    logger.info("Created intend %s with %s items", intend.intend_number, len(items))
    return True, "Intend created", intend


def list_intends(status: Optional[str] = None) -> List[Dict[str, Any]]:
    qs = (
        Intend.objects.select_related("vendor")
        .annotate(
            total_items=Count("items", distinct=True),
            items_in_po=Count(
                "items", filter=Q(items__po_item__isnull=False), distinct=True
            ),
        )
        .order_by("-created_at", "-intend_id")
    )
    rows = []
    for intend in qs:
        derived = fulfilment_status(intend.total_items, intend.items_in_po)
        if derived == Intend.PENDING and intend.status in EDITABLE_STATUSES:
            derived = intend.status
        if status and derived != status:
            continue
        rows.append(
            {
                "intend_id": intend.intend_id,
                "intend_number": intend.intend_number,
                "vendor_id": intend.vendor_id,
                "vendor_name": intend.vendor.name if intend.vendor else None,
                "notes": intend.notes,
                "status": derived,
                "total_items": intend.total_items,
                "items_in_po": intend.items_in_po,
                "created_at": intend.created_at,
            }
        )
    return rows


def get_intend(intend: Intend) -> Dict[str, Any]:
    items = []
    for item in intend.items.select_related(
        "ingredient", "po_item__purchase_order"
    ).order_by("intend_item_id"):
        po_item = getattr(item, "po_item", None)
        items.append(
            {
                "intend_item_id": item.intend_item_id,
                "ingredient_id": item.ingredient_id,
                "ingredient_name": item.ingredient.name,
                "unit": item.ingredient.unit,
                "quantity": item.quantity_requested,
                "last_price": item.ingredient.last_price,
                "remarks": item.remarks,
                "in_po": po_item is not None,
                "po_number": po_item.purchase_order.po_number if po_item else None,
            }
        )
    return {
        "intend_id": intend.intend_id,
        "intend_number": intend.intend_number,
        "vendor_id": intend.vendor_id,
        "vendor_name": intend.vendor.name if intend.vendor else None,
        "status": intend.status,
        "notes": intend.notes,
        "created_at": intend.created_at,
        "items": items,
    }


def update_intend(intend: Intend, data: Dict[str, Any]) -> Tuple[bool, str]:
    updates = []
    if "vendor_id" in data:
        vendor_id = data["vendor_id"]
        if vendor_id and not Vendor.objects.filter(pk=vendor_id).exists():
            return False, "Vendor not found"
        intend.vendor_id = vendor_id or None
        updates.append("vendor")
    if "status" in data:
        if data["status"] not in EDITABLE_STATUSES:
            return False, f"Invalid status: {data['status']}"
        intend.status = data["status"]
        updates.append("status")
    if "notes" in data:
        intend.notes = data["notes"] or None
        updates.append("notes")
    if not updates:
        return False, "No fields to update"
    intend.save(update_fields=updates + ["updated_at"])
    logger.info("Updated intend %s: %s", intend.intend_number, ", ".join(updates))
    return True, "Intend updated"


def delete_intend(intend: Intend) -> Tuple[bool, str]:
    linked = intend.items.filter(po_item__isnull=False).exists()
    if linked:
        return False, "Cannot delete intend - some items are already part of a purchase order"
    intend.delete()
    logger.info("Deleted intend %s", intend.intend_number)
    return True, "Intend deleted"


def add_item(intend: Intend, item: Dict[str, Any]) -> Tuple[bool, str, Optional[IntendItem]]:
    valid, msg = _validate_items([item])
    if not valid:
        return False, msg, None
    if intend.items.filter(ingredient_id=item["ingredient_id"]).exists():
        return False, "Ingredient already exists in this intend", None
    try:
        with transaction.atomic():
            created = IntendItem.objects.create(
                intend=intend,
                ingredient_id=item["ingredient_id"],
                quantity_requested=to_quantity(item["quantity"]),
                remarks=item.get("remarks") or None,
            )
            refresh_fulfilment_status(intend)
    except IntegrityError:
        return False, "Ingredient already exists in this intend", None
    return True, "Item added", created


def update_item_quantity(item: IntendItem, quantity: Any) -> Tuple[bool, str]:
    qty = parse_decimal(quantity)
    if qty is None or qty <= 0:
        return False, "Quantity must be greater than 0"
    item.quantity_requested = to_quantity(qty)
    item.save(update_fields=["quantity_requested"])
    return True, "Item updated"


def remove_item(item: IntendItem) -> Tuple[bool, str]:
    po_item = getattr(item, "po_item", None)
    if po_item is not None:
        return (
            False,
            "Cannot delete item - it is already part of purchase order "
            f"{po_item.purchase_order.po_number}",
        )
    intend = item.intend
    with transaction.atomic():
        item.delete()
        refresh_fulfilment_status(intend)
    return True, "Item removed"
