import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from backoffice.models import (
    Ingredient,
    StockAdjustment,
    StockAdjustmentItem,
    StockMovement,
)
from . import numbering
from .money import ZERO, parse_decimal, to_money, to_quantity

logger = logging.getLogger(__name__)

# Direction applied to the (positive) quantity of each movement type.
# Adjustments carry their own sign.
MOVEMENT_SIGNS = {
    StockMovement.IN: 1,
    StockMovement.OPENING: 1,
    StockMovement.OUT: -1,
    StockMovement.WASTAGE: -1,
    StockMovement.ADJUSTMENT: 1,
}


class DuplicateMovementError(ValueError):
    """Raised when a reference line has already been posted to the ledger."""


def post_movement(
    ingredient_id: int,
    movement_type: str,
    quantity: Any,
    *,
    unit_cost: Any = None,
    reference_type: Optional[str] = None,
    reference_id: Optional[int] = None,
    reference_line: Optional[int] = None,
    remarks: Optional[str] = None,
    movement_date: Optional[date] = None,
    user=None,
) -> Optional[StockMovement]:
    """Apply a stock change and append the matching ledger row.

    Returns ``None`` for a zero quantity, which posts nothing. Raises
    ``Ingredient.DoesNotExist``, ``ValueError`` for an invalid type or sign
    and :class:`DuplicateMovementError` when the reference line was already
    posted. Callers running inside ``transaction.atomic`` get the whole
    operation rolled back on any of these.
    """

    if movement_type not in MOVEMENT_SIGNS:
        raise ValueError(f"Unknown movement type: {movement_type}")
    qty = to_quantity(quantity)
    if qty == 0:
        return None
    if movement_type != StockMovement.ADJUSTMENT and qty < 0:
        raise ValueError(f"{movement_type} movements need a positive quantity")
    change = qty * MOVEMENT_SIGNS[movement_type]

    with transaction.atomic():
        ingredient = Ingredient.objects.select_for_update().get(pk=ingredient_id)
        if (
            reference_line is not None
            and StockMovement.objects.filter(
                reference_type=reference_type,
                reference_id=reference_id,
                reference_line=reference_line,
            ).exists()
        ):
            raise DuplicateMovementError(
                f"{reference_type} {reference_id} line {reference_line} already posted"
            )
        ingredient.current_stock = to_quantity(ingredient.current_stock + change)
        ingredient.save(update_fields=["current_stock", "updated_at"])
        movement = StockMovement.objects.create(
            ingredient=ingredient,
            movement_type=movement_type,
            quantity=change,
            balance_after=ingredient.current_stock,
            unit_cost=None if unit_cost is None else to_money(unit_cost),
            reference_type=reference_type,
            reference_id=reference_id,
            reference_line=reference_line,
            remarks=remarks,
            movement_date=movement_date or timezone.localdate(),
            created_by=user,
        )
    logger.info(
        "Stock %s of %s for ingredient %s, balance %s",
        movement_type,
        change,
        ingredient_id,
        movement.balance_after,
    )
    return movement


def set_stock_level(
    ingredient_id: int, new_level: Any, user=None, remarks: Optional[str] = None
) -> Optional[StockMovement]:
    """Bring an ingredient to ``new_level`` through an adjustment movement."""

    with transaction.atomic():
        ingredient = Ingredient.objects.select_for_update().get(pk=ingredient_id)
        variance = to_quantity(new_level) - ingredient.current_stock
        return post_movement(
            ingredient_id,
            StockMovement.ADJUSTMENT,
            variance,
            unit_cost=ingredient.last_price,
            reference_type="manual",
            remarks=remarks or "Manual stock edit",
            user=user,
        )


def _validate_adjustment_items(
    items: List[Dict[str, Any]],
) -> Tuple[bool, str]:
    if not items:
        return False, "At least one item is required"
    seen = set()
    for idx, item in enumerate(items, start=1):
        ingredient_id = item.get("ingredient_id")
        if not ingredient_id:
            return False, f"Item {idx}: ingredient_id is required"
        if ingredient_id in seen:
            return False, f"Item {idx}: duplicate ingredient"
        seen.add(ingredient_id)
        actual = parse_decimal(item.get("actual_quantity"))
        if actual is None or actual < 0:
            return False, f"Item {idx}: actual_quantity must be zero or more"
    missing = seen - set(
        Ingredient.objects.filter(pk__in=seen).values_list("pk", flat=True)
    )
    if missing:
        return False, f"Ingredients not found: {sorted(missing)}"
    return True, ""


def adjust_stock(
    adjustment_data: Dict[str, Any], items: List[Dict[str, Any]], user=None
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Record a stock count and post the variance of each counted line.

    The system quantity is always read from the ledger at posting time, so
    after the adjustment each ingredient's stock equals the counted
    ``actual_quantity``.
    """

    adjustment_type = adjustment_data.get("adjustment_type") or (
        StockAdjustment.PHYSICAL_COUNT
    )
    if adjustment_type not in dict(StockAdjustment.ADJUSTMENT_TYPES):
        return False, f"Invalid adjustment_type: {adjustment_type}", None
    valid, msg = _validate_adjustment_items(items)
    if not valid:
        return False, msg, None

    adjustment_date = timezone.localdate()
    if adjustment_data.get("adjustment_date"):
        adjustment_date = numbering.as_date(adjustment_data["adjustment_date"])
        if adjustment_date is None:
            return False, "adjustment_date must be a valid date", None
    with transaction.atomic():
        adjustment = StockAdjustment.objects.create(
            adjustment_number=numbering.next_number("ADJ", adjustment_date),
            adjustment_type=adjustment_type,
            adjustment_date=adjustment_date,
            notes=adjustment_data.get("notes"),
            created_by=user,
        )
        adjusted = 0
        for line, item in enumerate(items, start=1):
            ingredient = Ingredient.objects.select_for_update().get(
                pk=item["ingredient_id"]
            )
            actual = to_quantity(item["actual_quantity"])
            variance = actual - ingredient.current_stock
            StockAdjustmentItem.objects.create(
                adjustment=adjustment,
                ingredient=ingredient,
                system_quantity=ingredient.current_stock,
                actual_quantity=actual,
                variance=variance,
                remarks=item.get("remarks"),
            )
            if variance == 0:
                continue
            if adjustment_type == StockAdjustment.WASTAGE and variance < 0:
                movement_type, qty = StockMovement.WASTAGE, -variance
            else:
                movement_type, qty = StockMovement.ADJUSTMENT, variance
            post_movement(
                ingredient.pk,
                movement_type,
                qty,
                unit_cost=ingredient.last_price,
                reference_type="adjustment",
                reference_id=adjustment.adjustment_id,
                reference_line=line,
                remarks=f"{adjustment.adjustment_number}: {item.get('remarks') or adjustment_type}",
                movement_date=adjustment_date,
                user=user,
            )
            adjusted += 1
    logger.info(
        "Stock adjustment %s posted %s variances",
        adjustment.adjustment_number,
        adjusted,
    )
    return (
        True,
        "Stock adjusted",
        {
            "adjustment_id": adjustment.adjustment_id,
            "adjustment_number": adjustment.adjustment_number,
            "items_adjusted": adjusted,
        },
    )


def get_movements(ingredient_id: int, limit: int = 100):
    return (
        StockMovement.objects.filter(ingredient_id=ingredient_id)
        .select_related("ingredient")
        .order_by("-movement_date", "-movement_id")[:limit]
    )


def list_stock(low_stock_only: bool = False) -> List[Dict[str, Any]]:
    """Return ingredients with their stock value and low-stock flag."""

    rows = []
    for ing in Ingredient.objects.filter(is_active=True).order_by("name"):
        if low_stock_only and not ing.is_low_stock:
            continue
        rows.append(
            {
                "ingredient_id": ing.ingredient_id,
                "name": ing.name,
                "unit": ing.unit,
                "category": ing.category,
                "current_stock": ing.current_stock,
                "min_stock": ing.min_stock,
                "last_price": ing.last_price,
                "stock_value": ing.stock_value,
                "is_low_stock": ing.is_low_stock,
            }
        )
    return rows


def stock_value_at(on_date: date) -> Decimal:
    """Value of stock at the end of ``on_date``, derived backward.

    Quantities are rebuilt from current stock minus every movement dated
    after ``on_date`` and valued at the ingredient's last price.
    """

    later = dict(
        StockMovement.objects.filter(movement_date__gt=on_date)
        .order_by()
        .values("ingredient_id")
        .annotate(total=Sum("quantity"))
        .values_list("ingredient_id", "total")
    )
    total = ZERO
    for ing in Ingredient.objects.all().only(
        "ingredient_id", "current_stock", "last_price"
    ):
        qty = ing.current_stock - (later.get(ing.ingredient_id) or ZERO)
        total += qty * ing.last_price
    return to_money(total)


def current_stock_value() -> Decimal:
    total = ZERO
    for ing in Ingredient.objects.all().only("current_stock", "last_price"):
        total += ing.current_stock * ing.last_price
    return to_money(total)
