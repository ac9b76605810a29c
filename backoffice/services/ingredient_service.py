import logging
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import OuterRef, Subquery

from backoffice.models import (
    Ingredient,
    IntendItem,
    PurchaseOrderItem,
    RecipeIngredient,
    StockAdjustmentItem,
    StockMovement,
)
from . import stock_service
from .money import to_quantity

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "unit", "category", "min_stock", "last_price", "is_active")


def create_ingredient(data: Dict[str, Any], user=None) -> Ingredient:
    """Create an ingredient; any starting stock is posted as an opening entry."""

    opening = to_quantity(data.get("current_stock"))
    with transaction.atomic():
        ingredient = Ingredient.objects.create(
            **{k: data[k] for k in EDITABLE_FIELDS if k in data}
        )
        if opening > 0:
            stock_service.post_movement(
                ingredient.pk,
                StockMovement.OPENING,
                opening,
                unit_cost=ingredient.last_price,
                reference_type="opening",
                reference_id=ingredient.pk,
                remarks="Opening stock",
                user=user,
            )
            ingredient.refresh_from_db()
    logger.info("Created ingredient %s (%s)", ingredient.name, ingredient.pk)
    return ingredient


def update_ingredient(ingredient: Ingredient, data: Dict[str, Any], user=None) -> Ingredient:
    """Update master fields; a changed ``current_stock`` becomes an adjustment."""

    with transaction.atomic():
        changed = [k for k in EDITABLE_FIELDS if k in data]
        for key in changed:
            setattr(ingredient, key, data[key])
        if changed:
            ingredient.save(update_fields=changed + ["updated_at"])
        if "current_stock" in data and to_quantity(data["current_stock"]) != (
            ingredient.current_stock
        ):
            stock_service.set_stock_level(
                ingredient.pk, data["current_stock"], user=user
            )
        ingredient.refresh_from_db()
    return ingredient


def delete_ingredient(ingredient: Ingredient) -> Tuple[bool, str]:
    if IntendItem.objects.filter(ingredient=ingredient).exists():
        return False, "Cannot delete ingredient - it is part of an intend"
    if PurchaseOrderItem.objects.filter(ingredient=ingredient).exists():
        return False, "Cannot delete ingredient - it is part of a purchase order"
    if RecipeIngredient.objects.filter(ingredient=ingredient).exists():
        return False, "Cannot delete ingredient - it is used by a recipe"
    if StockAdjustmentItem.objects.filter(ingredient=ingredient).exists():
        return False, "Cannot delete ingredient - it has stock adjustments"
    if (
        StockMovement.objects.filter(ingredient=ingredient)
        .exclude(movement_type=StockMovement.OPENING)
        .exists()
    ):
        # Ledger rows are permanent; retire the ingredient with is_active instead.
        return False, "Cannot delete ingredient - it has stock movements. Deactivate it instead"
    with transaction.atomic():
        StockMovement.objects.filter(ingredient=ingredient).delete()
        ingredient.delete()
    logger.info("Deleted ingredient %s", ingredient.name)
    return True, "Ingredient deleted"


def search(query: str, limit: int = 20):
    qs = Ingredient.objects.filter(is_active=True)
    if query:
        qs = qs.filter(name__icontains=query)
    return qs.order_by("name")[:limit]


def last_prices() -> List[Dict[str, Any]]:
    """Latest purchase order price per ingredient, else the stored last price."""

    latest = (
        PurchaseOrderItem.objects.filter(ingredient=OuterRef("pk"))
        .order_by("-purchase_order__created_at", "-po_item_id")
        .values("unit_price")[:1]
    )
    rows = []
    for ing in Ingredient.objects.annotate(po_price=Subquery(latest)).order_by("name"):
        price: Optional[Any] = ing.po_price
        rows.append(
            {
                "ingredient_id": ing.ingredient_id,
                "name": ing.name,
                "unit": ing.unit,
                "last_price": price if price is not None else ing.last_price,
            }
        )
    return rows
