from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db import IntegrityError, transaction

from ..models import Ingredient, Recipe, RecipeIngredient
from .money import ZERO, parse_decimal, percent, to_money, to_quantity

logger = logging.getLogger(__name__)

RECIPE_FIELDS = (
    "name",
    "description",
    "category",
    "portion_size",
    "selling_price",
    "instructions",
    "notes",
    "is_active",
)


# ---------------------------------------------------------------------------
# Helper utilities
# ---------------------------------------------------------------------------


def _strip_or_none(val: Any) -> Optional[str]:
    """Return a stripped string or ``None``."""
    if isinstance(val, str):
        val = val.strip()
        return val or None
    return None


def _validate_lines(lines: List[Dict[str, Any]]) -> None:
    """Raise ``ValueError`` for missing ingredients, bad quantities or repeats."""

    seen = set()
    for idx, line in enumerate(lines, start=1):
        ingredient_id = line.get("ingredient_id")
        if not ingredient_id:
            raise ValueError(f"Ingredient {idx}: ingredient_id is required")
        if ingredient_id in seen:
            raise ValueError(f"Ingredient {idx}: duplicate ingredient")
        seen.add(ingredient_id)
        qty = parse_decimal(line.get("quantity"))
        if qty is None or qty <= 0:
            raise ValueError(f"Ingredient {idx}: quantity must be greater than 0")
    found = set(Ingredient.objects.filter(pk__in=seen).values_list("pk", flat=True))
    if seen - found:
        raise ValueError(f"Ingredients not found: {sorted(seen - found)}")


def _write_lines(recipe: Recipe, lines: List[Dict[str, Any]]) -> None:
    units = dict(
        Ingredient.objects.filter(
            pk__in=[line["ingredient_id"] for line in lines]
        ).values_list("pk", "unit")
    )
    RecipeIngredient.objects.bulk_create(
        [
            RecipeIngredient(
                recipe=recipe,
                ingredient_id=line["ingredient_id"],
                quantity=to_quantity(line["quantity"]),
                unit=line.get("unit") or units.get(line["ingredient_id"]),
                notes=_strip_or_none(line.get("notes")),
            )
            for line in lines
        ]
    )


# ---------------------------------------------------------------------------
# Costing
# ---------------------------------------------------------------------------


def recipe_cost(recipe: Recipe, portions: Any = 1) -> Dict[str, Any]:
    """Cost a recipe at current ingredient prices.

    Each line costs ``quantity * last_price`` per portion. The profit margin
    is measured against the selling price and is 0 when the recipe has no
    price.
    """

    portions_d = parse_decimal(portions)
    if portions_d is None or portions_d <= 0:
        portions_d = Decimal("1")
    breakdown = []
    cost = ZERO
    for line in recipe.lines.select_related("ingredient").order_by("id"):
        line_cost = line.quantity * line.ingredient.last_price
        cost += line_cost
        breakdown.append(
            {
                "ingredient_id": line.ingredient_id,
                "ingredient_name": line.ingredient.name,
                "unit": line.unit or line.ingredient.unit,
                "quantity_per_portion": line.quantity,
                "quantity_total": to_quantity(line.quantity * portions_d),
                "unit_price": line.ingredient.last_price,
                "cost_per_portion": to_money(line_cost),
                "cost_total": to_money(line_cost * portions_d),
                "available_stock": line.ingredient.current_stock,
            }
        )
    cost_per_portion = to_money(cost)
    price = recipe.selling_price
    return {
        "portions": portions_d,
        "current_cost": cost_per_portion,
        "total_cost": to_money(cost * portions_d),
        "selling_price": price,
        "profit_per_portion": to_money(price - cost_per_portion),
        "profit_margin": percent(price - cost_per_portion, price),
        "cost_breakdown": breakdown,
    }


def cost_per_portion(recipe: Recipe) -> Decimal:
    return recipe_cost(recipe)["current_cost"]


# ---------------------------------------------------------------------------
# CRUD operations
# ---------------------------------------------------------------------------


def create_recipe(
    data: Dict[str, Any], lines: List[Dict[str, Any]]
) -> Tuple[bool, str, Optional[int]]:
    """Create a recipe and its ingredient lines."""
    if not _strip_or_none(data.get("name")):
        return False, "Recipe name is required.", None
    price = parse_decimal(data.get("selling_price"))
    if data.get("selling_price") not in (None, "") and (price is None or price < 0):
        return False, "selling_price must be zero or more.", None
    try:
        _validate_lines(lines)
        with transaction.atomic():
            fields = {k: data[k] for k in RECIPE_FIELDS if k in data}
            fields["name"] = _strip_or_none(fields["name"])
            fields["selling_price"] = to_money(price)
            recipe = Recipe.objects.create(**fields)
            _write_lines(recipe, lines)
        logger.info("Created recipe %s with %s lines", recipe.name, len(lines))
        return True, "Recipe created.", recipe.recipe_id
    except IntegrityError as exc:
        logger.warning("Error creating recipe: %s", exc)
        return False, "A recipe with this name already exists.", None
    except ValueError as exc:
        return False, str(exc), None


def update_recipe(
    recipe_id: int, data: Dict[str, Any], lines: Optional[List[Dict[str, Any]]]
) -> Tuple[bool, str]:
    """Update a recipe; when ``lines`` is given they replace the old ones."""
    try:
        if lines is not None:
            _validate_lines(lines)
        with transaction.atomic():
            recipe = Recipe.objects.select_for_update().get(pk=recipe_id)
            for key in RECIPE_FIELDS:
                if key not in data:
                    continue
                value = data[key]
                if key == "selling_price":
                    price = parse_decimal(value)
                    if price is None or price < 0:
                        raise ValueError("selling_price must be zero or more.")
                    value = to_money(price)
                setattr(recipe, key, value)
            recipe.save()
            if lines is not None:
                recipe.lines.all().delete()
                _write_lines(recipe, lines)
        return True, "Recipe updated."
    except Recipe.DoesNotExist:
        return False, "Recipe not found."
    except IntegrityError as exc:
        logger.warning("Error updating recipe: %s", exc)
        return False, "A recipe with this name already exists."
    except ValueError as exc:
        return False, str(exc)


def delete_recipe(recipe: Recipe) -> Tuple[bool, str]:
    """Delete a recipe that has never been sold."""
    if recipe.sale_items.exists():
        return False, "Cannot delete recipe - it has recorded sales."
    with transaction.atomic():
        recipe.lines.all().delete()
        recipe.delete()
    logger.info("Deleted recipe %s", recipe.name)
    return True, "Recipe deleted."


def recipe_detail(recipe: Recipe, portions: Any = 1) -> Dict[str, Any]:
    detail = {
        "recipe_id": recipe.recipe_id,
        "name": recipe.name,
        "description": recipe.description,
        "category": recipe.category,
        "portion_size": recipe.portion_size,
        "selling_price": recipe.selling_price,
        "instructions": recipe.instructions,
        "notes": recipe.notes,
        "is_active": recipe.is_active,
    }
    costing = recipe_cost(recipe, portions)
    detail.update(
        {
            "current_cost": costing["current_cost"],
            "profit_margin": costing["profit_margin"],
            "portions": costing["portions"],
            "total_cost": costing["total_cost"],
            "cost_breakdown": costing["cost_breakdown"],
        }
    )
    return detail
