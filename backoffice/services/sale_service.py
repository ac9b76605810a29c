"""Record dish sales and consume ingredient stock for them."""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.utils import timezone

from backoffice.models import Ingredient, Recipe, Sale, SaleItem, StockMovement
from . import numbering, recipe_service, stock_service
from .money import ZERO, parse_decimal, percent, to_money, to_quantity

logger = logging.getLogger(__name__)


def _validate_items(items: List[Dict[str, Any]]) -> Tuple[bool, str]:
    if not items:
        return False, "At least one item is required"
    for idx, item in enumerate(items, start=1):
        if not item.get("recipe_id"):
            return False, f"Item {idx}: recipe_id is required"
        qty = parse_decimal(item.get("quantity"))
        if qty is None or qty <= 0:
            return False, f"Item {idx}: quantity must be greater than 0"
        if item.get("selling_price") not in (None, ""):
            price = parse_decimal(item.get("selling_price"))
            if price is None or price < 0:
                return False, f"Item {idx}: selling_price must be zero or more"
    return True, ""


def _requirements(sale: Sale) -> Dict[int, Decimal]:
    """Total quantity of each ingredient consumed by ``sale``."""

    totals: Dict[int, Decimal] = defaultdict(lambda: ZERO)
    for item in sale.items.select_related("recipe"):
        for line in item.recipe.lines.all():
            totals[line.ingredient_id] += line.quantity * item.quantity
    return {k: to_quantity(v) for k, v in totals.items()}


def _shortages(requirements: Dict[int, Decimal]) -> List[Dict[str, Any]]:
    shortages = []
    for ing in Ingredient.objects.select_for_update().filter(pk__in=requirements):
        needed = requirements[ing.pk]
        if ing.current_stock < needed:
            shortages.append(
                {
                    "ingredient_id": ing.pk,
                    "ingredient_name": ing.name,
                    "unit": ing.unit,
                    "required": needed,
                    "available": ing.current_stock,
                    "shortage": needed - ing.current_stock,
                }
            )
    return shortages


def _consume(sale: Sale, user=None) -> None:
    """Post one ``out`` movement per ingredient and mark the sale processed."""

    requirements = _requirements(sale)
    prices = dict(
        Ingredient.objects.filter(pk__in=requirements).values_list("pk", "last_price")
    )
    for ingredient_id, qty in sorted(requirements.items()):
        stock_service.post_movement(
            ingredient_id,
            StockMovement.OUT,
            qty,
            unit_cost=prices.get(ingredient_id),
            reference_type="sale",
            reference_id=sale.sale_id,
            reference_line=ingredient_id,
            remarks=f"Sale {sale.sale_number}",
            movement_date=sale.sale_date,
            user=user,
        )
    sale.status = Sale.PROCESSED
    sale.processed_at = timezone.now()
    sale.save(update_fields=["status", "processed_at"])


class InsufficientStock(Exception):
    def __init__(self, shortages: List[Dict[str, Any]]):
        super().__init__("Insufficient stock")
        self.shortages = shortages


def create_sale(
    data: Dict[str, Any], items: List[Dict[str, Any]], user=None, process: bool = True
) -> Tuple[bool, str, Dict[str, Any]]:
    """Record a sale, cost it and, when ``process`` is set, consume stock.

    Nothing is written when any ingredient would go below zero; the payload
    then lists every shortage.
    """

    valid, msg = _validate_items(items)
    if not valid:
        return False, msg, {}
    sale_date = timezone.localdate()
    if data.get("sale_date"):
        sale_date = numbering.as_date(data["sale_date"])
        if sale_date is None:
            return False, "sale_date must be a valid date", {}
    recipes = {
        r.recipe_id: r
        for r in Recipe.objects.filter(pk__in=[i["recipe_id"] for i in items])
    }
    missing = sorted({i["recipe_id"] for i in items} - set(recipes))
    if missing:
        return False, f"Recipes not found: {missing}", {}

    try:
        with transaction.atomic():
            sale = Sale.objects.create(
                sale_number=numbering.next_number("SALE", sale_date),
                sale_date=sale_date,
                notes=data.get("notes") or None,
                created_by=user,
            )
            revenue = cost = dishes = ZERO
            for item in items:
                recipe = recipes[item["recipe_id"]]
                qty = to_quantity(item["quantity"])
                price = (
                    to_money(item["selling_price"])
                    if item.get("selling_price") not in (None, "")
                    else recipe.selling_price
                )
                unit_cost = recipe_service.cost_per_portion(recipe)
                line_revenue = to_money(qty * price)
                line_cost = to_money(qty * unit_cost)
                SaleItem.objects.create(
                    sale=sale,
                    recipe=recipe,
                    quantity=qty,
                    selling_price=price,
                    cost_per_portion=unit_cost,
                    total_revenue=line_revenue,
                    total_cost=line_cost,
                    profit=line_revenue - line_cost,
                )
                revenue += line_revenue
                cost += line_cost
                dishes += qty
            sale.total_dishes = dishes
            sale.total_revenue = revenue
            sale.total_cost = cost
            sale.gross_profit = revenue - cost
            sale.profit_margin = percent(revenue - cost, revenue)
            sale.save()
            if process:
                shortages = _shortages(_requirements(sale))
                if shortages:
                    raise InsufficientStock(shortages)
                _consume(sale, user)
    except InsufficientStock as exc:
        logger.warning("Sale rejected, %s ingredients short", len(exc.shortages))
        return False, "Insufficient stock", {"details": exc.shortages}
    logger.info(
        "Sale %s recorded: revenue %s, cost %s, status %s",
        sale.sale_number,
        sale.total_revenue,
        sale.total_cost,
        sale.status,
    )
    return (
        True,
        "Sale recorded",
        {
            "sale_id": sale.sale_id,
            "sale_number": sale.sale_number,
            "status": sale.status,
            "total_revenue": sale.total_revenue,
            "total_cost": sale.total_cost,
            "gross_profit": sale.gross_profit,
            "profit_margin": sale.profit_margin,
        },
    )


def process_sale(sale_id: int, user=None) -> Tuple[bool, str, Dict[str, Any]]:
    with transaction.atomic():
        try:
            sale = Sale.objects.select_for_update().get(pk=sale_id)
        except Sale.DoesNotExist:
            return False, "Sale not found", {}
        if sale.status == Sale.PROCESSED:
            return False, "Sale is already processed", {}
        shortages = _shortages(_requirements(sale))
        if shortages:
            return False, "Insufficient stock", {"details": shortages}
        _consume(sale, user)
    logger.info("Processed sale %s", sale.sale_number)
    return True, "Sale processed", {"sale_id": sale.sale_id, "status": sale.status}


def delete_sale(sale: Sale) -> Tuple[bool, str]:
    if sale.status == Sale.PROCESSED:
        return False, "Processed sales cannot be deleted"
    sale.delete()
    logger.info("Deleted sale %s", sale.sale_number)
    return True, "Sale deleted"


def list_sales(
    status: Optional[str] = None,
    date_from: Optional[Any] = None,
    date_to: Optional[Any] = None,
):
    qs = Sale.objects.order_by("-sale_date", "-sale_id")
    if status:
        qs = qs.filter(status=status)
    if date_from:
        qs = qs.filter(sale_date__gte=date_from)
    if date_to:
        qs = qs.filter(sale_date__lte=date_to)
    return qs


def get_sale(sale: Sale) -> Dict[str, Any]:
    consumption = [
        {
            "ingredient_id": m.ingredient_id,
            "ingredient_name": m.ingredient.name,
            "unit": m.ingredient.unit,
            "quantity": -m.quantity,
            "unit_cost": m.unit_cost,
            "total_cost": to_money(-m.quantity * (m.unit_cost or ZERO)),
        }
        for m in StockMovement.objects.filter(
            reference_type="sale", reference_id=sale.sale_id
        ).select_related("ingredient")
    ]
    return {
        "sale_id": sale.sale_id,
        "sale_number": sale.sale_number,
        "sale_date": sale.sale_date,
        "status": sale.status,
        "total_dishes": sale.total_dishes,
        "total_revenue": sale.total_revenue,
        "total_cost": sale.total_cost,
        "gross_profit": sale.gross_profit,
        "profit_margin": sale.profit_margin,
        "notes": sale.notes,
        "processed_at": sale.processed_at,
        "items": [
            {
                "sale_item_id": i.sale_item_id,
                "recipe_id": i.recipe_id,
                "recipe_name": i.recipe.name,
                "quantity": i.quantity,
                "selling_price": i.selling_price,
                "cost_per_portion": i.cost_per_portion,
                "total_revenue": i.total_revenue,
                "total_cost": i.total_cost,
                "profit": i.profit,
            }
            for i in sale.items.select_related("recipe").order_by("sale_item_id")
        ],
        "consumption": consumption,
    }
