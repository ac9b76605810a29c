"""Bulk maintenance of transactional data: wipe everything or seed samples."""

import logging
from datetime import timedelta
from typing import Any, Dict, Tuple

from django.db import transaction
from django.utils import timezone

from backoffice.models import (
    DocumentSequence,
    ExpenseCategory,
    GoodsReceivedNote,
    GRNItem,
    Ingredient,
    Intend,
    IntendItem,
    OtherExpense,
    OtherExpensePayment,
    Payment,
    PurchaseOrder,
    PurchaseOrderItem,
    Recipe,
    Sale,
    SaleItem,
    StockAdjustment,
    StockAdjustmentItem,
    StockMovement,
    Vendor,
)
from . import (
    expense_service,
    goods_receiving_service,
    intend_service,
    payment_service,
    purchase_order_service,
    recipe_service,
    sale_service,
    stock_service,
)
from .money import to_money

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "DELETE_ALL_TRANSACTIONS"

SEED_VENDOR_NAME = "Test Vendor (seed)"
SEED_RECIPE_NAME = "Seed Special"

# Children before parents so protected foreign keys never block a delete.
DELETE_ORDER = [
    ("saleItems", SaleItem),
    ("sales", Sale),
    ("payments", Payment),
    ("grnItems", GRNItem),
    ("grns", GoodsReceivedNote),
    ("purchaseOrderItems", PurchaseOrderItem),
    ("purchaseOrders", PurchaseOrder),
    ("intendItems", IntendItem),
    ("intends", Intend),
    ("stockMovements", StockMovement),
    ("stockAdjustmentItems", StockAdjustmentItem),
    ("stockAdjustments", StockAdjustment),
    ("expensePayments", OtherExpensePayment),
    ("expenses", OtherExpense),
    ("documentSequences", DocumentSequence),
]


def delete_all_transactions(confirm: str) -> Tuple[bool, str, Dict[str, Any]]:
    """Delete every transactional row and reset stock to zero.

    Master data (ingredients, vendors, recipes, users, expense categories)
    is kept.
    """

    if confirm != DELETE_CONFIRMATION:
        return False, f"Confirmation text must be {DELETE_CONFIRMATION}", {}
    counts: Dict[str, int] = {}
    with transaction.atomic():
        for label, model in DELETE_ORDER:
            deleted, _ = model.objects.all().delete()
            counts[label] = deleted
        reset = Ingredient.objects.update(current_stock=0)
    total = sum(counts.values())
    logger.warning(
        "Deleted all transactions: %s rows, %s ingredients reset", total, reset
    )
    return (
        True,
        "All transactional data deleted",
        {"deletedCounts": counts, "totalDeleted": total, "ingredientsReset": reset},
    )


def _expect(result: Tuple, what: str):
    """Unwrap a service ``(ok, msg, payload)`` tuple or abort the seed."""
    ok, msg = result[0], result[1]
    if not ok:
        raise ValueError(f"Seeding {what} failed: {msg}")
    return result[2] if len(result) > 2 else None


def seed_transaction_data(user=None) -> Tuple[bool, str, Dict[str, Any]]:
    """Create a small, consistent set of sample transactions.

    Everything goes through the regular services so stock, PO rollups and
    payment totals hold the same invariants as real data.
    """

    ingredients = list(Ingredient.objects.filter(is_active=True).order_by("pk")[:5])
    if not ingredients:
        return False, "Create at least one ingredient before seeding", {}

    today = timezone.localdate()
    counts = {
        "vendors": 0,
        "intends": 0,
        "purchaseOrders": 0,
        "grns": 0,
        "payments": 0,
        "recipes": 0,
        "sales": 0,
        "expenses": 0,
        "stockAdjustments": 0,
    }
    try:
        with transaction.atomic():
            vendor, created = Vendor.objects.get_or_create(
                name=SEED_VENDOR_NAME, defaults={"contact": "0000000000"}
            )
            counts["vendors"] += int(created)

            # A fully received and paid PO, then a partially received one.
            for received_share in (1, 0.5):
                intend = _expect(
                    intend_service.create_intend(
                        {"notes": "Seed intend"},
                        [
                            {"ingredient_id": ing.pk, "quantity": 10}
                            for ing in ingredients
                        ],
                        user,
                    ),
                    "intend",
                )
                counts["intends"] += 1
                po_data = _expect(
                    purchase_order_service.generate_from_intend(
                        {
                            "intend_id": intend.intend_id,
                            "vendor_id": vendor.vendor_id,
                            "expected_delivery_date": today + timedelta(days=2),
                            "items": [
                                {
                                    "intend_item_id": item.intend_item_id,
                                    "quantity": item.quantity_requested,
                                    "unit_price": to_money(ing.last_price) or 10,
                                }
                                for item, ing in zip(
                                    intend.items.order_by("intend_item_id"), ingredients
                                )
                            ],
                        },
                        user,
                    ),
                    "purchase order",
                )
                counts["purchaseOrders"] += 1
                po = PurchaseOrder.objects.get(pk=po_data["po_id"])
                _expect(
                    goods_receiving_service.create_grn(
                        {"po_id": po.po_id, "received_date": today, "notes": "Seed GRN"},
                        [
                            {
                                "po_item_id": item.po_item_id,
                                "quantity_received": item.quantity_ordered
                                * to_money(received_share),
                                "unit_price_actual": item.unit_price,
                            }
                            for item in po.items.all()
                        ],
                        user,
                    ),
                    "GRN",
                )
                counts["grns"] += 1
                po.refresh_from_db()
                _expect(
                    payment_service.create_payment(
                        {
                            "po_id": po.po_id,
                            "payment_date": today,
                            "amount": to_money(po.outstanding_amount * to_money(received_share)),
                            "payment_method": "bank_transfer",
                            "remarks": "Seed payment",
                        },
                        user,
                    ),
                    "payment",
                )
                counts["payments"] += 1

            recipe = Recipe.objects.filter(name=SEED_RECIPE_NAME).first()
            if recipe is None:
                recipe_id = _expect(
                    recipe_service.create_recipe(
                        {"name": SEED_RECIPE_NAME, "selling_price": 250},
                        [{"ingredient_id": ingredients[0].pk, "quantity": 1}],
                    ),
                    "recipe",
                )
                recipe = Recipe.objects.get(pk=recipe_id)
                counts["recipes"] += 1
            _expect(
                sale_service.create_sale(
                    {"sale_date": today, "notes": "Seed sale"},
                    [{"recipe_id": recipe.recipe_id, "quantity": 2}],
                    user,
                ),
                "sale",
            )
            counts["sales"] += 1

            category, _ = ExpenseCategory.objects.get_or_create(
                code="UTIL", defaults={"name": "Utilities"}
            )
            _expect(
                expense_service.create_expense(
                    {
                        "category_id": category.category_id,
                        "amount": 1000,
                        "tax_amount": 180,
                        "notes": "Seed expense",
                    }
                ),
                "expense",
            )
            counts["expenses"] += 1

            first = Ingredient.objects.get(pk=ingredients[0].pk)
            _expect(
                stock_service.adjust_stock(
                    {"adjustment_type": "physical_count", "notes": "Seed count"},
                    [
                        {
                            "ingredient_id": first.pk,
                            "actual_quantity": max(first.current_stock - 1, 0),
                            "remarks": "Seed variance",
                        }
                    ],
                    user,
                ),
                "stock adjustment",
            )
            counts["stockAdjustments"] += 1
    except ValueError as exc:
        logger.error("Seeding transaction data failed: %s", exc)
        return False, str(exc), {}
    total = sum(counts.values())
    logger.info("Seeded transaction data: %s", counts)
    return (
        True,
        "Seed data created",
        {"createdCounts": counts, "totalCreated": total},
    )
