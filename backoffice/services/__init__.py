"""Service layer for the back-office app."""

from . import (
    admin_data_service,
    dashboard_service,
    expense_service,
    goods_receiving_service,
    ingredient_service,
    intend_service,
    kpis,
    money,
    numbering,
    payment_service,
    purchase_order_service,
    recipe_service,
    sale_service,
    stock_service,
    vendor_service,
)

__all__ = [
    "admin_data_service",
    "dashboard_service",
    "expense_service",
    "goods_receiving_service",
    "ingredient_service",
    "intend_service",
    "kpis",
    "money",
    "numbering",
    "payment_service",
    "purchase_order_service",
    "recipe_service",
    "sale_service",
    "stock_service",
    "vendor_service",
]
