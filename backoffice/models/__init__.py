from .fields import CoerceDecimalField, MoneyField, QuantityField
from .users import User
from .vendors import Vendor
from .ingredients import Ingredient, StockAdjustment, StockAdjustmentItem, StockMovement
from .purchasing import (
    GoodsReceivedNote,
    GRNItem,
    Intend,
    IntendItem,
    PurchaseOrder,
    PurchaseOrderItem,
)
from .payments import (
    PAYMENT_METHODS,
    ExpenseCategory,
    OtherExpense,
    OtherExpensePayment,
    Payment,
)
from .recipes import Recipe, RecipeIngredient, Sale, SaleItem
from .sequences import DocumentSequence

__all__ = [
    "CoerceDecimalField",
    "MoneyField",
    "QuantityField",
    "User",
    "Vendor",
    "Ingredient",
    "StockMovement",
    "StockAdjustment",
    "StockAdjustmentItem",
    "Intend",
    "IntendItem",
    "PurchaseOrder",
    "PurchaseOrderItem",
    "GoodsReceivedNote",
    "GRNItem",
    "PAYMENT_METHODS",
    "Payment",
    "ExpenseCategory",
    "OtherExpense",
    "OtherExpensePayment",
    "Recipe",
    "RecipeIngredient",
    "Sale",
    "SaleItem",
    "DocumentSequence",
]
