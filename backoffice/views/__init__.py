from .api import ExpenseCategoryViewSet, IngredientViewSet, UserViewSet, VendorViewSet
from .expenses import ExpenseViewSet
from .purchasing import (
    GoodsReceivedNoteViewSet,
    IntendViewSet,
    PaymentViewSet,
    PurchaseOrderViewSet,
)
from .recipes import RecipeViewSet, SaleViewSet
from .stock import StockViewSet

__all__ = [
    "ExpenseCategoryViewSet",
    "ExpenseViewSet",
    "GoodsReceivedNoteViewSet",
    "IngredientViewSet",
    "IntendViewSet",
    "PaymentViewSet",
    "PurchaseOrderViewSet",
    "RecipeViewSet",
    "SaleViewSet",
    "StockViewSet",
    "UserViewSet",
    "VendorViewSet",
]
