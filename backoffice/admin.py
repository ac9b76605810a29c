from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import (
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
    RecipeIngredient,
    Sale,
    SaleItem,
    StockAdjustment,
    StockAdjustmentItem,
    StockMovement,
    User,
    Vendor,
)


@admin.register(User)
class BackofficeUserAdmin(UserAdmin):
    list_display = ("username", "email", "role", "is_active")
    fieldsets = UserAdmin.fieldsets + (("Back office", {"fields": ("role",)}),)


for model in [
    Ingredient,
    Vendor,
    StockMovement,
    StockAdjustment,
    StockAdjustmentItem,
    Intend,
    IntendItem,
    PurchaseOrder,
    PurchaseOrderItem,
    GoodsReceivedNote,
    GRNItem,
    Payment,
    ExpenseCategory,
    OtherExpense,
    OtherExpensePayment,
    Recipe,
    RecipeIngredient,
    Sale,
    SaleItem,
    DocumentSequence,
]:
    admin.site.register(model)
