"""API routes for the back-office app."""

from django.urls import path
from rest_framework.routers import DefaultRouter

from .views import (
    ExpenseCategoryViewSet,
    ExpenseViewSet,
    GoodsReceivedNoteViewSet,
    IngredientViewSet,
    IntendViewSet,
    PaymentViewSet,
    PurchaseOrderViewSet,
    RecipeViewSet,
    SaleViewSet,
    StockViewSet,
    UserViewSet,
    VendorViewSet,
)
from .views import admin_tools, auth, reports

router = DefaultRouter()
router.register(r"users", UserViewSet)
router.register(r"ingredients", IngredientViewSet)
router.register(r"vendors", VendorViewSet)
router.register(r"intends", IntendViewSet, basename="intend")
router.register(r"purchase-orders", PurchaseOrderViewSet, basename="purchase-order")
router.register(r"grns", GoodsReceivedNoteViewSet, basename="grn")
router.register(r"payments", PaymentViewSet, basename="payment")
router.register(r"stock", StockViewSet, basename="stock")
router.register(r"recipes", RecipeViewSet, basename="recipe")
router.register(r"sales", SaleViewSet, basename="sale")
router.register(r"expense-categories", ExpenseCategoryViewSet)
router.register(r"expenses", ExpenseViewSet, basename="expense")

urlpatterns = router.urls + [
    path("auth/login/", auth.login, name="auth-login"),
    path("auth/logout/", auth.logout, name="auth-logout"),
    path("auth/session/", auth.session, name="auth-session"),
    path("dashboard/", reports.dashboard, name="dashboard"),
    path("staff/dashboard/", reports.staff_dashboard, name="staff-dashboard"),
    path("accounts/dashboard/", reports.accounts_dashboard, name="accounts-dashboard"),
    path("mtd-cogs/", reports.mtd_cogs, name="mtd-cogs"),
    path("charts/sales-trends/", reports.sales_trends, name="sales-trends"),
    path("cash-ledger/", reports.cash_ledger, name="cash-ledger"),
    path(
        "admin/seed-transaction-data/",
        admin_tools.seed_transaction_data,
        name="seed-transaction-data",
    ),
    path(
        "admin/delete-all-transactions/",
        admin_tools.delete_all_transactions,
        name="delete-all-transactions",
    ),
]
