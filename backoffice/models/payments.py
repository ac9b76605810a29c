from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from .fields import MoneyField
from .purchasing import PurchaseOrder
from .vendors import Vendor

PAYMENT_METHODS = [
    ("cash", "Cash"),
    ("bank_transfer", "Bank transfer"),
    ("upi", "UPI"),
    ("cheque", "Cheque"),
    ("card", "Card"),
]


class Payment(models.Model):
    """Payment made to a vendor against a purchase order."""

    COMPLETED = "completed"
    PENDING = "pending"
    CANCELLED = "cancelled"
    STATUS_CHOICES = [
        (COMPLETED, "Completed"),
        (PENDING, "Pending"),
        (CANCELLED, "Cancelled"),
    ]

    payment_id = models.AutoField(primary_key=True)
    payment_number = models.CharField(max_length=30, unique=True)
    purchase_order = models.ForeignKey(
        PurchaseOrder, models.CASCADE, db_column="po_id", related_name="payments"
    )
    vendor = models.ForeignKey(
        Vendor, models.PROTECT, db_column="vendor_id", related_name="payments"
    )
    payment_date = models.DateField()
    amount = MoneyField()
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHODS)
    transaction_reference = models.CharField(max_length=255, blank=True, null=True)
    transaction_date = models.DateField(blank=True, null=True)
    bank_name = models.CharField(max_length=255, blank=True, null=True)
    remarks = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=COMPLETED)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.SET_NULL,
        db_column="created_by",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.payment_number or f"Payment {self.pk}"

    class Meta:
        db_table = "payments"


class ExpenseCategory(models.Model):
    category_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=100, unique=True)
    code = models.CharField(max_length=30, unique=True)
    is_operating = models.BooleanField(default=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.name

    class Meta:
        db_table = "expense_categories"
        ordering = ["name"]


class OtherExpense(models.Model):
    """Non-purchase expense such as rent, utilities or repairs."""

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    PAYMENT_STATUS_CHOICES = [
        (UNPAID, "Unpaid"),
        (PARTIAL, "Partially paid"),
        (PAID, "Paid"),
    ]

    expense_id = models.AutoField(primary_key=True)
    expense_number = models.CharField(max_length=30, unique=True)
    expense_date = models.DateField(default=timezone.localdate)
    category = models.ForeignKey(
        ExpenseCategory,
        models.PROTECT,
        db_column="category_id",
        related_name="expenses",
    )
    vendor = models.ForeignKey(
        Vendor,
        models.SET_NULL,
        db_column="vendor_id",
        related_name="expenses",
        blank=True,
        null=True,
    )
    amount = MoneyField()
    tax_amount = MoneyField(default=Decimal("0"))
    notes = models.TextField(blank=True, null=True)
    attachment_url = models.URLField(max_length=500, blank=True, null=True)
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=UNPAID
    )
    total_paid = MoneyField(default=Decimal("0"))
    created_at = models.DateTimeField(auto_now_add=True)

    @property
    def total_amount(self) -> Decimal:
        return self.amount + self.tax_amount

    @property
    def outstanding_amount(self) -> Decimal:
        return max(self.total_amount - self.total_paid, Decimal("0"))

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.expense_number or f"Expense {self.pk}"

    class Meta:
        db_table = "other_expenses"


class OtherExpensePayment(models.Model):
    payment_id = models.AutoField(primary_key=True)
    expense = models.ForeignKey(
        OtherExpense, models.CASCADE, db_column="expense_id", related_name="payments"
    )
    amount = MoneyField()
    payment_date = models.DateField(default=timezone.localdate)
    method = models.CharField(max_length=20, choices=PAYMENT_METHODS, default="cash")
    reference = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "other_expense_payments"
