from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from .fields import MoneyField, QuantityField
from .ingredients import Ingredient
from .vendors import Vendor


class Intend(models.Model):
    """Internal requisition of ingredient quantities ahead of purchasing."""

    PENDING = "pending"
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    PARTIALLY_FULFILLED = "partially_fulfilled"
    FULFILLED = "fulfilled"
    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (DRAFT, "Draft"),
        (SUBMITTED, "Submitted"),
        (APPROVED, "Approved"),
        (PARTIALLY_FULFILLED, "Partially fulfilled"),
        (FULFILLED, "Fulfilled"),
    ]

    intend_id = models.AutoField(primary_key=True)
    intend_number = models.CharField(max_length=30, unique=True)
    vendor = models.ForeignKey(
        Vendor,
        models.PROTECT,
        db_column="vendor_id",
        related_name="intends",
        blank=True,
        null=True,
    )
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=PENDING)
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.SET_NULL,
        db_column="created_by",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.intend_number or f"Intend {self.pk}"

    class Meta:
        db_table = "intends"


class IntendItem(models.Model):
    """Requested quantity of one ingredient within an intend."""

    intend_item_id = models.AutoField(primary_key=True)
    intend = models.ForeignKey(
        Intend, models.CASCADE, db_column="intend_id", related_name="items"
    )
    ingredient = models.ForeignKey(
        Ingredient,
        models.PROTECT,
        db_column="ingredient_id",
        related_name="intend_items",
    )
    quantity_requested = QuantityField()
    remarks = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.intend} - {self.ingredient}"

    class Meta:
        db_table = "intend_items"
        constraints = [
            models.UniqueConstraint(
                fields=["intend", "ingredient"], name="uniq_intend_ingredient"
            )
        ]


class PurchaseOrder(models.Model):
    """Order placed with a vendor, optionally raised from an intend."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PARTIALLY_RECEIVED = "partially_received"
    RECEIVED = "received"
    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (PARTIALLY_RECEIVED, "Partially received"),
        (RECEIVED, "Received"),
    ]

    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
    PAYMENT_STATUS_CHOICES = [
        (UNPAID, "Unpaid"),
        (PARTIAL, "Partially paid"),
        (PAID, "Paid"),
    ]

    po_id = models.AutoField(primary_key=True)
    po_number = models.CharField(max_length=30, unique=True)
    vendor = models.ForeignKey(
        Vendor, models.PROTECT, db_column="vendor_id", related_name="purchase_orders"
    )
    intend = models.ForeignKey(
        Intend,
        models.SET_NULL,
        db_column="intend_id",
        related_name="purchase_orders",
        blank=True,
        null=True,
    )
    order_date = models.DateField(default=timezone.localdate)
    expected_delivery_date = models.DateField(blank=True, null=True)
    status = models.CharField(max_length=30, choices=STATUS_CHOICES, default=PENDING)
    notes = models.TextField(blank=True, null=True)
    total_amount = MoneyField(default=Decimal("0"))
    total_items_count = models.PositiveIntegerField(default=0)
    received_items_count = models.PositiveIntegerField(default=0)
    received_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0")
    )
    actual_receivable_amount = models.DecimalField(
        max_digits=14, decimal_places=2, blank=True, null=True
    )
    total_paid = MoneyField(default=Decimal("0"))
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=UNPAID
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.SET_NULL,
        db_column="created_by",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def receivable_amount(self) -> Decimal:
        if self.actual_receivable_amount is not None:
            return self.actual_receivable_amount
        return self.total_amount

    @property
    def outstanding_amount(self) -> Decimal:
        return max(self.receivable_amount - self.total_paid, Decimal("0"))

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.po_number or f"PO {self.pk}"

    class Meta:
        db_table = "purchase_orders"


class PurchaseOrderItem(models.Model):
    """Ordered quantity and contract price of one ingredient."""

    po_item_id = models.AutoField(primary_key=True)
    purchase_order = models.ForeignKey(
        PurchaseOrder, models.CASCADE, db_column="po_id", related_name="items"
    )
    intend_item = models.OneToOneField(
        IntendItem,
        models.SET_NULL,
        db_column="intend_item_id",
        related_name="po_item",
        blank=True,
        null=True,
    )
    ingredient = models.ForeignKey(
        Ingredient, models.PROTECT, db_column="ingredient_id", related_name="po_items"
    )
    quantity_ordered = QuantityField()
    unit_price = MoneyField()
    quantity_received = QuantityField(default=Decimal("0"))

    @property
    def total_price(self) -> Decimal:
        return (self.quantity_ordered * self.unit_price).quantize(Decimal("0.01"))

    @property
    def received_percentage(self) -> Decimal:
        if not self.quantity_ordered:
            return Decimal("0")
        pct = self.quantity_received / self.quantity_ordered * 100
        return min(max(pct, Decimal("0")), Decimal("100")).quantize(Decimal("0.01"))

    @property
    def item_status(self) -> str:
        if self.quantity_received >= self.quantity_ordered > 0:
            return "received"
        if self.quantity_received > 0:
            return "partial"
        return "pending"

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.purchase_order} - {self.ingredient}"

    class Meta:
        db_table = "purchase_order_items"


class GoodsReceivedNote(models.Model):
    """Receipt of goods against a purchase order on a given date."""

    grn_id = models.AutoField(primary_key=True)
    grn_number = models.CharField(max_length=30, unique=True)
    purchase_order = models.ForeignKey(
        PurchaseOrder, models.CASCADE, db_column="po_id", related_name="grns"
    )
    received_date = models.DateField(default=timezone.localdate)
    received_by = models.CharField(max_length=255, blank=True, null=True)
    client_reference = models.CharField(
        max_length=100, unique=True, blank=True, null=True
    )
    notes = models.TextField(blank=True, null=True)
    total_amount = MoneyField(default=Decimal("0"))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.SET_NULL,
        db_column="created_by",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.grn_number or f"GRN {self.pk}"

    class Meta:
        db_table = "goods_received_notes"


class GRNItem(models.Model):
    """Quantity and actual price received for one PO line."""

    grn_item_id = models.AutoField(primary_key=True)
    grn = models.ForeignKey(
        GoodsReceivedNote, models.CASCADE, db_column="grn_id", related_name="items"
    )
    po_item = models.ForeignKey(
        PurchaseOrderItem,
        models.CASCADE,
        db_column="po_item_id",
        related_name="grn_items",
    )
    ingredient = models.ForeignKey(
        Ingredient, models.PROTECT, db_column="ingredient_id"
    )
    quantity_ordered = QuantityField()
    quantity_received = QuantityField()
    unit_price_ordered = MoneyField()
    unit_price_actual = MoneyField()
    quantity_variance = QuantityField(default=Decimal("0"))
    price_variance = MoneyField(default=Decimal("0"))
    line_total = MoneyField(default=Decimal("0"))
    remarks = models.TextField(blank=True, null=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.grn} item {self.po_item}"

    class Meta:
        db_table = "grn_items"
