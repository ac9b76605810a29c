from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from .fields import MoneyField, QuantityField


class Ingredient(models.Model):
    """A stocked ingredient and its running ledger balance."""

    ingredient_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=255, unique=True, blank=False, null=False)
    unit = models.CharField(max_length=50, blank=False, null=False)
    category = models.CharField(max_length=100, blank=True, null=True)
    current_stock = QuantityField(default=Decimal("0"))
    min_stock = QuantityField(default=Decimal("0"))
    last_price = MoneyField(default=Decimal("0"))
    is_active = models.BooleanField(default=True, null=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock

    @property
    def stock_value(self) -> Decimal:
        return (self.current_stock * self.last_price).quantize(Decimal("0.01"))

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.name or f"Ingredient {self.pk}"

    class Meta:
        db_table = "ingredients"
        ordering = ["name"]


class StockMovement(models.Model):
    """Append-only ledger entry changing an ingredient's stock.

    ``quantity`` is the signed change applied to the ingredient and
    ``balance_after`` the stock level once it was applied.
    """

    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"
    OPENING = "opening"
    WASTAGE = "wastage"
    MOVEMENT_TYPES = [
        (IN, "In"),
        (OUT, "Out"),
        (ADJUSTMENT, "Adjustment"),
        (OPENING, "Opening"),
        (WASTAGE, "Wastage"),
    ]

    movement_id = models.AutoField(primary_key=True)
    ingredient = models.ForeignKey(
        Ingredient,
        models.PROTECT,
        db_column="ingredient_id",
        related_name="movements",
    )
    movement_type = models.CharField(max_length=20, choices=MOVEMENT_TYPES)
    quantity = QuantityField()
    balance_after = QuantityField()
    unit_cost = models.DecimalField(
        max_digits=14, decimal_places=2, blank=True, null=True
    )
    reference_type = models.CharField(max_length=30, blank=True, null=True)
    reference_id = models.IntegerField(blank=True, null=True)
    reference_line = models.IntegerField(blank=True, null=True)
    remarks = models.TextField(blank=True, null=True)
    movement_date = models.DateField(default=timezone.localdate)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.SET_NULL,
        db_column="created_by",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.movement_type} {self.quantity} of {self.ingredient}"

    class Meta:
        db_table = "stock_movements"
        constraints = [
            models.UniqueConstraint(
                fields=["reference_type", "reference_id", "reference_line"],
                name="uniq_stock_movement_reference",
            )
        ]


class StockAdjustment(models.Model):
    """A physical count, wastage write-off or correction of stock levels."""

    PHYSICAL_COUNT = "physical_count"
    WASTAGE = "wastage"
    CORRECTION = "correction"
    ADJUSTMENT_TYPES = [
        (PHYSICAL_COUNT, "Physical count"),
        (WASTAGE, "Wastage"),
        (CORRECTION, "Correction"),
    ]

    adjustment_id = models.AutoField(primary_key=True)
    adjustment_number = models.CharField(max_length=30, unique=True)
    adjustment_type = models.CharField(
        max_length=20, choices=ADJUSTMENT_TYPES, default=PHYSICAL_COUNT
    )
    adjustment_date = models.DateField(default=timezone.localdate)
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.SET_NULL,
        db_column="created_by",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.adjustment_number

    class Meta:
        db_table = "stock_adjustments"


class StockAdjustmentItem(models.Model):
    adjustment = models.ForeignKey(
        StockAdjustment,
        models.CASCADE,
        db_column="adjustment_id",
        related_name="items",
    )
    ingredient = models.ForeignKey(
        Ingredient, models.PROTECT, db_column="ingredient_id"
    )
    system_quantity = QuantityField()
    actual_quantity = QuantityField()
    variance = QuantityField()
    remarks = models.TextField(blank=True, null=True)

    class Meta:
        db_table = "stock_adjustment_items"
