from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from .fields import MoneyField, QuantityField
from .ingredients import Ingredient


class Recipe(models.Model):
    """A dish sold by the restaurant and its selling price."""

    recipe_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=255, unique=True, null=False, blank=False)
    description = models.TextField(blank=True, null=True)
    category = models.CharField(max_length=100, blank=True, null=True)
    portion_size = models.CharField(max_length=50, blank=True, null=True)
    selling_price = MoneyField(default=Decimal("0"))
    instructions = models.TextField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True, null=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.name or f"Recipe {self.pk}"

    class Meta:
        db_table = "recipes"
        ordering = ["name"]


class RecipeIngredient(models.Model):
    """Quantity of an ingredient used for one portion of a recipe."""

    recipe = models.ForeignKey(
        Recipe, models.CASCADE, db_column="recipe_id", related_name="lines"
    )
    ingredient = models.ForeignKey(
        Ingredient,
        models.PROTECT,
        db_column="ingredient_id",
        related_name="recipe_lines",
    )
    quantity = QuantityField()
    unit = models.CharField(max_length=50, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.recipe} - {self.ingredient}"

    class Meta:
        db_table = "recipe_ingredients"
        constraints = [
            models.UniqueConstraint(
                fields=["recipe", "ingredient"], name="uniq_recipe_ingredient"
            )
        ]


class Sale(models.Model):
    """A day's recorded sale of one or more recipes."""

    PENDING = "pending"
    PROCESSED = "processed"
    STATUS_CHOICES = [(PENDING, "Pending"), (PROCESSED, "Processed")]

    sale_id = models.AutoField(primary_key=True)
    sale_number = models.CharField(max_length=30, unique=True)
    sale_date = models.DateField(default=timezone.localdate)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    total_dishes = QuantityField(default=Decimal("0"))
    total_revenue = MoneyField(default=Decimal("0"))
    total_cost = MoneyField(default=Decimal("0"))
    gross_profit = MoneyField(default=Decimal("0"))
    profit_margin = models.DecimalField(
        max_digits=7, decimal_places=2, default=Decimal("0")
    )
    notes = models.TextField(blank=True, null=True)
    processed_at = models.DateTimeField(blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.SET_NULL,
        db_column="created_by",
        blank=True,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.sale_number or f"Sale {self.pk}"

    class Meta:
        db_table = "sales"


class SaleItem(models.Model):
    sale_item_id = models.AutoField(primary_key=True)
    sale = models.ForeignKey(
        Sale, models.CASCADE, db_column="sale_id", related_name="items"
    )
    recipe = models.ForeignKey(
        Recipe, models.PROTECT, db_column="recipe_id", related_name="sale_items"
    )
    quantity = QuantityField()
    selling_price = MoneyField()
    cost_per_portion = MoneyField()
    total_revenue = MoneyField()
    total_cost = MoneyField()
    profit = MoneyField()

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.sale} - {self.recipe}"

    class Meta:
        db_table = "sale_items"
