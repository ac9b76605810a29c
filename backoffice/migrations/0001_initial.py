from decimal import Decimal

import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import backoffice.models.fields

PAYMENT_METHODS = [
    ("cash", "Cash"),
    ("bank_transfer", "Bank transfer"),
    ("upi", "UPI"),
    ("cheque", "Cheque"),
    ("card", "Card"),
]


def money(**kwargs):
    return backoffice.models.fields.MoneyField(decimal_places=2, max_digits=14, **kwargs)


def quantity(**kwargs):
    return backoffice.models.fields.QuantityField(
        decimal_places=3, max_digits=14, **kwargs
    )


def created_by():
    return models.ForeignKey(
        blank=True,
        db_column="created_by",
        null=True,
        on_delete=django.db.models.deletion.SET_NULL,
        to=settings.AUTH_USER_MODEL,
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("role", models.CharField(choices=[("admin", "Admin"), ("accounts", "Accounts"), ("manager", "Manager"), ("staff", "Staff")], default="staff", max_length=20)),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={"db_table": "users"},
            managers=[("objects", django.contrib.auth.models.UserManager())],
        ),
        migrations.CreateModel(
            name="Vendor",
            fields=[
                ("vendor_id", models.AutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("contact", models.CharField(max_length=255)),
                ("email", models.CharField(blank=True, max_length=254, null=True)),
                ("address", models.TextField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"db_table": "vendors", "ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Ingredient",
            fields=[
                ("ingredient_id", models.AutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("unit", models.CharField(max_length=50)),
                ("category", models.CharField(blank=True, max_length=100, null=True)),
                ("current_stock", quantity(default=Decimal("0"))),
                ("min_stock", quantity(default=Decimal("0"))),
                ("last_price", money(default=Decimal("0"))),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"db_table": "ingredients", "ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="DocumentSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("prefix", models.CharField(max_length=10)),
                ("period", models.CharField(max_length=8)),
                ("last_value", models.PositiveIntegerField(default=0)),
            ],
            options={"db_table": "document_sequences"},
        ),
        migrations.AddConstraint(
            model_name="documentsequence",
            constraint=models.UniqueConstraint(fields=("prefix", "period"), name="uniq_document_sequence"),
        ),
        migrations.CreateModel(
            name="ExpenseCategory",
            fields=[
                ("category_id", models.AutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=100, unique=True)),
                ("code", models.CharField(max_length=30, unique=True)),
                ("is_operating", models.BooleanField(default=True)),
            ],
            options={"db_table": "expense_categories", "ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Recipe",
            fields=[
                ("recipe_id", models.AutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("description", models.TextField(blank=True, null=True)),
                ("category", models.CharField(blank=True, max_length=100, null=True)),
                ("portion_size", models.CharField(blank=True, max_length=50, null=True)),
                ("selling_price", money(default=Decimal("0"))),
                ("instructions", models.TextField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"db_table": "recipes", "ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Intend",
            fields=[
                ("intend_id", models.AutoField(primary_key=True, serialize=False)),
                ("intend_number", models.CharField(max_length=30, unique=True)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("draft", "Draft"), ("submitted", "Submitted"), ("approved", "Approved"), ("partially_fulfilled", "Partially fulfilled"), ("fulfilled", "Fulfilled")], default="pending", max_length=30)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", created_by()),
                ("vendor", models.ForeignKey(blank=True, db_column="vendor_id", null=True, on_delete=django.db.models.deletion.PROTECT, related_name="intends", to="backoffice.vendor")),
            ],
            options={"db_table": "intends"},
        ),
        migrations.CreateModel(
            name="IntendItem",
            fields=[
                ("intend_item_id", models.AutoField(primary_key=True, serialize=False)),
                ("quantity_requested", quantity()),
                ("remarks", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("ingredient", models.ForeignKey(db_column="ingredient_id", on_delete=django.db.models.deletion.PROTECT, related_name="intend_items", to="backoffice.ingredient")),
                ("intend", models.ForeignKey(db_column="intend_id", on_delete=django.db.models.deletion.CASCADE, related_name="items", to="backoffice.intend")),
            ],
            options={"db_table": "intend_items"},
        ),
        migrations.AddConstraint(
            model_name="intenditem",
            constraint=models.UniqueConstraint(fields=("intend", "ingredient"), name="uniq_intend_ingredient"),
        ),
        migrations.CreateModel(
            name="PurchaseOrder",
            fields=[
                ("po_id", models.AutoField(primary_key=True, serialize=False)),
                ("po_number", models.CharField(max_length=30, unique=True)),
                ("order_date", models.DateField(default=django.utils.timezone.localdate)),
                ("expected_delivery_date", models.DateField(blank=True, null=True)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("partially_received", "Partially received"), ("received", "Received")], default="pending", max_length=30)),
                ("notes", models.TextField(blank=True, null=True)),
                ("total_amount", money(default=Decimal("0"))),
                ("total_items_count", models.PositiveIntegerField(default=0)),
                ("received_items_count", models.PositiveIntegerField(default=0)),
                ("received_percentage", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=5)),
                ("actual_receivable_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("total_paid", money(default=Decimal("0"))),
                ("payment_status", models.CharField(choices=[("unpaid", "Unpaid"), ("partial", "Partially paid"), ("paid", "Paid")], default="unpaid", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", created_by()),
                ("intend", models.ForeignKey(blank=True, db_column="intend_id", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="purchase_orders", to="backoffice.intend")),
                ("vendor", models.ForeignKey(db_column="vendor_id", on_delete=django.db.models.deletion.PROTECT, related_name="purchase_orders", to="backoffice.vendor")),
            ],
            options={"db_table": "purchase_orders"},
        ),
        migrations.CreateModel(
            name="PurchaseOrderItem",
            fields=[
                ("po_item_id", models.AutoField(primary_key=True, serialize=False)),
                ("quantity_ordered", quantity()),
                ("unit_price", money()),
                ("quantity_received", quantity(default=Decimal("0"))),
                ("ingredient", models.ForeignKey(db_column="ingredient_id", on_delete=django.db.models.deletion.PROTECT, related_name="po_items", to="backoffice.ingredient")),
                ("intend_item", models.OneToOneField(blank=True, db_column="intend_item_id", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="po_item", to="backoffice.intenditem")),
                ("purchase_order", models.ForeignKey(db_column="po_id", on_delete=django.db.models.deletion.CASCADE, related_name="items", to="backoffice.purchaseorder")),
            ],
            options={"db_table": "purchase_order_items"},
        ),
        migrations.CreateModel(
            name="GoodsReceivedNote",
            fields=[
                ("grn_id", models.AutoField(primary_key=True, serialize=False)),
                ("grn_number", models.CharField(max_length=30, unique=True)),
                ("received_date", models.DateField(default=django.utils.timezone.localdate)),
                ("received_by", models.CharField(blank=True, max_length=255, null=True)),
                ("client_reference", models.CharField(blank=True, max_length=100, null=True, unique=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("total_amount", money(default=Decimal("0"))),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", created_by()),
                ("purchase_order", models.ForeignKey(db_column="po_id", on_delete=django.db.models.deletion.CASCADE, related_name="grns", to="backoffice.purchaseorder")),
            ],
            options={"db_table": "goods_received_notes"},
        ),
        migrations.CreateModel(
            name="GRNItem",
            fields=[
                ("grn_item_id", models.AutoField(primary_key=True, serialize=False)),
                ("quantity_ordered", quantity()),
                ("quantity_received", quantity()),
                ("unit_price_ordered", money()),
                ("unit_price_actual", money()),
                ("quantity_variance", quantity(default=Decimal("0"))),
                ("price_variance", money(default=Decimal("0"))),
                ("line_total", money(default=Decimal("0"))),
                ("remarks", models.TextField(blank=True, null=True)),
                ("grn", models.ForeignKey(db_column="grn_id", on_delete=django.db.models.deletion.CASCADE, related_name="items", to="backoffice.goodsreceivednote")),
                ("ingredient", models.ForeignKey(db_column="ingredient_id", on_delete=django.db.models.deletion.PROTECT, to="backoffice.ingredient")),
                ("po_item", models.ForeignKey(db_column="po_item_id", on_delete=django.db.models.deletion.CASCADE, related_name="grn_items", to="backoffice.purchaseorderitem")),
            ],
            options={"db_table": "grn_items"},
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("payment_id", models.AutoField(primary_key=True, serialize=False)),
                ("payment_number", models.CharField(max_length=30, unique=True)),
                ("payment_date", models.DateField()),
                ("amount", money()),
                ("payment_method", models.CharField(choices=PAYMENT_METHODS, max_length=20)),
                ("transaction_reference", models.CharField(blank=True, max_length=255, null=True)),
                ("transaction_date", models.DateField(blank=True, null=True)),
                ("bank_name", models.CharField(blank=True, max_length=255, null=True)),
                ("remarks", models.TextField(blank=True, null=True)),
                ("status", models.CharField(choices=[("completed", "Completed"), ("pending", "Pending"), ("cancelled", "Cancelled")], default="completed", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", created_by()),
                ("purchase_order", models.ForeignKey(db_column="po_id", on_delete=django.db.models.deletion.CASCADE, related_name="payments", to="backoffice.purchaseorder")),
                ("vendor", models.ForeignKey(db_column="vendor_id", on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="backoffice.vendor")),
            ],
            options={"db_table": "payments"},
        ),
        migrations.CreateModel(
            name="OtherExpense",
            fields=[
                ("expense_id", models.AutoField(primary_key=True, serialize=False)),
                ("expense_number", models.CharField(max_length=30, unique=True)),
                ("expense_date", models.DateField(default=django.utils.timezone.localdate)),
                ("amount", money()),
                ("tax_amount", money(default=Decimal("0"))),
                ("notes", models.TextField(blank=True, null=True)),
                ("attachment_url", models.URLField(blank=True, max_length=500, null=True)),
                ("payment_status", models.CharField(choices=[("unpaid", "Unpaid"), ("partial", "Partially paid"), ("paid", "Paid")], default="unpaid", max_length=20)),
                ("total_paid", money(default=Decimal("0"))),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("category", models.ForeignKey(db_column="category_id", on_delete=django.db.models.deletion.PROTECT, related_name="expenses", to="backoffice.expensecategory")),
                ("vendor", models.ForeignKey(blank=True, db_column="vendor_id", null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="expenses", to="backoffice.vendor")),
            ],
            options={"db_table": "other_expenses"},
        ),
        migrations.CreateModel(
            name="OtherExpensePayment",
            fields=[
                ("payment_id", models.AutoField(primary_key=True, serialize=False)),
                ("amount", money()),
                ("payment_date", models.DateField(default=django.utils.timezone.localdate)),
                ("method", models.CharField(choices=PAYMENT_METHODS, default="cash", max_length=20)),
                ("reference", models.CharField(blank=True, max_length=255, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("expense", models.ForeignKey(db_column="expense_id", on_delete=django.db.models.deletion.CASCADE, related_name="payments", to="backoffice.otherexpense")),
            ],
            options={"db_table": "other_expense_payments"},
        ),
        migrations.CreateModel(
            name="RecipeIngredient",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("quantity", quantity()),
                ("unit", models.CharField(blank=True, max_length=50, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("ingredient", models.ForeignKey(db_column="ingredient_id", on_delete=django.db.models.deletion.PROTECT, related_name="recipe_lines", to="backoffice.ingredient")),
                ("recipe", models.ForeignKey(db_column="recipe_id", on_delete=django.db.models.deletion.CASCADE, related_name="lines", to="backoffice.recipe")),
            ],
            options={"db_table": "recipe_ingredients"},
        ),
        migrations.AddConstraint(
            model_name="recipeingredient",
            constraint=models.UniqueConstraint(fields=("recipe", "ingredient"), name="uniq_recipe_ingredient"),
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("sale_id", models.AutoField(primary_key=True, serialize=False)),
                ("sale_number", models.CharField(max_length=30, unique=True)),
                ("sale_date", models.DateField(default=django.utils.timezone.localdate)),
                ("status", models.CharField(choices=[("pending", "Pending"), ("processed", "Processed")], default="pending", max_length=20)),
                ("total_dishes", quantity(default=Decimal("0"))),
                ("total_revenue", money(default=Decimal("0"))),
                ("total_cost", money(default=Decimal("0"))),
                ("gross_profit", money(default=Decimal("0"))),
                ("profit_margin", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=7)),
                ("notes", models.TextField(blank=True, null=True)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", created_by()),
            ],
            options={"db_table": "sales"},
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                ("sale_item_id", models.AutoField(primary_key=True, serialize=False)),
                ("quantity", quantity()),
                ("selling_price", money()),
                ("cost_per_portion", money()),
                ("total_revenue", money()),
                ("total_cost", money()),
                ("profit", money()),
                ("recipe", models.ForeignKey(db_column="recipe_id", on_delete=django.db.models.deletion.PROTECT, related_name="sale_items", to="backoffice.recipe")),
                ("sale", models.ForeignKey(db_column="sale_id", on_delete=django.db.models.deletion.CASCADE, related_name="items", to="backoffice.sale")),
            ],
            options={"db_table": "sale_items"},
        ),
        migrations.CreateModel(
            name="StockMovement",
            fields=[
                ("movement_id", models.AutoField(primary_key=True, serialize=False)),
                ("movement_type", models.CharField(choices=[("in", "In"), ("out", "Out"), ("adjustment", "Adjustment"), ("opening", "Opening"), ("wastage", "Wastage")], max_length=20)),
                ("quantity", quantity()),
                ("balance_after", quantity()),
                ("unit_cost", models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ("reference_type", models.CharField(blank=True, max_length=30, null=True)),
                ("reference_id", models.IntegerField(blank=True, null=True)),
                ("reference_line", models.IntegerField(blank=True, null=True)),
                ("remarks", models.TextField(blank=True, null=True)),
                ("movement_date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", created_by()),
                ("ingredient", models.ForeignKey(db_column="ingredient_id", on_delete=django.db.models.deletion.PROTECT, related_name="movements", to="backoffice.ingredient")),
            ],
            options={"db_table": "stock_movements"},
        ),
        migrations.AddConstraint(
            model_name="stockmovement",
            constraint=models.UniqueConstraint(fields=("reference_type", "reference_id", "reference_line"), name="uniq_stock_movement_reference"),
        ),
        migrations.CreateModel(
            name="StockAdjustment",
            fields=[
                ("adjustment_id", models.AutoField(primary_key=True, serialize=False)),
                ("adjustment_number", models.CharField(max_length=30, unique=True)),
                ("adjustment_type", models.CharField(choices=[("physical_count", "Physical count"), ("wastage", "Wastage"), ("correction", "Correction")], default="physical_count", max_length=20)),
                ("adjustment_date", models.DateField(default=django.utils.timezone.localdate)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", created_by()),
            ],
            options={"db_table": "stock_adjustments"},
        ),
        migrations.CreateModel(
            name="StockAdjustmentItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("system_quantity", quantity()),
                ("actual_quantity", quantity()),
                ("variance", quantity()),
                ("remarks", models.TextField(blank=True, null=True)),
                ("adjustment", models.ForeignKey(db_column="adjustment_id", on_delete=django.db.models.deletion.CASCADE, related_name="items", to="backoffice.stockadjustment")),
                ("ingredient", models.ForeignKey(db_column="ingredient_id", on_delete=django.db.models.deletion.PROTECT, to="backoffice.ingredient")),
            ],
            options={"db_table": "stock_adjustment_items"},
        ),
    ]
