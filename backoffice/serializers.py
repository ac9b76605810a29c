from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import (
    PAYMENT_METHODS,
    ExpenseCategory,
    GoodsReceivedNote,
    Ingredient,
    OtherExpense,
    Payment,
    PurchaseOrder,
    Sale,
    StockMovement,
    Vendor,
)

User = get_user_model()


class IngredientSerializer(serializers.ModelSerializer):
    """Expose ingredient master data and stock levels."""

    current_stock = serializers.DecimalField(
        max_digits=14, decimal_places=3, required=False, min_value=0
    )
    min_stock = serializers.DecimalField(
        max_digits=14, decimal_places=3, required=False, min_value=0
    )
    last_price = serializers.DecimalField(
        max_digits=14, decimal_places=2, required=False, min_value=0
    )
    stock_value = serializers.DecimalField(
        max_digits=16, decimal_places=2, read_only=True
    )
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Ingredient
        fields = [
            "ingredient_id",
            "name",
            "unit",
            "category",
            "current_stock",
            "min_stock",
            "last_price",
            "stock_value",
            "is_low_stock",
            "is_active",
            "created_at",
            "updated_at",
        ]

    def validate_name(self, value):
        qs = Ingredient.objects.filter(name__iexact=value.strip())
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("An ingredient with this name already exists.")
        return value.strip()


class VendorSerializer(serializers.ModelSerializer):
    """Serialize vendor contact details."""

    class Meta:
        model = Vendor
        fields = [
            "vendor_id",
            "name",
            "contact",
            "email",
            "address",
            "notes",
            "is_active",
            "created_at",
            "updated_at",
        ]


class StockMovementSerializer(serializers.ModelSerializer):
    """Show ledger entries for a specific ingredient."""

    ingredient_name = serializers.CharField(source="ingredient.name", read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            "movement_id",
            "ingredient",
            "ingredient_name",
            "movement_type",
            "quantity",
            "balance_after",
            "unit_cost",
            "reference_type",
            "reference_id",
            "remarks",
            "movement_date",
            "created_at",
        ]


class PurchaseOrderListSerializer(serializers.ModelSerializer):
    vendor_name = serializers.CharField(source="vendor.name", read_only=True)
    intend_number = serializers.CharField(
        source="intend.intend_number", read_only=True, default=None
    )
    outstanding_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )

    class Meta:
        model = PurchaseOrder
        fields = [
            "po_id",
            "po_number",
            "vendor",
            "vendor_name",
            "intend",
            "intend_number",
            "order_date",
            "expected_delivery_date",
            "status",
            "total_amount",
            "total_items_count",
            "received_items_count",
            "received_percentage",
            "actual_receivable_amount",
            "total_paid",
            "outstanding_amount",
            "payment_status",
            "created_at",
        ]


class GoodsReceivedNoteSerializer(serializers.ModelSerializer):
    """Serialize GRN headers for listings."""

    po_number = serializers.CharField(source="purchase_order.po_number", read_only=True)
    vendor_name = serializers.CharField(
        source="purchase_order.vendor.name", read_only=True
    )

    class Meta:
        model = GoodsReceivedNote
        fields = [
            "grn_id",
            "grn_number",
            "purchase_order",
            "po_number",
            "vendor_name",
            "received_date",
            "received_by",
            "total_amount",
            "notes",
            "created_at",
        ]


class PaymentSerializer(serializers.ModelSerializer):
    po_number = serializers.CharField(source="purchase_order.po_number", read_only=True)
    vendor_name = serializers.CharField(source="vendor.name", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "payment_id",
            "payment_number",
            "purchase_order",
            "po_number",
            "vendor",
            "vendor_name",
            "payment_date",
            "amount",
            "payment_method",
            "transaction_reference",
            "transaction_date",
            "bank_name",
            "remarks",
            "status",
            "created_at",
        ]


class PaymentCreateSerializer(serializers.Serializer):
    """Parse a payment request; amount limits are checked by the service."""

    po_id = serializers.IntegerField()
    payment_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHODS)
    transaction_reference = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    transaction_date = serializers.DateField(required=False, allow_null=True)
    bank_name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    remarks = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class SaleSerializer(serializers.ModelSerializer):
    class Meta:
        model = Sale
        fields = [
            "sale_id",
            "sale_number",
            "sale_date",
            "status",
            "total_dishes",
            "total_revenue",
            "total_cost",
            "gross_profit",
            "profit_margin",
            "notes",
            "processed_at",
            "created_at",
        ]


class ExpenseCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = ExpenseCategory
        fields = ["category_id", "name", "code", "is_operating"]


class OtherExpenseSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source="category.name", read_only=True)
    total_amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, read_only=True
    )
    outstanding = serializers.DecimalField(
        source="outstanding_amount", max_digits=14, decimal_places=2, read_only=True
    )

    class Meta:
        model = OtherExpense
        fields = [
            "expense_id",
            "expense_number",
            "expense_date",
            "category",
            "category_name",
            "vendor",
            "amount",
            "tax_amount",
            "total_amount",
            "total_paid",
            "outstanding",
            "payment_status",
            "notes",
            "attachment_url",
            "created_at",
        ]


class UserSerializer(serializers.ModelSerializer):
    """Back-office users; passwords are write-only."""

    password = serializers.CharField(
        write_only=True, required=False, min_length=4, trim_whitespace=False
    )

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "password",
            "first_name",
            "last_name",
            "email",
            "role",
            "is_active",
            "date_joined",
            "last_login",
        ]
        read_only_fields = ["date_joined", "last_login"]
        # Duplicate usernames are reported as a 409 by the view.
        extra_kwargs = {"username": {"validators": []}}

    def validate(self, attrs):
        if self.instance is None and not attrs.get("password"):
            raise serializers.ValidationError({"password": "Password is required."})
        return attrs

    def create(self, validated_data):
        password = validated_data.pop("password")
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user

    def update(self, instance, validated_data):
        password = validated_data.pop("password", None)
        for key, value in validated_data.items():
            setattr(instance, key, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance
