from decimal import Decimal, InvalidOperation

from django.db import models


class CoerceDecimalField(models.DecimalField):
    """DecimalField that coerces empty or invalid values to Decimal('0')."""

    def to_python(self, value):
        if value in self.empty_values:
            return Decimal("0")
        try:
            return Decimal(str(value))
        except (TypeError, ValueError, InvalidOperation):
            return Decimal("0")

    def from_db_value(self, value, expression, connection):
        return self.to_python(value)


class MoneyField(CoerceDecimalField):
    """Monetary amount stored with two decimal places."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("max_digits", 14)
        kwargs.setdefault("decimal_places", 2)
        super().__init__(*args, **kwargs)


class QuantityField(CoerceDecimalField):
    """Stock quantity stored with three decimal places."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("max_digits", 14)
        kwargs.setdefault("decimal_places", 3)
        super().__init__(*args, **kwargs)
