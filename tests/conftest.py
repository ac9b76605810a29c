import os
import sys

import django
import pytest

# Ensure project root is on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backoffice_app.settings")
django.setup()

from backoffice.models import Recipe, RecipeIngredient, Vendor  # noqa: E402
from backoffice.services import ingredient_service, purchase_order_service  # noqa: E402


@pytest.fixture
def ingredient_factory(db):
    """Create ingredients through the service so opening stock is on the ledger."""

    counter = {"n": 0}

    def create_ingredient(**kwargs):
        counter["n"] += 1
        defaults = {
            "name": f"Ingredient {counter['n']}",
            "unit": "kg",
            "last_price": 10,
            "min_stock": 0,
        }
        defaults.update(kwargs)
        return ingredient_service.create_ingredient(defaults)

    return create_ingredient


@pytest.fixture
def vendor_factory(db):
    counter = {"n": 0}

    def create_vendor(**kwargs):
        counter["n"] += 1
        defaults = {"name": f"Vendor {counter['n']}", "contact": "555-0100"}
        defaults.update(kwargs)
        return Vendor.objects.create(**defaults)

    return create_vendor


@pytest.fixture
def recipe_factory(db):
    def create_recipe(name="Dish", selling_price=100, lines=()):
        recipe = Recipe.objects.create(name=name, selling_price=selling_price)
        for ingredient, quantity in lines:
            RecipeIngredient.objects.create(
                recipe=recipe,
                ingredient=ingredient,
                quantity=quantity,
                unit=ingredient.unit,
            )
        return recipe

    return create_recipe


@pytest.fixture
def po_factory(db, vendor_factory):
    """Create a PO from ``(ingredient, quantity, unit_price)`` lines."""

    def create_po(lines, vendor=None, user=None):
        vendor = vendor or vendor_factory()
        success, msg, po = purchase_order_service.create_po(
            {"vendor_id": vendor.pk},
            [
                {"ingredient_id": ing.pk, "quantity": qty, "unit_price": price}
                for ing, qty, price in lines
            ],
            user=user,
        )
        assert success, msg
        return po

    return create_po


@pytest.fixture
def admin_user(db):
    from django.contrib.auth import get_user_model

    User = get_user_model()
    user, _ = User.objects.get_or_create(username="admin")
    user.role = User.ROLE_ADMIN
    user.set_password("admin")
    user.save()
    return user


@pytest.fixture
def staff_user(db):
    from django.contrib.auth import get_user_model

    User = get_user_model()
    return User.objects.create_user("staff", password="staff", role=User.ROLE_STAFF)


@pytest.fixture
def api_client(admin_user):
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client
