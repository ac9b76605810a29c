from decimal import Decimal

import pytest

from backoffice.models import Recipe, Sale, StockMovement
from backoffice.services import recipe_service, sale_service


@pytest.mark.django_db
def test_recipe_costing(ingredient_factory, recipe_factory):
    rice = ingredient_factory(name="Rice", last_price=60)
    ghee = ingredient_factory(name="Ghee", last_price=500)
    recipe = recipe_factory(
        name="Pulao", selling_price=120, lines=[(rice, "0.25"), (ghee, "0.02")]
    )
    costing = recipe_service.recipe_cost(recipe, portions=4)
    assert costing["current_cost"] == Decimal("25.00")
    assert costing["total_cost"] == Decimal("100.00")
    assert costing["profit_per_portion"] == Decimal("95.00")
    assert costing["profit_margin"] == Decimal("79.17")
    assert [line["ingredient_name"] for line in costing["cost_breakdown"]] == ["Rice", "Ghee"]


@pytest.mark.django_db
def test_recipe_without_price_has_zero_margin(ingredient_factory, recipe_factory):
    recipe = recipe_factory(selling_price=0, lines=[(ingredient_factory(), 1)])
    assert recipe_service.recipe_cost(recipe)["profit_margin"] == Decimal("0.00")


@pytest.mark.django_db
def test_create_and_update_recipe(ingredient_factory):
    a = ingredient_factory()
    b = ingredient_factory()
    success, msg, recipe_id = recipe_service.create_recipe(
        {"name": " Soup ", "selling_price": 80},
        [{"ingredient_id": a.pk, "quantity": 1}],
    )
    assert success, msg
    success, msg, _ = recipe_service.create_recipe(
        {"name": "Soup"}, [{"ingredient_id": a.pk, "quantity": 1}]
    )
    assert not success

    success, msg = recipe_service.update_recipe(
        recipe_id, {"selling_price": 90}, [{"ingredient_id": b.pk, "quantity": 2}]
    )
    assert success, msg
    detail = recipe_service.recipe_detail(Recipe.objects.get(pk=recipe_id))
    assert detail["name"] == "Soup"
    assert detail["selling_price"] == Decimal("90.00")
    assert [l["ingredient_id"] for l in detail["cost_breakdown"]] == [b.pk]


@pytest.mark.django_db
def test_recipe_lines_reject_duplicates(ingredient_factory):
    a = ingredient_factory()
    success, msg, _ = recipe_service.create_recipe(
        {"name": "Dup"},
        [{"ingredient_id": a.pk, "quantity": 1}, {"ingredient_id": a.pk, "quantity": 2}],
    )
    assert not success
    assert "duplicate" in msg


@pytest.mark.django_db
def test_sale_consumes_stock(ingredient_factory, recipe_factory):
    rice = ingredient_factory(name="Rice", current_stock=10, last_price=60)
    recipe = recipe_factory(selling_price=120, lines=[(rice, "0.5")])
    success, msg, result = sale_service.create_sale(
        {"sale_date": "2024-05-12"}, [{"recipe_id": recipe.pk, "quantity": 4}]
    )
    assert success, msg
    assert result["sale_number"] == "SALE-20240512-001"
    assert result["status"] == Sale.PROCESSED
    assert result["total_revenue"] == Decimal("480.00")
    assert result["total_cost"] == Decimal("120.00")
    assert result["gross_profit"] == Decimal("360.00")
    assert result["profit_margin"] == Decimal("75.00")
    rice.refresh_from_db()
    assert rice.current_stock == Decimal("8.000")

    detail = sale_service.get_sale(Sale.objects.get(pk=result["sale_id"]))
    assert detail["consumption"][0]["quantity"] == Decimal("2.000")


@pytest.mark.django_db
def test_sale_with_insufficient_stock_writes_nothing(ingredient_factory, recipe_factory):
    rice = ingredient_factory(name="Rice", current_stock=1)
    oil = ingredient_factory(name="Oil", current_stock=100)
    recipe = recipe_factory(lines=[(rice, 1), (oil, 1)])
    success, msg, result = sale_service.create_sale(
        {}, [{"recipe_id": recipe.pk, "quantity": 3}]
    )
    assert not success
    assert msg == "Insufficient stock"
    assert result["details"] == [
        {
            "ingredient_id": rice.pk,
            "ingredient_name": "Rice",
            "unit": "kg",
            "required": Decimal("3.000"),
            "available": Decimal("1.000"),
            "shortage": Decimal("2.000"),
        }
    ]
    assert not Sale.objects.exists()
    assert not StockMovement.objects.filter(reference_type="sale").exists()
    oil.refresh_from_db()
    assert oil.current_stock == Decimal("100.000")


@pytest.mark.django_db
def test_unprocessed_sale_can_be_processed_later(ingredient_factory, recipe_factory):
    rice = ingredient_factory(current_stock=5)
    recipe = recipe_factory(lines=[(rice, 1)])
    success, msg, result = sale_service.create_sale(
        {}, [{"recipe_id": recipe.pk, "quantity": 2, "selling_price": 50}], process=False
    )
    assert success, msg
    assert result["status"] == Sale.PENDING
    rice.refresh_from_db()
    assert rice.current_stock == Decimal("5.000")

    success, msg, _ = sale_service.process_sale(result["sale_id"])
    assert success, msg
    success, msg, _ = sale_service.process_sale(result["sale_id"])
    assert not success
    rice.refresh_from_db()
    assert rice.current_stock == Decimal("3.000")

    sale = Sale.objects.get(pk=result["sale_id"])
    success, msg = sale_service.delete_sale(sale)
    assert not success


@pytest.mark.django_db
def test_recipe_with_sales_cannot_be_deleted(ingredient_factory, recipe_factory):
    recipe = recipe_factory(lines=[(ingredient_factory(current_stock=5), 1)])
    sale_service.create_sale({}, [{"recipe_id": recipe.pk, "quantity": 1}])
    success, msg = recipe_service.delete_recipe(recipe)
    assert not success
