import pytest

from backoffice.models import Intend
from backoffice.services import intend_service, purchase_order_service


def _make_intend(ingredients, vendor=None):
    success, msg, intend = intend_service.create_intend(
        {"notes": "weekly", "vendor_id": vendor.pk if vendor else None},
        [{"ingredient_id": ing.pk, "quantity": 5} for ing in ingredients],
    )
    assert success, msg
    return intend


@pytest.mark.django_db
def test_create_intend_round_trip(ingredient_factory, vendor_factory):
    tomato = ingredient_factory(name="Tomato")
    onion = ingredient_factory(name="Onion")
    intend = _make_intend([tomato, onion], vendor=vendor_factory())
    assert intend.intend_number.startswith("INT-")
    assert intend.status == Intend.PENDING

    detail = intend_service.get_intend(intend)
    assert [i["ingredient_name"] for i in detail["items"]] == ["Tomato", "Onion"]
    assert all(not i["in_po"] for i in detail["items"])


@pytest.mark.django_db
def test_create_intend_rejects_bad_items(ingredient_factory):
    ing = ingredient_factory()
    success, msg, _ = intend_service.create_intend({}, [])
    assert not success
    success, msg, _ = intend_service.create_intend(
        {}, [{"ingredient_id": ing.pk, "quantity": 0}]
    )
    assert not success
    assert "quantity" in msg
    success, msg, _ = intend_service.create_intend(
        {},
        [
            {"ingredient_id": ing.pk, "quantity": 1},
            {"ingredient_id": ing.pk, "quantity": 2},
        ],
    )
    assert not success
    assert "Duplicate" in msg


@pytest.mark.django_db
def test_status_follows_items_on_purchase_orders(ingredient_factory, vendor_factory):
    a = ingredient_factory()
    b = ingredient_factory()
    intend = _make_intend([a, b])
    items = list(intend.items.order_by("intend_item_id"))
    vendor = vendor_factory()

    success, msg, result = purchase_order_service.generate_from_intend(
        {
            "intend_id": intend.pk,
            "vendor_id": vendor.pk,
            "items": [
                {"intend_item_id": items[0].pk, "quantity": 5, "unit_price": 2}
            ],
        }
    )
    assert success, msg
    assert result["intend_status"] == Intend.PARTIALLY_FULFILLED

    success, msg, result = purchase_order_service.generate_from_intend(
        {
            "intend_id": intend.pk,
            "vendor_id": vendor.pk,
            "items": [
                {"intend_item_id": items[1].pk, "quantity": 5, "unit_price": 2}
            ],
        }
    )
    assert success, msg
    assert result["intend_status"] == Intend.FULFILLED
    rows = intend_service.list_intends(status=Intend.FULFILLED)
    assert [r["intend_id"] for r in rows] == [intend.pk]


@pytest.mark.django_db
def test_item_on_purchase_order_cannot_be_removed(ingredient_factory, vendor_factory):
    ing = ingredient_factory()
    intend = _make_intend([ing])
    item = intend.items.get()
    success, msg, result = purchase_order_service.generate_from_intend(
        {
            "intend_id": intend.pk,
            "vendor_id": vendor_factory().pk,
            "items": [{"intend_item_id": item.pk, "quantity": 5, "unit_price": 1}],
        }
    )
    assert success, msg
    item.refresh_from_db()
    success, msg = intend_service.remove_item(item)
    assert not success
    assert result["po_number"] in msg
    success, msg = intend_service.delete_intend(intend)
    assert not success


@pytest.mark.django_db
def test_add_update_and_remove_items(ingredient_factory):
    a = ingredient_factory()
    b = ingredient_factory()
    intend = _make_intend([a])

    success, msg, item = intend_service.add_item(intend, {"ingredient_id": b.pk, "quantity": 3})
    assert success, msg
    success, msg, _ = intend_service.add_item(intend, {"ingredient_id": b.pk, "quantity": 3})
    assert not success

    success, msg = intend_service.update_item_quantity(item, "7.5")
    assert success, msg
    item.refresh_from_db()
    assert str(item.quantity_requested) == "7.500"

    success, msg = intend_service.remove_item(item)
    assert success, msg
    assert intend.items.count() == 1


@pytest.mark.django_db
def test_update_intend_requires_fields(ingredient_factory):
    intend = _make_intend([ingredient_factory()])
    success, msg = intend_service.update_intend(intend, {})
    assert not success
    assert msg == "No fields to update"
    success, msg = intend_service.update_intend(intend, {"status": "approved"})
    assert success, msg
    intend.refresh_from_db()
    assert intend.status == Intend.APPROVED
