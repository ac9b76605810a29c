from decimal import Decimal

import pytest

from backoffice.models import Ingredient, Payment, PurchaseOrder
from backoffice.services import intend_service, payment_service, purchase_order_service


@pytest.mark.django_db
def test_create_po_totals_and_last_price(ingredient_factory, vendor_factory):
    rice = ingredient_factory(name="Rice", last_price=1)
    dal = ingredient_factory(name="Dal", last_price=1)
    success, msg, po = purchase_order_service.create_po(
        {"vendor_id": vendor_factory().pk},
        [
            {"ingredient_id": rice.pk, "quantity": 10, "unit_price": "45.50"},
            {"ingredient_id": dal.pk, "quantity": "2.5", "unit_price": 100},
        ],
    )
    assert success, msg
    assert po.po_number.startswith("PO-")
    assert po.status == PurchaseOrder.PENDING
    assert po.total_amount == Decimal("705.00")
    assert po.total_items_count == 2
    assert po.payment_status == PurchaseOrder.UNPAID
    assert Ingredient.objects.get(pk=rice.pk).last_price == Decimal("45.50")


@pytest.mark.django_db
def test_create_po_requires_vendor_and_items(ingredient_factory, vendor_factory):
    ing = ingredient_factory()
    success, msg, _ = purchase_order_service.create_po(
        {}, [{"ingredient_id": ing.pk, "quantity": 1, "unit_price": 1}]
    )
    assert msg == "Vendor is required to create a purchase order"
    success, msg, _ = purchase_order_service.create_po({"vendor_id": vendor_factory().pk}, [])
    assert not success
    assert msg == "Please select at least one item to create a purchase order"


@pytest.mark.django_db
def test_generate_from_intend_rejects_items_already_ordered(
    ingredient_factory, vendor_factory
):
    ing = ingredient_factory()
    success, msg, intend = intend_service.create_intend(
        {}, [{"ingredient_id": ing.pk, "quantity": 4}]
    )
    assert success, msg
    item = intend.items.get()
    data = {
        "intend_id": intend.pk,
        "vendor_id": vendor_factory().pk,
        "items": [{"intend_item_id": item.pk, "quantity": 4, "unit_price": 3}],
    }
    success, msg, result = purchase_order_service.generate_from_intend(data)
    assert success, msg
    assert result["total_amount"] == Decimal("12.00")

    success, msg, _ = purchase_order_service.generate_from_intend(data)
    assert not success
    assert msg == "Some selected items are already part of a purchase order"
    assert PurchaseOrder.objects.count() == 1


@pytest.mark.django_db
def test_generate_from_intend_needs_vendor(ingredient_factory):
    ing = ingredient_factory()
    _, _, intend = intend_service.create_intend({}, [{"ingredient_id": ing.pk, "quantity": 1}])
    success, msg, _ = purchase_order_service.generate_from_intend(
        {"intend_id": intend.pk, "items": []}
    )
    assert not success
    assert msg == "Vendor is required to create a purchase order"


@pytest.mark.django_db
def test_manual_status_transitions(ingredient_factory, po_factory):
    po = po_factory([(ingredient_factory(), 1, 1)])
    success, msg = purchase_order_service.update_po(po, {"status": "received"})
    assert not success
    success, msg = purchase_order_service.update_po(po, {"status": "confirmed"})
    assert success, msg
    po.refresh_from_db()
    assert po.status == PurchaseOrder.CONFIRMED
    success, msg = purchase_order_service.update_po(po, {"status": "pending"})
    assert not success


@pytest.mark.django_db
def test_delete_po_only_when_pending_and_unpaid(ingredient_factory, po_factory):
    po = po_factory([(ingredient_factory(), 10, 10)])
    Payment.objects.create(
        payment_number="PAY-X",
        purchase_order=po,
        vendor=po.vendor,
        payment_date="2024-01-01",
        amount=10,
        payment_method="cash",
    )
    success, msg = purchase_order_service.delete_po(po)
    assert not success

    other = po_factory([(ingredient_factory(), 1, 1)])
    purchase_order_service.update_po(other, {"status": "confirmed"})
    success, msg = purchase_order_service.delete_po(other)
    assert not success
    assert msg == "Only pending purchase orders can be deleted"


@pytest.mark.django_db
def test_delete_po_frees_intend_items(ingredient_factory, vendor_factory):
    ing = ingredient_factory()
    _, _, intend = intend_service.create_intend({}, [{"ingredient_id": ing.pk, "quantity": 1}])
    item = intend.items.get()
    success, msg, result = purchase_order_service.generate_from_intend(
        {
            "intend_id": intend.pk,
            "vendor_id": vendor_factory().pk,
            "items": [{"intend_item_id": item.pk, "quantity": 1, "unit_price": 1}],
        }
    )
    assert success, msg
    po = PurchaseOrder.objects.get(pk=result["po_id"])
    success, msg = purchase_order_service.delete_po(po)
    assert success, msg
    intend.refresh_from_db()
    assert intend.status == "pending"
    success, msg = intend_service.remove_item(intend.items.get())
    assert success, msg


@pytest.mark.django_db
def test_list_outstanding_reports_unpaid_orders(ingredient_factory, po_factory):
    po = po_factory([(ingredient_factory(), 2, 50)])
    rows = payment_service.list_outstanding()
    assert rows[0]["po_id"] == po.pk
    assert rows[0]["outstandingAmount"] == Decimal("100.00")
