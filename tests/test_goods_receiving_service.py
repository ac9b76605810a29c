from decimal import Decimal

import pytest

from backoffice.models import GoodsReceivedNote, GRNItem, Ingredient, PurchaseOrder, StockMovement
from backoffice.services import goods_receiving_service


def _receive(po, quantity, price=None, **extra):
    item = po.items.get()
    line = {"po_item_id": item.pk, "quantity_received": quantity}
    if price is not None:
        line["unit_price_actual"] = price
    return goods_receiving_service.create_grn(
        {"po_id": po.pk, "received_date": "2024-05-10", **extra}, [line]
    )


def test_reconcile_line_reports_variances():
    line = goods_receiving_service.reconcile_line(100, 10, 0, 80, 12)
    assert line.total_received == Decimal("80.000")
    assert line.quantity_variance == Decimal("-20.000")
    assert line.price_variance == Decimal("2.00")
    assert line.variance_percent == Decimal("20.00")
    assert line.line_total == Decimal("960.00")


@pytest.mark.django_db
def test_partial_receipt_with_price_change(ingredient_factory, po_factory):
    ing = ingredient_factory(name="Paneer", current_stock=0)
    po = po_factory([(ing, 100, 10)])

    success, msg, result = _receive(po, 80, 12)
    assert success, msg
    assert result["grn_number"].startswith("GRN-20240510-")
    assert result["po_status"] == PurchaseOrder.PARTIALLY_RECEIVED
    assert result["total_amount"] == Decimal("960.00")

    grn_item = GRNItem.objects.get(grn_id=result["grn_id"])
    assert grn_item.quantity_variance == Decimal("-20.000")
    assert grn_item.price_variance == Decimal("2.00")
    assert grn_item.line_total == Decimal("960.00")

    ing.refresh_from_db()
    assert ing.current_stock == Decimal("80.000")
    assert ing.last_price == Decimal("12.00")
    po.refresh_from_db()
    assert po.received_percentage == Decimal("0.00")
    assert po.actual_receivable_amount is None
    movement = StockMovement.objects.get(reference_type="grn", reference_id=result["grn_id"])
    assert movement.movement_type == StockMovement.IN
    assert movement.unit_cost == Decimal("12.00")


@pytest.mark.django_db
def test_full_receipt_sets_receivable_to_grn_value(ingredient_factory, po_factory):
    ing = ingredient_factory()
    po = po_factory([(ing, 100, 10)])
    _receive(po, 80, 12)
    success, msg, result = _receive(po, 20)
    assert success, msg
    assert result["po_status"] == PurchaseOrder.RECEIVED
    assert result["received_percentage"] == Decimal("100.00")
    po.refresh_from_db()
    assert po.actual_receivable_amount == Decimal("1160.00")
    assert po.outstanding_amount == Decimal("1160.00")

    success, msg, _ = _receive(po, 1)
    assert not success
    assert msg == "Purchase order is already fully received"


@pytest.mark.django_db
def test_replayed_grn_posts_nothing_twice(ingredient_factory, po_factory):
    ing = ingredient_factory(current_stock=0)
    po = po_factory([(ing, 10, 5)])
    first = _receive(po, 4, client_reference="tablet-42")
    second = _receive(po, 4, client_reference="tablet-42")
    assert first[0] and second[0]
    assert second[2]["replayed"] is True
    assert second[2]["grn_id"] == first[2]["grn_id"]
    assert GoodsReceivedNote.objects.count() == 1
    ing.refresh_from_db()
    assert ing.current_stock == Decimal("4.000")


@pytest.mark.django_db
def test_zero_quantity_line_moves_no_stock(ingredient_factory, po_factory):
    ing = ingredient_factory(current_stock=0)
    po = po_factory([(ing, 10, 5)])
    success, msg, result = _receive(po, 0)
    assert success, msg
    assert not StockMovement.objects.filter(reference_type="grn").exists()
    po.refresh_from_db()
    assert po.status == PurchaseOrder.PENDING
    assert Ingredient.objects.get(pk=ing.pk).current_stock == 0


@pytest.mark.django_db
def test_grn_rejects_foreign_items(ingredient_factory, po_factory):
    po = po_factory([(ingredient_factory(), 10, 5)])
    other = po_factory([(ingredient_factory(), 10, 5)])
    success, msg, _ = goods_receiving_service.create_grn(
        {"po_id": po.pk},
        [{"po_item_id": other.items.get().pk, "quantity_received": 1}],
    )
    assert not success
    assert "does not belong" in msg
    assert not GoodsReceivedNote.objects.exists()


@pytest.mark.django_db
def test_grn_rejects_negative_quantity(ingredient_factory, po_factory):
    po = po_factory([(ingredient_factory(), 10, 5)])
    success, msg, _ = _receive(po, -1)
    assert not success
    assert "quantity_received" in msg


@pytest.mark.django_db
def test_string_po_item_ids_are_accepted(ingredient_factory, po_factory):
    po = po_factory([(ingredient_factory(current_stock=0), 10, 10)])
    item = po.items.get()
    success, msg, result = goods_receiving_service.create_grn(
        {"po_id": str(po.pk)},
        [{"po_item_id": str(item.pk), "quantity_received": "10"}],
    )
    assert success, msg
    assert result["po_status"] == PurchaseOrder.RECEIVED


@pytest.mark.django_db
def test_non_numeric_po_item_id_is_rejected(ingredient_factory, po_factory):
    po = po_factory([(ingredient_factory(), 10, 10)])
    success, msg, _ = goods_receiving_service.create_grn(
        {"po_id": po.pk}, [{"po_item_id": "abc", "quantity_received": 1}]
    )
    assert not success
    assert msg == "Item 1: po_item_id must be a number"
    assert not GoodsReceivedNote.objects.exists()
