from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from backoffice.models import ExpenseCategory, Intend
from backoffice.services import intend_service, payment_service


@pytest.mark.django_db
def test_login_returns_token_and_session(admin_user):
    client = APIClient()
    resp = client.post("/api/auth/login/", {"username": "admin", "password": "admin"}, format="json")
    assert resp.status_code == 200
    token = resp.json()["token"]
    assert resp.json()["user"]["role"] == "admin"

    client.credentials(HTTP_AUTHORIZATION=f"Token {token}")
    resp = client.get("/api/auth/session/")
    assert resp.json()["user"]["username"] == "admin"
    assert client.post("/api/auth/logout/").status_code == 200
    assert client.get("/api/auth/session/").status_code == 401


@pytest.mark.django_db
def test_login_rejects_bad_password(admin_user):
    resp = APIClient().post(
        "/api/auth/login/", {"username": "admin", "password": "nope"}, format="json"
    )
    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid credentials"


@pytest.mark.django_db
def test_api_requires_authentication():
    resp = APIClient().get("/api/ingredients/")
    assert resp.status_code in (401, 403)
    assert "status_code" in resp.json()


@pytest.mark.django_db
def test_missing_object_returns_404_error(api_client):
    resp = api_client.get("/api/purchase-orders/999/")
    assert resp.status_code == 404
    assert resp.json() == {"error": "PurchaseOrder not found", "status_code": 404}


@pytest.mark.django_db
def test_ingredient_crud_and_numbers_are_json_numbers(api_client):
    resp = api_client.post(
        "/api/ingredients/",
        {"name": "Butter", "unit": "kg", "current_stock": 3, "last_price": "450.50"},
        format="json",
    )
    assert resp.status_code == 201, resp.content
    body = resp.json()
    assert body["current_stock"] == 3.0
    assert body["stock_value"] == 1351.5

    resp = api_client.post(
        "/api/ingredients/", {"name": "butter", "unit": "kg"}, format="json"
    )
    assert resp.status_code == 400
    assert "already exists" in resp.json()["error"]

    resp = api_client.get(f"/api/stock/movements/{body['ingredient_id']}/")
    assert resp.status_code == 200
    assert resp.json()[0]["movement_type"] == "opening"

    resp = api_client.delete(f"/api/ingredients/{body['ingredient_id']}/")
    assert resp.status_code == 204


@pytest.mark.django_db
def test_users_duplicate_username_conflict(api_client):
    payload = {"username": "cook", "password": "secret", "role": "staff"}
    assert api_client.post("/api/users/", payload, format="json").status_code == 201
    resp = api_client.post("/api/users/", payload, format="json")
    assert resp.status_code == 409
    assert resp.json()["error"] == "Username already exists"

    short = {"username": "cook2", "password": "abc", "role": "staff"}
    assert api_client.post("/api/users/", short, format="json").status_code == 400


@pytest.mark.django_db
def test_users_endpoint_is_admin_only(staff_user):
    client = APIClient()
    client.force_authenticate(user=staff_user)
    assert client.get("/api/users/").status_code == 403


@pytest.mark.django_db
def test_admin_tools_check_role_on_server(staff_user, ingredient_factory):
    ingredient_factory()
    client = APIClient()
    client.force_authenticate(user=staff_user)
    resp = client.post("/api/admin/seed-transaction-data/", {"isAdmin": True}, format="json")
    assert resp.status_code == 403
    resp = client.post(
        "/api/admin/delete-all-transactions/",
        {"confirm": "DELETE_ALL_TRANSACTIONS"},
        format="json",
    )
    assert resp.status_code == 403


@pytest.mark.django_db
def test_admin_delete_all_requires_confirmation(api_client):
    resp = api_client.post("/api/admin/delete-all-transactions/", {}, format="json")
    assert resp.status_code == 400
    resp = api_client.post(
        "/api/admin/delete-all-transactions/",
        {"confirm": "DELETE_ALL_TRANSACTIONS"},
        format="json",
    )
    assert resp.status_code == 200
    assert resp.json()["success"] is True


@pytest.mark.django_db
def test_purchasing_flow_over_http(api_client, ingredient_factory, vendor_factory):
    ing = ingredient_factory(name="Milk", current_stock=0)
    vendor = vendor_factory()

    resp = api_client.post(
        "/api/intends/",
        {"notes": "dairy", "items": [{"ingredient_id": ing.pk, "quantity": 20}]},
        format="json",
    )
    assert resp.status_code == 201, resp.content
    intend_id = resp.json()["intend_id"]
    item_id = api_client.get(f"/api/intends/{intend_id}/items/").json()[0]["intend_item_id"]

    resp = api_client.post(
        "/api/purchase-orders/generate-from-intend/",
        {
            "intend_id": intend_id,
            "vendor_id": vendor.pk,
            "items": [{"intend_item_id": item_id, "quantity": 20, "unit_price": 50}],
        },
        format="json",
    )
    assert resp.status_code == 201, resp.content
    po_id = resp.json()["po_id"]
    assert resp.json()["intend_status"] == Intend.FULFILLED

    resp = api_client.delete(f"/api/intends/{intend_id}/items/?item_id={item_id}")
    assert resp.status_code == 403

    po = api_client.get(f"/api/purchase-orders/{po_id}/").json()
    resp = api_client.post(
        "/api/grns/",
        {
            "po_id": po_id,
            "items": [
                {"po_item_id": po["items"][0]["po_item_id"], "quantity_received": 20}
            ],
        },
        format="json",
    )
    assert resp.status_code == 201, resp.content
    assert resp.json()["po_status"] == "received"

    resp = api_client.post(
        "/api/payments/",
        {"po_id": po_id, "payment_date": "2024-05-11", "amount": 1001, "payment_method": "cash"},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.json()["outstandingAmount"] == 1000.0

    resp = api_client.post(
        "/api/payments/",
        {"po_id": po_id, "payment_date": "2024-05-11", "amount": 1000, "payment_method": "cash"},
        format="json",
    )
    assert resp.status_code == 201
    assert resp.json()["payment_status"] == "paid"
    assert api_client.get("/api/payments/outstanding/").json() == []


@pytest.mark.django_db
def test_intend_pdf_download(api_client, ingredient_factory):
    ing = ingredient_factory(name="Sugar")
    resp = api_client.post(
        "/api/intends/",
        {"items": [{"ingredient_id": ing.pk, "quantity": 2}]},
        format="json",
    )
    resp = api_client.get(f"/api/intends/{resp.json()['intend_id']}/pdf/")
    assert resp.status_code == 200
    assert resp["Content-Type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


@pytest.mark.django_db
def test_sale_with_shortage_over_http(api_client, ingredient_factory, recipe_factory):
    recipe = recipe_factory(lines=[(ingredient_factory(name="Egg", current_stock=1), 2)])
    resp = api_client.post(
        "/api/sales/", {"items": [{"recipe_id": recipe.pk, "quantity": 1}]}, format="json"
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Insufficient stock"
    assert body["details"][0]["shortage"] == 1.0


@pytest.mark.django_db
def test_recipe_detail_with_portions(api_client, ingredient_factory, recipe_factory):
    recipe = recipe_factory(
        selling_price=100, lines=[(ingredient_factory(last_price=20), "0.5")]
    )
    resp = api_client.get(f"/api/recipes/{recipe.pk}/?portions=3")
    assert resp.status_code == 200
    body = resp.json()
    assert body["current_cost"] == 10.0
    assert body["total_cost"] == 30.0
    assert body["profit_margin"] == 90.0


@pytest.mark.django_db
def test_expense_endpoints(api_client):
    category = ExpenseCategory.objects.create(name="Gas", code="GAS")
    resp = api_client.post(
        "/api/expenses/",
        {"category_id": category.pk, "amount": 1000, "tax_amount": 180},
        format="json",
    )
    assert resp.status_code == 201, resp.content
    expense_id = resp.json()["expense_id"]
    resp = api_client.post(
        f"/api/expenses/{expense_id}/payments/", {"amount": 1180}, format="json"
    )
    assert resp.status_code == 201
    assert resp.json()["payment_status"] == "paid"
    assert resp.json()["outstanding"] == 0.0
    assert api_client.get("/api/expenses/opex-summary/").status_code == 200


@pytest.mark.django_db
def test_report_endpoints(api_client):
    for url in (
        "/api/dashboard/",
        "/api/accounts/dashboard/",
        "/api/staff/dashboard/",
        "/api/mtd-cogs/",
        "/api/charts/sales-trends/",
        "/api/cash-ledger/",
    ):
        assert api_client.get(url).status_code == 200, url
    resp = api_client.get("/api/cash-ledger/?date_from=bad")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_healthz(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.django_db
def test_payment_detail_includes_vendor_and_po(api_client, ingredient_factory, po_factory):
    po = po_factory([(ingredient_factory(), 10, 10)])
    success, msg, result = payment_service.create_payment(
        {"po_id": po.pk, "payment_date": "2024-05-11", "amount": 40, "payment_method": "upi"}
    )
    assert success, msg

    resp = api_client.get(f"/api/payments/{result['payment_id']}/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["payment_number"] == result["payment_number"]
    assert body["amount"] == 40.0
    assert body["vendor"]["name"] == po.vendor.name
    assert body["purchase_order"]["po_number"] == po.po_number
    assert body["purchase_order"]["payment_status"] == "partial"
    assert body["purchase_order"]["outstandingAmount"] == 60.0

    assert api_client.get("/api/payments/999/").status_code == 404


@pytest.mark.django_db
def test_staff_dashboard(api_client, ingredient_factory):
    low = ingredient_factory(name="Saffron", current_stock=1, min_stock=5)
    ingredient_factory(name="Salt", current_stock=50, min_stock=5)
    success, msg, intend = intend_service.create_intend(
        {}, [{"ingredient_id": low.pk, "quantity": 10}]
    )
    assert success, msg

    resp = api_client.get("/api/staff/dashboard/")
    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["totalIngredients"] == 2
    assert body["summary"]["lowStockCount"] == 1
    assert body["summary"]["pendingIntends"] == 1
    assert [i["name"] for i in body["lowStockItems"]] == ["Saffron"]
    assert body["pendingIntends"][0]["intend_number"] == intend.intend_number
    assert {m["ingredient_name"] for m in body["recentMovements"]} == {"Saffron", "Salt"}


@pytest.mark.django_db
def test_non_numeric_ids_are_client_errors(api_client, ingredient_factory):
    assert api_client.get("/api/intends/abc/").status_code == 404
    assert api_client.get("/api/purchase-orders/abc/").status_code == 404

    resp = api_client.get("/api/grns/?po_id=abc")
    assert resp.status_code == 400
    assert resp.json()["error"] == "po_id: po_id must be a number"

    success, msg, intend = intend_service.create_intend(
        {}, [{"ingredient_id": ingredient_factory().pk, "quantity": 1}]
    )
    assert success, msg
    resp = api_client.delete(f"/api/intends/{intend.pk}/items/?item_id=abc")
    assert resp.status_code == 400
