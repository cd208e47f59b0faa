# backend/tests/routes/test_booking_routes.py
"""
Route tests for /api/v1/bookings.

Uses the shared ``client`` fixture: per-test SQLite session, invoice
directory under tmp_path and the fake WhatsApp client.
"""

from decimal import Decimal

import pytest

from app.models.booking import Booking
from app.models.shipment import Shipment

BASE = "/api/v1/bookings"


@pytest.fixture
def created(client, catalog, walk_in_payload):
    response = client.post(BASE, json=walk_in_payload)
    assert response.status_code == 201
    return response.json()


class TestCreateBooking:
    def test_created(self, client, catalog, walk_in_payload, invoice_dir, whatsapp):
        response = client.post(BASE, json=walk_in_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Booking created successfully"
        assert body["order_id"] == "ORD-1"
        assert body["customer_type"] == "User"
        assert body["total"] == 230.0
        assert body["pdf_path"] == str(invoice_dir / "anitha_r-ORD-1.pdf")
        assert body["notification"] == {"status": "sent", "error": None}
        assert body["id"]
        assert (invoice_dir / "anitha_r-ORD-1.pdf").is_file()
        assert len(whatsapp.messages) == 1

    def test_duplicate_order_id(self, client, created, walk_in_payload, db):
        response = client.post(BASE, json=walk_in_payload)

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "DUPLICATE_ORDER_ID"
        assert body["status"] == 409
        assert body["instance"] == BASE
        assert db.query(Booking).count() == 1

    def test_missing_walk_in_field(self, client, catalog, walk_in_payload):
        payload = {k: v for k, v in walk_in_payload.items() if k != "district"}

        response = client.post(BASE, json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "MISSING_FIELD"
        assert body["errors"] == {"field": "district"}
        assert body["detail"] == "district is required for bookings without customer_id"

    def test_empty_products(self, client, catalog, walk_in_payload):
        response = client.post(BASE, json={**walk_in_payload, "products": []})

        assert response.status_code == 400
        assert response.json()["code"] == "MISSING_PRODUCTS"

    def test_unavailable_product(self, client, catalog, walk_in_payload):
        products = [{"id": 3, "product_type": "sparklers", "quantity": 1}]

        response = client.post(BASE, json={**walk_in_payload, "products": products})

        assert response.status_code == 404
        assert response.json()["detail"] == (
            "Product 3 of type sparklers not found or not available"
        )

    def test_unknown_customer(self, client, catalog, walk_in_payload):
        payload = {
            "order_id": "ORD-5",
            "customer_id": "01HNOSUCHCUSTOMER000000000",
            "products": walk_in_payload["products"],
            "total": 230,
        }

        response = client.post(BASE, json=payload)

        assert response.status_code == 404
        assert response.json()["code"] == "CUSTOMER_NOT_FOUND"

    def test_insufficient_stock(self, client, catalog, walk_in_payload):
        products = [{"id": 1, "product_type": "ground_chakras", "quantity": 9}]

        response = client.post(BASE, json={**walk_in_payload, "products": products})

        assert response.status_code == 409
        assert response.json()["code"] == "INSUFFICIENT_STOCK"

    def test_notification_failure_still_created(self, client, catalog, walk_in_payload, whatsapp):
        from app.integrations.whatsapp_client import WhatsAppError

        whatsapp.fail_with = WhatsAppError("provider down", 500)

        response = client.post(BASE, json=walk_in_payload)

        assert response.status_code == 201
        assert response.json()["notification"]["status"] == "failed"


class TestInvoiceDownload:
    @pytest.mark.parametrize("reference", ["ORD-1", "ORD-1.pdf", "anitha_r-ORD-1.pdf"])
    def test_download(self, client, created, reference):
        response = client.get(f"{BASE}/invoice/{reference}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            "attachment; filename=anitha_r-ORD-1.pdf"
        )
        assert response.content.startswith(b"%PDF")

    def test_regenerates_missing_file(self, client, created, invoice_dir):
        path = invoice_dir / "anitha_r-ORD-1.pdf"
        original = path.read_bytes()
        path.unlink()

        response = client.get(f"{BASE}/invoice/ORD-1")

        assert response.status_code == 200
        assert response.content == original
        assert path.is_file()

    def test_unknown_order(self, client, created):
        response = client.get(f"{BASE}/invoice/ORD-404")

        assert response.status_code == 404
        assert response.json()["code"] == "INVOICE_NOT_FOUND"

    def test_malformed_reference(self, client, created):
        response = client.get(f"{BASE}/invoice/ORD%201")

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ORDER_ID"


class TestStatusUpdate:
    def test_dispatch_with_nested_shipment(self, client, created, whatsapp, db):
        response = client.patch(
            f"{BASE}/{created['id']}/status",
            json={
                "status": "dispatched",
                "shipment": {"transportName": "ABC Transport", "lrNumber": "LR123"},
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Status updated successfully"
        assert body["data"] == {"id": created["id"], "status": "dispatched"}
        assert body["shipment"]["transport_name"] == "ABC Transport"
        assert body["shipment"]["lr_number"] == "LR123"
        assert body["notification"]["status"] == "sent"
        assert db.query(Shipment).count() == 1

    def test_dispatch_with_flat_fields(self, client, created):
        response = client.patch(
            f"{BASE}/{created['id']}/status",
            json={
                "status": "dispatched",
                "transport_name": "ABC Transport",
                "lr_number": "LR123",
                "transport_contact": "9000000000",
            },
        )

        assert response.status_code == 200
        assert response.json()["shipment"]["transport_contact"] == "9000000000"

    def test_incomplete_shipment(self, client, created, db):
        response = client.patch(
            f"{BASE}/{created['id']}/status",
            json={"status": "dispatched", "shipment": {"lrNumber": "LR123"}},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INCOMPLETE_SHIPMENT"
        assert db.query(Shipment).count() == 0

    def test_invalid_status(self, client, created):
        response = client.patch(f"{BASE}/{created['id']}/status", json={"status": "lost"})

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_STATUS"

    def test_unknown_booking(self, client, catalog):
        response = client.patch(f"{BASE}/01HNOSUCHBOOKING0000000000/status", json={"status": "paid"})

        assert response.status_code == 404

    def test_backwards_move_is_allowed(self, client, created):
        client.patch(f"{BASE}/{created['id']}/status", json={"status": "delivered"})

        response = client.patch(f"{BASE}/{created['id']}/status", json={"status": "booked"})

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "booked"
        assert response.json()["shipment"] is None


class TestListings:
    def test_list(self, client, created):
        response = client.get(BASE)

        assert response.status_code == 200
        rows = response.json()
        assert [row["order_id"] for row in rows] == ["ORD-1"]
        assert rows[0]["total"] == 230.0
        assert rows[0]["status"] == "booked"
        assert rows[0]["products"][0]["price"] == "100.00"

    def test_list_filters(self, client, created):
        assert client.get(BASE, params={"status": "paid"}).json() == []
        assert client.get(BASE, params={"customer_type": "Agent"}).json() == []
        assert len(client.get(BASE, params={"status": "booked", "customer_type": "User"}).json()) == 1

    def test_list_invalid_status(self, client, created):
        response = client.get(BASE, params={"status": "lost"})

        assert response.status_code == 400

    def test_filtered_board(self, client, created):
        assert client.get(f"{BASE}/filtered").json() == []

        client.patch(
            f"{BASE}/{created['id']}/status",
            json={"status": "dispatched", "transportName": "ABC Transport", "lrNumber": "LR123"},
        )
        response = client.get(f"{BASE}/filtered", params={"status": "dispatched"})

        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 1
        row = rows[0]
        assert row["total"] == 230.0
        assert [item["line_total"] for item in row["items"]] == [180.0, 50.0]
        assert row["shipment"]["lr_number"] == "LR123"

    def test_filtered_ignores_unknown_status(self, client, created):
        client.patch(f"{BASE}/{created['id']}/status", json={"status": "paid"})

        response = client.get(f"{BASE}/filtered", params={"status": "lost"})

        assert response.status_code == 200
        assert [row["order_id"] for row in response.json()] == ["ORD-1"]
        assert Decimal(str(response.json()[0]["total"])) == Decimal("230")
