# backend/tests/routes/test_customer_routes.py
from app.models.customer import Customer


def test_list_customers(client, db, agent):
    db.add(Customer(customer_name="Arun Stores", mobile_number="9000000001", customer_type="Dealer"))
    db.commit()

    response = client.get("/api/v1/customers")

    assert response.status_code == 200
    rows = response.json()
    assert [row["customer_name"] for row in rows] == ["Arun Stores", "Ravi Traders"]
    assert rows[1]["id"] == agent.id
    assert rows[1]["customer_type"] == "Agent"


def test_list_customers_empty(client):
    response = client.get("/api/v1/customers")

    assert response.status_code == 200
    assert response.json() == []


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "Phoenix Crackers" in response.json()["message"]


def test_health(client):
    response = client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["environment"] == "test"
    assert set(body["database_pool"]) == {"size", "checked_in", "checked_out", "overflow"}


def test_metrics_after_booking(client, catalog, walk_in_payload):
    client.post("/api/v1/bookings", json=walk_in_payload)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    text = response.text
    assert "bookings_prometheus_scrapes_total" in text
    assert 'bookings_invoice_renders_total{reason="created"}' in text
    assert 'bookings_notifications_total{event_type="invoice",status="sent"}' in text
    assert 'operation="create_booking"' in text
