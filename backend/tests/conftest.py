# backend/tests/conftest.py
"""
Pytest configuration shared by unit and route tests.

Every test gets a fresh in-memory SQLite database, a seeded catalog, an
isolated invoice directory and a fake WhatsApp client that records what
would have been sent.
"""

import os

# Set test configuration BEFORE any app imports
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["WHATSAPP_ENABLED"] = "false"

from decimal import Decimal
from typing import Any, Dict

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies.database import get_db
from app.api.dependencies.services import get_invoice_renderer, get_whatsapp_client
from app.database import Base
from app.integrations.whatsapp_client import FakeWhatsAppClient
from app.main import app as fastapi_app
from app.models.catalog import ProductAvailability, ProductUnit
from app.models.customer import Customer
from app.repositories.catalog_repository import CatalogRepository
from app.services.booking_service import BookingService
from app.services.invoice_renderer import InvoiceRenderer
from app.services.notification_service import NotificationService


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    TestingSessionLocal = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog(db: Session) -> CatalogRepository:
    """
    Two product types:

    sparklers       #1 10 cm Electric Sparklers  100.00 less 10%
                    #2 Colour Sparklers           50.00
                    #3 Green Sparklers            80.00  (off)
    ground_chakras  #1 Big Chakra                 40.00  stock 5
    """
    repo = CatalogRepository(db)
    repo.create_category("sparklers")
    repo.create_category("Ground Chakras", tracks_inventory=True)
    repo.add_product(
        "sparklers",
        serial_number="SP-01",
        productname="10 cm Electric Sparklers",
        price=Decimal("100.00"),
        per=ProductUnit.BOX,
        discount=Decimal("10.00"),
        fast_running=True,
    )
    repo.add_product(
        "sparklers",
        serial_number="SP-02",
        productname="Colour Sparklers",
        price=Decimal("50.00"),
        per=ProductUnit.BOX,
    )
    repo.add_product(
        "sparklers",
        serial_number="SP-03",
        productname="Green Sparklers",
        price=Decimal("80.00"),
        status=ProductAvailability.OFF,
    )
    repo.add_product(
        "ground_chakras",
        serial_number="GC-01",
        productname="Big Chakra",
        price=Decimal("40.00"),
        per=ProductUnit.PKT,
        stock=5,
    )
    db.commit()
    return repo


@pytest.fixture
def agent(db: Session) -> Customer:
    customer = Customer(
        customer_name="Ravi Traders",
        address="4 Bazaar Street",
        mobile_number="9123456780",
        email="ravi@example.com",
        district="Madurai",
        state="Tamil Nadu",
        customer_type="Agent",
    )
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def walk_in_payload() -> Dict[str, Any]:
    """ORD-1: 2 x 100.00 less 10% + 1 x 50.00 = 230.00"""
    return {
        "order_id": "ORD-1",
        "customer_name": "Anitha R",
        "address": "12 Main Road",
        "district": "Virudhunagar",
        "state": "Tamil Nadu",
        "mobile_number": "98765 43210",
        "email": "anitha@example.com",
        "products": [
            {"id": 1, "product_type": "sparklers", "quantity": 2},
            {"id": 2, "product_type": "sparklers", "quantity": 1},
        ],
        "total": 230,
    }


@pytest.fixture
def invoice_dir(tmp_path):
    return tmp_path / "pdf_data"


@pytest.fixture
def renderer(invoice_dir) -> InvoiceRenderer:
    return InvoiceRenderer(invoice_dir)


@pytest.fixture
def whatsapp() -> FakeWhatsAppClient:
    return FakeWhatsAppClient()


@pytest.fixture
def notification_service(db: Session, whatsapp: FakeWhatsAppClient) -> NotificationService:
    return NotificationService(db, whatsapp)


@pytest.fixture
def booking_service(
    db: Session, renderer: InvoiceRenderer, notification_service: NotificationService
) -> BookingService:
    return BookingService(db, renderer=renderer, notification_service=notification_service)


@pytest.fixture
def client(db: Session, renderer: InvoiceRenderer, whatsapp: FakeWhatsAppClient):
    """TestClient wired to the per-test database, invoice directory and fake WhatsApp."""

    def override_get_db():
        yield db

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_invoice_renderer] = lambda: renderer
    fastapi_app.dependency_overrides[get_whatsapp_client] = lambda: whatsapp
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()
