# backend/tests/unit/test_booking_validator.py
"""
Unit tests for BookingValidator.

Checks run in a fixed order and stop at the first failure, so several tests
send payloads with more than one problem and assert which one is reported.
"""

from decimal import Decimal

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.schemas.booking import BookingCreateRequest
from app.services.booking_validator import BookingValidator


@pytest.fixture
def validator(db, catalog):
    return BookingValidator(db)


def _request(payload, **changes):
    data = {**payload, **changes}
    return BookingCreateRequest(**{k: v for k, v in data.items() if v is not ...})


class TestValidWalkIn:
    def test_returns_draft_with_catalog_prices(self, validator, walk_in_payload):
        draft = validator.validate(_request(walk_in_payload))

        assert draft.order_id == "ORD-1"
        assert draft.customer_id is None
        assert draft.customer_type == "User"
        assert draft.customer.customer_name == "Anitha R"
        assert [(i.product_type, i.product_id, i.quantity) for i in draft.items] == [
            ("sparklers", 1, 2),
            ("sparklers", 2, 1),
        ]
        assert draft.items[0].productname == "10 cm Electric Sparklers"
        assert draft.items[0].discount == Decimal("10.00")
        assert draft.total == Decimal("230.00")

    def test_declared_total_is_not_trusted(self, validator, walk_in_payload):
        draft = validator.validate(_request(walk_in_payload, total="1"))

        assert draft.declared_total == Decimal("1")
        assert draft.total == Decimal("230.00")

    def test_string_quantities_and_ids_are_accepted(self, validator, walk_in_payload):
        products = [{"id": "2", "product_type": "Sparklers", "quantity": "3"}]

        draft = validator.validate(_request(walk_in_payload, products=products))

        assert draft.items[0].product_id == 2
        assert draft.items[0].quantity == 3
        assert draft.total == Decimal("150.00")


class TestOrderId:
    def test_missing(self, validator, walk_in_payload):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, order_id=None))

        assert exc_info.value.code == "MISSING_FIELD"
        assert exc_info.value.details == {"field": "order_id"}

    @pytest.mark.parametrize("order_id", ["ORD 1", "ORD/1", "ORD-1.pdf", "ORD-1;"])
    def test_bad_characters(self, validator, walk_in_payload, order_id):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, order_id=order_id))

        assert exc_info.value.code == "INVALID_ORDER_ID"

    def test_checked_before_products(self, validator, walk_in_payload):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, order_id="bad id", products=[]))

        assert exc_info.value.code == "INVALID_ORDER_ID"


class TestProducts:
    @pytest.mark.parametrize("products", [None, [], "sparklers"])
    def test_missing_or_empty(self, validator, walk_in_payload, products):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, products=products))

        assert exc_info.value.code == "MISSING_PRODUCTS"

    @pytest.mark.parametrize(
        "line",
        [
            {"id": 1, "product_type": "sparklers", "quantity": 0},
            {"id": 1, "product_type": "sparklers"},
            {"id": 1, "quantity": 1},
            {"product_type": "sparklers", "quantity": 1},
            {"id": "one", "product_type": "sparklers", "quantity": 1},
        ],
    )
    def test_malformed_line_names_its_index(self, validator, walk_in_payload, line):
        products = [{"id": 2, "product_type": "sparklers", "quantity": 1}, line]

        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, products=products))

        assert exc_info.value.code == "INVALID_PRODUCT_LINE"
        assert exc_info.value.details["index"] == 1

    def test_unavailable_product_is_not_found(self, validator, walk_in_payload):
        products = [{"id": 3, "product_type": "sparklers", "quantity": 1}]

        with pytest.raises(NotFoundException) as exc_info:
            validator.validate(_request(walk_in_payload, products=products))

        assert exc_info.value.message == "Product 3 of type sparklers not found or not available"
        assert exc_info.value.details == {"id": 3, "product_type": "sparklers"}

    def test_unknown_category_is_not_found(self, validator, walk_in_payload):
        products = [{"id": 1, "product_type": "rockets", "quantity": 1}]

        with pytest.raises(NotFoundException):
            validator.validate(_request(walk_in_payload, products=products))

    def test_checked_before_total(self, validator, walk_in_payload):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, products=[], total=0))

        assert exc_info.value.code == "MISSING_PRODUCTS"


class TestTotal:
    @pytest.mark.parametrize("total", [None, 0, -5, "abc", "NaN", True])
    def test_must_be_positive_number(self, validator, walk_in_payload, total):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, total=total))

        assert exc_info.value.code == "INVALID_TOTAL"

    def test_checked_before_customer(self, validator, walk_in_payload):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, total=0, email=None))

        assert exc_info.value.code == "INVALID_TOTAL"


class TestWalkInCustomer:
    @pytest.mark.parametrize(
        "field", ["customer_name", "address", "district", "state", "mobile_number", "email"]
    )
    def test_each_field_is_required(self, validator, walk_in_payload, field):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, **{field: "  "}))

        assert exc_info.value.code == "MISSING_FIELD"
        assert exc_info.value.details == {"field": field}
        assert field in exc_info.value.message

    def test_first_missing_field_is_reported(self, validator, walk_in_payload):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, district=None, email=None))

        assert exc_info.value.details == {"field": "district"}

    def test_type_other_than_default_is_rejected(self, validator, walk_in_payload):
        with pytest.raises(ValidationException) as exc_info:
            validator.validate(_request(walk_in_payload, customer_type="Agent"))

        assert exc_info.value.code == "INVALID_CUSTOMER_TYPE"

    def test_explicit_default_type_is_accepted(self, validator, walk_in_payload):
        draft = validator.validate(_request(walk_in_payload, customer_type="User"))

        assert draft.customer_type == "User"


class TestStandingCustomer:
    def _payload(self, walk_in_payload, agent, **changes):
        payload = {
            "order_id": "ORD-2",
            "customer_id": agent.id,
            "products": walk_in_payload["products"],
            "total": 230,
        }
        payload.update(changes)
        return BookingCreateRequest(**payload)

    def test_snapshot_comes_from_customer_record(self, validator, walk_in_payload, agent):
        draft = validator.validate(self._payload(walk_in_payload, agent))

        assert draft.customer_id == agent.id
        assert draft.customer_type == "Agent"
        assert draft.customer.customer_name == "Ravi Traders"
        assert draft.customer.mobile_number == "9123456780"

    def test_type_override(self, validator, walk_in_payload, agent):
        draft = validator.validate(
            self._payload(walk_in_payload, agent, customer_type="Dealer")
        )

        assert draft.customer_type == "Dealer"

    def test_unknown_customer_is_not_found(self, validator, walk_in_payload, agent):
        with pytest.raises(NotFoundException) as exc_info:
            validator.validate(
                self._payload(walk_in_payload, agent, customer_id="01HZZZZZZZZZZZZZZZZZZZZZZZ")
            )

        assert exc_info.value.code == "CUSTOMER_NOT_FOUND"
