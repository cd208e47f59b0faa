# backend/app/services/booking_validator.py
"""
Booking Validator

Turns a raw create-booking request into a BookingDraft, or fails with the
first problem found. Checks run in a fixed order and stop at the first
failure:

1. order id present and well formed
2. product lines present, each well formed and bookable
3. declared total positive
4. customer resolved (standing customer) or fully supplied (walk-in)

Nothing here writes to the database.
"""

from decimal import Decimal, InvalidOperation
import logging
import re
from typing import Any, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import ORDER_ID_PATTERN
from ..core.exceptions import NotFoundException, ValidationException
from ..domain.booking_draft import BookingDraft, CustomerSnapshot, LineItem
from ..repositories.catalog_repository import normalize_category
from ..repositories.customer_repository import CustomerRepository
from ..repositories.factory import RepositoryFactory
from ..schemas.booking import BookingCreateRequest, BookingLineRequest
from .base import BaseService
from .catalog_service import CatalogService

logger = logging.getLogger(__name__)

_ORDER_ID_RE = re.compile(ORDER_ID_PATTERN)

# Walk-in bookings must carry every one of these, checked in this order
WALK_IN_REQUIRED_FIELDS = (
    "customer_name",
    "address",
    "district",
    "state",
    "mobile_number",
    "email",
)


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def _as_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


class BookingValidator(BaseService):
    """Ordered, short-circuiting validation of create-booking requests."""

    def __init__(
        self,
        db: Session,
        catalog_service: Optional[CatalogService] = None,
        customer_repository: Optional[CustomerRepository] = None,
    ):
        super().__init__(db)
        self.catalog_service = catalog_service or CatalogService(db)
        self.customer_repository = (
            customer_repository or RepositoryFactory.create_customer_repository(db)
        )

    @BaseService.measure_operation("validate_booking")
    def validate(self, payload: BookingCreateRequest) -> BookingDraft:
        """
        Validate a create-booking request.

        Returns:
            BookingDraft with catalog prices captured and the customer snapshotted

        Raises:
            ValidationException: Malformed or missing input
            NotFoundException: Unknown customer or unavailable product
        """
        order_id = self._check_order_id(payload.order_id)
        items = self._check_products(payload.products)
        declared_total = self._check_total(payload.total)
        customer_id, customer_type, snapshot = self._resolve_customer(payload)

        draft = BookingDraft(
            order_id=order_id,
            customer_id=customer_id,
            customer_type=customer_type,
            customer=snapshot,
            items=tuple(items),
            declared_total=declared_total,
        )
        if draft.total != declared_total:
            self.logger.info(
                "Declared total %s for order %s differs from computed %s",
                declared_total,
                order_id,
                draft.total,
            )
        return draft

    def _check_order_id(self, raw: Optional[str]) -> str:
        order_id = _clean(raw)
        if order_id is None:
            raise ValidationException(
                "order_id is required", code="MISSING_FIELD", details={"field": "order_id"}
            )
        if not _ORDER_ID_RE.fullmatch(order_id):
            raise ValidationException(
                "Invalid order_id format",
                code="INVALID_ORDER_ID",
                details={"order_id": order_id},
            )
        return order_id

    def _check_products(self, raw: Any) -> List[LineItem]:
        if not isinstance(raw, list) or not raw:
            raise ValidationException(
                "Products array is required and must not be empty",
                code="MISSING_PRODUCTS",
                details={"field": "products"},
            )

        lines = [self._check_line_shape(index, entry) for index, entry in enumerate(raw)]

        items: List[LineItem] = []
        for category, product_id, quantity in lines:
            product = self.catalog_service.get_product(category, product_id)
            if product is None or not product.is_available:
                raise NotFoundException(
                    f"Product {product_id} of type {category} not found or not available",
                    code="PRODUCT_NOT_AVAILABLE",
                    details={"id": product_id, "product_type": category},
                )
            items.append(
                LineItem(
                    product_type=category,
                    product_id=product_id,
                    productname=product.productname,
                    price=Decimal(product.price),
                    discount=Decimal(product.discount or 0),
                    quantity=quantity,
                    per=getattr(product.per, "value", product.per),
                )
            )
        return items

    def _check_line_shape(self, index: int, entry: Any) -> Tuple[str, int, int]:
        if isinstance(entry, BookingLineRequest):
            raw_id, raw_type, raw_qty = entry.id, entry.product_type, entry.quantity
        elif isinstance(entry, dict):
            raw_id, raw_type, raw_qty = (
                entry.get("id"),
                entry.get("product_type"),
                entry.get("quantity"),
            )
        else:
            raw_id = raw_type = raw_qty = None

        product_id = _as_int(raw_id)
        category = normalize_category(_clean(raw_type) or "")
        quantity = _as_int(raw_qty)
        if product_id is None or not category or quantity is None or quantity < 1:
            raise ValidationException(
                "Each product must have id, product_type, and quantity >= 1",
                code="INVALID_PRODUCT_LINE",
                details={
                    "index": index,
                    "id": raw_id,
                    "product_type": raw_type,
                    "quantity": raw_qty,
                },
            )
        return category, product_id, quantity

    def _check_total(self, raw: Any) -> Decimal:
        total = _as_decimal(raw)
        if total is None or total <= 0:
            raise ValidationException(
                "Total must be a positive number",
                code="INVALID_TOTAL",
                details={"total": raw if isinstance(raw, (int, float, str)) else None},
            )
        return total

    def _resolve_customer(
        self, payload: BookingCreateRequest
    ) -> Tuple[Optional[str], str, CustomerSnapshot]:
        default_type = settings.default_customer_type
        customer_id = _clean(payload.customer_id)
        override_type = _clean(payload.customer_type)

        if customer_id is not None:
            customer = self.customer_repository.get_by_id(customer_id)
            if customer is None:
                raise NotFoundException(
                    "Customer not found",
                    code="CUSTOMER_NOT_FOUND",
                    details={"customer_id": customer_id},
                )
            snapshot = CustomerSnapshot(
                customer_name=customer.customer_name,
                address=customer.address,
                mobile_number=customer.mobile_number,
                email=customer.email,
                district=customer.district,
                state=customer.state,
            )
            return customer_id, override_type or customer.customer_type or default_type, snapshot

        if override_type is not None and override_type != default_type:
            raise ValidationException(
                f"Customer type must be '{default_type}' for bookings without customer_id",
                code="INVALID_CUSTOMER_TYPE",
                details={"customer_type": override_type},
            )

        values = {field: _clean(getattr(payload, field)) for field in WALK_IN_REQUIRED_FIELDS}
        for field in WALK_IN_REQUIRED_FIELDS:
            if values[field] is None:
                raise ValidationException(
                    f"{field} is required for bookings without customer_id",
                    code="MISSING_FIELD",
                    details={"field": field},
                )

        snapshot = CustomerSnapshot(
            customer_name=values["customer_name"] or "",
            address=values["address"],
            mobile_number=values["mobile_number"],
            email=values["email"],
            district=values["district"],
            state=values["state"],
        )
        return None, default_type, snapshot
