# backend/app/schemas/booking.py
"""
Booking schemas.

Request models are intentionally loose about types and presence: the
booking validator owns the ordered business checks and reports them as 400s
naming the offending field, which field-level pydantic errors cannot do.
Response models are strict.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.booking_draft import LineItem
from ._strict_base import StrictModel
from .base import Money, StandardizedModel


class BookingLineRequest(BaseModel):
    """A requested product line: category, product number and quantity."""

    model_config = ConfigDict(extra="ignore")

    id: Any = Field(None, description="Product number within its category")
    product_type: Any = Field(None, description="Category label, e.g. 'sparklers'")
    quantity: Any = Field(None, description="Units ordered, at least 1")


class BookingCreateRequest(BaseModel):
    """
    Create a booking.

    Either reference a standing customer with ``customer_id`` (optionally
    overriding its ``customer_type``) or supply the walk-in customer fields
    inline. ``total`` is a sanity check only; the stored total is recomputed
    from catalog prices.
    """

    model_config = ConfigDict(extra="ignore")

    order_id: Optional[str] = Field(None, description="Caller-supplied order identifier")
    customer_id: Optional[str] = None
    customer_type: Optional[str] = None
    products: Any = Field(None, description="Requested product lines")
    total: Any = Field(None, description="Declared total, must be positive")

    customer_name: Optional[str] = None
    address: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    mobile_number: Optional[str] = None
    email: Optional[str] = None


class ShipmentDetailsRequest(BaseModel):
    """Carrier details supplied when dispatching an order."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    transport_name: Optional[str] = Field(None, alias="transportName")
    lr_number: Optional[str] = Field(None, alias="lrNumber")
    transport_contact: Optional[str] = Field(None, alias="transportContact")

    def is_empty(self) -> bool:
        return not any((self.transport_name, self.lr_number, self.transport_contact))


class StatusUpdateRequest(BaseModel):
    """Move a booking to any of the lifecycle statuses."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: Any = None
    shipment: Optional[ShipmentDetailsRequest] = None

    # Flat shipment fields are accepted for older clients
    transport_name: Optional[str] = Field(None, alias="transportName")
    lr_number: Optional[str] = Field(None, alias="lrNumber")
    transport_contact: Optional[str] = Field(None, alias="transportContact")

    def shipment_details(self) -> Optional[ShipmentDetailsRequest]:
        """Nested shipment details, or the flat fields when no nested object was sent."""
        if self.shipment is not None and not self.shipment.is_empty():
            return self.shipment
        flat = ShipmentDetailsRequest(
            transport_name=self.transport_name,
            lr_number=self.lr_number,
            transport_contact=self.transport_contact,
        )
        return None if flat.is_empty() else flat


# Responses


class NotificationOutcomeResponse(StrictModel):
    status: str
    error: Optional[str] = None


class LineItemResponse(StandardizedModel):
    product_type: str
    id: int
    productname: str
    price: Money
    discount: Money
    per: Optional[str] = None
    quantity: int
    line_total: Money

    @classmethod
    def from_line_item(cls, item: LineItem) -> "LineItemResponse":
        return cls(
            product_type=item.product_type,
            id=item.product_id,
            productname=item.productname,
            price=item.price,
            discount=item.discount,
            per=item.per,
            quantity=item.quantity,
            line_total=item.line_total,
        )


class ShipmentResponse(StandardizedModel):
    order_id: str
    transport_name: str
    lr_number: str
    transport_contact: Optional[str] = None
    created_at: Optional[datetime] = None


class BookingCreateResponse(StrictModel):
    message: str = "Booking created successfully"
    id: str
    created_at: datetime
    customer_type: str
    pdf_path: Optional[str] = None
    order_id: str
    total: Money
    notification: NotificationOutcomeResponse


class BookingSummaryResponse(StandardizedModel):
    id: str
    order_id: str
    customer_id: Optional[str] = None
    customer_name: str
    address: Optional[str] = None
    mobile_number: Optional[str] = None
    email: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    customer_type: str
    products: List[Dict[str, Any]]
    total: Money
    status: str
    created_at: datetime
    pdf: Optional[str] = None


class FilteredBookingResponse(BookingSummaryResponse):
    """Fulfilment board row: recomputed total plus shipment details."""

    items: List[LineItemResponse] = Field(default_factory=list)
    shipment: Optional[ShipmentResponse] = None


class StatusChangeData(StrictModel):
    id: str
    status: str


class StatusUpdateResponse(StrictModel):
    message: str = "Status updated successfully"
    data: StatusChangeData
    shipment: Optional[ShipmentResponse] = None
    notification: NotificationOutcomeResponse
