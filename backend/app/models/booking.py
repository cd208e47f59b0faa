# backend/app/models/booking.py
"""
Booking model.

A booking is a customer order: line items, a server-computed total, a
lifecycle status and the path of its rendered invoice. Customer details are
snapshotted onto the row so the invoice can always be regenerated exactly
as it was issued, whatever happens to the customer record later.

The invoice file is a cache. The booking row is the source of truth.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..core.constants import DEFAULT_CUSTOMER_TYPE
from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """
    Booking lifecycle statuses.

    Ordered booked → paid → packed → dispatched → delivered, but operators
    may set any status from any other (manual corrections), so there is no
    transition table. Only membership is validated.
    """

    BOOKED = "booked"
    PAID = "paid"
    PACKED = "packed"
    DISPATCHED = "dispatched"
    DELIVERED = "delivered"

    @classmethod
    def parse(cls, value: Any) -> Optional["BookingStatus"]:
        """Return the matching status, or None for anything outside the fixed set."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


# Statuses shown on the fulfilment ("filtered") board
FULFILMENT_STATUSES = (
    BookingStatus.PAID,
    BookingStatus.PACKED,
    BookingStatus.DISPATCHED,
    BookingStatus.DELIVERED,
)


class Booking(Base):
    """Persisted customer order."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    order_id = Column(String(100), nullable=False, unique=True, index=True)
    customer_id = Column(String(26), ForeignKey("customers.id"), nullable=True, index=True)

    # Customer snapshot (preserved for invoice regeneration)
    customer_name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    mobile_number = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    district = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    customer_type = Column(String(50), nullable=False, default=DEFAULT_CUSTOMER_TYPE, index=True)

    # Line items captured at booking time: product_type, id, productname,
    # price, discount, per, quantity
    products = Column(JSON, nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    status = Column(String(20), nullable=False, default=BookingStatus.BOOKED.value, index=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    pdf = Column(String(500), nullable=True)

    customer = relationship("Customer")
    shipment = relationship(
        "Shipment",
        back_populates="booking",
        uselist=False,
        primaryjoin="Booking.order_id == Shipment.order_id",
    )

    __table_args__ = (
        CheckConstraint("total > 0", name="ck_bookings_total_positive"),
        CheckConstraint(
            "status IN ('booked', 'paid', 'packed', 'dispatched', 'delivered')",
            name="ck_bookings_status_valid",
        ),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.order_id} {self.status}>"
