# backend/app/models/shipment.py
"""Carrier/consignment details recorded when a booking is dispatched."""

from sqlalchemy import Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Shipment(Base):
    """
    Shipment record linked to a booking by order id.

    Written once, in the same transaction that moves the booking into
    'dispatched'. Never updated afterwards.
    """

    __tablename__ = "shipments"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    order_id = Column(
        String(100),
        ForeignKey("bookings.order_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    transport_name = Column(String(255), nullable=False)
    lr_number = Column(String(100), nullable=False)
    transport_contact = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    booking = relationship(
        "Booking",
        back_populates="shipment",
        primaryjoin="Shipment.order_id == Booking.order_id",
    )

    def __repr__(self) -> str:
        return f"<Shipment {self.order_id} {self.transport_name} LR={self.lr_number}>"
