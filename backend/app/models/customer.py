# backend/app/models/customer.py
"""Standing customer records (agents, dealers and repeat buyers)."""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func
import ulid

from ..core.constants import DEFAULT_CUSTOMER_TYPE
from ..database import Base


class Customer(Base):
    """
    Customer on file.

    Bookings snapshot these fields at creation time, so later edits here do
    not change historical invoices.
    """

    __tablename__ = "customers"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    customer_name = Column(String(255), nullable=False)
    address = Column(Text, nullable=True)
    mobile_number = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    district = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    customer_type = Column(String(50), nullable=False, default=DEFAULT_CUSTOMER_TYPE)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Customer {self.id} {self.customer_name}>"
