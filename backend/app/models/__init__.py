"""
Database models for the booking backend.

- Catalog: ProductType (runtime-defined categories) and Product
- Customer: standing customer records
- Booking: orders with snapshotted customer data and line items
- Shipment: carrier details recorded on dispatch
"""

from .booking import FULFILMENT_STATUSES, Booking, BookingStatus
from .catalog import Product, ProductAvailability, ProductType, ProductUnit
from .customer import Customer
from .shipment import Shipment

__all__ = [
    "Booking",
    "BookingStatus",
    "Customer",
    "FULFILMENT_STATUSES",
    "Product",
    "ProductAvailability",
    "ProductType",
    "ProductUnit",
    "Shipment",
]
