# backend/app/repositories/factory.py
"""
Repository Factory

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .catalog_repository import CatalogRepository
    from .customer_repository import CustomerRepository
    from .shipment_repository import ShipmentRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation so services share one session per request.
    """

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        """Create repository for booking operations."""
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_catalog_repository(db: Session) -> "CatalogRepository":
        """Create repository for product type and product lookups."""
        from .catalog_repository import CatalogRepository

        return CatalogRepository(db)

    @staticmethod
    def create_customer_repository(db: Session) -> "CustomerRepository":
        """Create repository for customer records."""
        from .customer_repository import CustomerRepository

        return CustomerRepository(db)

    @staticmethod
    def create_shipment_repository(db: Session) -> "ShipmentRepository":
        """Create repository for shipment records."""
        from .shipment_repository import ShipmentRepository

        return ShipmentRepository(db)
