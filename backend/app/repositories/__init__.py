# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the booking backend.

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories
- RepositoryFactory: Factory for creating repository instances
- CatalogRepository: Product types and products (category-scoped lookups)
- CustomerRepository: Standing customer records
- BookingRepository: Booking rows, invoice reference resolution, status updates
- ShipmentRepository: Insert-only shipment records

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    booking = repository.get("ORD-1")
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .catalog_repository import CatalogRepository, normalize_category
from .customer_repository import CustomerRepository
from .factory import RepositoryFactory
from .shipment_repository import ShipmentRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "CatalogRepository",
    "CustomerRepository",
    "RepositoryFactory",
    "ShipmentRepository",
    "normalize_category",
]
