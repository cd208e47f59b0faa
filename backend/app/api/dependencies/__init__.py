# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .database import get_db
from .services import (
    get_booking_service,
    get_catalog_service,
    get_customer_service,
    get_invoice_renderer,
    get_notification_service,
    get_whatsapp_client,
)

__all__ = [
    # Database
    "get_db",
    # Services
    "get_booking_service",
    "get_catalog_service",
    "get_customer_service",
    "get_invoice_renderer",
    "get_notification_service",
    "get_whatsapp_client",
]
