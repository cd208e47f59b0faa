# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging
from typing import Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import settings
from ...integrations import WhatsAppClient
from ...services.booking_service import BookingService
from ...services.catalog_service import CatalogService
from ...services.customer_service import CustomerService
from ...services.invoice_renderer import InvoiceRenderer
from ...services.notification_service import NotificationService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _build_whatsapp_client() -> Optional[WhatsAppClient]:
    if not settings.whatsapp_enabled:
        logger.info("WhatsApp notifications disabled")
        return None
    if not settings.whatsapp_configured:
        logger.warning("WhatsApp enabled but phone number id or access token missing")
        return None
    return WhatsAppClient(
        access_token=settings.whatsapp_access_token,
        phone_number_id=settings.whatsapp_phone_number_id,
        base_url=settings.whatsapp_api_base_url,
        timeout=settings.whatsapp_timeout_seconds,
    )


def get_whatsapp_client() -> Optional[WhatsAppClient]:
    """WhatsApp client, or None when messaging is disabled or not configured."""
    return _build_whatsapp_client()


def get_invoice_renderer() -> InvoiceRenderer:
    return InvoiceRenderer(settings.invoice_storage_dir)


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Get catalog service instance for dependency injection."""
    return CatalogService(db)


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    return CustomerService(db)


def get_notification_service(
    db: Session = Depends(get_db),
    client: Optional[WhatsAppClient] = Depends(get_whatsapp_client),
) -> NotificationService:
    """Get notification service instance for dependency injection."""
    return NotificationService(db, client)


def get_booking_service(
    db: Session = Depends(get_db),
    renderer: InvoiceRenderer = Depends(get_invoice_renderer),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BookingService:
    """
    Get booking service instance for dependency injection.

    Args:
        db: Database session
        renderer: Invoice renderer bound to the configured storage directory
        notification_service: WhatsApp dispatcher

    Returns:
        BookingService instance
    """
    return BookingService(
        db,
        renderer=renderer,
        notification_service=notification_service,
    )
