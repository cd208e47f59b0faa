"""External service integrations for the booking backend."""

from .whatsapp_client import FakeWhatsAppClient, WhatsAppClient, WhatsAppError

__all__ = ["FakeWhatsAppClient", "WhatsAppClient", "WhatsAppError"]
