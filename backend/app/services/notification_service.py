# backend/app/services/notification_service.py
"""
Notification Service

Sends customer-facing WhatsApp messages for bookings: the invoice on
creation and a short update on every status change.

Delivery is best effort. The caller's database work is already committed
when these run, so failures are raised as domain exceptions for the caller
to report, never to unwind.
"""

from dataclasses import dataclass
import logging
import re
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    InvalidRecipientException,
    ServiceException,
    UpstreamServiceException,
)
from ..integrations.whatsapp_client import WhatsAppClient, WhatsAppError
from ..models.booking import Booking, BookingStatus
from ..models.shipment import Shipment
from ..monitoring.prometheus_metrics import prometheus_metrics
from .base import BaseService
from .invoice_renderer import InvoiceArtifact

logger = logging.getLogger(__name__)

_NON_DIGIT_RE = re.compile(r"\D")

EVENT_INVOICE = "invoice"
EVENT_STATUS_CHANGE = "status_change"


def normalize_recipient(raw: Optional[str], country_code: Optional[str] = None) -> str:
    """
    Turn a stored mobile number into an E.164 recipient.

    Bare 10-digit numbers are domestic and get the country code; 12-digit
    numbers already starting with it pass through.

    Raises:
        InvalidRecipientException: For anything else
    """
    code = country_code or settings.default_country_code
    digits = _NON_DIGIT_RE.sub("", raw or "")
    if len(digits) == 10:
        return f"+{code}{digits}"
    if len(digits) == 10 + len(code) and digits.startswith(code):
        return f"+{digits}"
    raise InvalidRecipientException(raw)


def _mask(recipient: str) -> str:
    return f"***{recipient[-4:]}"


@dataclass(frozen=True)
class NotificationOutcome:
    """
    Result of a best-effort notification.

    status is one of sent, failed, disabled or skipped.
    """

    status: str
    error: Optional[str] = None
    message_id: Optional[str] = None

    SENT = "sent"
    FAILED = "failed"
    DISABLED = "disabled"
    SKIPPED = "skipped"

    @classmethod
    def sent(cls, message_id: Optional[str] = None) -> "NotificationOutcome":
        return cls(status=cls.SENT, message_id=message_id)

    @classmethod
    def failed(cls, error: str) -> "NotificationOutcome":
        return cls(status=cls.FAILED, error=error)

    @classmethod
    def disabled(cls) -> "NotificationOutcome":
        return cls(status=cls.DISABLED)

    @classmethod
    def skipped(cls, reason: str) -> "NotificationOutcome":
        return cls(status=cls.SKIPPED, error=reason)

    @property
    def delivered(self) -> bool:
        return self.status == self.SENT


class NotificationService(BaseService):
    """
    WhatsApp dispatcher for booking events.

    With no client (messaging disabled or not configured) every send returns
    a ``disabled`` outcome without calling out.
    """

    def __init__(
        self,
        db: Session,
        client: Optional[WhatsAppClient] = None,
        *,
        invoice_template: Optional[str] = None,
        status_template: Optional[str] = None,
        language: Optional[str] = None,
    ) -> None:
        super().__init__(db)
        self.client = client
        self.invoice_template = invoice_template or settings.whatsapp_invoice_template
        self.status_template = status_template or settings.whatsapp_status_template
        self.language = language or settings.whatsapp_template_language

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def normalize_recipient(self, raw: Optional[str]) -> str:
        return normalize_recipient(raw)

    @BaseService.measure_operation("send_invoice")
    def send_invoice(self, booking: Booking, artifact: InvoiceArtifact) -> NotificationOutcome:
        """
        Upload the invoice PDF and send the purchase receipt template.

        Raises:
            InvalidRecipientException: If the booking's mobile number is unusable
            UpstreamServiceException: If the provider fails or times out
        """
        if self.client is None:
            return self._disabled(EVENT_INVOICE, booking)

        recipient = normalize_recipient(booking.mobile_number)
        client = self.client

        def dispatch() -> Dict[str, Any]:
            try:
                media_id = client.upload_media(artifact.path, mime_type="application/pdf")
            except OSError as exc:
                raise ServiceException(
                    "Invoice file could not be read for upload",
                    code="INVOICE_UNREADABLE",
                    details={"order_id": booking.order_id},
                ) from exc
            components: List[Dict[str, Any]] = [
                {
                    "type": "header",
                    "parameters": [
                        {
                            "type": "document",
                            "document": {"id": media_id, "filename": artifact.filename},
                        }
                    ],
                },
                {
                    "type": "body",
                    "parameters": [
                        {"type": "text", "text": f"{settings.currency_prefix}{artifact.total}"},
                        {"type": "text", "text": settings.issuer_address},
                        {"type": "text", "text": "receipt"},
                    ],
                },
            ]
            return client.send_template(
                recipient, self.invoice_template, language=self.language, components=components
            )

        return self._dispatch(EVENT_INVOICE, booking, recipient, dispatch)

    @BaseService.measure_operation("send_status_change")
    def send_status_change(
        self,
        booking: Booking,
        new_status: BookingStatus,
        shipment: Optional[Shipment] = None,
    ) -> NotificationOutcome:
        """
        Tell the customer their order moved to a new status.

        Raises:
            InvalidRecipientException: If the booking's mobile number is unusable
            UpstreamServiceException: If the provider fails or times out
        """
        if self.client is None:
            return self._disabled(EVENT_STATUS_CHANGE, booking)

        recipient = normalize_recipient(booking.mobile_number)
        if shipment is not None:
            shipment_text = f"Transport: {shipment.transport_name}, LR No: {shipment.lr_number}"
            if shipment.transport_contact:
                shipment_text += f", Contact: {shipment.transport_contact}"
        else:
            shipment_text = "N/A"

        components = [
            {
                "type": "body",
                "parameters": [
                    {"type": "text", "text": booking.customer_name or "Customer"},
                    {"type": "text", "text": booking.order_id},
                    {"type": "text", "text": new_status.value.capitalize()},
                    {"type": "text", "text": shipment_text},
                ],
            }
        ]
        client = self.client

        def dispatch() -> Dict[str, Any]:
            return client.send_template(
                recipient, self.status_template, language=self.language, components=components
            )

        return self._dispatch(EVENT_STATUS_CHANGE, booking, recipient, dispatch)

    def _disabled(self, event_type: str, booking: Booking) -> NotificationOutcome:
        self.logger.debug("WhatsApp disabled, not sending %s for %s", event_type, booking.order_id)
        prometheus_metrics.record_notification_outcome(event_type, NotificationOutcome.DISABLED)
        return NotificationOutcome.disabled()

    def _dispatch(
        self, event_type: str, booking: Booking, recipient: str, dispatch: Any
    ) -> NotificationOutcome:
        started = time.monotonic()
        try:
            response = dispatch()
        except WhatsAppError as exc:
            prometheus_metrics.record_notification_outcome(event_type, NotificationOutcome.FAILED)
            self.logger.warning(
                "WhatsApp %s for order %s to %s failed: %s",
                event_type,
                booking.order_id,
                _mask(recipient),
                exc,
            )
            raise UpstreamServiceException(
                "WhatsApp delivery failed",
                code="NOTIFICATION_FAILED",
                details={
                    "event_type": event_type,
                    "status_code": exc.status_code,
                    "error_type": exc.error_type,
                },
            ) from exc
        except ServiceException:
            prometheus_metrics.record_notification_outcome(event_type, NotificationOutcome.FAILED)
            raise
        finally:
            prometheus_metrics.observe_notification_dispatch(
                event_type, time.monotonic() - started
            )

        messages = response.get("messages")
        first = messages[0] if isinstance(messages, list) and messages else None
        message_id = first.get("id") if isinstance(first, dict) else None
        prometheus_metrics.record_notification_outcome(event_type, NotificationOutcome.SENT)
        self.log_operation(
            f"whatsapp_{event_type}",
            order_id=booking.order_id,
            recipient=_mask(recipient),
            message_id=message_id,
        )
        return NotificationOutcome.sent(message_id)
