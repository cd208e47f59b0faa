# backend/app/services/booking_service.py
"""
Booking Service

Owns the two user-facing booking operations and the read views around them.

create_booking:
    validate -> transaction{insert, reserve stock, render invoice} -> send invoice
advance_status:
    validate -> transaction{update status, record shipment} -> send status change

Notifications always run after the commit. Their failure is reported on the
result and never undoes the booking or the status change.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
import logging
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.exceptions import (
    DomainException,
    InsufficientStockException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..domain.booking_draft import BookingDraft, LineItem, compute_total
from ..models.booking import FULFILMENT_STATUSES, Booking, BookingStatus
from ..models.shipment import Shipment
from ..repositories.booking_repository import BookingRepository
from ..repositories.catalog_repository import CatalogRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.shipment_repository import ShipmentRepository
from ..schemas.booking import BookingCreateRequest, ShipmentDetailsRequest
from .base import BaseService
from .booking_validator import BookingValidator
from .invoice_renderer import InvoiceArtifact, InvoiceRenderer
from .notification_service import NotificationOutcome, NotificationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingCreateResult:
    booking: Booking
    artifact: InvoiceArtifact
    notification: NotificationOutcome


@dataclass(frozen=True)
class StatusChangeResult:
    booking: Booking
    shipment: Optional[Shipment]
    notification: NotificationOutcome


@dataclass(frozen=True)
class FulfilmentRow:
    """A booking on the fulfilment board with its total recomputed from line items."""

    booking: Booking
    items: Tuple[LineItem, ...]
    total: Decimal
    shipment: Optional[Shipment]


class BookingService(BaseService):
    """
    Lifecycle controller for bookings.

    Validation always completes before the first write, so a rejected
    request leaves no trace in the database or in invoice storage.
    """

    def __init__(
        self,
        db: Session,
        *,
        validator: Optional[BookingValidator] = None,
        renderer: Optional[InvoiceRenderer] = None,
        notification_service: Optional[NotificationService] = None,
        booking_repository: Optional[BookingRepository] = None,
        catalog_repository: Optional[CatalogRepository] = None,
        shipment_repository: Optional[ShipmentRepository] = None,
    ):
        super().__init__(db)
        self.validator = validator or BookingValidator(db)
        self.renderer = renderer or InvoiceRenderer()
        self.notification_service = notification_service or NotificationService(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.catalog_repository = (
            catalog_repository or RepositoryFactory.create_catalog_repository(db)
        )
        self.shipment_repository = (
            shipment_repository or RepositoryFactory.create_shipment_repository(db)
        )

    @BaseService.measure_operation("create_booking")
    def create_booking(self, payload: BookingCreateRequest) -> BookingCreateResult:
        """
        Create a booking and its invoice, then send the invoice to the customer.

        Raises:
            ValidationException: Malformed or missing input
            NotFoundException: Unknown customer or unavailable product
            ConflictException: Duplicate order id or insufficient stock
            ServiceException: Storage or rendering failure
        """
        draft = self.validator.validate(payload)
        created_at = datetime.now(timezone.utc)
        artifact: Optional[InvoiceArtifact] = None

        try:
            with self.transaction():
                # Insert first: a duplicate order id must fail before its
                # invoice path is written over.
                booking = self.booking_repository.insert(draft, None, created_at=created_at)
                self._reserve_stock(draft)
                artifact = self.renderer.render(
                    draft.order_id,
                    draft.customer,
                    draft.customer_type,
                    draft.items,
                    created_at,
                )
                self.booking_repository.update_invoice_path(booking, str(artifact.path))
        except RepositoryException as exc:
            self._discard_uncommitted(artifact)
            raise ServiceException(
                "Failed to create booking", code="STORAGE_FAILURE"
            ) from exc
        except Exception:
            self._discard_uncommitted(artifact)
            raise

        self.log_operation(
            "create_booking",
            booking_id=booking.id,
            order_id=booking.order_id,
            total=str(draft.total),
        )

        notification = self._notify(
            booking, lambda: self.notification_service.send_invoice(booking, artifact)
        )
        return BookingCreateResult(booking=booking, artifact=artifact, notification=notification)

    @BaseService.measure_operation("advance_status")
    def advance_status(
        self,
        booking_id: str,
        status: object,
        shipment: Optional[ShipmentDetailsRequest] = None,
    ) -> StatusChangeResult:
        """
        Set a booking's status, recording shipment details when dispatching.

        Any of the five statuses may be set from any other. Shipment details
        are only read when the target is ``dispatched``; when present they
        must name both the carrier and the LR number.

        Raises:
            ValidationException: Unknown status or incomplete shipment details
            NotFoundException: Unknown booking
            ServiceException: Storage failure (nothing is written)
        """
        new_status = BookingStatus.parse(status)
        if new_status is None:
            raise ValidationException(
                "Invalid status",
                code="INVALID_STATUS",
                details={"status": status, "allowed": [s.value for s in BookingStatus]},
            )

        details = None
        if new_status is BookingStatus.DISPATCHED and shipment is not None:
            details = self._check_shipment(shipment)

        try:
            with self.transaction():
                booking = self.booking_repository.update_status(booking_id, new_status)
                shipment_row = self._record_shipment(booking, details)
        except RepositoryException as exc:
            raise ServiceException(
                "Failed to update booking status", code="STORAGE_FAILURE"
            ) from exc

        self.log_operation(
            "advance_status",
            booking_id=booking.id,
            order_id=booking.order_id,
            status=new_status.value,
        )

        notification = self._notify(
            booking,
            lambda: self.notification_service.send_status_change(
                booking, new_status, shipment_row
            ),
        )
        return StatusChangeResult(booking=booking, shipment=shipment_row, notification=notification)

    @BaseService.measure_operation("get_invoice")
    def get_invoice(self, reference: str) -> Tuple[Booking, InvoiceArtifact]:
        """
        Resolve an invoice reference and return its artifact, regenerating it if missing.

        Raises:
            ValidationException: Malformed reference
            NotFoundException: No booking matches, even after the slug fallback
        """
        booking = self.booking_repository.resolve_invoice_reference(reference)
        artifact = self.renderer.ensure(booking)

        if booking.pdf != str(artifact.path):
            with self.transaction():
                self.booking_repository.update_invoice_path(booking, str(artifact.path))
            self.logger.info("Invoice path for %s updated to %s", booking.order_id, artifact.filename)

        return booking, artifact

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self, status: Optional[str] = None, customer_type: Optional[str] = None
    ) -> List[Booking]:
        parsed = None
        if status:
            parsed = BookingStatus.parse(status)
            if parsed is None:
                raise ValidationException(
                    "Invalid status",
                    code="INVALID_STATUS",
                    details={"status": status, "allowed": [s.value for s in BookingStatus]},
                )
        return self.booking_repository.list_by_status(parsed, customer_type or None)

    @BaseService.measure_operation("list_filtered_bookings")
    def list_filtered_bookings(self, status: Optional[str] = None) -> List[FulfilmentRow]:
        """Fulfilment board; a status outside paid..delivered is ignored."""
        parsed = BookingStatus.parse(status) if status else None
        if parsed is not None and parsed not in FULFILMENT_STATUSES:
            parsed = None

        rows = []
        for booking in self.booking_repository.list_filtered(parsed):
            items = tuple(LineItem.from_json(entry) for entry in booking.products or [])
            rows.append(
                FulfilmentRow(
                    booking=booking,
                    items=items,
                    total=compute_total(items),
                    shipment=booking.shipment,
                )
            )
        return rows

    # Helpers

    def _reserve_stock(self, draft: BookingDraft) -> None:
        for item in draft.items:
            reserved = self.catalog_repository.reserve_stock(
                item.product_type, item.product_id, item.quantity
            )
            if not reserved:
                raise InsufficientStockException(
                    item.product_type, item.product_id, item.quantity
                )

    def _check_shipment(self, shipment: ShipmentDetailsRequest) -> Optional[dict]:
        if shipment.is_empty():
            return None
        transport_name = (shipment.transport_name or "").strip()
        lr_number = (shipment.lr_number or "").strip()
        missing = [
            name
            for name, value in (("transport_name", transport_name), ("lr_number", lr_number))
            if not value
        ]
        if missing:
            raise ValidationException(
                "Transport name and LR number are required for dispatch",
                code="INCOMPLETE_SHIPMENT",
                details={"missing": missing},
            )
        return {
            "transport_name": transport_name,
            "lr_number": lr_number,
            "transport_contact": (shipment.transport_contact or "").strip() or None,
        }

    def _record_shipment(self, booking: Booking, details: Optional[dict]) -> Optional[Shipment]:
        if booking.status != BookingStatus.DISPATCHED.value:
            return None

        existing = self.shipment_repository.get_for_order(booking.order_id)
        if details is None:
            return existing
        if existing is not None:
            self.logger.warning(
                "Shipment already recorded for order %s, keeping LR %s",
                booking.order_id,
                existing.lr_number,
            )
            return existing
        return self.shipment_repository.record(booking.order_id, **details)

    def _discard_uncommitted(self, artifact: Optional[InvoiceArtifact]) -> None:
        if artifact is not None:
            self.logger.warning("Booking not committed, removing invoice %s", artifact.path)
            self.renderer.discard(artifact)

    def _notify(
        self, booking: Booking, send: Callable[[], NotificationOutcome]
    ) -> NotificationOutcome:
        try:
            return send()
        except DomainException as exc:
            self.logger.warning(
                "Notification for order %s not delivered: %s (%s)",
                booking.order_id,
                exc.message,
                exc.code,
            )
            return NotificationOutcome.failed(exc.message)
