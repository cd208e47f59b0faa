# backend/app/repositories/booking_repository.py
"""
Booking Repository

Data access for bookings. Bookings are self-contained: the customer snapshot
and the priced line items live on the row, so nothing here needs to join the
catalog or the customer table to describe an order.

Transactions are owned by the service layer; methods here only flush.
"""

from datetime import datetime, timezone
import logging
import re
from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from ..core.constants import INVOICE_SUFFIX, ORDER_ID_PATTERN
from ..core.exceptions import (
    DuplicateOrderException,
    NotFoundException,
    RepositoryException,
    ValidationException,
)
from ..domain.booking_draft import BookingDraft
from ..models.booking import FULFILMENT_STATUSES, Booking, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_ORDER_ID_RE = re.compile(ORDER_ID_PATTERN)


def _is_order_id_violation(exc: IntegrityError) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return "order_id" in message and ("unique" in message or "duplicate" in message)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking rows."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def insert(
        self,
        draft: BookingDraft,
        artifact_path: Optional[str],
        *,
        created_at: Optional[datetime] = None,
    ) -> Booking:
        """
        Write a new booking row from a validated draft.

        Raises:
            DuplicateOrderException: If the order id is already taken
            RepositoryException: For any other storage failure
        """
        snapshot = draft.customer
        try:
            booking = self.create(
                order_id=draft.order_id,
                customer_id=draft.customer_id,
                customer_name=snapshot.customer_name,
                address=snapshot.address,
                mobile_number=snapshot.mobile_number,
                email=snapshot.email,
                district=snapshot.district,
                state=snapshot.state,
                customer_type=draft.customer_type,
                products=draft.products_json(),
                total=draft.total,
                status=BookingStatus.BOOKED.value,
                created_at=created_at or datetime.now(timezone.utc),
                pdf=artifact_path,
            )
        except RepositoryException as exc:
            cause = exc.__cause__
            if isinstance(cause, IntegrityError) and _is_order_id_violation(cause):
                raise DuplicateOrderException(draft.order_id) from cause
            raise

        self.logger.info("Inserted booking %s (order %s)", booking.id, booking.order_id)
        return booking

    def get_by_order_id(self, order_id: str) -> Optional[Booking]:
        try:
            return (
                self._build_query()
                .options(selectinload(Booking.shipment))
                .filter(Booking.order_id == order_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking by order_id {order_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve booking: {str(e)}")

    def get(self, order_id: str) -> Booking:
        """Booking for an order id, or NotFoundException."""
        booking = self.get_by_order_id(order_id)
        if booking is None:
            raise NotFoundException(
                f"Booking with order_id '{order_id}' not found",
                code="BOOKING_NOT_FOUND",
                details={"order_id": order_id},
            )
        return booking

    def resolve_invoice_reference(self, reference: str) -> Booking:
        """
        Resolve a download reference to its booking.

        Accepts ``<order_id>``, ``<order_id>.pdf`` and the file-name form
        ``<customer_slug>-<order_id>[.pdf]`` used in invoice links. A direct
        match on the whole reference wins over the slug fallback.

        Raises:
            ValidationException: If the reference has characters outside the order id alphabet
            NotFoundException: If no booking matches either way
        """
        order_ref = reference
        if order_ref.endswith(INVOICE_SUFFIX):
            order_ref = order_ref[: -len(INVOICE_SUFFIX)]
        if not order_ref or not _ORDER_ID_RE.fullmatch(order_ref):
            raise ValidationException(
                "Invalid order_id format",
                code="INVALID_ORDER_ID",
                details={"order_id": reference},
            )

        booking = self.get_by_order_id(order_ref)
        if booking is not None:
            return booking

        parts = order_ref.split("-")
        if len(parts) > 1:
            fallback = "-".join(parts[1:])
            self.logger.debug("Direct lookup failed for %s, trying %s", order_ref, fallback)
            booking = self.get_by_order_id(fallback)
            if booking is not None:
                return booking

        raise NotFoundException(
            "Invoice not found",
            code="INVOICE_NOT_FOUND",
            details={
                "order_id": order_ref,
                "hint": "Use the order_id returned when the booking was created",
            },
        )

    def update_status(self, booking_id: str, status: BookingStatus) -> Booking:
        """
        Set a booking's status.

        Raises:
            NotFoundException: If booking not found
            RepositoryException: If update fails
        """
        try:
            booking = self.get_by_id(booking_id)
            if not booking:
                raise NotFoundException(
                    f"Booking with id {booking_id} not found",
                    code="BOOKING_NOT_FOUND",
                    details={"id": booking_id},
                )

            previous = booking.status
            booking.status = status.value
            self.db.flush()
            self.logger.info(f"Booking {booking_id} status {previous} -> {status.value}")
            return booking

        except NotFoundException:
            raise
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating status of booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to update booking status: {str(e)}") from e

    def update_invoice_path(self, booking: Booking, path: str) -> Booking:
        booking.pdf = path
        self.db.flush()
        return booking

    def list_by_status(
        self,
        status: Optional[BookingStatus] = None,
        customer_type: Optional[str] = None,
    ) -> List[Booking]:
        query = self._build_query()
        if status is not None:
            query = query.filter(Booking.status == status.value)
        if customer_type:
            query = query.filter(Booking.customer_type == customer_type)
        return self._execute_query(query.order_by(Booking.created_at.desc(), Booking.id))

    def list_filtered(self, status: Optional[BookingStatus] = None) -> List[Booking]:
        """Bookings on the fulfilment board (paid onwards) with their shipment details."""
        allowed = [s.value for s in FULFILMENT_STATUSES]
        query = (
            self._build_query()
            .options(selectinload(Booking.shipment))
            .populate_existing()
            .filter(Booking.status.in_(allowed))
        )
        if status is not None and status.value in allowed:
            query = query.filter(Booking.status == status.value)
        return self._execute_query(query.order_by(Booking.created_at.desc(), Booking.id))
