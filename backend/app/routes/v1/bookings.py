# backend/app/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    GET /invoice/{order_id} - Download an invoice (regenerated if missing)
    GET /filtered - Fulfilment board (paid onwards) with totals and shipment
    GET / - List bookings by status and customer type
    POST / - Create a booking, render its invoice and send it
    PATCH /{booking_id}/status - Move a booking to another status
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.params import Path
from fastapi.responses import FileResponse

from ...api.dependencies import get_booking_service
from ...core.exceptions import DomainException
from ...schemas.booking import (
    BookingCreateRequest,
    BookingCreateResponse,
    BookingSummaryResponse,
    FilteredBookingResponse,
    LineItemResponse,
    NotificationOutcomeResponse,
    ShipmentResponse,
    StatusChangeData,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from ...services.booking_service import BookingService
from ...services.notification_service import NotificationOutcome

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _notification_response(outcome: NotificationOutcome) -> NotificationOutcomeResponse:
    return NotificationOutcomeResponse(status=outcome.status, error=outcome.error)


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.get(
    "/filtered",
    response_model=List[FilteredBookingResponse],
)
async def list_filtered_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[FilteredBookingResponse]:
    """Bookings from paid onwards, with totals recomputed from line items."""
    try:
        rows = await asyncio.to_thread(booking_service.list_filtered_bookings, status_filter)
    except DomainException as e:
        handle_domain_exception(e)

    response = []
    for row in rows:
        summary = FilteredBookingResponse.model_validate(row.booking)
        response.append(
            summary.model_copy(
                update={
                    "total": row.total,
                    "items": [LineItemResponse.from_line_item(item) for item in row.items],
                    "shipment": (
                        ShipmentResponse.model_validate(row.shipment) if row.shipment else None
                    ),
                }
            )
        )
    return response


@router.get(
    "",
    response_model=List[BookingSummaryResponse],
)
async def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    customer_type: Optional[str] = Query(None),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingSummaryResponse]:
    """List bookings, newest first, optionally filtered by status and customer type."""
    try:
        bookings = await asyncio.to_thread(
            booking_service.list_bookings, status_filter, customer_type
        )
    except DomainException as e:
        handle_domain_exception(e)
    return [BookingSummaryResponse.model_validate(booking) for booking in bookings]


@router.post(
    "",
    response_model=BookingCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(
    payload: BookingCreateRequest,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingCreateResponse:
    """
    Create a booking.

    The invoice is rendered before the response is sent. WhatsApp delivery
    is reported in ``notification``; a failed send does not fail the request.
    """
    try:
        result = await asyncio.to_thread(booking_service.create_booking, payload)
    except DomainException as e:
        handle_domain_exception(e)

    booking = result.booking
    return BookingCreateResponse(
        id=booking.id,
        created_at=booking.created_at,
        customer_type=booking.customer_type,
        pdf_path=booking.pdf,
        order_id=booking.order_id,
        total=booking.total,
        notification=_notification_response(result.notification),
    )


@router.get(
    "/invoice/{order_id}",
    response_class=FileResponse,
    responses={200: {"content": {"application/pdf": {}}}},
)
async def get_invoice(
    order_id: str = Path(..., max_length=255),
    booking_service: BookingService = Depends(get_booking_service),
) -> FileResponse:
    """
    Download an invoice by order id.

    Accepts ``ORD-1``, ``ORD-1.pdf`` and the file name form
    ``<customer_slug>-ORD-1.pdf``.
    """
    try:
        _, artifact = await asyncio.to_thread(booking_service.get_invoice, order_id)
    except DomainException as e:
        handle_domain_exception(e)

    return FileResponse(
        artifact.path,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={artifact.filename}"},
    )


# ============================================================================
# SECTION 2: Routes with path parameters
# ============================================================================


@router.patch(
    "/{booking_id}/status",
    response_model=StatusUpdateResponse,
)
async def update_booking_status(
    payload: StatusUpdateRequest,
    booking_id: str = Path(..., max_length=64),
    booking_service: BookingService = Depends(get_booking_service),
) -> StatusUpdateResponse:
    """
    Set a booking's status.

    Moving to ``dispatched`` may carry carrier details (transport name and LR
    number together, contact optional) which are recorded once per order.
    """
    try:
        result = await asyncio.to_thread(
            booking_service.advance_status,
            booking_id,
            payload.status,
            payload.shipment_details(),
        )
    except DomainException as e:
        handle_domain_exception(e)

    return StatusUpdateResponse(
        data=StatusChangeData(id=result.booking.id, status=result.booking.status),
        shipment=ShipmentResponse.model_validate(result.shipment) if result.shipment else None,
        notification=_notification_response(result.notification),
    )
