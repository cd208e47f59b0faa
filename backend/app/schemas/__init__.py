# backend/app/schemas/__init__.py
"""
Pydantic schemas for the booking API.

Request models are permissive and leave ordered business checks to the
services; response models are strict.
"""

from .base import Money, StandardizedModel
from .booking import (
    BookingCreateRequest,
    BookingCreateResponse,
    BookingLineRequest,
    BookingSummaryResponse,
    FilteredBookingResponse,
    LineItemResponse,
    NotificationOutcomeResponse,
    ShipmentDetailsRequest,
    ShipmentResponse,
    StatusChangeData,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from .catalog import CategoryListResponse, ProductListResponse, ProductResponse
from .customer import CustomerResponse

__all__ = [
    "BookingCreateRequest",
    "BookingCreateResponse",
    "BookingLineRequest",
    "BookingSummaryResponse",
    "CategoryListResponse",
    "CustomerResponse",
    "FilteredBookingResponse",
    "LineItemResponse",
    "Money",
    "NotificationOutcomeResponse",
    "ProductListResponse",
    "ProductResponse",
    "ShipmentDetailsRequest",
    "ShipmentResponse",
    "StandardizedModel",
    "StatusChangeData",
    "StatusUpdateRequest",
    "StatusUpdateResponse",
]
