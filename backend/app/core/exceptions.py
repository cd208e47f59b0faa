# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the booking backend.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying the subclass status code."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class UpstreamServiceException(DomainException):
    """Raised when an external provider errors out or times out."""

    status_code = status.HTTP_502_BAD_GATEWAY


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class DuplicateOrderException(ConflictException):
    """Raised when a booking is created with an order id that already exists."""

    def __init__(self, order_id: str):
        super().__init__(
            message=f"Booking with order_id '{order_id}' already exists",
            code="DUPLICATE_ORDER_ID",
            details={"order_id": order_id},
        )


class InsufficientStockException(ConflictException):
    """Raised when an inventory-tracked product cannot cover the requested quantity."""

    def __init__(self, category: str, product_id: int, requested: int):
        super().__init__(
            message=f"Insufficient stock for product {product_id} of type {category}",
            code="INSUFFICIENT_STOCK",
            details={"product_type": category, "id": product_id, "requested": requested},
        )


class InvalidRecipientException(ValidationException):
    """Raised when a customer's mobile number cannot be turned into an E.164 recipient."""

    def __init__(self, raw_number: Optional[str]):
        super().__init__(
            message="Invalid mobile number format",
            code="INVALID_RECIPIENT",
            details={"suffix": (raw_number or "")[-4:]},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
