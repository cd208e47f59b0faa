# backend/app/schemas/customer.py
"""Customer response schemas."""

from datetime import datetime
from typing import Optional

from .base import StandardizedModel


class CustomerResponse(StandardizedModel):
    id: str
    customer_name: str
    address: Optional[str] = None
    mobile_number: Optional[str] = None
    email: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    customer_type: str
    created_at: Optional[datetime] = None
