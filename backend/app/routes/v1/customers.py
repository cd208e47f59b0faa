# backend/app/routes/v1/customers.py
"""Customer routes - standing customers that bookings can reference."""

import asyncio
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies.services import get_customer_service
from ...core.exceptions import DomainException
from ...schemas.customer import CustomerResponse
from ...services.customer_service import CustomerService

router = APIRouter(tags=["customers-v1"])


@router.get("", response_model=List[CustomerResponse])
async def list_customers(
    service: CustomerService = Depends(get_customer_service),
) -> List[CustomerResponse]:
    try:
        customers = await asyncio.to_thread(service.list_customers)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return [CustomerResponse.model_validate(customer) for customer in customers]
