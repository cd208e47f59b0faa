# backend/app/repositories/customer_repository.py
"""Repository for standing customer records."""

from typing import List

from sqlalchemy.orm import Session

from ..models.customer import Customer
from .base_repository import BaseRepository


class CustomerRepository(BaseRepository[Customer]):
    """Customer lookups used by booking validation and the customer listing."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Customer)

    def list_customers(self) -> List[Customer]:
        return self._execute_query(self._build_query().order_by(Customer.customer_name))
