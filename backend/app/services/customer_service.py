# backend/app/services/customer_service.py
"""Read access to standing customers for booking forms."""

from typing import List, Optional

from sqlalchemy.orm import Session

from ..models.customer import Customer
from ..repositories.customer_repository import CustomerRepository
from ..repositories.factory import RepositoryFactory
from .base import BaseService


class CustomerService(BaseService):
    def __init__(self, db: Session, customer_repository: Optional[CustomerRepository] = None):
        super().__init__(db)
        self.customer_repository = (
            customer_repository or RepositoryFactory.create_customer_repository(db)
        )

    @BaseService.measure_operation("list_customers")
    def list_customers(self) -> List[Customer]:
        return self.customer_repository.list_customers()
