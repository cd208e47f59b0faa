# backend/app/services/catalog_service.py
"""
Catalog Service

Read-side resolution of product types and products. The set of valid
categories is data, so every lookup goes through the repository rather than
a compiled-in list.
"""

import logging
from typing import List, Optional, Set

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException
from ..models.catalog import Product
from ..repositories.catalog_repository import CatalogRepository, normalize_category
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class CatalogService(BaseService):
    """Resolves category labels and product identities against the catalog."""

    def __init__(self, db: Session, catalog_repository: Optional[CatalogRepository] = None):
        super().__init__(db)
        self.catalog_repository = (
            catalog_repository or RepositoryFactory.create_catalog_repository(db)
        )

    @BaseService.measure_operation("list_categories")
    def list_categories(self) -> Set[str]:
        return self.catalog_repository.list_categories()

    @BaseService.measure_operation("list_available")
    def list_available(self, category: str) -> List[Product]:
        """
        Available products of one category.

        Raises:
            NotFoundException: If the category is not registered
        """
        name = normalize_category(category)
        if not name or not self.catalog_repository.category_exists(name):
            raise NotFoundException(
                f"Product type '{category}' not found",
                code="PRODUCT_TYPE_NOT_FOUND",
                details={"product_type": category},
            )
        return self.catalog_repository.list_available(name)

    @BaseService.measure_operation("list_all_available")
    def list_all_available(self) -> List[Product]:
        return self.catalog_repository.list_all_available()

    def get_product(self, category: str, product_id: int) -> Optional[Product]:
        return self.catalog_repository.get_product(category, product_id)

    def exists(self, category: str, product_id: int) -> bool:
        """True when the product is present and currently bookable."""
        return self.is_available(category, product_id)

    def is_available(self, category: str, product_id: int) -> bool:
        if not self.catalog_repository.category_exists(category):
            return False
        return self.catalog_repository.is_available(category, product_id)
