# backend/app/repositories/catalog_repository.py
"""
Repository for the product catalog.

Categories are data, not schema: every product sits in the single
``products`` table and is addressed by (category, product_id). Category
labels are normalized the same way on write and on lookup, so
"Ground Chakras" and "ground_chakras" name the same category.
"""

import logging
import re
from decimal import Decimal
from typing import List, Optional, Set

from sqlalchemy import func, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.catalog import Product, ProductAvailability, ProductType, ProductUnit
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_category(label: str) -> str:
    """Lowercase a category label and collapse whitespace runs to underscores."""
    return _WHITESPACE_RE.sub("_", (label or "").strip().lower())


class CatalogRepository(BaseRepository[Product]):
    """Read-side catalog queries plus the seeding helpers used by admin tooling."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Product)

    # Categories

    def list_categories(self) -> Set[str]:
        try:
            rows = self.db.query(ProductType.name).all()
            return {name for (name,) in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing product types: {str(e)}")
            raise RepositoryException(f"Failed to list product types: {str(e)}")

    def get_category(self, category: str) -> Optional[ProductType]:
        return (
            self.db.query(ProductType)
            .filter(ProductType.name == normalize_category(category))
            .first()
        )

    def category_exists(self, category: str) -> bool:
        return self.get_category(category) is not None

    def create_category(self, name: str, *, tracks_inventory: bool = False) -> ProductType:
        """Register a new product type. Does not commit."""
        product_type = ProductType(name=normalize_category(name), tracks_inventory=tracks_inventory)
        try:
            self.db.add(product_type)
            self.db.flush()
            return product_type
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating product type {name}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to create product type: {str(e)}") from e

    # Products

    def get_product(self, category: str, product_id: int) -> Optional[Product]:
        try:
            return (
                self._build_query()
                .filter(
                    Product.category == normalize_category(category),
                    Product.product_id == product_id,
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting product {category}#{product_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve product: {str(e)}")

    def is_available(self, category: str, product_id: int) -> bool:
        product = self.get_product(category, product_id)
        return product is not None and product.is_available

    def list_available(self, category: str) -> List[Product]:
        """Products of one category whose availability flag is on."""
        query = (
            self._build_query()
            .filter(
                Product.category == normalize_category(category),
                Product.status == ProductAvailability.ON,
            )
            .order_by(Product.product_id)
        )
        return self._execute_query(query)

    def list_all_available(self) -> List[Product]:
        """Available products across every category."""
        query = (
            self._build_query()
            .filter(Product.status == ProductAvailability.ON)
            .order_by(Product.category, Product.product_id)
        )
        return self._execute_query(query)

    def add_product(
        self,
        category: str,
        *,
        serial_number: str,
        productname: str,
        price: Decimal,
        per: ProductUnit = ProductUnit.PIECES,
        discount: Decimal = Decimal("0"),
        image: Optional[str] = None,
        status: ProductAvailability = ProductAvailability.ON,
        stock: Optional[int] = None,
        fast_running: bool = False,
    ) -> Product:
        """
        Add a product to an existing category, numbering it within that category.

        Raises:
            RepositoryException: If the category does not exist or the insert fails
        """
        name = normalize_category(category)
        if not self.category_exists(name):
            raise RepositoryException(f"Product type '{name}' does not exist")

        next_id = (
            self.db.query(func.coalesce(func.max(Product.product_id), 0))
            .filter(Product.category == name)
            .scalar()
        ) + 1
        return self.create(
            category=name,
            product_id=next_id,
            serial_number=serial_number,
            productname=productname,
            price=price,
            per=per,
            discount=discount,
            image=image,
            status=status,
            stock=stock,
            fast_running=fast_running,
        )

    def reserve_stock(self, category: str, product_id: int, quantity: int) -> bool:
        """
        Atomically decrement stock when enough units remain.

        A single conditional UPDATE, so two concurrent bookings cannot both
        take the last units. Products outside inventory-tracking categories, or
        without a stock count, always succeed.
        Does not commit.
        """
        name = normalize_category(category)
        product = self.get_product(name, product_id)
        if product is None:
            return False
        if product.stock is None or not product.product_type.tracks_inventory:
            return True

        try:
            result = self.db.execute(
                update(Product)
                .where(
                    Product.category == name,
                    Product.product_id == product_id,
                    Product.stock >= quantity,
                )
                .values(stock=Product.stock - quantity)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error reserving stock for {name}#{product_id}: {str(e)}")
            raise RepositoryException(f"Failed to reserve stock: {str(e)}") from e

        reserved = result.rowcount == 1
        # The UPDATE bypasses the identity map; reload stock on next access
        self.db.expire(product, ["stock"])
        if not reserved:
            self.logger.info(
                "Stock reservation refused for %s#%s (requested %s)", name, product_id, quantity
            )
        return reserved
