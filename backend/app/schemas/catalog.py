# backend/app/schemas/catalog.py
"""Catalog response schemas."""

from typing import List, Optional

from pydantic import Field

from ..models.catalog import ProductAvailability, ProductUnit
from ._strict_base import StrictModel
from .base import Money, StandardizedModel


class ProductResponse(StandardizedModel):
    """A bookable product, addressed by (product_type, id)."""

    product_type: str = Field(..., validation_alias="category")
    id: int = Field(..., validation_alias="product_id")
    serial_number: str
    productname: str
    price: Money
    per: ProductUnit
    discount: Money
    image: Optional[str] = None
    status: ProductAvailability
    stock: Optional[int] = None
    fast_running: bool = False


class CategoryListResponse(StrictModel):
    categories: List[str]


class ProductListResponse(StrictModel):
    product_type: Optional[str] = None
    products: List[ProductResponse]
