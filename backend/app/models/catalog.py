# backend/app/models/catalog.py
"""
Catalog models: administrator-defined product types and their products.

Product types are open-ended and created at runtime. Every product lives in
the single ``products`` table keyed by its category name, so adding a type
never requires new storage. Product numbers are only unique inside their
category; (category, product_id) is the identity callers use.
"""

from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base
from .base_enum import create_safe_enum


class ProductUnit(str, Enum):
    """Unit of sale."""

    PIECES = "pieces"
    BOX = "box"
    PKT = "pkt"


class ProductAvailability(str, Enum):
    """Availability flag; only 'on' products can be booked."""

    ON = "on"
    OFF = "off"


class ProductType(Base):
    """A named category (e.g. "sparklers") owning a set of products."""

    __tablename__ = "product_types"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False, unique=True, index=True)
    tracks_inventory = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    products = relationship(
        "Product",
        back_populates="product_type",
        order_by="Product.product_id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<ProductType {self.name}>"


class Product(Base):
    """A sellable item inside one product type."""

    __tablename__ = "products"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    category = Column(
        String(100),
        ForeignKey("product_types.name", ondelete="CASCADE"),
        nullable=False,
    )
    product_id = Column(Integer, nullable=False)
    serial_number = Column(String(50), nullable=False)
    productname = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    per = Column(
        create_safe_enum(ProductUnit, "product_unit"),
        nullable=False,
        default=ProductUnit.PIECES,
    )
    discount = Column(Numeric(5, 2), nullable=False, default=0)
    image = Column(String(500), nullable=True)
    status = Column(
        create_safe_enum(ProductAvailability, "product_availability"),
        nullable=False,
        default=ProductAvailability.ON,
    )
    stock = Column(Integer, nullable=True)
    fast_running = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product_type = relationship("ProductType", back_populates="products")

    __table_args__ = (
        UniqueConstraint("category", "product_id", name="uq_products_category_product_id"),
        Index("ix_products_category_status", "category", "status"),
        CheckConstraint("price > 0", name="ck_products_price_positive"),
        CheckConstraint("discount >= 0 AND discount <= 100", name="ck_products_discount_range"),
        CheckConstraint("stock IS NULL OR stock >= 0", name="ck_products_stock_non_negative"),
    )

    @property
    def is_available(self) -> bool:
        return self.status == ProductAvailability.ON

    def __repr__(self) -> str:
        return f"<Product {self.category}#{self.product_id} {self.productname}>"
