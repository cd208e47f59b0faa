# backend/app/models/base_enum.py
"""
Safe enum helpers for SQLAlchemy.

SQLAlchemy's Enum type persists member NAMES by default. Our enums are
(str, Enum) with lowercase values ('on', 'pieces', ...) that are also what
raw SQL and seed scripts write, so columns must persist VALUES instead.

Usage:
    from app.models.base_enum import create_safe_enum

    class Product(Base):
        per = Column(create_safe_enum(ProductUnit, "product_unit"), nullable=False)
"""

from enum import Enum
from typing import Sequence, Type

from sqlalchemy import Enum as SAEnum


def create_safe_enum(
    enum_class: Type[Enum],
    name: str,
    *,
    native_enum: bool = False,
    validate_strings: bool = True,
) -> SAEnum:
    """
    Create a SQLAlchemy Enum that stores enum values (not names).

    Non-native by default: the column is a VARCHAR with a CHECK constraint,
    which behaves the same on PostgreSQL and SQLite.
    """
    return SAEnum(
        enum_class,
        name=name,
        native_enum=native_enum,
        create_constraint=not native_enum,
        validate_strings=validate_strings,
        values_callable=_get_enum_values,
    )


def _get_enum_values(enum_class: Type[Enum]) -> Sequence[str]:
    return [member.value for member in enum_class]
