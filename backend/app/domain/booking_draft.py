"""Booking domain values shared across validation, persistence, rendering and schemas."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional, Tuple

TWO_PLACES = Decimal("0.01")
HUNDRED = Decimal("100")


def to_money(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def compute_line_total(price: Decimal, discount: Decimal, quantity: int) -> Decimal:
    """(price - price * discount / 100) * quantity, unrounded."""
    return (price - price * discount / HUNDRED) * quantity


def compute_total(items: Iterable["LineItem"]) -> Decimal:
    """Grand total of discounted line totals, rounded to 2 decimal places."""
    return to_money(
        sum(
            (compute_line_total(item.price, item.discount, item.quantity) for item in items),
            Decimal("0"),
        )
    )


@dataclass(frozen=True)
class CustomerSnapshot:
    customer_name: str
    address: Optional[str] = None
    mobile_number: Optional[str] = None
    email: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None


@dataclass(frozen=True)
class LineItem:
    """A product line with price and discount captured at booking time."""

    product_type: str
    product_id: int
    productname: str
    price: Decimal
    discount: Decimal
    quantity: int
    per: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return to_money(compute_line_total(self.price, self.discount, self.quantity))

    def to_json(self) -> dict[str, Any]:
        # Money is stored as strings so JSON round-trips keep exact decimals
        return {
            "product_type": self.product_type,
            "id": self.product_id,
            "productname": self.productname,
            "price": str(self.price),
            "discount": str(self.discount),
            "per": self.per,
            "quantity": self.quantity,
        }

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "LineItem":
        return cls(
            product_type=str(data.get("product_type", "")),
            product_id=int(data["id"]),
            productname=str(data.get("productname") or ""),
            price=Decimal(str(data.get("price", "0"))),
            discount=Decimal(str(data.get("discount", "0"))),
            quantity=int(data.get("quantity", 0)),
            per=data.get("per"),
        )


@dataclass(frozen=True)
class BookingDraft:
    """A fully validated booking that has not been persisted yet."""

    order_id: str
    customer_id: Optional[str]
    customer_type: str
    customer: CustomerSnapshot
    items: Tuple[LineItem, ...]
    declared_total: Decimal

    @property
    def total(self) -> Decimal:
        return compute_total(self.items)

    def products_json(self) -> list[dict[str, Any]]:
        return [item.to_json() for item in self.items]
