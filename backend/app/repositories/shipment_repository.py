# backend/app/repositories/shipment_repository.py
"""Repository for shipment records written on dispatch."""

from typing import Optional

from sqlalchemy.orm import Session

from ..models.shipment import Shipment
from .base_repository import BaseRepository


class ShipmentRepository(BaseRepository[Shipment]):
    """Shipments are insert-only."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Shipment)

    def get_for_order(self, order_id: str) -> Optional[Shipment]:
        return self.find_one_by(order_id=order_id)

    def record(
        self,
        order_id: str,
        *,
        transport_name: str,
        lr_number: str,
        transport_contact: Optional[str] = None,
    ) -> Shipment:
        """Insert the shipment row for an order. Does not commit."""
        shipment = self.create(
            order_id=order_id,
            transport_name=transport_name,
            lr_number=lr_number,
            transport_contact=transport_contact,
        )
        self.logger.info("Recorded shipment for order %s via %s", order_id, transport_name)
        return shipment
