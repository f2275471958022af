"""
orders.py — Order Ledger

Persists placed orders. An order row is only ever inserted by the checkout
workflow after the charge succeeded and stock was decremented; it is not
updated here.
"""

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import ChargeResult, OrderStatus
from .tables import Order


class OrderLedger:
    """Order access bound to one database session. Like InventoryStore, it never commits."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, order_id: str, buyer_id: str, line_items: List[dict],
               total: Decimal, charge: ChargeResult) -> Order:
        """
        Adds a new order to the current transaction and flushes it.

        Args:
            order_id (str): Id generated before the charge (gateway reference id).
            buyer_id (str): Authenticated buyer.
            line_items (list[dict]): Snapshot of `_id`, `name`, `price`, `qty` per line.
            total (Decimal): Trusted total that was charged.
            charge (ChargeResult): Successful gateway result.

        Returns:
            Order: The pending order row.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the insert fails.
        """
        order = Order(
            id=order_id,
            buyer_id=buyer_id,
            line_items=line_items,
            total_amount=total,
            payment_transaction_id=charge.transaction_id,
            payment=charge.raw,
            status=OrderStatus.NOT_PROCESS.value,
        )
        self.session.add(order)
        self.session.flush()
        return order

    def get(self, order_id: str) -> Optional[Order]:
        return self.session.get(Order, order_id)

    def list_for_buyer(self, buyer_id: str) -> List[Order]:
        """All orders of one buyer, newest first."""
        stmt = (
            select(Order)
            .where(Order.buyer_id == buyer_id)
            .order_by(Order.created_at.desc())
        )
        return list(self.session.scalars(stmt))
