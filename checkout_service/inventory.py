"""
inventory.py — Inventory Store

Read access to the authoritative product records and the one write path for
stock: the conditional decrement. Stock is never changed by reading a product,
adjusting the value in Python and writing it back.
"""

import uuid
from decimal import Decimal
from typing import Dict, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from .logging_config import get_logger
from .tables import Product

log = get_logger(__name__)


class InventoryStore:
    """
    Product/stock access bound to one database session.

    The store never commits. The caller owns the transaction, so several
    decrements and the order insert can be committed or rolled back together.
    """

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, product_id: str) -> Optional[Product]:
        return self.session.get(Product, product_id)

    def find_by_ids(self, product_ids: Iterable[str]) -> Dict[str, Product]:
        """
        Loads all products for the given ids in one query.

        Args:
            product_ids (Iterable[str]): Product ids, duplicates allowed.

        Returns:
            dict: Mapping of product id to Product. Unknown ids are simply absent.
        """
        ids = set(product_ids)
        if not ids:
            return {}
        rows = self.session.scalars(select(Product).where(Product.id.in_(ids)))
        return {product.id: product for product in rows}

    def conditional_decrement(self, product_id: str, amount: int) -> bool:
        """
        Atomically removes `amount` units from stock if at least that many are left.

        Issued as a single UPDATE guarded by `quantity >= amount`, so two
        concurrent checkouts for the last unit cannot both match.

        Args:
            product_id (str): Product to decrement.
            amount (int): Units to remove, must be positive.

        Returns:
            bool: True iff the stock was sufficient and the decrement was applied.
        """
        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.quantity >= amount)
            .values(quantity=Product.quantity - amount)
            .execution_options(synchronize_session=False)
        )
        applied = result.rowcount == 1
        if not applied:
            log.warning(f"[IS] Bedingtes Dekrement für {product_id} (-{amount}) nicht angewendet.")
        return applied

    def add_product(self, name: str, price, quantity: int, product_id: Optional[str] = None,
                    slug: Optional[str] = None) -> Product:
        """Inserts a product. Used to seed local databases and tests."""
        product = Product(
            id=product_id or uuid.uuid4().hex,
            name=name,
            slug=slug or "-".join(name.lower().split()),
            price=Decimal(str(price)),
            quantity=quantity,
        )
        self.session.add(product)
        self.session.flush()
        return product
