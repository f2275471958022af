from datetime import datetime, timezone
import uuid

from sqlalchemy import JSON, CheckConstraint, Column, DateTime, Integer, Numeric, String

from .database import Base
from .models import OrderStatus


def _utcnow():
    return datetime.now(timezone.utc)


# Defines the ORM model for a product in the catalog. Also the inventory record.
class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
    )

    id = Column(String(64), primary_key=True, default=lambda: uuid.uuid4().hex)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)  # authoritative price
    quantity = Column(Integer, nullable=False, default=0)  # available stock
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


# Defines the ORM model for a placed order. Written once per successful checkout.
class Order(Base):
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)  # also the gateway reference id
    buyer_id = Column(String(64), index=True, nullable=False)
    line_items = Column(JSON, nullable=False, default=list)  # snapshot at purchase time
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_transaction_id = Column(String(128), nullable=False)
    payment = Column(JSON)  # raw gateway result
    status = Column(String(32), nullable=False, default=OrderStatus.NOT_PROCESS.value)
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
