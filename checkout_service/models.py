"""
models.py — Data Models for Checkout Processing

This module defines the data structures exchanged with the storefront frontend
and the payment gateway. It uses Pydantic models to ensure type safety and
automatic validation of incoming data.

The cart is untrusted: prices and names sent by the browser are advisory only.
Business validation of the cart (empty cart, missing ids, bad quantities) is
done by the checkout workflow so that it yields a proper ValidationError.

Models:
    - CartItem: A single line of the buyer's cart as sent by the browser.
    - CheckoutRequest: The checkout payload (payment nonce + cart).
    - OrderLineItem / OrderOut: Stored order snapshot as returned by the API.
    - CheckoutResponse / ErrorResponse: API response bodies.
    - ChargeResult: Outcome of a payment gateway charge.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


class OrderStatus(str, Enum):
    """Fulfilment states of an order. Only admins move an order past NOT_PROCESS."""
    NOT_PROCESS = "Not Process"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCEL = "Cancel"


class CartItem(BaseModel):
    """
    Represents a single product line in the buyer's cart.

    Attributes:
        product_id (str): Product identifier, sent by the browser as `_id`.
        name (str): Display name as seen by the buyer (ignored by the server).
        price (Decimal): Price as seen by the buyer. Must match the stored price exactly.
        qty (int): Requested quantity, a JSON integer. Defaults to 1 when absent.
    """
    model_config = ConfigDict(populate_by_name=True)

    product_id: Optional[str] = Field(default=None, alias="_id")
    name: Optional[str] = None
    price: Optional[Decimal] = None
    qty: Optional[StrictInt] = None


class CheckoutRequest(BaseModel):
    """
    Represents a checkout submitted by the storefront.

    Attributes:
        nonce (str): Opaque payment method token from the gateway's drop-in UI.
        cart (List[CartItem]): The buyer's cart.
    """
    nonce: str = ""
    cart: List[CartItem] = Field(default_factory=list)


class OrderLineItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="_id")
    name: str
    price: Decimal
    qty: int


class OrderOut(BaseModel):
    """Order as returned to the buyer."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    buyer_id: str
    line_items: List[OrderLineItem]
    total_amount: Decimal
    payment_transaction_id: str
    status: OrderStatus
    created_at: Optional[datetime] = None


class CheckoutResponse(BaseModel):
    ok: bool = True
    orderId: str
    transactionId: str
    status: str
    amount: Decimal
    order: OrderOut


class ErrorResponse(BaseModel):
    ok: bool = False
    message: str


class ClientTokenResponse(BaseModel):
    clientToken: str


@dataclass
class ChargeResult:
    """
    Outcome of a charge against the payment gateway.

    Attributes:
        success (bool): True if the gateway accepted the charge.
        transaction_id (str): Gateway transaction id (only on success).
        status (str): Gateway transaction status, e.g. "submitted_for_settlement".
        error (str): Gateway error message (only on failure, never shown to the buyer).
        raw (dict): The gateway response body, stored with the order.
    """
    success: bool
    transaction_id: Optional[str] = None
    status: Optional[str] = None
    error: Optional[str] = None
    raw: dict = field(default_factory=dict)


@dataclass
class CheckoutResult:
    order: Any
    transaction_id: str
    status: str
    amount: Decimal
