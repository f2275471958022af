"""
exceptions.py — Error Taxonomy of the Checkout Workflow

Each error carries the HTTP status the API layer answers with and a message
that is safe to show to the buyer. Gateway or database internals never go
into `message`; they are logged where the error is raised.

    ValidationError         400  malformed or tampered cart, no side effects
    InsufficientStockError  409  not enough stock, retry with other quantities
    PaymentError            402  gateway declined or unreachable, no side effects
    PersistenceError        500  payment captured but order not recorded
"""

from typing import Optional


class CheckoutError(Exception):
    """Base class for all checkout failures."""

    http_status = 500
    default_message = "Checkout failed."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CheckoutError):
    http_status = 400
    default_message = "Invalid cart."


class InsufficientStockError(CheckoutError):
    http_status = 409
    default_message = "Insufficient stock."


class PaymentError(CheckoutError):
    http_status = 402
    default_message = "Payment gateway rejected."


class PersistenceError(CheckoutError):
    """
    Raised when the charge went through but the order could not be stored.

    Attributes:
        transaction_id (str): Gateway transaction that needs manual reconciliation.
    """

    http_status = 500
    default_message = "Checkout failed."

    def __init__(self, message: Optional[str] = None, transaction_id: Optional[str] = None):
        super().__init__(message)
        self.transaction_id = transaction_id
