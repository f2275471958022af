"""
dependencies.py — FastAPI Dependencies

Request-scoped collaborators of the API: the payment gateway client and the
buyer identity. The DB session dependency lives in `database.get_db`.
"""

from typing import Optional

from fastapi import Header, HTTPException

from .clients import PaymentGatewayClient


def get_gateway():
    """Yields a gateway client for one request and closes it afterwards."""
    gateway = PaymentGatewayClient()
    try:
        yield gateway
    finally:
        gateway.close()


def get_current_buyer(x_user_id: Optional[str] = Header(default=None, alias="X-User-Id")) -> str:
    """
    Returns the id of the signed-in buyer.

    Sign-in and token verification happen in the upstream auth layer, which
    forwards the verified user id in the `X-User-Id` header.

    Raises:
        HTTPException(401): If no authenticated user was forwarded.
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Authentication required.")
    return x_user_id
