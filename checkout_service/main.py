"""
main.py — FastAPI Entry Point for the Checkout Service

This module provides the REST API consumed by the storefront frontend.
It is a thin adapter around the checkout workflow: it parses the request,
resolves the buyer and the collaborators, runs the workflow and maps its
outcome to an HTTP status and a JSON body that always carries `ok`.

Responsibilities:
    • Provide a client token for the browser's payment drop-in
    • Accept checkouts and answer with the persisted order
    • List the signed-in buyer's orders
    • Provide system health information
"""

from typing import List

import httpx
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from .clients import PaymentGatewayClient
from .database import get_db, init_db
from .dependencies import get_current_buyer, get_gateway
from .exceptions import CheckoutError
from .logging_config import get_logger, setup_logging
from .models import (
    CheckoutRequest,
    CheckoutResponse,
    ClientTokenResponse,
    ErrorResponse,
    OrderOut,
)
from .orders import OrderLedger
from .workflow import process_checkout

# Initialization
# Configure logging and initialize FastAPI app
setup_logging()
log = get_logger(__name__)
app = FastAPI(title="Storefront Checkout Service")


@app.on_event("startup")
def on_startup():
    """Creates the database tables if they don't exist yet."""
    log.info("Checkout-Service startet...")
    init_db()


# Error mapping: every error body carries ok=false
@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    return JSONResponse(status_code=exc.http_status, content={"ok": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    log.warning(f"Ungültiger Request auf {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"ok": False, "message": "Invalid request body."})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "message": str(exc.detail)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    log.critical(f"Unbekannter Fehler auf {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"ok": False, "message": "Checkout failed."})


# API Endpoint: client token for the payment drop-in
@app.get("/api/v1/checkout/token", response_model=ClientTokenResponse)
def client_token(gateway: PaymentGatewayClient = Depends(get_gateway)):
    """
    Fetches a client token from the payment gateway.

    Returns:
        dict: {"clientToken": str}

    Raises:
        HTTPException(500): If the gateway cannot issue a token.
    """
    try:
        return {"clientToken": gateway.generate_client_token()}
    except httpx.HTTPError as e:
        log.error(f"Client-Token konnte nicht erzeugt werden: {e}")
        raise HTTPException(status_code=500, detail="Could not obtain payment client token.")


# API Endpoint: Storefront → Checkout
@app.post(
    "/api/v1/checkout/payment",
    response_model=CheckoutResponse,
    responses={400: {"model": ErrorResponse}, 402: {"model": ErrorResponse},
               409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def checkout(
        payload: CheckoutRequest,
        buyer_id: str = Depends(get_current_buyer),
        db: Session = Depends(get_db),
        gateway: PaymentGatewayClient = Depends(get_gateway),
):
    """
    Charges the buyer for the cart and creates the order.

    The amount charged is computed from stored prices; the cart's prices are
    only used to detect a stale or tampered cart.

    Args:
        payload (CheckoutRequest): Nonce and cart from the storefront.
        buyer_id (str): Signed-in buyer.
        db (Session): Request-scoped DB session.
        gateway (PaymentGatewayClient): Payment gateway client.

    Returns:
        CheckoutResponse: ok=True with order id, transaction id, status and amount.
        Failures are answered by the CheckoutError handler (400/402/409/500).
    """
    result = process_checkout(db, gateway, buyer_id, payload)
    return CheckoutResponse(
        orderId=result.order.id,
        transactionId=result.transaction_id,
        status=result.status,
        amount=result.amount,
        order=OrderOut.model_validate(result.order),
    )


@app.get("/api/v1/orders", response_model=List[OrderOut])
def list_orders(buyer_id: str = Depends(get_current_buyer), db: Session = Depends(get_db)):
    """Returns the signed-in buyer's orders, newest first."""
    return [OrderOut.model_validate(o) for o in OrderLedger(db).list_for_buyer(buyer_id)]


@app.get("/api/v1/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: str, buyer_id: str = Depends(get_current_buyer), db: Session = Depends(get_db)):
    order = OrderLedger(db).get(order_id)
    if order is None or order.buyer_id != buyer_id:
        raise HTTPException(status_code=404, detail="Order not found.")
    return OrderOut.model_validate(order)


# Health Check Endpoint
@app.get("/health")
def health_check():
    """
    Simple health check endpoint.

    Returns:
        dict: A basic JSON object indicating service availability.
    """
    return {"status": "ok"}
