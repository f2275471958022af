"""
mock_payment_gateway.py — Mock Implementation of the hosted Payment Gateway (REST API)

This module provides a simulated payment gateway for local runs and tests of the
checkout service. It exposes a simple FastAPI application that mimics the
behavior of a hosted gateway with a browser drop-in.

Simulation Scenarios (selected by the payment method nonce):
    • Successful sale, submitted for settlement
    • Declined payment (HTTP 402)            — nonce starts with "fake-decline-"
    • Gateway failure (HTTP 500)             — nonce starts with "fake-error-"
    • Timeout simulation (late response)     — nonce starts with "fake-timeout-"

Endpoints:
    POST /v2/client_token — Issues a client token for the drop-in UI.
    POST /v2/charges      — Handles incoming sale requests.

Port:
    Default: 8001 (HTTP)
"""

from decimal import Decimal
import logging
import time
import uuid

from fastapi import FastAPI, Header, HTTPException
from pydantic import BaseModel

app = FastAPI(title="Mock Payment Gateway")
logging.basicConfig(level=logging.INFO)

TIMEOUT_SECONDS = 10

# Idempotency-Key -> first response
_processed = {}


class ChargeRequest(BaseModel):
    """
    Represents a sale request payload.

    Attributes:
        amount (Decimal): Sale amount in major currency units, sent as a decimal string.
        currency (str): ISO 4217 currency code (e.g., 'USD').
        paymentMethodNonce (str): Nonce from the drop-in UI.
        referenceId (str): Merchant reference (the order id).
        submitForSettlement (bool): Settle immediately.
    """
    amount: Decimal
    currency: str
    paymentMethodNonce: str
    referenceId: str
    submitForSettlement: bool = True


@app.post("/v2/client_token")
def create_client_token():
    """Issues a random client token."""
    return {"clientToken": f"ct_{uuid.uuid4().hex}"}


@app.post("/v2/charges")
def create_charge(
        request: ChargeRequest,
        idempotency_key: str = Header(..., alias="Idempotency-Key")
):
    """
        Processes a sale request.

        Repeating a request with the same `Idempotency-Key` returns the first
        successful result instead of charging again.

        Args:
            request (ChargeRequest): The sale details.
            idempotency_key (str): Unique key from the merchant, one per checkout.

        Returns:
            dict: Transaction result on success, including:
                - success (bool): Always True for successful sales.
                - transactionId (str): Unique transaction identifier.
                - status (str): "submitted_for_settlement" or "authorized".
                - amount (str): The charged amount.
                - createdAt (str): UTC timestamp of the transaction.

        Raises:
            HTTPException(402): If the payment is declined.
            HTTPException(500): If the gateway simulates an internal failure.
    """
    logging.info(f"[PG] Zahlungsanfrage für {request.referenceId} über {request.amount} (Idempotenz: {idempotency_key})")

    if idempotency_key in _processed:
        logging.info(f"[PG] Wiederholte Anfrage für {request.referenceId}, liefere erstes Ergebnis.")
        return _processed[idempotency_key]

    nonce = request.paymentMethodNonce

    if nonce.startswith("fake-decline-"):
        logging.warning(f"[PG] Zahlung für {request.referenceId} abgelehnt.")
        raise HTTPException(
            status_code=402,
            detail={"errorCode": "processor_declined", "message": "Do Not Honor"}
        )

    if nonce.startswith("fake-error-"):
        logging.error(f"[PG] Interner Fehler für {request.referenceId}.")
        raise HTTPException(status_code=500, detail={"errorCode": "gateway_error"})

    if nonce.startswith("fake-timeout-"):
        logging.info(f"[PG] Simuliere Timeout für {request.referenceId}...")
        time.sleep(TIMEOUT_SECONDS)
        logging.error(f"[PG] Timeout-Anfrage {request.referenceId} abgeschlossen (zu spät).")

    logging.info(f"[PG] Zahlung für {request.referenceId} erfolgreich.")
    result = {
        "success": True,
        "transactionId": f"tr_{uuid.uuid4().hex}",
        "status": "submitted_for_settlement" if request.submitForSettlement else "authorized",
        "amount": str(request.amount),
        "currency": request.currency,
        "createdAt": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())
    }
    _processed[idempotency_key] = result
    return result


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8001)
