"""
This module provides the communication client for the hosted payment gateway
used by the checkout service.

The gateway is a REST API. A charge either succeeds (transaction id returned),
is declined (4xx, reported as an unsuccessful ChargeResult), or fails on the
transport level (timeout, connection error, 5xx), which is raised to the caller.
"""

from decimal import Decimal
from typing import Optional

import httpx

from .config import (
    CHECKOUT_CURRENCY,
    PAYMENT_GATEWAY_MERCHANT_ID,
    PAYMENT_GATEWAY_PRIVATE_KEY,
    PAYMENT_GATEWAY_PUBLIC_KEY,
    PAYMENT_GATEWAY_URL,
)
from .logging_config import get_logger
from .models import ChargeResult

log = get_logger(__name__)


def format_amount(amount: Decimal) -> str:
    """
    Formats a monetary amount for the gateway.

    Whole amounts are sent without decimals ("1525"), everything else with
    exactly two ("10.50").
    """
    if amount == amount.to_integral_value():
        return str(int(amount))
    return str(amount.quantize(Decimal("0.01")))


# --- Payment Gateway Client (REST) ---
class PaymentGatewayClient:
    """
    Client for the hosted payment gateway (REST API).
    Handles client token generation, charge creation and error responses.
    """
    def __init__(self, base_url: str = PAYMENT_GATEWAY_URL, transport: Optional[httpx.BaseTransport] = None):
        """
        Initializes the HTTP client with proper timeout configuration and merchant credentials.

        Args:
            base_url (str): Gateway base URL.
            transport (httpx.BaseTransport): Optional transport (e.g. httpx.MockTransport in tests).
        """
        timeout_config = httpx.Timeout(5.0, read=8.0)
        self.client = httpx.Client(
            base_url=base_url,
            timeout=timeout_config,
            auth=(PAYMENT_GATEWAY_PUBLIC_KEY, PAYMENT_GATEWAY_PRIVATE_KEY),
            headers={"X-Merchant-Id": PAYMENT_GATEWAY_MERCHANT_ID},
            transport=transport,
        )

    def close(self):
        """Closes the HTTP client session."""
        self.client.close()

    def generate_client_token(self) -> str:
        """
        Requests a client token for the browser's drop-in payment UI.

        Returns:
            str: The client token.

        Raises:
            httpx.HTTPError: If the gateway is unreachable, answers with an error status,
                or returns no readable token.
        """
        response = self.client.post("/v2/client_token", json={})
        response.raise_for_status()
        token = _json_or_empty(response).get("clientToken")
        if not token:
            log.error(f"Ungültige Client-Token-Antwort vom Gateway: {response.text[:200]!r}")
            raise httpx.DecodingError("Gateway returned no client token.", request=response.request)
        return token

    def charge(self, amount: Decimal, nonce: str, reference_id: str) -> ChargeResult:
        """
        Creates a new sale via the gateway REST API and submits it for settlement.

        The reference id doubles as idempotency key, so a retried request for the
        same checkout can never be charged twice.

        Args:
            amount (Decimal): Trusted total computed by the server.
            nonce (str): Payment method nonce provided by the browser.
            reference_id (str): Id of the order this charge belongs to.

        Returns:
            ChargeResult: success=True with transaction id, or success=False if declined.

        Raises:
            httpx.TimeoutException: If the gateway does not respond within the timeout.
            httpx.TransportError: If the gateway cannot be reached.
            httpx.HTTPStatusError: If the gateway answers with a 5xx status.
        """
        payload = {
            "amount": format_amount(amount),
            "currency": CHECKOUT_CURRENCY,
            "paymentMethodNonce": nonce,
            "referenceId": reference_id,
            "submitForSettlement": True,
        }
        headers = {"Idempotency-Key": reference_id}

        try:
            response = self.client.post("/v2/charges", json=payload, headers=headers)
            response.raise_for_status()  # Löst HTTPStatusError bei 4xx/5xx aus
        except httpx.TimeoutException:
            log.error(f"[Checkout: {reference_id}] Payment Gateway Timeout. Status unbekannt.")
            # Gefährlicher Fall: die Zahlung könnte trotzdem durchgegangen sein.
            raise
        except httpx.HTTPStatusError as e:
            if e.response.status_code >= 500:
                log.error(f"[Checkout: {reference_id}] HTTP-Fehler beim Gateway: {e}")
                raise
            # 4xx, speziell 402 (Payment Declined)
            error = _error_message(e.response)
            log.warning(f"[Checkout: {reference_id}] Zahlung abgelehnt (HTTP {e.response.status_code}): {error}")
            return ChargeResult(success=False, error=error, raw=_json_or_empty(e.response))
        except httpx.TransportError as e:
            log.error(f"[Checkout: {reference_id}] Payment Gateway nicht erreichbar: {e}")
            raise

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            # Antwort nicht auswertbar: fail closed, Zahlungsstatus unbekannt.
            log.error(
                f"[Checkout: {reference_id}] Ungültige Gateway-Antwort (HTTP {response.status_code}): "
                f"{response.text[:200]!r}. Zahlungsstatus unbekannt, prüfen!"
            )
            return ChargeResult(success=False, error="Unreadable gateway response.")

        if not data.get("success", True) or not data.get("transactionId"):
            error = data.get("message") or "Gateway reported an unsuccessful transaction."
            log.warning(f"[Checkout: {reference_id}] Zahlung nicht erfolgreich: {error}")
            return ChargeResult(success=False, error=error, raw=data)

        return ChargeResult(
            success=True,
            transaction_id=data["transactionId"],
            status=data.get("status", "submitted_for_settlement"),
            raw=data,
        )


def _json_or_empty(response: httpx.Response) -> dict:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(response: httpx.Response) -> str:
    detail = _json_or_empty(response).get("detail")
    if isinstance(detail, dict):
        return detail.get("message") or detail.get("errorCode") or response.reason_phrase
    return detail or response.reason_phrase
