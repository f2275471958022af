"""Tests for the payment gateway client, using httpx.MockTransport."""

import json
from decimal import Decimal

import httpx
import pytest

from checkout_service.clients import PaymentGatewayClient, format_amount


def make_client(handler):
    return PaymentGatewayClient(base_url="http://gateway.test", transport=httpx.MockTransport(handler))


@pytest.mark.parametrize("amount, expected", [
    (Decimal("1525"), "1525"),
    (Decimal("1525.00"), "1525"),
    (Decimal("10.5"), "10.50"),
    (Decimal("0.99"), "0.99"),
])
def test_format_amount(amount, expected):
    assert format_amount(amount) == expected


def test_charge_success_sends_trusted_amount_and_idempotency_key():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={
            "success": True, "transactionId": "tr_1", "status": "submitted_for_settlement",
        })

    result = make_client(handler).charge(Decimal("1525.00"), "fake-nonce", "order-1")

    assert result.success is True
    assert result.transaction_id == "tr_1"
    assert result.status == "submitted_for_settlement"
    assert seen["path"] == "/v2/charges"
    assert seen["headers"]["Idempotency-Key"] == "order-1"
    assert seen["headers"]["X-Merchant-Id"]
    assert seen["headers"]["Authorization"].startswith("Basic ")
    assert seen["body"]["amount"] == "1525"
    assert seen["body"]["paymentMethodNonce"] == "fake-nonce"
    assert seen["body"]["referenceId"] == "order-1"
    assert seen["body"]["submitForSettlement"] is True


def test_declined_charge_is_an_unsuccessful_result():
    def handler(request):
        return httpx.Response(402, json={"detail": {"errorCode": "processor_declined", "message": "Do Not Honor"}})

    result = make_client(handler).charge(Decimal("10"), "fake-decline-1", "order-1")

    assert result.success is False
    assert result.error == "Do Not Honor"
    assert result.transaction_id is None


def test_unsuccessful_body_is_an_unsuccessful_result():
    def handler(request):
        return httpx.Response(200, json={"success": False, "message": "Gateway Rejected: fraud"})

    result = make_client(handler).charge(Decimal("10"), "fake-nonce", "order-1")

    assert result.success is False
    assert result.error == "Gateway Rejected: fraud"


@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>proxy error</html>"),
    httpx.Response(200, json=["txn_1"]),
])
def test_unreadable_success_body_is_an_unsuccessful_result(response):
    def handler(request):
        return response

    result = make_client(handler).charge(Decimal("10"), "fake-nonce", "order-1")

    assert result.success is False
    assert result.error == "Unreadable gateway response."
    assert result.transaction_id is None


def test_server_error_is_raised():
    def handler(request):
        return httpx.Response(500, json={"detail": {"errorCode": "gateway_error"}})

    with pytest.raises(httpx.HTTPStatusError):
        make_client(handler).charge(Decimal("10"), "fake-nonce", "order-1")


@pytest.mark.parametrize("error", [httpx.ReadTimeout, httpx.ConnectError])
def test_transport_errors_are_raised(error):
    def handler(request):
        raise error("boom", request=request)

    with pytest.raises(error):
        make_client(handler).charge(Decimal("10"), "fake-nonce", "order-1")


def test_generate_client_token():
    def handler(request):
        assert request.url.path == "/v2/client_token"
        return httpx.Response(200, json={"clientToken": "ct_1"})

    assert make_client(handler).generate_client_token() == "ct_1"


def test_client_token_without_readable_body_is_raised():
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    with pytest.raises(httpx.DecodingError):
        make_client(handler).generate_client_token()
