"""
Tests for the PayPal wallet processor against a mocked REST API
"""

import httpx
import pytest

from lessonbook.payments.paypal_client import PayPalProcessor


def paypal_transport(payment_body: dict, status_code: int = 201):
    """Answer the token request, then return payment_body for any payment call"""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "A21-token"})
        return httpx.Response(status_code, json=payment_body)

    return httpx.MockTransport(handler)


def processor_for(transport, client_id="client-id", client_secret="client-secret"):
    http = httpx.AsyncClient(transport=transport)
    return PayPalProcessor(client_id, client_secret, http)


async def create(processor):
    return await processor.create_payment(
        amount=25.0,
        item_name="Business English Grammar",
        sku="lesson-1",
        description="Lesson purchase",
        custom='{"userId": "u"}',
        return_url="http://testserver/api/payments/paypal/success",
        cancel_url="http://testserver/api/payments/paypal/cancel",
    )


@pytest.mark.asyncio
async def test_create_payment_success():
    processor = processor_for(paypal_transport({
        "id": "PAYID-1",
        "state": "created",
        "links": [{"rel": "approval_url", "href": "https://www.sandbox.paypal.com/checkoutnow?token=EC-1"}],
        "transactions": [{"amount": {"total": "25.00"}, "custom": '{"userId": "u"}'}],
    }))

    result = await create(processor)

    assert result.ok
    assert result.value.id == "PAYID-1"
    assert result.value.approval_url.endswith("token=EC-1")
    assert result.value.total == 25.0


@pytest.mark.asyncio
async def test_create_payment_response_without_id_is_a_failure():
    processor = processor_for(paypal_transport({
        "state": "created",
        "links": [{"rel": "approval_url", "href": "https://www.sandbox.paypal.com/checkoutnow"}],
    }))

    result = await create(processor)

    assert not result.ok
    assert result.error


@pytest.mark.asyncio
async def test_create_payment_without_approval_url():
    processor = processor_for(paypal_transport({"id": "PAYID-2", "state": "created", "links": []}))

    result = await create(processor)

    assert not result.ok
    assert result.error == "PayPal returned no approval URL"


@pytest.mark.asyncio
async def test_create_payment_http_error():
    processor = processor_for(paypal_transport({"name": "VALIDATION_ERROR"}, status_code=400))

    result = await create(processor)

    assert not result.ok


@pytest.mark.asyncio
async def test_execute_payment_malformed_response():
    processor = processor_for(paypal_transport({"state": "approved"}, status_code=200))

    result = await processor.execute_payment("PAYID-1", "PAYER-1")

    assert not result.ok


@pytest.mark.asyncio
async def test_unconfigured_processor_makes_no_calls():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    processor = processor_for(httpx.MockTransport(handler), client_id=None)

    result = await create(processor)

    assert not result.ok
    assert result.error == "PayPal is not configured"
    assert calls == []
