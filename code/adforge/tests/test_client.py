from __future__ import annotations

import httpx
import pytest
from unittest.mock import AsyncMock

from adforge.client import AdForgeClient, unwrap
from adforge.errors import (
    ApiConnectionError,
    ApiError,
    ApiTimeoutError,
    ApiValidationError,
    InsufficientCreditsError,
    NotFoundError,
)

pytestmark = pytest.mark.integration


def test_unwrap_envelopes():
    assert unwrap({"success": True, "data": {"a": 1}}) == {"a": 1}
    assert unwrap({"success": True, "task_id": "t"}) == {"task_id": "t"}
    assert unwrap([1, 2]) == [1, 2]
    with pytest.raises(ApiError, match="nope"):
        unwrap({"success": False, "error": "nope"})


@pytest.mark.asyncio
async def test_bearer_token_on_private_routes_only(client, backend):
    await client.auth.me()
    await client.auth.signup("a@b.co", "hunter22", "Ada")

    assert backend.requests_to("/api/v1/auth/me")[0]["authorization"] == "Bearer test-token"
    assert backend.requests_to("/api/v1/auth/signup")[0]["authorization"] is None


@pytest.mark.asyncio
async def test_token_provider_takes_precedence(backend):
    provider = AsyncMock(return_value="fresh-token")
    transport = httpx.ASGITransport(app=backend.app)
    async with AdForgeClient(base_url="http://test", token="stale", token_provider=provider, transport=transport) as c:
        await c.auth.me()

    provider.assert_awaited()
    assert backend.requests_to("/api/v1/auth/me")[0]["authorization"] == "Bearer fresh-token"


@pytest.mark.asyncio
async def test_success_false_envelope_raises(client):
    with pytest.raises(ApiError, match="Brand archived"):
        await client.request_data("GET", "/api/v1/brands/archived")


@pytest.mark.asyncio
async def test_request_json_keeps_the_envelope(client):
    payload = await client.request_json("GET", "/api/v1/credits/balance")
    assert payload["success"] is True
    assert payload["data"]["credits"] == 120


@pytest.mark.asyncio
async def test_validation_errors_are_formatted(client):
    with pytest.raises(ApiValidationError) as exc_info:
        await client.request_data(
            "POST", "/api/v1/subscriptions/check-credits", json={"operation_type": "ad", "quantity": "lots"}
        )
    assert exc_info.value.status_code == 422
    assert str(exc_info.value).startswith("Validation error: body.quantity: ")


@pytest.mark.asyncio
async def test_payment_required_carries_credit_details(client):
    with pytest.raises(InsufficientCreditsError) as exc_info:
        await client.subscriptions.deduct_credits("video_generation")
    error = exc_info.value
    assert error.message == "Insufficient credits"
    assert (error.credits_needed, error.credits_available, error.current_plan) == (40, 12, "starter")


@pytest.mark.asyncio
async def test_not_found_raises_or_defaults(client):
    with pytest.raises(NotFoundError, match="Job missing not found"):
        await client.jobs.get("missing")

    data = await client.request_data(
        "GET", "/api/v1/nowhere", not_found_default={"success": True, "data": {"ads": []}}
    )
    assert data == {"ads": []}


@pytest.mark.asyncio
async def test_server_error_message_falls_back_to_detail(client):
    with pytest.raises(ApiError) as exc_info:
        await client.subscriptions.current()
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == "billing provider down"


@pytest.mark.asyncio
async def test_transport_failures_are_translated():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    def stall(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    async with AdForgeClient(base_url="http://test", transport=httpx.MockTransport(refuse)) as c:
        with pytest.raises(ApiConnectionError):
            await c.jobs.get("j1")
        assert await c.health() is False

    async with AdForgeClient(base_url="http://test", transport=httpx.MockTransport(stall)) as c:
        with pytest.raises(ApiTimeoutError):
            await c.jobs.get("j1")


@pytest.mark.asyncio
async def test_health(client):
    assert await client.health() is True
