"""End-to-end order submission tests through the HTTP API."""

import re
import uuid

import pytest
from httpx import ASGITransport, AsyncClient

from order_intake.core.config import settings
from order_intake.core.dependencies import get_rate_limiter, get_transport
from order_intake.core.exceptions import GENERIC_FAILURE_MESSAGE
from order_intake.main import app
from tests.conftest import order_payload
from tests.fakes import FailingTransport, RecordingTransport

pytestmark = pytest.mark.intake

ORDER_NUMBER_RE = re.compile(r"^E3-\d+-[0-9A-Z]{9}$")
SUBMIT_PATHS = ["/api/submit-order", "/api/v1/orders"]


def _uid() -> str:
    return uuid.uuid4().hex[:8]


# ---------------------------------------------------------------------------
# Success
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("path", SUBMIT_PATHS)
async def test_submit_order_success(client: AsyncClient, transport: RecordingTransport, path):
    r = await client.post(path, json=order_payload())
    assert r.status_code == 200
    data = r.json()
    assert data["success"] is True
    assert ORDER_NUMBER_RE.match(data["orderNumber"])
    assert data["message"] == "Order submitted successfully"
    assert len(transport.sent) == 2


async def test_scenario_messages(client: AsyncClient, transport: RecordingTransport):
    """Jane Doe orders two stickers; both parties are notified."""
    r = await client.post("/api/submit-order", json=order_payload())
    assert r.status_code == 200
    order_number = r.json()["orderNumber"]

    (business,) = transport.to("shop@example.com")
    assert "Jane Doe" in business.subject
    assert "$7.00" in business.subject
    assert order_number in business.subject

    (customer,) = transport.to("jane@example.com")
    assert order_number in customer.subject
    assert customer.to == "jane@example.com"


async def test_each_submission_gets_its_own_number(client: AsyncClient):
    first = (await client.post("/api/submit-order", json=order_payload())).json()
    second = (await client.post("/api/submit-order", json=order_payload())).json()
    assert first["orderNumber"] != second["orderNumber"]


async def test_request_id_is_echoed(client: AsyncClient):
    r = await client.post(
        "/api/submit-order", json=order_payload(), headers={"X-Request-Id": "form-123"}
    )
    assert r.headers["X-Request-Id"] == "form-123"


# ---------------------------------------------------------------------------
# Validation failures
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "customer",
    [None, {"email": "jane@example.com"}, {"name": "Jane Doe"}, {"name": "", "email": ""}],
)
async def test_missing_customer_info(client: AsyncClient, transport, customer):
    r = await client.post("/api/submit-order", json=order_payload(customer=customer))
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required customer information"}
    assert transport.sent == []


async def test_empty_order(client: AsyncClient, transport):
    r = await client.post("/api/submit-order", json=order_payload(items=[]))
    assert r.status_code == 400
    assert r.json() == {"error": "No items in order"}
    assert transport.sent == []


async def test_malformed_item_is_invalid_data(client: AsyncClient, transport):
    items = [{"name": "Sticker", "quantity": "lots", "price": 3.5, "subtotal": 7.0}]
    r = await client.post("/api/submit-order", json=order_payload(items=items))
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid order data"}
    assert transport.sent == []


async def test_non_object_body_is_invalid_data(client: AsyncClient, transport):
    r = await client.post("/api/submit-order", json=["not", "an", "order"])
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid order data"}


async def test_unparseable_json_is_invalid_data(client: AsyncClient):
    r = await client.post(
        "/api/submit-order",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert "error" in r.json()


# ---------------------------------------------------------------------------
# Dispatch failures
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("failing", ["shop@example.com", "jane@example.com"])
async def test_either_send_failing_reports_failure(client: AsyncClient, failing):
    failing_transport = FailingTransport(failing)
    app.dependency_overrides[get_transport] = lambda: failing_transport

    r = await client.post("/api/submit-order", json=order_payload())
    assert r.status_code == 500
    assert r.json() == {"error": GENERIC_FAILURE_MESSAGE}
    # The other message was still sent; the caller cannot tell.
    assert len(failing_transport.sent) == 1


async def test_transport_detail_is_not_leaked(client: AsyncClient):
    app.dependency_overrides[get_transport] = lambda: FailingTransport("jane@example.com")
    r = await client.post("/api/submit-order", json=order_payload())
    assert "550" not in r.text
    assert "mailbox" not in r.text


async def test_unexpected_error_is_generic_500(client: AsyncClient):
    class BrokenTransport(RecordingTransport):
        async def send(self, message):
            raise RuntimeError("boom")

    app.dependency_overrides[get_transport] = lambda: BrokenTransport()
    r = await client.post("/api/submit-order", json=order_payload())
    assert r.status_code == 500
    assert r.json() == {"error": GENERIC_FAILURE_MESSAGE}
    assert "boom" not in r.text


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------


async def test_sixth_submission_is_rate_limited(client: AsyncClient, transport):
    for _ in range(5):
        r = await client.post("/api/submit-order", json=order_payload())
        assert r.status_code == 200

    r = await client.post("/api/submit-order", json=order_payload())
    assert r.status_code == 429
    assert r.json() == {"error": "Too many orders submitted, please try again later."}
    assert r.headers["Retry-After"] == "900"
    assert len(transport.sent) == 10


async def test_rate_limit_counts_rejected_submissions(client: AsyncClient, transport):
    for _ in range(5):
        r = await client.post("/api/submit-order", json=order_payload(items=[]))
        assert r.status_code == 400

    r = await client.post("/api/submit-order", json=order_payload())
    assert r.status_code == 429
    assert transport.sent == []


async def test_rate_limit_checked_before_body(client: AsyncClient):
    for _ in range(5):
        await client.post("/api/submit-order", json=order_payload())
    r = await client.post("/api/submit-order", json=["garbage"])
    assert r.status_code == 429


async def test_rotating_forwarded_for_does_not_escape_limit(client: AsyncClient):
    """One peer spoofing a new X-Forwarded-For each time is still one client."""
    codes = []
    for i in range(20):
        r = await client.post(
            "/api/submit-order",
            json=order_payload(),
            headers={"X-Forwarded-For": f"1.2.3.{i}"},
        )
        codes.append(r.status_code)
    assert codes == [200] * 5 + [429] * 15


async def test_rate_limit_is_per_client_behind_trusted_proxy(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "TRUST_PROXY", True)

    def via_proxy(client_ip: str) -> dict:
        # The client-controlled first hop varies; the proxy-appended hop does not.
        return {"X-Forwarded-For": f"spoofed-{_uid()}, {client_ip}"}

    for _ in range(5):
        r = await client.post(
            "/api/submit-order", json=order_payload(), headers=via_proxy("10.0.0.1")
        )
        assert r.status_code == 200

    blocked = await client.post(
        "/api/submit-order", json=order_payload(), headers=via_proxy("10.0.0.1")
    )
    assert blocked.status_code == 429

    other = await client.post(
        "/api/submit-order", json=order_payload(), headers=via_proxy("10.0.0.2")
    )
    assert other.status_code == 200


async def test_rate_limiter_outage_is_generic_json_500(transport):
    class BrokenLimiter:
        window_seconds = 900

        async def admit(self, identity: str) -> bool:
            raise ConnectionError("redis: connection refused")

        async def close(self) -> None:
            return None

    app.dependency_overrides[get_transport] = lambda: transport
    app.dependency_overrides[get_rate_limiter] = lambda: BrokenLimiter()
    try:
        # The server error middleware re-raises after responding; keep the response.
        asgi = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=asgi, base_url="http://test") as c:
            r = await c.post("/api/submit-order", json=order_payload())
    finally:
        app.dependency_overrides.clear()

    assert r.status_code == 500
    assert r.headers["content-type"].startswith("application/json")
    assert r.json() == {"error": GENERIC_FAILURE_MESSAGE}
    assert "redis" not in r.text
    assert transport.sent == []


async def test_health_is_not_rate_limited(client: AsyncClient):
    for _ in range(10):
        r = await client.get("/api/health")
        assert r.status_code == 200


async def test_composition_error_is_generic_500(client: AsyncClient, transport, monkeypatch):
    import order_intake.services.intake as intake_mod

    def explode(*args, **kwargs):
        raise ValueError("template blew up")

    monkeypatch.setattr(intake_mod, "compose_notifications", explode)
    r = await client.post("/api/submit-order", json=order_payload())
    assert r.status_code == 500
    assert r.json() == {"error": GENERIC_FAILURE_MESSAGE}
    assert transport.sent == []
