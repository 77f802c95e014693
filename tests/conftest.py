"""Shared test fixtures."""

import os
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

# Never reach a real mail server or Redis from tests
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("EMAIL_TRANSPORT", "console")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")
os.environ.setdefault("EMAIL_FROM", "orders@example.com")
os.environ.setdefault("BUSINESS_EMAIL", "shop@example.com")

from order_intake.core.dependencies import get_rate_limiter, get_transport  # noqa: E402
from order_intake.main import app  # noqa: E402
from order_intake.services.rate_limit import MemoryRateLimiter  # noqa: E402
from tests.fakes import RecordingTransport  # noqa: E402


def order_payload(**overrides) -> dict:
    """A valid order form submission; keyword arguments replace top-level keys."""
    payload = {
        "customer": {"name": "Jane Doe", "email": "jane@example.com"},
        "items": [{"name": "Sticker", "quantity": 2, "price": 3.5, "subtotal": 7.0}],
        "total": 7.0,
        "orderDate": "2024-01-01T00:00:00Z",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def limiter() -> MemoryRateLimiter:
    return MemoryRateLimiter(max_hits=5, window_seconds=900)


@pytest.fixture
async def client(transport, limiter) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client for the FastAPI app.

    The transport and rate limiter normally built at startup are replaced
    by per-test fakes through dependency overrides.
    """
    app.dependency_overrides[get_transport] = lambda: transport
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    try:
        asgi = ASGITransport(app=app)
        async with AsyncClient(transport=asgi, base_url="http://test") as c:
            yield c
    finally:
        app.dependency_overrides.clear()
