"""FastAPI dependencies: collaborators built at startup, plus the rate gate."""

from fastapi import Depends, Request

from order_intake.core.config import settings
from order_intake.core.exceptions import RateLimited
from order_intake.services.client_identity import client_identity
from order_intake.services.composer import BusinessProfile
from order_intake.services.rate_limit import RateLimiter
from order_intake.services.transport import EmailTransport


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_transport(request: Request) -> EmailTransport:
    return request.app.state.transport


def get_business_profile() -> BusinessProfile:
    return BusinessProfile.from_settings(settings)


def get_dispatch_timeout() -> float:
    return settings.DISPATCH_TIMEOUT_SECONDS


async def enforce_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
) -> None:
    """Count this submission against the caller's window; 429 once it is spent.

    Runs before the body is validated, so malformed submissions count too.
    """
    if not await limiter.admit(client_identity(request)):
        raise RateLimited(headers={"Retry-After": str(limiter.window_seconds)})
