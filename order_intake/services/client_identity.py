"""Client identity for admission control: resolved IP, salted and hashed."""

import hashlib

from starlette.requests import Request

from order_intake.core.config import settings


def resolve_client_ip(request: Request, trust_proxy: bool | None = None) -> str | None:
    """Return the address the rate gate should count against.

    By default this is the socket peer; ``X-Forwarded-For`` is client-supplied
    and ignored. With ``TRUST_PROXY`` the right-most hop is used, which is the
    one appended by our own reverse proxy.
    """
    if trust_proxy is None:
        trust_proxy = settings.TRUST_PROXY
    if trust_proxy:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            last = forwarded.split(",")[-1].strip()
            if last:
                return last
    if request.client:
        return request.client.host
    return None


def hash_ip(ip: str | None) -> str:
    """Return salted SHA-256 hex digest of the IP; unknown clients share one bucket."""
    return hashlib.sha256(f"{settings.IP_HASH_SALT}:{ip or 'unknown'}".encode()).hexdigest()


def client_identity(request: Request) -> str:
    return hash_ip(resolve_client_ip(request))
