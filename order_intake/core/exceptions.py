"""Intake error taxonomy and the handlers that render it as ``{"error": ...}``."""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to submit order. Please try again or contact us directly."


class IntakeError(Exception):
    """Base for every failure the intake flow reports to the caller."""

    status: int = 500
    message: str = GENERIC_FAILURE_MESSAGE

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None):
        if message is not None:
            self.message = message
        self.headers = headers
        super().__init__(self.message)


class RateLimited(IntakeError):
    status = 429
    message = "Too many orders submitted, please try again later."


class MissingCustomerInfo(IntakeError):
    status = 400
    message = "Missing required customer information"


class EmptyOrder(IntakeError):
    status = 400
    message = "No items in order"


class InvalidOrderData(IntakeError):
    status = 400
    message = "Invalid order data"


class DispatchFailed(IntakeError):
    """One or both notifications could not be sent.

    The message shown to the caller is always the generic one; which
    recipient failed is only written to the server log.
    """

    def __init__(self, failed_recipients: list[str]):
        self.failed_recipients = failed_recipients
        super().__init__()


class InternalError(IntakeError):
    """Catch-all for unexpected exceptions during composition or dispatch."""


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing or invalid."""


class TransportError(Exception):
    """Raised by an e-mail transport when a message could not be delivered."""


async def intake_error_handler(request: Request, exc: IntakeError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status,
        content={"error": exc.message},
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail if isinstance(exc.detail, str) else "Error"},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": InvalidOrderData.message},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": GENERIC_FAILURE_MESSAGE},
    )
