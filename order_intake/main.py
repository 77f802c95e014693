"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from order_intake.api.v1.router import api_v1_router, form_router
from order_intake.core.config import settings
from order_intake.core.exceptions import (
    IntakeError,
    http_exception_handler,
    intake_error_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from order_intake.core.logging_config import configure_logging
from order_intake.core.middleware.cors import get_cors_config
from order_intake.core.middleware.request_id import RequestIdMiddleware
from order_intake.services.rate_limit import build_rate_limiter
from order_intake.services.transport import build_transport

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Misconfiguration fails here, before the first order is accepted.
    app.state.transport = build_transport(settings)
    app.state.rate_limiter = build_rate_limiter(settings)
    logger.info(
        "Order intake ready (transport=%s, rate limit=%s)",
        settings.EMAIL_TRANSPORT,
        settings.RATE_LIMIT_BACKEND,
    )
    try:
        yield
    finally:
        await app.state.transport.close()
        await app.state.rate_limiter.close()


app = FastAPI(
    title="E3 Order Intake API",
    version="0.1.0",
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Middleware (last added = first executed)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(CORSMiddleware, **get_cors_config())

# Exception handlers ({"error": message})
app.add_exception_handler(IntakeError, intake_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Routes
app.include_router(api_v1_router, prefix="/api/v1")
app.include_router(form_router, prefix="/api")


def run() -> None:
    """Console entry point: serve on ``PORT``."""
    import uvicorn

    uvicorn.run("order_intake.main:app", host="0.0.0.0", port=settings.PORT)
