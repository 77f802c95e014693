"""Order submission endpoint used by the public order form."""

from typing import Any

from fastapi import APIRouter, Body, Depends

from order_intake.core.dependencies import (
    enforce_rate_limit,
    get_business_profile,
    get_dispatch_timeout,
    get_transport,
)
from order_intake.schemas.common import ErrorResponse
from order_intake.schemas.order import OrderSubmitResponse
from order_intake.services.composer import BusinessProfile
from order_intake.services.intake import process_order
from order_intake.services.transport import EmailTransport

router = APIRouter()

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Missing or malformed order data"},
    429: {"model": ErrorResponse, "description": "Too many submissions from this client"},
    500: {"model": ErrorResponse, "description": "Notifications could not be sent"},
}


async def submit_order(
    payload: dict[str, Any] = Body(...),
    transport: EmailTransport = Depends(get_transport),
    profile: BusinessProfile = Depends(get_business_profile),
    timeout: float = Depends(get_dispatch_timeout),
) -> OrderSubmitResponse:
    """Accept an order, e-mail the business and the customer, return the order number.

    Succeeds only when both e-mails were accepted by the transport.
    """
    record = await process_order(payload, transport, profile, timeout)
    return OrderSubmitResponse(order_number=record.order_number)


router.add_api_route(
    "/orders",
    submit_order,
    methods=["POST"],
    response_model=OrderSubmitResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(enforce_rate_limit)],
)
