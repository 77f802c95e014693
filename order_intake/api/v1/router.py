"""Aggregate all v1 sub-routers, plus the unversioned paths the order form posts to."""

from fastapi import APIRouter, Depends

from order_intake.api.v1.health import health_check
from order_intake.api.v1.health import router as health_router
from order_intake.api.v1.orders import ERROR_RESPONSES, submit_order
from order_intake.api.v1.orders import router as orders_router
from order_intake.core.dependencies import enforce_rate_limit
from order_intake.schemas.common import HealthResponse
from order_intake.schemas.order import OrderSubmitResponse

api_v1_router = APIRouter()

api_v1_router.include_router(health_router, tags=["health"])
api_v1_router.include_router(orders_router, tags=["orders"])

# /api/submit-order and /api/health, as served to the existing web form.
form_router = APIRouter()

form_router.add_api_route(
    "/submit-order",
    submit_order,
    methods=["POST"],
    response_model=OrderSubmitResponse,
    responses=ERROR_RESPONSES,
    dependencies=[Depends(enforce_rate_limit)],
    tags=["orders"],
)
form_router.add_api_route(
    "/health",
    health_check,
    methods=["GET"],
    response_model=HealthResponse,
    tags=["health"],
)
