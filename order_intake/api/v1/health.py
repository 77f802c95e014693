"""Health check endpoint."""

from datetime import UTC, datetime

from fastapi import APIRouter

from order_intake.schemas.common import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check for process supervision. Touches no collaborator."""
    return HealthResponse(status="OK", timestamp=datetime.now(UTC))
