"""Health check endpoints."""

from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...infrastructure.dependencies import ServiceContainer
from ..dependencies import get_service_container

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    oracle_providers: Dict[str, bool]
    ledger_configured: bool
    mirror_configured: bool
    cycle_state: str


@router.get("/health", response_model=HealthResponse)
async def health_check(container: ServiceContainer = Depends(get_service_container)) -> HealthResponse:
    """Check the health of all service components.

    Returns:
        Oracle provider activity, credential presence and cycle state
    """
    return HealthResponse(
        status="healthy",
        version="0.1.0",
        oracle_providers=container.oracle_factory.list_providers(),
        ledger_configured=container.get_ledger().is_configured,
        mirror_configured=container.get('mirror').is_configured,
        cycle_state=container.get_fact_check_cycle().state.value,
    )
