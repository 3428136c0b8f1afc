"""FastAPI dependencies resolving services from the application's container."""

from fastapi import Request

from ..domain.services.fact_check_cycle import FactCheckCycle
from ..domain.services.verdict_log import VerdictLog
from ..infrastructure.dependencies import ServiceContainer


def get_service_container(request: Request) -> ServiceContainer:
    """Container created in the application lifespan."""
    return request.app.state.container


def get_fact_check_cycle(request: Request) -> FactCheckCycle:
    """FastAPI dependency for the fact-check cycle."""
    return get_service_container(request).get_fact_check_cycle()


def get_verdict_log(request: Request) -> VerdictLog:
    """FastAPI dependency for the verdict log."""
    return get_service_container(request).get_verdict_log()
