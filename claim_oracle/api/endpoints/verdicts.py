"""Verdict log and cycle control endpoints."""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ...domain.models.verdict_record import VerdictRecord
from ...domain.services.fact_check_cycle import FactCheckCycle
from ...domain.services.verdict_log import VerdictLog
from ..dependencies import get_fact_check_cycle, get_verdict_log

logger = logging.getLogger(__name__)

router = APIRouter(tags=["verdicts"])


class VerdictsResponse(BaseModel):
    """Response model for the verdict log."""

    count: int
    verdicts: List[VerdictRecord]


class CycleStatusResponse(BaseModel):
    """Response model for the cycle status."""

    state: str
    last_report: Optional[Dict[str, Any]] = None


@router.get("/verdicts", response_model=VerdictsResponse)
async def list_verdicts(
    limit: int = Query(20, ge=1, le=100, description="Number of most recent verdicts"),
    verdict_log: VerdictLog = Depends(get_verdict_log),
) -> VerdictsResponse:
    """List the most recent verdicts, newest first."""
    records = await verdict_log.recent(limit)
    return VerdictsResponse(count=len(records), verdicts=records)


@router.post("/cycles/run")
async def run_cycle(
    demo: bool = Query(False, description="Verify the built-in demo posts instead of the feed"),
    cycle: FactCheckCycle = Depends(get_fact_check_cycle),
) -> Dict[str, Any]:
    """Trigger a fact-check cycle and wait for its report.

    Raises:
        HTTPException: 409 if a cycle is already running
    """
    if cycle.is_running:
        raise HTTPException(status_code=409, detail="A cycle is already running")

    report = await cycle.run_cycle(demo=demo)
    if report is None:
        raise HTTPException(status_code=409, detail="A cycle is already running")
    return report.to_dict()


@router.get("/cycles/status", response_model=CycleStatusResponse)
async def cycle_status(cycle: FactCheckCycle = Depends(get_fact_check_cycle)) -> CycleStatusResponse:
    """Current orchestrator state and the report of the last finished cycle."""
    return CycleStatusResponse(
        state=cycle.state.value,
        last_report=cycle.last_report.to_dict() if cycle.last_report else None,
    )
