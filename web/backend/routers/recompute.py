#!/usr/bin/env python3
"""
Recompute endpoints - request rescoring and inspect the queue.
"""

from typing import Dict

from fastapi import APIRouter, Depends

from database.repository import MatchingRepository
from scheduler.queue import RecomputeScheduler
from ..dependencies import get_repository, get_scheduler
from ..models.requests import RecomputeRequest
from ..models.responses import RecomputeResponse
from ..services.recompute_service import RecomputeService

router = APIRouter(prefix="/api/recompute", tags=["recompute"])


def get_recompute_service(
    repo: MatchingRepository = Depends(get_repository),
    scheduler: RecomputeScheduler = Depends(get_scheduler),
) -> RecomputeService:
    return RecomputeService(repo, scheduler)


@router.post("", response_model=RecomputeResponse)
def enqueue_recompute(
    request: RecomputeRequest,
    service: RecomputeService = Depends(get_recompute_service),
):
    """
    Enqueue a recompute for an entity.

    Returns ``enqueued=false`` when a recompute for the entity is already pending.
    """
    return service.enqueue_recompute(
        request.entity_type,
        request.entity_id,
        request.reason,
        company_id=request.company_id,
    )


@router.get("/queue")
def get_queue_counts(service: RecomputeService = Depends(get_recompute_service)) -> Dict[str, object]:
    """Queue entry counts by status."""
    return {"success": True, "counts": service.queue_counts()}
