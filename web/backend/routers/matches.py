#!/usr/bin/env python3
"""
Driver match endpoints - a driver's view of their scored jobs.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from database.repository import MatchingRepository
from matching.rollout import RolloutController
from ..config import get_config
from ..dependencies import get_repository, get_rollout
from ..services.match_service import MatchService
from ..models.responses import (
    DriverMatchesResponse,
    DriverMatchResponse,
    MatchScoresResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/drivers", tags=["matches"])


def get_match_service(
    repo: MatchingRepository = Depends(get_repository),
    rollout: RolloutController = Depends(get_rollout),
) -> MatchService:
    return MatchService(repo, rollout, get_config().matching.fusion)


@router.get("/{driver_id}/matches", response_model=DriverMatchesResponse)
def get_top_matches(
    driver_id: str,
    limit: int = Query(default=10, ge=1, le=200, description="Maximum results to return"),
    min_score: Optional[int] = Query(default=None, ge=0, le=100, description="Minimum overall score"),
    offset: int = Query(default=0, ge=0),
    exclude_hidden: bool = Query(default=True, description="Leave out jobs the driver hid"),
    service: MatchService = Depends(get_match_service),
):
    """
    Get the driver's best matches, highest overall score first.

    Only jobs that are Active right now are returned.
    """
    return service.get_top_matches(
        driver_id,
        role="driver",
        limit=limit,
        min_score=min_score,
        exclude_hidden=exclude_hidden,
        offset=offset,
    )


@router.get("/{driver_id}/matches/scores", response_model=MatchScoresResponse)
def get_all_match_scores(
    driver_id: str,
    service: MatchService = Depends(get_match_service),
):
    """Get job_id -> overall score for every visible match."""
    return service.get_all_match_scores(driver_id)


@router.get("/{driver_id}/matches/{job_id}", response_model=DriverMatchResponse)
def get_match_score(
    driver_id: str,
    job_id: str,
    service: MatchService = Depends(get_match_service),
):
    """Get the full score, reasons and breakdown for one driver/job pair."""
    return service.get_match_score(driver_id, job_id)
