#!/usr/bin/env python3
"""
Candidate match endpoints - a company's view of applicants and leads.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from ..models.responses import CandidateMatchesResponse
from ..services.match_service import MatchService
from .matches import get_match_service

router = APIRouter(prefix="/api/companies", tags=["candidates"])


@router.get("/{company_id}/candidates", response_model=CandidateMatchesResponse)
def get_candidate_matches(
    company_id: str,
    job_id: Optional[str] = Query(default=None, description="Only candidates scored against this job"),
    source: Optional[Literal["application", "lead"]] = Query(default=None, description="application or lead"),
    min_score: Optional[int] = Query(default=None, ge=0, le=100),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    service: MatchService = Depends(get_match_service),
):
    """Get the company's scored candidates, highest overall score first."""
    return service.get_candidate_matches(
        company_id,
        job_id=job_id,
        candidate_source=source,
        min_score=min_score,
        limit=limit,
        offset=offset,
    )
