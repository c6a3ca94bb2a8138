#!/usr/bin/env python3
"""
Feedback endpoints - driver feedback and match events.
"""

from fastapi import APIRouter, Depends

from database.repository import MatchingRepository
from scheduler.queue import RecomputeScheduler
from ..dependencies import get_repository, get_scheduler
from ..services.feedback_service import FeedbackService
from ..models.requests import FeedbackRequest, MatchEventRequest
from ..models.responses import FeedbackResponse, MatchEventResponse

router = APIRouter(prefix="/api/drivers", tags=["feedback"])


def get_feedback_service(
    repo: MatchingRepository = Depends(get_repository),
    scheduler: RecomputeScheduler = Depends(get_scheduler),
) -> FeedbackService:
    return FeedbackService(repo, scheduler)


@router.post("/{driver_id}/matches/{job_id}/feedback", response_model=FeedbackResponse)
def submit_feedback(
    driver_id: str,
    job_id: str,
    request: FeedbackRequest,
    service: FeedbackService = Depends(get_feedback_service),
):
    """
    Record helpful / not_relevant / hide for a job match.

    The job must exist and be Active. A recompute of the driver's matches is
    enqueued.
    """
    return service.submit_feedback(driver_id, job_id, request.feedback)


@router.post("/{driver_id}/events", response_model=MatchEventResponse)
def record_event(
    driver_id: str,
    request: MatchEventRequest,
    service: FeedbackService = Depends(get_feedback_service),
):
    """Record a view, click, save or apply on a job."""
    return service.record_event(driver_id, request.job_id, request.event_type)
