#!/usr/bin/env python3
"""
Feedback service - driver feedback and interaction events.

Feedback and save/apply events change the driver's Behavior signal, so each
write enqueues a recompute of that driver's matches in the same transaction.
"""

import logging

from database.repository import MatchingRepository
from matching.scorer.models import FeedbackValue, JobStatus, MatchEventType
from scheduler.queue import RecomputeScheduler
from ..exceptions import FeedbackRejectedException, NotFoundException
from ..models.responses import FeedbackResponse, MatchEventResponse

logger = logging.getLogger(__name__)

RECOMPUTING_EVENTS = {MatchEventType.SAVE.value, MatchEventType.APPLY.value}


class FeedbackService:
    def __init__(self, repo: MatchingRepository, scheduler: RecomputeScheduler):
        self.repo = repo
        self.scheduler = scheduler

    def submit_feedback(self, driver_id: str, job_id: str, feedback: str) -> FeedbackResponse:
        """
        Record a driver's feedback on a job and schedule a recompute.

        Raises:
            FeedbackRejectedException: If the job does not exist or is not Active.
        """
        feedback = FeedbackValue(feedback).value
        job = self.repo.jobs.get_by_id(job_id)
        if job is None:
            raise FeedbackRejectedException(f"Job {job_id} not found")
        if job.status != JobStatus.ACTIVE.value:
            raise FeedbackRejectedException(f"Job {job_id} is not active (status: {job.status})")

        self.repo.feedback.upsert_feedback(driver_id, job_id, feedback)
        if feedback == FeedbackValue.HIDE.value:
            self.repo.matches.delete_driver_matches(driver_id, [job_id])

        enqueued = self.scheduler.enqueue("driver_profile", driver_id, "feedback_updated", repo=self.repo)
        self.repo.commit()
        if enqueued:
            self.scheduler.nudge()

        return FeedbackResponse(
            driver_id=driver_id,
            job_id=job_id,
            feedback=feedback,
            recompute_enqueued=enqueued,
        )

    def record_event(self, driver_id: str, job_id: str, event_type: str) -> MatchEventResponse:
        event_type = MatchEventType(event_type).value
        if self.repo.jobs.get_by_id(job_id) is None:
            raise NotFoundException(f"Job {job_id} not found")

        event = self.repo.feedback.record_event(driver_id, job_id, event_type)
        enqueued = False
        if event_type in RECOMPUTING_EVENTS:
            enqueued = self.scheduler.enqueue("driver_profile", driver_id, f"match_{event_type}", repo=self.repo)
        self.repo.commit()
        if enqueued:
            self.scheduler.nudge()

        return MatchEventResponse(event_id=str(event.id))
