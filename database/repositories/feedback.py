import logging
from datetime import datetime, timedelta, timezone
from typing import List, Set, Tuple

from sqlalchemy import select, func

from database.models import DriverMatchFeedback, DriverMatchEvent, Job
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

# (job_id, value, company_id, route_type, freight_type)
SignedRow = Tuple[str, str, str, str, str]


class FeedbackRepository(BaseRepository):
    """Driver feedback and interaction events; the Behavior signal's raw input."""

    def upsert_feedback(self, driver_id: str, job_id: str, feedback: str) -> None:
        stmt = self.insert(DriverMatchFeedback).values(
            driver_id=driver_id, job_id=job_id, feedback=feedback
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=['driver_id', 'job_id'],
            set_={'feedback': feedback, 'updated_at': func.now()},
        )
        self.db.execute(stmt)
        logger.info(f"Recorded '{feedback}' feedback from driver {driver_id} on job {job_id}")

    def get_feedback_with_jobs(self, driver_id: str) -> List[SignedRow]:
        """All feedback for a driver with the signature fields of each job (NULL if the job is gone)."""
        stmt = (
            select(
                DriverMatchFeedback.job_id,
                DriverMatchFeedback.feedback,
                Job.company_id,
                Job.route_type,
                Job.freight_type,
            )
            .outerjoin(Job, Job.id == DriverMatchFeedback.job_id)
            .where(DriverMatchFeedback.driver_id == driver_id)
        )
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def get_hidden_job_ids(self, driver_id: str) -> Set[str]:
        stmt = select(DriverMatchFeedback.job_id).where(
            DriverMatchFeedback.driver_id == driver_id,
            DriverMatchFeedback.feedback == 'hide',
        )
        return set(self.db.execute(stmt).scalars().all())

    def record_event(self, driver_id: str, job_id: str, event_type: str) -> DriverMatchEvent:
        event = DriverMatchEvent(driver_id=driver_id, job_id=job_id, event_type=event_type)
        self.db.add(event)
        self.db.flush()
        return event

    def get_recent_events_with_jobs(
        self,
        driver_id: str,
        lookback_days: int = 90,
        limit: int = 500,
    ) -> List[SignedRow]:
        since = datetime.now(timezone.utc) - timedelta(days=lookback_days)
        stmt = (
            select(
                DriverMatchEvent.job_id,
                DriverMatchEvent.event_type,
                Job.company_id,
                Job.route_type,
                Job.freight_type,
            )
            .outerjoin(Job, Job.id == DriverMatchEvent.job_id)
            .where(
                DriverMatchEvent.driver_id == driver_id,
                DriverMatchEvent.created_at >= since,
            )
            .order_by(DriverMatchEvent.created_at.desc())
            .limit(limit)
        )
        return [tuple(row) for row in self.db.execute(stmt).all()]
