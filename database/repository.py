import logging

from sqlalchemy.orm import Session

from database.repositories import (
    DriverRepository,
    JobRepository,
    CandidateRepository,
    MatchRepository,
    FeedbackRepository,
    QueueRepository,
    RolloutRepository,
    EmbeddingRepository,
)

logger = logging.getLogger(__name__)


class MatchingRepository:
    """
    Facade over the per-aggregate repositories sharing one Session.

    Usage:
        repo = MatchingRepository(session)
        driver = repo.drivers.get_by_id(driver_id)
        repo.matches.upsert_driver_match(driver_id, job_id, row)
    """

    def __init__(self, db: Session):
        self.db = db
        self.drivers = DriverRepository(db)
        self.jobs = JobRepository(db)
        self.candidates = CandidateRepository(db)
        self.matches = MatchRepository(db)
        self.feedback = FeedbackRepository(db)
        self.queue = QueueRepository(db)
        self.rollout = RolloutRepository(db)
        self.embeddings = EmbeddingRepository(db)

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
