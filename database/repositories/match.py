import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select, delete, and_

from database.models import (
    DriverJobMatchScore,
    CompanyCandidateMatchScore,
    DriverMatchFeedback,
    Job,
)
from database.repositories.base import BaseRepository
from database.repositories.job import ACTIVE_STATUS

logger = logging.getLogger(__name__)

HIDE_FEEDBACK = 'hide'


class MatchRepository(BaseRepository):
    def upsert_driver_match(self, driver_id: str, job_id: str, row: Dict[str, Any]) -> None:
        """Insert or overwrite the stored score for one (driver, job) pair."""
        stmt = self.insert(DriverJobMatchScore).values(driver_id=driver_id, job_id=job_id, **row)
        stmt = stmt.on_conflict_do_update(
            index_elements=['driver_id', 'job_id'],
            set_={**row, 'version': DriverJobMatchScore.version + 1},
        )
        self.db.execute(stmt)

    def upsert_candidate_match(
        self,
        company_id: str,
        job_id: str,
        candidate_source: str,
        candidate_id: str,
        row: Dict[str, Any],
        candidate_driver_id: Optional[str] = None,
    ) -> None:
        values = dict(row, candidate_driver_id=candidate_driver_id)
        stmt = self.insert(CompanyCandidateMatchScore).values(
            company_id=company_id,
            job_id=job_id,
            candidate_source=candidate_source,
            candidate_id=candidate_id,
            **values,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=['company_id', 'job_id', 'candidate_source', 'candidate_id'],
            set_={**values, 'version': CompanyCandidateMatchScore.version + 1},
        )
        self.db.execute(stmt)

    def delete_driver_matches(self, driver_id: str, job_ids: Sequence[str]) -> int:
        """Remove stored rows for jobs the driver should no longer see (e.g. hidden)."""
        if not job_ids:
            return 0
        result = self.db.execute(
            delete(DriverJobMatchScore).where(
                DriverJobMatchScore.driver_id == driver_id,
                DriverJobMatchScore.job_id.in_(list(job_ids)),
            )
        )
        if result.rowcount:
            logger.info(f"Deleted {result.rowcount} match rows for driver {driver_id}")
        return result.rowcount

    def _driver_matches_stmt(self, driver_id: str, exclude_hidden: bool):
        stmt = (
            select(DriverJobMatchScore, Job)
            .join(Job, Job.id == DriverJobMatchScore.job_id)
            .where(
                DriverJobMatchScore.driver_id == driver_id,
                Job.status == ACTIVE_STATUS,
            )
        )
        if exclude_hidden:
            stmt = stmt.outerjoin(
                DriverMatchFeedback,
                and_(
                    DriverMatchFeedback.driver_id == DriverJobMatchScore.driver_id,
                    DriverMatchFeedback.job_id == DriverJobMatchScore.job_id,
                    DriverMatchFeedback.feedback == HIDE_FEEDBACK,
                ),
            ).where(DriverMatchFeedback.id.is_(None))
        return stmt

    def get_driver_matches(
        self,
        driver_id: str,
        min_score: Optional[int] = None,
        exclude_hidden: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Tuple[DriverJobMatchScore, Job]]:
        """
        Stored matches for a driver whose job is currently Active.

        Job status is checked live here, so a job closed after scoring drops
        out of reads before any recompute runs.
        """
        stmt = self._driver_matches_stmt(driver_id, exclude_hidden)
        if min_score is not None:
            stmt = stmt.where(DriverJobMatchScore.overall_score >= min_score)

        stmt = stmt.order_by(
            DriverJobMatchScore.overall_score.desc(),
            DriverJobMatchScore.computed_at.desc(),
            DriverJobMatchScore.job_id,
        )
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [tuple(row) for row in self.db.execute(stmt).all()]

    def get_driver_match(
        self,
        driver_id: str,
        job_id: str,
    ) -> Optional[Tuple[DriverJobMatchScore, Job]]:
        stmt = self._driver_matches_stmt(driver_id, exclude_hidden=True).where(
            DriverJobMatchScore.job_id == job_id
        )
        row = self.db.execute(stmt).first()
        return tuple(row) if row is not None else None

    def get_candidate_matches(
        self,
        company_id: str,
        job_id: Optional[str] = None,
        candidate_source: Optional[str] = None,
        min_score: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Tuple[CompanyCandidateMatchScore, Job]]:
        stmt = (
            select(CompanyCandidateMatchScore, Job)
            .join(Job, Job.id == CompanyCandidateMatchScore.job_id)
            .where(
                CompanyCandidateMatchScore.company_id == company_id,
                Job.status == ACTIVE_STATUS,
            )
        )
        if job_id:
            stmt = stmt.where(CompanyCandidateMatchScore.job_id == job_id)
        if candidate_source:
            stmt = stmt.where(CompanyCandidateMatchScore.candidate_source == candidate_source)
        if min_score is not None:
            stmt = stmt.where(CompanyCandidateMatchScore.overall_score >= min_score)

        stmt = stmt.order_by(
            CompanyCandidateMatchScore.overall_score.desc(),
            CompanyCandidateMatchScore.computed_at.desc(),
            CompanyCandidateMatchScore.candidate_id,
        )
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [tuple(row) for row in self.db.execute(stmt).all()]
