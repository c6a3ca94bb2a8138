#!/usr/bin/env python3
"""
Match service - read API over stored match scores.

Every read asks the rollout controller first. A caller who may not see
scores gets an empty result with ``visible=False``, never an error.
Driver reads check the job's live status, so a closed job disappears
before its rows are recomputed.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from database.models import CompanyCandidateMatchScore, DriverJobMatchScore, Job
from database.repository import MatchingRepository
from matching.config_loader import FusionConfig
from matching.rollout import RolloutController
from matching.scorer.models import MATCH_ACTIONS, Role
from ..models.responses import (
    CandidateMatch,
    CandidateMatchesResponse,
    DriverJobMatch,
    DriverMatchResponse,
    DriverMatchesResponse,
    MatchActions,
    MatchScoresResponse,
)

logger = logging.getLogger(__name__)


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None


def _optional_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


class MatchService:
    """Service for reading driver and company match scores."""

    def __init__(self, repo: MatchingRepository, rollout: RolloutController, fusion: FusionConfig):
        self.repo = repo
        self.rollout = rollout
        self.fusion = fusion

    def _score_fields(self, row) -> Dict[str, Any]:
        """Common score columns with display caps applied; stored lists stay complete."""
        return {
            "overall_score": int(row.overall_score),
            "rules_score": float(row.rules_score),
            "semantic_score": _optional_float(row.semantic_score),
            "behavior_score": _optional_float(row.behavior_score),
            "confidence": row.confidence,
            "top_reasons": list(row.top_reasons or [])[:self.fusion.max_reasons],
            "cautions": list(row.cautions or [])[:self.fusion.max_cautions],
            "missing_fields": list(row.missing_fields or [])[:self.fusion.max_missing_fields],
            "score_breakdown": dict(row.score_breakdown or {}),
            "degraded_mode": bool(row.degraded_mode),
            "computed_at": _iso(row.computed_at),
        }

    def _to_driver_match(self, row: DriverJobMatchScore, job: Job) -> DriverJobMatch:
        return DriverJobMatch(
            match_id=str(row.id),
            driver_id=str(row.driver_id),
            job_id=str(row.job_id),
            job_title=job.title if job else None,
            company_id=job.company_id if job else None,
            actions=MatchActions(**MATCH_ACTIONS),
            **self._score_fields(row),
        )

    def _to_candidate_match(self, row: CompanyCandidateMatchScore, job: Job) -> CandidateMatch:
        return CandidateMatch(
            match_id=str(row.id),
            company_id=str(row.company_id),
            job_id=str(row.job_id),
            job_title=job.title if job else None,
            candidate_source=row.candidate_source,
            candidate_id=str(row.candidate_id),
            candidate_driver_id=row.candidate_driver_id,
            **self._score_fields(row),
        )

    def get_top_matches(
        self,
        subject_id: str,
        role: str = Role.DRIVER.value,
        limit: Optional[int] = 10,
        min_score: Optional[int] = None,
        exclude_hidden: bool = True,
        offset: int = 0,
    ):
        """
        Highest scoring matches for a driver, or for a company's candidates.

        Returns:
            DriverMatchesResponse for drivers, CandidateMatchesResponse for companies.
        """
        if Role(role) == Role.COMPANY:
            return self.get_candidate_matches(subject_id, min_score=min_score, limit=limit, offset=offset)

        if not self.rollout.is_visible(Role.DRIVER, subject_id):
            return DriverMatchesResponse(visible=False, count=0, matches=[])

        rows = self.repo.matches.get_driver_matches(
            subject_id,
            min_score=min_score,
            exclude_hidden=exclude_hidden,
            limit=limit,
            offset=offset,
        )
        matches = [self._to_driver_match(row, job) for row, job in rows]
        return DriverMatchesResponse(visible=True, count=len(matches), matches=matches)

    def get_all_match_scores(self, driver_id: str) -> MatchScoresResponse:
        """job_id -> overall score, for badges on job listings."""
        if not self.rollout.is_visible(Role.DRIVER, driver_id):
            return MatchScoresResponse(visible=False, scores={})

        rows = self.repo.matches.get_driver_matches(driver_id, exclude_hidden=True)
        return MatchScoresResponse(
            visible=True,
            scores={str(row.job_id): int(row.overall_score) for row, _ in rows},
        )

    def get_match_score(self, driver_id: str, job_id: str) -> DriverMatchResponse:
        if not self.rollout.is_visible(Role.DRIVER, driver_id):
            return DriverMatchResponse(visible=False, match=None)

        found = self.repo.matches.get_driver_match(driver_id, job_id)
        if found is None:
            return DriverMatchResponse(visible=True, match=None)
        row, job = found
        return DriverMatchResponse(visible=True, match=self._to_driver_match(row, job))

    def get_candidate_matches(
        self,
        company_id: str,
        job_id: Optional[str] = None,
        candidate_source: Optional[str] = None,
        min_score: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> CandidateMatchesResponse:
        if not self.rollout.is_visible(Role.COMPANY, company_id):
            return CandidateMatchesResponse(visible=False, count=0, matches=[])

        rows = self.repo.matches.get_candidate_matches(
            company_id,
            job_id=job_id,
            candidate_source=candidate_source,
            min_score=min_score,
            limit=limit,
            offset=offset,
        )
        matches: List[CandidateMatch] = [self._to_candidate_match(row, job) for row, job in rows]
        return CandidateMatchesResponse(visible=True, count=len(matches), matches=matches)
