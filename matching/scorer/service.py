#!/usr/bin/env python3
"""
Match Scoring Service - per-pair pipeline: Rules -> Semantic -> Behavior -> Fusion.

Driver side:
- Rules: deterministic attribute fit (always present)
- Semantic: embedding similarity of the driver's notes and the job text (optional)
- Behavior: the driver's own feedback and interaction history
- Fusion: overall score, confidence, reasons, cautions, breakdown

Company side scores candidates (applications, leads) with the company rules
and the semantic signal; there is no behavior signal for candidates.

Scorer-level errors stop here: a missing semantic signal degrades the match,
a pair without identity is declined (``InvalidCandidate``), and when pairs are
scored in bulk a failing pair is logged and skipped without affecting the rest.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

from matching.config_loader import MatchingConfig
from matching.errors import SignalUnavailable
from matching.scorer import behavior as behavior_scoring
from matching.scorer.behavior import BehaviorContext
from matching.scorer.company_rules import score_candidate_job
from matching.scorer.driver_rules import score_driver_job
from matching.scorer.fusion import fuse_scores
from matching.scorer.models import (
    CandidateFeatures,
    DriverFeatures,
    JobFeatures,
    MatchResult,
    SemanticResult,
)
from matching.scorer.semantic import SemanticScorer

logger = logging.getLogger(__name__)

T = TypeVar("T")

DRIVER_ENTITY = "driver_profile"
JOB_ENTITY = "job"


class MatchScoringService:
    """
    Orchestrates the scoring pipeline for single pairs and for batches.

    Shared inputs (features, behavior context, config) are treated as
    read-only, so pairs can be scored concurrently on a thread pool.
    """

    def __init__(self, config: MatchingConfig, semantic_scorer: Optional[SemanticScorer] = None):
        self.config = config
        self.semantic_scorer = semantic_scorer

    def _semantic(self, subject: Tuple[str, str, str], target: Tuple[str, str, str]) -> Optional[SemanticResult]:
        if self.semantic_scorer is None:
            logger.debug("No semantic scorer configured; scoring %s %s rules-only", *subject[:2])
            return None
        try:
            return self.semantic_scorer.score(subject, target)
        except SignalUnavailable as e:
            logger.info(f"Degraded match for {subject[0]} {subject[1]} / job {target[1]}: {e}")
            return None

    def score_driver_job(
        self,
        driver: DriverFeatures,
        job: JobFeatures,
        context: BehaviorContext,
        computed_at: Optional[datetime] = None,
    ) -> Optional[MatchResult]:
        """
        Score one driver/job pair.

        Returns:
            MatchResult, or None when the pair must not be scored (job not
            Active, or the driver hid the job).

        Raises:
            InvalidCandidate: If the driver id or job id is missing.
        """
        rules = score_driver_job(driver, job, self.config.rules.driver)

        if not job.is_active:
            logger.debug(f"Skipping job {job.job_id} with status {job.status}")
            return None

        behavior = behavior_scoring.score_behavior(job, context, self.config.behavior)
        if behavior.hidden:
            return None

        semantic = None
        if (driver.about or "").strip():
            semantic = self._semantic(
                (DRIVER_ENTITY, driver.driver_id, driver.text_block),
                (JOB_ENTITY, job.job_id, job.text_block),
            )
        else:
            logger.debug(f"Driver {driver.driver_id} has no free-text notes; semantic signal unavailable")

        return fuse_scores(rules, semantic, behavior, self.config.fusion, computed_at)

    def score_candidate_job(
        self,
        candidate: CandidateFeatures,
        job: JobFeatures,
        computed_at: Optional[datetime] = None,
    ) -> Optional[MatchResult]:
        """
        Score one candidate (application or lead) against one of the company's jobs.

        Raises:
            InvalidCandidate: If the candidate id or job id is missing.
        """
        computed_at = computed_at or datetime.now(timezone.utc)
        rules = score_candidate_job(candidate, job, self.config.rules.company, as_of=computed_at)
        if not job.is_active:
            return None

        semantic = self._semantic(
            (candidate.source.value, candidate.candidate_id, candidate.text_block),
            (JOB_ENTITY, job.job_id, job.text_block),
        )
        return fuse_scores(rules, semantic, None, self.config.fusion, computed_at)

    def score_many(
        self,
        items: Iterable[T],
        score_fn: Callable[[T], Optional[MatchResult]],
        describe: Callable[[T], str],
        max_workers: int = 8,
    ) -> List[Tuple[T, MatchResult]]:
        """
        Score items concurrently; per-item failures are logged and skipped.

        Returns:
            (item, result) pairs in input order, omitting declined and failed items.
        """
        items = list(items)
        if not items:
            return []

        def run(item: T) -> Optional[MatchResult]:
            try:
                return score_fn(item)
            except Exception as e:
                logger.warning(f"Skipping pair {describe(item)}: {e}", exc_info=True)
                return None

        with ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="score") as pool:
            results = list(pool.map(run, items))

        return [(item, result) for item, result in zip(items, results) if result is not None]
