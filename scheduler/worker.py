#!/usr/bin/env python3
"""
Recompute Worker - drains the matching recompute queue.

Each poll:
1. Release ``processing`` entries left behind by a worker that died
2. Claim a batch of pending entries (pending -> processing, conditional update)
3. For each entry load its inputs (bounded retry), score every pair on a
   thread pool, then upsert the rows and mark the entry done

A pair that fails to score is logged and skipped; an entry whose inputs cannot
be loaded after the retry budget is marked failed.

Usage:
    python -m scheduler.worker
    python -m scheduler.worker --burst
    python -m scheduler.worker --verbose
"""

import argparse
import logging
import signal
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError
from tenacity import Retrying, before_sleep_log, retry_if_exception_type, stop_after_attempt, wait_fixed

from database.repository import MatchingRepository
from database.uow import matching_uow
from matching.config_loader import AppConfig, load_config
from matching.errors import BatchFetchFailure
from matching.llm import create_embedding_provider
from matching.llm.interfaces import EmbeddingProvider
from matching.scorer.behavior import (
    BehaviorContext,
    EventSnapshot,
    FeedbackSnapshot,
    JobSignature,
    build_behavior_context,
)
from matching.scorer.features import (
    extract_candidate_from_application,
    extract_candidate_from_lead,
    extract_driver_features,
    extract_job_features,
)
from matching.scorer.models import CandidateFeatures, DriverFeatures, JobFeatures
from matching.scorer.semantic import EmbeddingMemo, SemanticScorer
from matching.scorer.service import DRIVER_ENTITY, JOB_ENTITY, MatchScoringService
from matching.utils import content_hash

logger = logging.getLogger(__name__)

EmbeddingKey = Tuple[str, str, str]


@dataclass(frozen=True)
class ClaimedEntry:
    """Detached copy of a claimed queue row."""
    id: str
    entity_type: str
    entity_id: str
    company_id: Optional[str]
    reason: str


@dataclass
class RecomputePlan:
    """Everything needed to score one queue entry, loaded up front."""
    driver_pairs: List[Tuple[DriverFeatures, JobFeatures, BehaviorContext]] = field(default_factory=list)
    candidate_pairs: List[Tuple[CandidateFeatures, JobFeatures]] = field(default_factory=list)
    hidden_by_driver: Dict[str, Set[str]] = field(default_factory=dict)
    cached_embeddings: List[Tuple[EmbeddingKey, List[float]]] = field(default_factory=list)
    follow_ups: List[Tuple[str, str, str]] = field(default_factory=list)

    @property
    def pair_count(self) -> int:
        return len(self.driver_pairs) + len(self.candidate_pairs)


class RecomputeWorker:
    def __init__(
        self,
        config: Optional[AppConfig] = None,
        uow: Callable = matching_uow,
        provider: Optional[EmbeddingProvider] = None,
        use_configured_provider: bool = True,
    ):
        self.config = config or load_config()
        self._uow = uow
        if provider is None and use_configured_provider:
            provider = create_embedding_provider(self.config.matching.semantic)
        self.provider = provider
        self._embed_executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="embed")
        self.running = True

    # ------------------------------------------------------------------
    # Queue handling
    # ------------------------------------------------------------------

    def claim_batch(self) -> List[ClaimedEntry]:
        with self._uow() as repo:
            repo.queue.release_stale(self.config.scheduler.stale_claim_minutes)

        with self._uow() as repo:
            entries = repo.queue.claim_batch(self.config.scheduler.batch_size)
            return [
                ClaimedEntry(e.id, e.entity_type, e.entity_id, e.company_id, e.reason)
                for e in entries
            ]

    def process_batch(self) -> Dict[str, int]:
        """Claim and process one batch; returns per-outcome entry counts."""
        stats = {"claimed": 0, "done": 0, "failed": 0}
        entries = self.claim_batch()
        stats["claimed"] = len(entries)
        if not entries:
            return stats

        logger.info(f"Claimed {len(entries)} recompute entries")
        for entry in entries:
            if self.process_entry(entry):
                stats["done"] += 1
            else:
                stats["failed"] += 1
        return stats

    def process_entry(self, entry: ClaimedEntry) -> bool:
        start = time.time()
        try:
            plan = self.fetch_plan(entry)
            written = self.score_and_store(entry, plan)
        except BatchFetchFailure as e:
            logger.error(f"Giving up on {entry.entity_type} {entry.entity_id}: {e}")
            self._mark_failed(entry, str(e))
            return False
        except Exception as e:
            logger.error(f"Recompute failed for {entry.entity_type} {entry.entity_id}: {e}", exc_info=True)
            self._mark_failed(entry, str(e))
            return False

        logger.info(
            f"Recomputed {entry.entity_type} {entry.entity_id} ({entry.reason}): "
            f"{written}/{plan.pair_count} pairs stored in {time.time() - start:.2f}s"
        )
        return True

    def _mark_failed(self, entry: ClaimedEntry, error: str) -> None:
        with self._uow() as repo:
            repo.queue.mark_failed(entry.id, error)

    # ------------------------------------------------------------------
    # Input loading
    # ------------------------------------------------------------------

    def fetch_plan(self, entry: ClaimedEntry) -> RecomputePlan:
        """
        Load the inputs for an entry, retrying transient database errors.

        Raises:
            BatchFetchFailure: When every attempt failed.
        """
        cfg = self.config.scheduler
        try:
            for attempt in Retrying(
                stop=stop_after_attempt(cfg.fetch_attempts),
                wait=wait_fixed(cfg.fetch_retry_wait_seconds),
                retry=retry_if_exception_type(SQLAlchemyError),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    return self._load_plan(entry)
        except SQLAlchemyError as e:
            raise BatchFetchFailure(
                f"could not load inputs after {cfg.fetch_attempts} attempts: {e}"
            ) from e

    def _load_plan(self, entry: ClaimedEntry) -> RecomputePlan:
        loaders = {
            "driver_profile": self._plan_for_driver,
            "job": self._plan_for_job,
            "company_profile": self._plan_for_company,
            "application": self._plan_for_application,
            "lead": self._plan_for_lead,
        }
        loader = loaders.get(entry.entity_type)
        if loader is None:
            raise ValueError(f"Unknown entity_type: {entry.entity_type}")

        with self._uow() as repo:
            plan = RecomputePlan()
            loader(repo, entry, plan)
            plan.cached_embeddings = repo.embeddings.get_cached(self._embedding_keys(plan))
            return plan

    def _behavior_context(self, repo: MatchingRepository, driver_id: str) -> BehaviorContext:
        cfg = self.config.matching.behavior
        feedback = [
            FeedbackSnapshot(job_id, value, JobSignature.of(company_id, route_type, freight_type))
            for job_id, value, company_id, route_type, freight_type
            in repo.feedback.get_feedback_with_jobs(driver_id)
        ]
        events = [
            EventSnapshot(job_id, event_type, JobSignature.of(company_id, route_type, freight_type))
            for job_id, event_type, company_id, route_type, freight_type
            in repo.feedback.get_recent_events_with_jobs(driver_id, cfg.lookback_days, cfg.max_events)
        ]
        return build_behavior_context(driver_id, feedback, events, cfg)

    def _add_driver(self, repo: MatchingRepository, profile, jobs: List[JobFeatures], plan: RecomputePlan) -> None:
        driver = extract_driver_features(profile, repo.drivers.get_latest_application(profile.id))
        context = self._behavior_context(repo, driver.driver_id)
        plan.hidden_by_driver[driver.driver_id] = set(context.hidden_job_ids)
        plan.driver_pairs.extend((driver, job, context) for job in jobs)

    def _add_candidates(self, repo: MatchingRepository, company_id: str, jobs: List[JobFeatures],
                        plan: RecomputePlan, applications=None, leads=None) -> None:
        if applications is None:
            applications = repo.candidates.get_applications_for_company(company_id)
        if leads is None:
            leads = repo.candidates.get_leads_for_company(company_id)

        for application in applications:
            candidate = extract_candidate_from_application(application)
            for job in jobs:
                # An application to a specific job is scored against that job only
                if application.job_id and application.job_id != job.job_id:
                    continue
                plan.candidate_pairs.append((candidate, job))

        for lead in leads:
            candidate = extract_candidate_from_lead(lead)
            plan.candidate_pairs.extend((candidate, job) for job in jobs)

    def _plan_for_driver(self, repo: MatchingRepository, entry: ClaimedEntry, plan: RecomputePlan) -> None:
        profile = repo.drivers.get_by_id(entry.entity_id)
        if profile is None:
            logger.info(f"Driver {entry.entity_id} no longer exists; nothing to score")
            return
        jobs = [extract_job_features(job) for job in repo.jobs.get_active_jobs()]
        self._add_driver(repo, profile, jobs, plan)

    def _plan_for_job(self, repo: MatchingRepository, entry: ClaimedEntry, plan: RecomputePlan) -> None:
        job_row = repo.jobs.get_by_id(entry.entity_id)
        if job_row is None or job_row.status != "Active":
            logger.info(f"Job {entry.entity_id} is missing or not Active; nothing to score")
            return
        job = extract_job_features(job_row)
        for profile in repo.drivers.get_all():
            self._add_driver(repo, profile, [job], plan)
        self._add_candidates(repo, job_row.company_id, [job], plan)

    def _plan_for_company(self, repo: MatchingRepository, entry: ClaimedEntry, plan: RecomputePlan) -> None:
        company_id = entry.company_id or entry.entity_id
        jobs = [extract_job_features(job) for job in repo.jobs.get_active_jobs(company_id)]
        self._add_candidates(repo, company_id, jobs, plan)

    def _plan_for_application(self, repo: MatchingRepository, entry: ClaimedEntry, plan: RecomputePlan) -> None:
        application = repo.candidates.get_application(entry.entity_id)
        if application is None:
            logger.info(f"Application {entry.entity_id} no longer exists; nothing to score")
            return
        jobs = [extract_job_features(job) for job in repo.jobs.get_active_jobs(application.company_id)]
        self._add_candidates(repo, application.company_id, jobs, plan, applications=[application], leads=[])
        if application.driver_id:
            # Driver-side fallbacks read the latest application
            plan.follow_ups.append((DRIVER_ENTITY, application.driver_id, "application_updated"))

    def _plan_for_lead(self, repo: MatchingRepository, entry: ClaimedEntry, plan: RecomputePlan) -> None:
        lead = repo.candidates.get_lead(entry.entity_id)
        if lead is None:
            logger.info(f"Lead {entry.entity_id} no longer exists; nothing to score")
            return
        jobs = [extract_job_features(job) for job in repo.jobs.get_active_jobs(lead.company_id)]
        self._add_candidates(repo, lead.company_id, jobs, plan, applications=[], leads=[lead])

    @staticmethod
    def _embedding_keys(plan: RecomputePlan) -> List[EmbeddingKey]:
        keys = set()
        for driver, job, _ in plan.driver_pairs:
            if driver.text_block:
                keys.add((DRIVER_ENTITY, driver.driver_id, content_hash(driver.text_block)))
            if job.text_block:
                keys.add((JOB_ENTITY, job.job_id, content_hash(job.text_block)))
        for candidate, job in plan.candidate_pairs:
            if candidate.text_block:
                keys.add((candidate.source.value, candidate.candidate_id, content_hash(candidate.text_block)))
            if job.text_block:
                keys.add((JOB_ENTITY, job.job_id, content_hash(job.text_block)))
        return sorted(keys)

    # ------------------------------------------------------------------
    # Scoring and persistence
    # ------------------------------------------------------------------

    def score_and_store(self, entry: ClaimedEntry, plan: RecomputePlan) -> int:
        memo = EmbeddingMemo()
        memo.seed(plan.cached_embeddings)
        semantic_scorer = None
        if self.provider is not None:
            semantic_scorer = SemanticScorer(
                self.provider, self.config.matching.semantic, memo=memo, executor=self._embed_executor
            )
        service = MatchScoringService(self.config.matching, semantic_scorer)
        computed_at = datetime.now(timezone.utc)
        max_workers = self.config.scheduler.max_workers

        driver_results = service.score_many(
            plan.driver_pairs,
            lambda pair: service.score_driver_job(pair[0], pair[1], pair[2], computed_at),
            describe=lambda pair: f"driver {pair[0].driver_id} / job {pair[1].job_id}",
            max_workers=max_workers,
        )
        candidate_results = service.score_many(
            plan.candidate_pairs,
            lambda pair: service.score_candidate_job(pair[0], pair[1], computed_at),
            describe=lambda pair: f"{pair[0].source.value} {pair[0].candidate_id} / job {pair[1].job_id}",
            max_workers=max_workers,
        )

        with self._uow() as repo:
            for (driver, job, _), result in driver_results:
                repo.matches.upsert_driver_match(driver.driver_id, job.job_id, result.to_row())

            for driver_id, hidden in plan.hidden_by_driver.items():
                repo.matches.delete_driver_matches(driver_id, sorted(hidden))

            for (candidate, job), result in candidate_results:
                repo.matches.upsert_candidate_match(
                    job.company_id,
                    job.job_id,
                    candidate.source.value,
                    candidate.candidate_id,
                    result.to_row(),
                    candidate_driver_id=candidate.candidate_driver_id,
                )

            for key, vector in memo.fresh_entries():
                repo.embeddings.upsert_embedding(
                    key, vector, provider=service.semantic_scorer.provider_name,
                    model=service.semantic_scorer.model_name,
                )

            for entity_type, entity_id, reason in plan.follow_ups:
                repo.queue.enqueue(entity_type, entity_id, reason)

            repo.queue.mark_done(entry.id)

        return len(driver_results) + len(candidate_results)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self, burst: bool = False) -> None:
        """Poll until stopped; in burst mode, exit once the queue is empty."""
        interval = self.config.scheduler.poll_interval_seconds
        logger.info(f"Recompute worker started (burst={burst}, interval={interval}s)")

        while self.running:
            try:
                stats = self.process_batch()
            except Exception as e:
                logger.error(f"Error in worker loop: {e}", exc_info=True)
                stats = {"claimed": 0}

            if stats["claimed"]:
                logger.info(f"Batch finished: {stats}")
                continue
            if burst:
                logger.info("Queue empty; burst run complete")
                break

            for _ in range(max(1, int(interval))):
                if not self.running:
                    break
                time.sleep(1)

        self.close()

    def stop(self, *_args) -> None:
        logger.info("Shutdown signal received")
        self.running = False

    def close(self) -> None:
        self._embed_executor.shutdown(wait=False)


def main(argv=None):
    parser = argparse.ArgumentParser(description='CDL Matchmaker Recompute Worker')
    parser.add_argument('--burst', action='store_true', help='Process all pending entries and exit')
    parser.add_argument('--config', default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--verbose', action='store_true')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    worker = RecomputeWorker(load_config(args.config))
    signal.signal(signal.SIGINT, worker.stop)
    signal.signal(signal.SIGTERM, worker.stop)
    worker.run(burst=args.burst)


if __name__ == '__main__':
    main()
