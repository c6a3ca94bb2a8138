#!/usr/bin/env python3
"""
Recompute Scheduler - durable enqueue with an optional Redis Queue nudge.

The queue table is the source of truth: an entity is enqueued once no matter
how many times it changes before a worker picks it up. When RQ is enabled a
``process_queue_task`` job is pushed after the insert commits so a worker
drains the table sooner than its next poll.
"""

import logging
from typing import Callable, Optional

from redis import Redis
from rq import Queue

from database.repository import MatchingRepository
from database.uow import matching_uow
from matching.config_loader import SchedulerConfig
from scheduler.tasks import process_queue_task

logger = logging.getLogger(__name__)


class RecomputeScheduler:
    def __init__(
        self,
        config: Optional[SchedulerConfig] = None,
        uow: Callable = matching_uow,
    ):
        self.config = config or SchedulerConfig()
        self._uow = uow
        self.redis_conn = None
        self.queue = None

        if not self.config.use_rq:
            logger.info("RQ nudge disabled via config. Workers will poll the queue table.")
            return

        try:
            self.redis_conn = Redis.from_url(self.config.redis_url)
            self.redis_conn.ping()
            self.queue = Queue(self.config.queue_name, connection=self.redis_conn)
            logger.info("Recompute scheduler connected to Redis")
        except Exception as e:
            logger.error(f"Redis connection failed: {e}. Falling back to polling.")
            self.redis_conn = None
            self.queue = None

    def enqueue(
        self,
        entity_type: str,
        entity_id: str,
        reason: str,
        company_id: Optional[str] = None,
        repo: Optional[MatchingRepository] = None,
    ) -> bool:
        """
        Request a recompute for an entity.

        Args:
            repo: Enqueue inside the caller's transaction instead of a new one.
                The nudge is then left to the caller (see ``nudge``).

        Returns:
            True if a new pending entry was created.
        """
        if repo is not None:
            return repo.queue.enqueue(entity_type, entity_id, reason, company_id=company_id)

        with self._uow() as uow_repo:
            created = uow_repo.queue.enqueue(entity_type, entity_id, reason, company_id=company_id)

        if created:
            self.nudge()
        return created

    def nudge(self) -> Optional[str]:
        """Push a drain task onto RQ; returns the RQ job id, or None in polling mode."""
        if self.queue is None:
            return None

        try:
            job = self.queue.enqueue(
                process_queue_task,
                job_timeout='10m',
                result_ttl=3600,
            )
            logger.debug(f"Queued recompute drain as job {job.id}")
            return job.id
        except Exception as e:
            logger.warning(f"Failed to nudge recompute worker via RQ: {e}")
            return None
