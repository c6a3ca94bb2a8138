#!/usr/bin/env python3
"""
Recompute service - explicit recompute requests from callers.
"""

import logging
from typing import Optional

from database.repository import MatchingRepository
from scheduler.queue import RecomputeScheduler
from ..models.responses import RecomputeResponse

logger = logging.getLogger(__name__)


class RecomputeService:
    def __init__(self, repo: MatchingRepository, scheduler: RecomputeScheduler):
        self.repo = repo
        self.scheduler = scheduler

    def enqueue_recompute(
        self,
        entity_type: str,
        entity_id: str,
        reason: str,
        company_id: Optional[str] = None,
    ) -> RecomputeResponse:
        enqueued = self.scheduler.enqueue(entity_type, entity_id, reason, company_id=company_id, repo=self.repo)
        self.repo.commit()
        if enqueued:
            self.scheduler.nudge()
        else:
            logger.info(f"Recompute for {entity_type} {entity_id} already pending")

        return RecomputeResponse(entity_type=entity_type, entity_id=entity_id, enqueued=enqueued)

    def queue_counts(self):
        return self.repo.queue.count_by_status()
