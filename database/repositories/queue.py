import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from sqlalchemy import select, update, func
from sqlalchemy.sql import text as sql_text

from database.models import RecomputeQueueEntry
from database.repositories.base import BaseRepository
from matching.errors import QueueClaimConflict

logger = logging.getLogger(__name__)

PENDING = 'pending'
PROCESSING = 'processing'
DONE = 'done'
FAILED = 'failed'

ENTITY_TYPES = ('driver_profile', 'job', 'company_profile', 'application', 'lead')


class QueueRepository(BaseRepository):
    """Durable recompute queue backed by ``matching_recompute_queue``."""

    def enqueue(
        self,
        entity_type: str,
        entity_id: str,
        reason: str,
        company_id: Optional[str] = None,
    ) -> bool:
        """
        Insert a pending entry unless one already exists for the entity.

        The conflict target is the partial unique index on pending rows, so
        concurrent enqueues for the same entity collapse into one row.

        Returns:
            True if a new entry was created, False if one was already pending.
        """
        if entity_type not in ENTITY_TYPES:
            raise ValueError(f"Unknown entity_type: {entity_type}")

        stmt = (
            self.insert(RecomputeQueueEntry)
            .values(
                entity_type=entity_type,
                entity_id=str(entity_id),
                company_id=company_id,
                reason=reason,
                status=PENDING,
            )
            .on_conflict_do_nothing(
                index_elements=['entity_type', 'entity_id'],
                index_where=sql_text("status = 'pending'"),
            )
        )
        result = self.db.execute(stmt)
        created = result.rowcount == 1
        if created:
            logger.debug(f"Enqueued {entity_type} {entity_id} ({reason})")
        else:
            logger.debug(f"Recompute already pending for {entity_type} {entity_id}")
        return created

    def get_entry(self, entry_id: str) -> Optional[RecomputeQueueEntry]:
        return self.db.get(RecomputeQueueEntry, entry_id)

    def list_pending_ids(self, limit: int = 20) -> List[str]:
        stmt = (
            select(RecomputeQueueEntry.id)
            .where(RecomputeQueueEntry.status == PENDING)
            .order_by(RecomputeQueueEntry.created_at, RecomputeQueueEntry.id)
            .limit(limit)
            .with_for_update(skip_locked=True)
        )
        return list(self.db.execute(stmt).scalars().all())

    def claim(self, entry_id: str) -> RecomputeQueueEntry:
        """
        Atomically move one entry from pending to processing.

        Raises:
            QueueClaimConflict: If another worker claimed it first.
        """
        now = datetime.now(timezone.utc)
        result = self.db.execute(
            update(RecomputeQueueEntry)
            .where(RecomputeQueueEntry.id == entry_id, RecomputeQueueEntry.status == PENDING)
            .values(
                status=PROCESSING,
                started_at=now,
                attempts=RecomputeQueueEntry.attempts + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise QueueClaimConflict(f"Queue entry {entry_id} is no longer pending")

        entry = self.db.get(RecomputeQueueEntry, entry_id)
        self.db.refresh(entry)
        return entry

    def claim_batch(self, limit: int = 20) -> List[RecomputeQueueEntry]:
        """Claim up to ``limit`` pending entries, oldest first; lost races are skipped."""
        claimed = []
        for entry_id in self.list_pending_ids(limit):
            try:
                claimed.append(self.claim(entry_id))
            except QueueClaimConflict:
                logger.debug(f"Entry {entry_id} claimed by another worker")
        return claimed

    def mark_done(self, entry_id: str) -> None:
        self.db.execute(
            update(RecomputeQueueEntry)
            .where(RecomputeQueueEntry.id == entry_id)
            .values(status=DONE, completed_at=datetime.now(timezone.utc), last_error=None)
            .execution_options(synchronize_session=False)
        )

    def mark_failed(self, entry_id: str, error: str) -> None:
        self.db.execute(
            update(RecomputeQueueEntry)
            .where(RecomputeQueueEntry.id == entry_id)
            .values(status=FAILED, completed_at=datetime.now(timezone.utc), last_error=error[:2000])
            .execution_options(synchronize_session=False)
        )

    def release(self, entry: RecomputeQueueEntry, note: Optional[str] = None) -> str:
        """
        Return a processing entry to pending.

        If a newer pending entry already exists for the same entity, that one
        will redo the work, so this one is closed as done instead.

        Returns:
            The entry's new status.
        """
        duplicate = self.db.execute(
            select(RecomputeQueueEntry.id).where(
                RecomputeQueueEntry.entity_type == entry.entity_type,
                RecomputeQueueEntry.entity_id == entry.entity_id,
                RecomputeQueueEntry.status == PENDING,
            )
        ).first()

        if duplicate is not None:
            values = dict(status=DONE, completed_at=datetime.now(timezone.utc),
                          last_error=note or 'superseded by newer pending entry')
        else:
            values = dict(status=PENDING, started_at=None, last_error=note)

        self.db.execute(
            update(RecomputeQueueEntry)
            .where(RecomputeQueueEntry.id == entry.id, RecomputeQueueEntry.status == PROCESSING)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return values['status']

    def release_stale(self, older_than_minutes: int) -> int:
        """Release processing entries whose worker appears to have died."""
        cutoff = datetime.now(timezone.utc) - timedelta(minutes=older_than_minutes)
        stale = self.db.execute(
            select(RecomputeQueueEntry).where(
                RecomputeQueueEntry.status == PROCESSING,
                RecomputeQueueEntry.started_at < cutoff,
            )
        ).scalars().all()

        for entry in stale:
            self.release(entry, note=f'released after {older_than_minutes}m in processing')

        if stale:
            logger.warning(f"Released {len(stale)} stale queue entries")
        return len(stale)

    def count_by_status(self) -> Dict[str, int]:
        rows = self.db.execute(
            select(RecomputeQueueEntry.status, func.count()).group_by(RecomputeQueueEntry.status)
        ).all()
        return {status: count for status, count in rows}
