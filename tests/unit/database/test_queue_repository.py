#!/usr/bin/env python3
"""
Tests for the durable recompute queue.

Usage:
    python -m pytest tests/unit/database/test_queue_repository.py -v
"""

import unittest
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import update

from database.models import RecomputeQueueEntry
from database.uow import matching_uow
from matching.errors import QueueClaimConflict
from tests import make_session_factory

pytestmark = pytest.mark.db


class TestQueueRepository(unittest.TestCase):

    def setUp(self):
        self.factory = make_session_factory()

    def uow(self):
        return matching_uow(self.factory)

    def test_enqueue_is_idempotent_while_pending(self):
        print("\n📊 UNIT Test 1: Enqueue dedup")
        with self.uow() as repo:
            self.assertTrue(repo.queue.enqueue('driver_profile', 'driver-1', 'profile_updated'))
            self.assertFalse(repo.queue.enqueue('driver_profile', 'driver-1', 'feedback'))
            self.assertTrue(repo.queue.enqueue('job', 'driver-1', 'job_updated'))

        with self.uow() as repo:
            self.assertEqual(repo.queue.count_by_status(), {'pending': 2})

    def test_unknown_entity_type_rejected(self):
        with self.uow() as repo:
            with self.assertRaises(ValueError):
                repo.queue.enqueue('resume', 'r-1', 'whatever')

    def test_claim_moves_entry_to_processing(self):
        print("\n📊 UNIT Test 2: Claim")
        with self.uow() as repo:
            repo.queue.enqueue('job', 'job-1', 'job_updated')

        with self.uow() as repo:
            entry_id = repo.queue.list_pending_ids()[0]
            entry = repo.queue.claim(entry_id)
            self.assertEqual(entry.status, 'processing')
            self.assertEqual(entry.attempts, 1)
            self.assertIsNotNone(entry.started_at)

            with self.assertRaises(QueueClaimConflict):
                repo.queue.claim(entry_id)

    def test_claim_batch_takes_oldest_pending(self):
        with self.uow() as repo:
            for i in range(3):
                repo.queue.enqueue('job', f'job-{i}', 'job_updated')

        with self.uow() as repo:
            claimed = repo.queue.claim_batch(limit=2)
            self.assertEqual(len(claimed), 2)
            self.assertEqual(repo.queue.count_by_status(), {'pending': 1, 'processing': 2})

    def test_enqueue_while_processing_creates_new_pending(self):
        print("\n📊 UNIT Test 3: Re-enqueue during processing")
        with self.uow() as repo:
            repo.queue.enqueue('driver_profile', 'driver-1', 'profile_updated')

        with self.uow() as repo:
            entry = repo.queue.claim_batch()[0]
            self.assertTrue(repo.queue.enqueue('driver_profile', 'driver-1', 'feedback'))
            self.assertEqual(repo.queue.release(entry), 'done')
            self.assertEqual(repo.queue.count_by_status(), {'pending': 1, 'done': 1})

    def test_release_returns_entry_to_pending(self):
        with self.uow() as repo:
            repo.queue.enqueue('job', 'job-1', 'job_updated')

        with self.uow() as repo:
            entry = repo.queue.claim_batch()[0]
            self.assertEqual(repo.queue.release(entry, note='shutdown'), 'pending')

        with self.uow() as repo:
            entry = repo.queue.claim_batch()[0]
            self.assertEqual(entry.attempts, 2)
            self.assertEqual(entry.last_error, 'shutdown')

    def test_release_stale(self):
        print("\n📊 UNIT Test 4: Stale claims")
        with self.uow() as repo:
            repo.queue.enqueue('job', 'job-1', 'job_updated')
            repo.queue.enqueue('job', 'job-2', 'job_updated')

        with self.uow() as repo:
            old, fresh = repo.queue.claim_batch()
            old_id = old.id
            repo.db.execute(
                update(RecomputeQueueEntry)
                .where(RecomputeQueueEntry.id == old_id)
                .values(started_at=datetime.now(timezone.utc) - timedelta(minutes=30))
            )

        with self.uow() as repo:
            self.assertEqual(repo.queue.release_stale(older_than_minutes=15), 1)

        with self.uow() as repo:
            self.assertEqual(repo.queue.get_entry(old_id).status, 'pending')
            self.assertEqual(repo.queue.count_by_status(), {'pending': 1, 'processing': 1})

    def test_mark_done_and_failed(self):
        with self.uow() as repo:
            repo.queue.enqueue('job', 'job-1', 'job_updated')
            repo.queue.enqueue('job', 'job-2', 'job_updated')

        with self.uow() as repo:
            first, second = repo.queue.claim_batch()
            first_id, second_id = first.id, second.id
            repo.queue.mark_done(first_id)
            repo.queue.mark_failed(second_id, 'x' * 5000)

        with self.uow() as repo:
            failed = repo.queue.get_entry(second_id)
            self.assertEqual(failed.status, 'failed')
            self.assertEqual(len(failed.last_error), 2000)
            self.assertIsNotNone(failed.completed_at)
            self.assertEqual(repo.queue.get_entry(first_id).status, 'done')


if __name__ == '__main__':
    unittest.main()
