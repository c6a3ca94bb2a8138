#!/usr/bin/env python3
"""
Tests for feedback, events, rollout config and the embedding cache.

Usage:
    python -m pytest tests/unit/database/test_signal_repositories.py -v
"""

import unittest

import pytest

from database.models import Job
from database.uow import matching_uow
from tests import make_session_factory

pytestmark = pytest.mark.db


class TestFeedbackRepository(unittest.TestCase):

    def setUp(self):
        self.factory = make_session_factory()
        with matching_uow(self.factory) as repo:
            repo.db.add(Job(id="job-1", company_id="company-1", title="OTR", route_type="OTR", freight_type="Dry Van"))

    def test_feedback_is_one_row_per_pair(self):
        print("\n📊 UNIT Test 1: Feedback upsert")
        with matching_uow(self.factory) as repo:
            repo.feedback.upsert_feedback("driver-1", "job-1", "helpful")
        with matching_uow(self.factory) as repo:
            repo.feedback.upsert_feedback("driver-1", "job-1", "hide")
            repo.feedback.upsert_feedback("driver-1", "job-gone", "not_relevant")

        with matching_uow(self.factory) as repo:
            rows = sorted(repo.feedback.get_feedback_with_jobs("driver-1"))
            self.assertEqual(rows, [
                ("job-1", "hide", "company-1", "OTR", "Dry Van"),
                ("job-gone", "not_relevant", None, None, None),
            ])
            self.assertEqual(repo.feedback.get_hidden_job_ids("driver-1"), {"job-1"})
            self.assertEqual(repo.feedback.get_hidden_job_ids("driver-2"), set())

    def test_events_with_job_signature(self):
        print("\n📊 UNIT Test 2: Events")
        with matching_uow(self.factory) as repo:
            event = repo.feedback.record_event("driver-1", "job-1", "save")
            self.assertIsNotNone(event.id)
            repo.feedback.record_event("driver-1", "job-1", "view")
            repo.feedback.record_event("driver-2", "job-1", "apply")

        with matching_uow(self.factory) as repo:
            rows = repo.feedback.get_recent_events_with_jobs("driver-1")
            self.assertEqual(sorted(r[1] for r in rows), ["save", "view"])
            self.assertEqual(rows[0][2:], ("company-1", "OTR", "Dry Van"))
            self.assertEqual(len(repo.feedback.get_recent_events_with_jobs("driver-1", limit=1)), 1)


class TestRolloutRepository(unittest.TestCase):

    def setUp(self):
        self.factory = make_session_factory()

    def test_no_row(self):
        with matching_uow(self.factory) as repo:
            self.assertIsNone(repo.rollout.get_config())

    def test_save_creates_closed_defaults(self):
        print("\n📊 UNIT Test 3: Rollout config")
        with matching_uow(self.factory) as repo:
            config = repo.rollout.save_config(driver_ui_enabled=True)
            self.assertTrue(config.shadow_mode)
            self.assertTrue(config.driver_ui_enabled)
            self.assertFalse(config.company_ui_enabled)

    def test_partial_update_and_beta_ids(self):
        with matching_uow(self.factory) as repo:
            repo.rollout.save_config(shadow_mode=False, company_beta_ids=["c-2", "c-1", "c-2"])
        with matching_uow(self.factory) as repo:
            repo.rollout.save_config(company_ui_enabled=True)
        with matching_uow(self.factory) as repo:
            config = repo.rollout.get_config()
            self.assertFalse(config.shadow_mode)
            self.assertTrue(config.company_ui_enabled)
            self.assertEqual(config.company_beta_ids, ["c-1", "c-2"])


class TestEmbeddingRepository(unittest.TestCase):

    def setUp(self):
        self.factory = make_session_factory()
        with matching_uow(self.factory) as repo:
            repo.embeddings.upsert_embedding(("job", "job-1", "hash-a"), [0.1, 0.2, 0.3], provider="hf", model="mini")
            repo.embeddings.upsert_embedding(("driver_profile", "driver-1", "hash-b"), [1.0, 0.0, 0.0])

    def test_cache_hit_requires_matching_hash(self):
        print("\n📊 UNIT Test 4: Embedding cache")
        with matching_uow(self.factory) as repo:
            hits = repo.embeddings.get_cached([
                ("job", "job-1", "hash-a"),
                ("driver_profile", "driver-1", "stale"),
                ("job", "job-9", "hash-a"),
            ])
            self.assertEqual(hits, [(("job", "job-1", "hash-a"), [0.1, 0.2, 0.3])])
            self.assertEqual(repo.embeddings.get_cached([]), [])

    def test_upsert_replaces_vector(self):
        with matching_uow(self.factory) as repo:
            repo.embeddings.upsert_embedding(("job", "job-1", "hash-c"), [0.5, 0.5])
        with matching_uow(self.factory) as repo:
            self.assertEqual(repo.embeddings.get_cached([("job", "job-1", "hash-a")]), [])
            self.assertEqual(
                repo.embeddings.get_cached([("job", "job-1", "hash-c")]),
                [(("job", "job-1", "hash-c"), [0.5, 0.5])],
            )


if __name__ == '__main__':
    unittest.main()
