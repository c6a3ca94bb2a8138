#!/usr/bin/env python3
"""
Tests for MatchScoringService - the per-pair pipeline.

Usage:
    python -m pytest tests/unit/matching/test_scoring_service.py -v
"""

import unittest
from dataclasses import replace
from unittest.mock import MagicMock

from matching.config_loader import MatchingConfig
from matching.errors import InvalidCandidate, SignalUnavailable
from matching.scorer.behavior import FeedbackSnapshot, JobSignature, build_behavior_context
from matching.scorer.models import CandidateFeatures, CandidateSource, Confidence, SemanticResult
from matching.scorer.semantic import SemanticScorer
from matching.scorer.service import MatchScoringService
from tests import make_driver, make_job


class TestMatchScoringService(unittest.TestCase):

    def setUp(self):
        self.config = MatchingConfig()
        self.semantic = MagicMock(spec=SemanticScorer)
        self.semantic.score.return_value = SemanticResult(similarity=70.0, phrases=["dry", "van"], provider="hf")
        self.service = MatchScoringService(self.config, self.semantic)
        self.context = build_behavior_context("driver-1", [], [], self.config.behavior)

    def test_full_pipeline(self):
        print("\n📊 UNIT Test 1: Full pipeline")
        result = self.service.score_driver_job(make_driver(), make_job(), self.context)

        self.assertIsNotNone(result)
        self.assertFalse(result.degraded_mode)
        self.assertEqual(result.semantic_score, 70.0)
        self.assertEqual(result.behavior_score, 5.0)
        self.assertEqual(result.confidence, Confidence.HIGH)
        self.assertTrue(0 <= result.overall_score <= 100)
        subject, target = self.semantic.score.call_args[0]
        self.assertEqual(subject[:2], ("driver_profile", "driver-1"))
        self.assertEqual(target[:2], ("job", "job-1"))
        print(f"   Overall: {result.overall_score}")

    def test_inactive_job_is_not_scored(self):
        print("\n📊 UNIT Test 2: Inactive and hidden jobs")
        for status in ("Draft", "Paused", "Closed"):
            self.assertIsNone(self.service.score_driver_job(make_driver(), make_job(status=status), self.context))

    def test_hidden_job_is_not_scored(self):
        context = build_behavior_context(
            "driver-1",
            [FeedbackSnapshot("job-1", "hide", JobSignature())],
            [],
            self.config.behavior,
        )
        self.assertIsNone(self.service.score_driver_job(make_driver(), make_job(), context))

    def test_driver_without_notes_skips_semantic(self):
        print("\n📊 UNIT Test 3: Degraded mode")
        result = self.service.score_driver_job(make_driver(about=None), make_job(), self.context)
        self.semantic.score.assert_not_called()
        self.assertTrue(result.degraded_mode)
        self.assertIsNone(result.semantic_score)
        self.assertEqual(result.confidence, Confidence.LOW)

    def test_unavailable_signal_degrades_instead_of_failing(self):
        self.semantic.score.side_effect = SignalUnavailable("timeout")
        result = self.service.score_driver_job(make_driver(), make_job(), self.context)
        self.assertTrue(result.degraded_mode)
        self.assertIsNone(result.provider)

    def test_no_semantic_scorer(self):
        service = MatchScoringService(self.config, None)
        result = service.score_driver_job(make_driver(), make_job(), self.context)
        self.assertTrue(result.degraded_mode)

    def test_missing_identity_raises(self):
        with self.assertRaises(InvalidCandidate):
            self.service.score_driver_job(make_driver(driver_id=""), make_job(), self.context)

    def test_candidate_scoring_has_no_behavior(self):
        candidate = CandidateFeatures(
            candidate_id="lead-1",
            source=CandidateSource.LEAD,
            driver_type="owner-operator",
            text_block="Owner-operator with own truck",
        )
        result = self.service.score_candidate_job(candidate, make_job())
        self.assertIsNone(result.behavior_score)
        self.assertNotIn("behavior", result.score_breakdown)
        self.assertEqual(self.semantic.score.call_args[0][0][:2], ("lead", "lead-1"))
        self.assertIsNone(self.service.score_candidate_job(candidate, make_job(status="Closed")))

    def test_score_many_skips_failing_pairs(self):
        print("\n📊 UNIT Test 4: Bulk scoring isolation")
        pairs = [
            (make_driver(), make_job(job_id="job-1")),
            (make_driver(driver_id=""), make_job(job_id="job-2")),
            (make_driver(), make_job(job_id="job-3", status="Closed")),
            (make_driver(), make_job(job_id="job-4")),
        ]
        results = self.service.score_many(
            pairs,
            lambda pair: self.service.score_driver_job(pair[0], pair[1], self.context),
            describe=lambda pair: f"{pair[0].driver_id}/{pair[1].job_id}",
            max_workers=2,
        )
        self.assertEqual([pair[1].job_id for pair, _ in results], ["job-1", "job-4"])
        self.assertEqual(self.service.score_many([], lambda item: None, describe=str), [])

    def test_concurrent_and_sequential_scoring_agree(self):
        jobs = [replace(make_job(), job_id=f"job-{i}", location=loc)
                for i, loc in enumerate(["Dallas, TX", "Tulsa, OK", "Miami, FL", None])]
        pairs = [(make_driver(), job) for job in jobs]
        concurrent = self.service.score_many(
            pairs,
            lambda pair: self.service.score_driver_job(pair[0], pair[1], self.context),
            describe=str,
            max_workers=4,
        )
        sequential = [self.service.score_driver_job(d, j, self.context) for d, j in pairs]
        self.assertEqual(
            [result.overall_score for _, result in concurrent],
            [result.overall_score for result in sequential],
        )


if __name__ == '__main__':
    unittest.main()
