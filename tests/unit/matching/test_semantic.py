#!/usr/bin/env python3
"""
Tests for the semantic scorer and its per-batch embedding memo.

Usage:
    python -m pytest tests/unit/matching/test_semantic.py -v
"""

import threading
import unittest
from unittest.mock import MagicMock

from matching.config_loader import SemanticConfig
from matching.errors import SignalUnavailable
from matching.llm.interfaces import EmbeddingProvider
from matching.scorer.semantic import EmbeddingMemo, SemanticScorer
from matching.utils import content_hash, cosine_similarity, shared_terms

DRIVER_TEXT = "Hauling dry van freight OTR for ten years"
JOB_TEXT = "OTR dry van position with weekly home time"


class FakeProvider(EmbeddingProvider):
    """Returns a fixed vector per text."""
    provider_name = "fake"
    model_name = "fake-mini"

    def __init__(self, vectors=None, default=None):
        self.vectors = vectors or {}
        self.default = default or [1.0, 0.0, 0.0]
        self.calls = []

    def embed(self, texts):
        self.calls.append(list(texts))
        return [self.vectors.get(t, self.default) for t in texts]


class BlockingProvider(EmbeddingProvider):
    provider_name = "slow"

    def __init__(self):
        self.release = threading.Event()

    def embed(self, texts):
        self.release.wait(5)
        return [[1.0, 0.0] for _ in texts]


class TestSemanticScorer(unittest.TestCase):

    def setUp(self):
        self.config = SemanticConfig(timeout_seconds=2.0)
        self.scorers = []

    def tearDown(self):
        for scorer in self.scorers:
            scorer.close()

    def make_scorer(self, provider, config=None, memo=None):
        scorer = SemanticScorer(provider, config or self.config, memo=memo)
        self.scorers.append(scorer)
        return scorer

    def test_identical_vectors_score_one_hundred(self):
        print("\n📊 UNIT Test 1: Similarity and phrases")
        scorer = self.make_scorer(FakeProvider())
        result = scorer.score(("driver_profile", "driver-1", DRIVER_TEXT), ("job", "job-1", JOB_TEXT))

        self.assertEqual(result.similarity, 100.0)
        self.assertEqual(result.phrases, ["dry", "van", "otr"])
        self.assertEqual(result.provider, "fake")
        self.assertEqual(result.model, "fake-mini")

    def test_negative_similarity_clamps_to_zero(self):
        provider = FakeProvider(vectors={DRIVER_TEXT: [1.0, 0.0], JOB_TEXT: [-1.0, 0.0]})
        result = self.make_scorer(provider).score(
            ("driver_profile", "driver-1", DRIVER_TEXT), ("job", "job-1", JOB_TEXT)
        )
        self.assertEqual(result.similarity, 0.0)

    def test_empty_input_is_unavailable(self):
        print("\n📊 UNIT Test 2: Unavailable signal")
        scorer = self.make_scorer(FakeProvider())
        with self.assertRaises(SignalUnavailable) as ctx:
            scorer.score(("driver_profile", "driver-1", "   "), ("job", "job-1", JOB_TEXT))
        self.assertEqual(ctx.exception.reason, "empty_input")

    def test_absent_provider_is_unavailable(self):
        scorer = self.make_scorer(None)
        with self.assertRaises(SignalUnavailable) as ctx:
            scorer.score(("driver_profile", "driver-1", DRIVER_TEXT), ("job", "job-1", JOB_TEXT))
        self.assertEqual(ctx.exception.reason, "provider_absent")
        self.assertIsNone(scorer.provider_name)

    def test_provider_error_is_unavailable(self):
        provider = MagicMock(spec=EmbeddingProvider)
        provider.embed.side_effect = RuntimeError("HF embedding failed (503)")
        scorer = self.make_scorer(provider)
        with self.assertRaises(SignalUnavailable) as ctx:
            scorer.embed("job", "job-1", JOB_TEXT)
        self.assertEqual(ctx.exception.reason, "provider_error")
        self.assertIn("503", str(ctx.exception))

    def test_empty_response_is_unavailable(self):
        provider = FakeProvider()
        provider.embed = lambda texts: [[]]
        with self.assertRaises(SignalUnavailable) as ctx:
            self.make_scorer(provider).embed("job", "job-1", JOB_TEXT)
        self.assertEqual(ctx.exception.reason, "provider_error")

    def test_slow_provider_times_out(self):
        print("\n📊 UNIT Test 3: Timeout")
        provider = BlockingProvider()
        scorer = self.make_scorer(provider, SemanticConfig(timeout_seconds=0.05))
        try:
            with self.assertRaises(SignalUnavailable) as ctx:
                scorer.embed("job", "job-1", JOB_TEXT)
            self.assertEqual(ctx.exception.reason, "timeout")
        finally:
            provider.release.set()

    def test_memo_avoids_repeat_calls(self):
        print("\n📊 UNIT Test 4: Embedding memo")
        provider = FakeProvider()
        memo = EmbeddingMemo()
        scorer = self.make_scorer(provider, memo=memo)

        scorer.score(("driver_profile", "driver-1", DRIVER_TEXT), ("job", "job-1", JOB_TEXT))
        scorer.score(("driver_profile", "driver-1", DRIVER_TEXT), ("job", "job-1", JOB_TEXT))

        self.assertEqual(len(provider.calls), 2)
        self.assertEqual(len(memo.fresh_entries()), 2)

    def test_seeded_memo_is_not_reported_fresh(self):
        provider = FakeProvider()
        memo = EmbeddingMemo()
        memo.seed([(("job", "job-1", content_hash(JOB_TEXT)), [0.0, 1.0, 0.0])])
        scorer = self.make_scorer(provider, memo=memo)

        vector = scorer.embed("job", "job-1", JOB_TEXT)
        self.assertEqual(vector, [0.0, 1.0, 0.0])
        self.assertEqual(provider.calls, [])
        self.assertEqual(memo.fresh_entries(), [])

    def test_changed_text_misses_the_memo(self):
        provider = FakeProvider()
        memo = EmbeddingMemo()
        memo.seed([(("job", "job-1", content_hash("old posting text")), [0.0, 1.0, 0.0])])
        self.make_scorer(provider, memo=memo).embed("job", "job-1", JOB_TEXT)
        self.assertEqual(provider.calls, [[JOB_TEXT]])


class TestTextUtilities(unittest.TestCase):

    def test_cosine_similarity_edge_cases(self):
        self.assertAlmostEqual(cosine_similarity([1, 0], [1, 0]), 1.0)
        self.assertEqual(cosine_similarity([], []), 0.0)
        self.assertEqual(cosine_similarity([1, 0], [1, 0, 0]), 0.0)
        self.assertEqual(cosine_similarity([0, 0], [1, 0]), 0.0)

    def test_shared_terms_skip_stopwords(self):
        self.assertEqual(shared_terms("The driver hauls flatbed loads", "Flatbed loads for the driver"),
                         ["flatbed", "loads"])
        self.assertEqual(shared_terms(None, "anything"), [])


if __name__ == '__main__':
    unittest.main()
