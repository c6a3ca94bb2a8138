#!/usr/bin/env python3
"""
Semantic Scorer - embedding similarity between driver and job text.

The signal is optional. Empty input, a missing provider, a provider error or
a call exceeding the hard timeout all raise ``SignalUnavailable`` and the
caller scores the pair in degraded (rules only) mode.

Provider calls run on a dedicated executor so the timeout can be enforced
with ``Future.result(timeout=...)``; no lock is held while waiting.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from typing import Dict, Iterable, List, Optional, Tuple

from matching.config_loader import SemanticConfig
from matching.errors import SignalUnavailable
from matching.llm.interfaces import EmbeddingProvider
from matching.scorer.models import SemanticResult
from matching.utils import content_hash, cosine_similarity, shared_terms

logger = logging.getLogger(__name__)

EmbeddingKey = Tuple[str, str, str]  # (entity_type, entity_id, content_hash)


class EmbeddingMemo:
    """Thread-safe in-memory embedding cache for one recompute batch.

    Seeded from the persistent cache before scoring; vectors computed during
    the batch are reported by ``fresh_entries`` so they can be written back.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._vectors: Dict[EmbeddingKey, List[float]] = {}
        self._fresh: Dict[EmbeddingKey, List[float]] = {}

    def seed(self, entries: Iterable[Tuple[EmbeddingKey, List[float]]]) -> None:
        with self._lock:
            for key, vector in entries:
                self._vectors[key] = vector

    def get(self, key: EmbeddingKey) -> Optional[List[float]]:
        with self._lock:
            return self._vectors.get(key)

    def put(self, key: EmbeddingKey, vector: List[float]) -> None:
        with self._lock:
            self._vectors[key] = vector
            self._fresh[key] = vector

    def fresh_entries(self) -> List[Tuple[EmbeddingKey, List[float]]]:
        with self._lock:
            return list(self._fresh.items())


class SemanticScorer:
    """Computes [0, 100] similarity plus supporting phrases for a text pair."""

    def __init__(
        self,
        provider: Optional[EmbeddingProvider],
        config: SemanticConfig,
        memo: Optional[EmbeddingMemo] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.provider = provider
        self.config = config
        self.memo = memo or EmbeddingMemo()
        self._executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix="embed")

    @property
    def provider_name(self) -> Optional[str]:
        return self.provider.provider_name if self.provider else None

    @property
    def model_name(self) -> Optional[str]:
        return self.provider.model_name if self.provider else None

    def embed(self, entity_type: str, entity_id: str, text: str) -> List[float]:
        """Return the embedding for an entity's text block, using the memo when the content is unchanged."""
        if not text or not text.strip():
            raise SignalUnavailable("empty_input", f"{entity_type} {entity_id} has no text")
        if self.provider is None:
            raise SignalUnavailable("provider_absent")

        key = (entity_type, entity_id, content_hash(text))
        cached = self.memo.get(key)
        if cached is not None:
            return cached

        future = self._executor.submit(self.provider.embed, [text])
        try:
            vectors = future.result(timeout=self.config.timeout_seconds)
        except FuturesTimeout:
            future.cancel()
            raise SignalUnavailable("timeout", f"no response within {self.config.timeout_seconds}s")
        except Exception as e:
            raise SignalUnavailable("provider_error", str(e)) from e

        if not vectors or not vectors[0]:
            raise SignalUnavailable("provider_error", "empty embedding response")

        self.memo.put(key, vectors[0])
        return vectors[0]

    def score(
        self,
        subject: Tuple[str, str, str],
        target: Tuple[str, str, str],
    ) -> SemanticResult:
        """
        Score a (subject, target) pair.

        Args:
            subject: (entity_type, entity_id, text) for the driver or candidate.
            target: (entity_type, entity_id, text) for the job.

        Raises:
            SignalUnavailable: When either embedding cannot be produced.
        """
        subject_vector = self.embed(*subject)
        target_vector = self.embed(*target)

        similarity = max(0.0, cosine_similarity(subject_vector, target_vector))
        return SemanticResult(
            similarity=round(similarity * 100, 2),
            phrases=shared_terms(subject[2], target[2], limit=self.config.max_phrases),
            provider=self.provider_name,
            model=self.model_name,
        )

    def close(self) -> None:
        self._executor.shutdown(wait=False)
