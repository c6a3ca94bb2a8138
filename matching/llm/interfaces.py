"""
Embedding Provider Interface - Abstract base for embedding services.

This module defines the interface for text embedding providers (Hugging Face,
OpenAI-compatible endpoints, etc.) used by the Semantic Scorer.
"""
from abc import ABC, abstractmethod
from typing import List


class EmbeddingProvider(ABC):
    """
    Abstract Interface for Embedding Providers.
    """
    provider_name: str = "unknown"
    model_name: str = ""
    dimensions: int = 0

    @abstractmethod
    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate one embedding vector per input text, in input order.

        Implementations raise on transport or provider errors; the caller
        turns those into an unavailable semantic signal.
        """
        pass
