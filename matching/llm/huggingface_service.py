"""
Hugging Face Embedding Service - feature extraction through the Inference API.
"""
from typing import List, Optional
import logging

import requests

from matching.llm.interfaces import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_HF_BASE_URL = "https://api-inference.huggingface.co/pipeline/feature-extraction"


class HuggingFaceEmbeddingService(EmbeddingProvider):
    """
    Hugging Face Inference API embedding provider.

    The default model (all-MiniLM-L6-v2) returns 384-dimensional sentence
    embeddings.
    """
    provider_name = "hf"

    def __init__(
        self,
        api_key: str,
        model: str = "sentence-transformers/all-MiniLM-L6-v2",
        base_url: Optional[str] = None,
        dimensions: int = 384,
        timeout_seconds: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model_name = model
        self.base_url = (base_url or DEFAULT_HF_BASE_URL).rstrip('/')
        self.dimensions = dimensions
        self.timeout_seconds = timeout_seconds
        self.session = session or requests.Session()

    def embed(self, texts: List[str]) -> List[List[float]]:
        url = f"{self.base_url}/{self.model_name}"
        response = self.session.post(
            url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json={"inputs": texts, "options": {"wait_for_model": True}},
            timeout=self.timeout_seconds,
        )
        if not response.ok:
            raise RuntimeError(f"HF embedding failed ({response.status_code}): {response.text[:200]}")

        result = response.json()
        if isinstance(result, list) and result and isinstance(result[0], list):
            return result

        raise RuntimeError("Unexpected HF embedding response format")
