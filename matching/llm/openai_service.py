"""
OpenAI Embedding Service - embeddings through the OpenAI API.

Works with any OpenAI-compatible endpoint (``base_url``). Every request is
bounded by the client ``timeout``; transient failures are retried by tenacity
only while the overall time budget allows.
"""
from typing import List, Optional
import logging

import openai
from openai import OpenAI
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)
from tenacity import RetryCallState

from matching.llm.interfaces import EmbeddingProvider

logger = logging.getLogger(__name__)


def _log_retry(retry_state: RetryCallState) -> None:
    """Log a warning before each retry sleep."""
    exc = retry_state.outcome.exception()
    wait = retry_state.next_action.sleep if retry_state.next_action else 0
    if isinstance(exc, openai.RateLimitError):
        logger.warning(
            "Embedding rate limit hit (attempt %s). Waiting %.1fs before retry. Details: %s",
            retry_state.attempt_number, wait, exc,
        )
    else:
        logger.warning(
            "Transient embedding API error (attempt %s). Waiting %.1fs before retry. Details: %s",
            retry_state.attempt_number, wait, exc,
        )


class OpenAIEmbeddingService(EmbeddingProvider):
    """
    OpenAI Embedding Service.
    """
    provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "text-embedding-3-small",
        dimensions: int = 384,
        timeout_seconds: float = 30.0,
        max_attempts: int = 3,
    ):
        client_kwargs = {'timeout': timeout_seconds, 'max_retries': 0}
        if api_key:
            client_kwargs['api_key'] = api_key
        if base_url:
            client_kwargs['base_url'] = base_url

        self.client = OpenAI(**client_kwargs)
        self.model_name = model
        self.dimensions = dimensions
        self.timeout_seconds = timeout_seconds
        self.max_attempts = max_attempts

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Generate embedding vectors, retrying transient errors within the timeout budget."""
        call = retry(
            retry=retry_if_exception_type((
                openai.RateLimitError,
                openai.APITimeoutError,
                openai.APIConnectionError,
                openai.InternalServerError,
            )),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
            stop=(stop_after_attempt(self.max_attempts) | stop_after_delay(self.timeout_seconds)),
            before_sleep=_log_retry,
            reraise=True,
        )(self._create)
        return call(texts)

    def _create(self, texts: List[str]) -> List[List[float]]:
        response = self.client.embeddings.create(
            input=texts,
            model=self.model_name,
            dimensions=self.dimensions,
        )
        return [item.embedding for item in sorted(response.data, key=lambda d: d.index)]
