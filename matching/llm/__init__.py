"""Embedding Module - embedding providers and the provider factory."""
import logging
from typing import Optional

from matching.config_loader import SemanticConfig
from matching.llm.interfaces import EmbeddingProvider
from matching.llm.openai_service import OpenAIEmbeddingService
from matching.llm.huggingface_service import HuggingFaceEmbeddingService

logger = logging.getLogger(__name__)


def create_embedding_provider(config: SemanticConfig) -> Optional[EmbeddingProvider]:
    """Build the configured provider, or None when the semantic signal is off."""
    if not config.enabled or config.provider == "none":
        logger.info("Semantic scoring disabled; matches will run in rules-only mode")
        return None

    if config.provider == "huggingface":
        if not config.api_key:
            logger.warning("No embedding API key configured; semantic scoring unavailable")
            return None
        return HuggingFaceEmbeddingService(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            dimensions=config.dimensions,
            timeout_seconds=config.timeout_seconds,
        )

    return OpenAIEmbeddingService(
        api_key=config.api_key,
        base_url=config.base_url,
        model=config.model,
        dimensions=config.dimensions,
        timeout_seconds=config.timeout_seconds,
    )


__all__ = [
    'EmbeddingProvider',
    'OpenAIEmbeddingService',
    'HuggingFaceEmbeddingService',
    'create_embedding_provider',
]
