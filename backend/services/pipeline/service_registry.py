"""Lazy registry for external service adapters.

Adapters are created on first access and shared process-wide. Loading
(model weights, client connections) is deferred to the adapter's own
ensure_loaded(), which runs on first use inside a worker thread.
"""

import logging

from config import settings
from services.pipeline.base import BaseExternalService

logger = logging.getLogger(__name__)

_registry: dict[str, BaseExternalService] = {}


def _create_service(name: str) -> BaseExternalService:
    """Factory: create a service adapter by name from settings."""
    if name == "embedder":
        from services.embeddings import SentenceTransformerEmbedder
        return SentenceTransformerEmbedder(
            model_name=settings.embedding_model,
            timeout=settings.external_timeout_seconds,
        )
    elif name == "vector_index":
        from services.vector_index import QdrantVectorIndex
        return QdrantVectorIndex(
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key,
            collection=settings.qdrant_collection,
            dimension=settings.embedding_dimension,
            timeout=settings.external_timeout_seconds,
        )
    else:
        raise ValueError(f"Unknown service: {name}")


def get_service(name: str) -> BaseExternalService:
    """Get a service adapter by name, creating it on first access."""
    if name not in _registry:
        _registry[name] = _create_service(name)
        logger.info("Registered service: %s", name)
    return _registry[name]


def clear() -> None:
    """Drop all adapters. Useful for testing."""
    _registry.clear()
