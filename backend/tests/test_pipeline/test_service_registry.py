"""Tests for the lazy service registry."""

import pytest

from services.embeddings import SentenceTransformerEmbedder
from services.pipeline import service_registry
from services.vector_index import QdrantVectorIndex


@pytest.fixture(autouse=True)
def _reset_registry():
    """Clear service registry before each test."""
    service_registry.clear()
    yield
    service_registry.clear()


class TestServiceRegistry:
    def test_creates_adapters_without_loading(self):
        embedder = service_registry.get_service("embedder")
        index = service_registry.get_service("vector_index")
        assert isinstance(embedder, SentenceTransformerEmbedder)
        assert isinstance(index, QdrantVectorIndex)
        assert not embedder.is_loaded
        assert not index.is_loaded

    def test_same_instance_returned(self):
        assert service_registry.get_service("embedder") is service_registry.get_service("embedder")

    def test_clear_drops_instances(self):
        first = service_registry.get_service("vector_index")
        service_registry.clear()
        assert service_registry.get_service("vector_index") is not first

    def test_unknown_service(self):
        with pytest.raises(ValueError):
            service_registry.get_service("reranker")
