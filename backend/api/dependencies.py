"""Shared dependencies for API routes."""

from fastapi import Depends

from config import settings
from services.embeddings import EmbeddingProvider
from services.pipeline import service_registry
from services.pipeline.appropriateness import (
    AppropriatenessFilter,
    KeepAllFilter,
    LLMAppropriatenessFilter,
)
from services.pipeline.orchestrator import MatchingOrchestrator
from services.pipeline.retriever import CandidateRetriever
from services.store import InMemoryStore
from services.vector_index import VectorIndex

_store = InMemoryStore()


def get_store() -> InMemoryStore:
    return _store


def get_embedder() -> EmbeddingProvider:
    return service_registry.get_service("embedder")


def get_vector_index() -> VectorIndex | None:
    if not settings.vector_search_enabled:
        return None
    return service_registry.get_service("vector_index")


def get_appropriateness_filter() -> AppropriatenessFilter:
    if settings.ai_filter_enabled and settings.gemini_api_key:
        return LLMAppropriatenessFilter(timeout=settings.external_timeout_seconds)
    return KeepAllFilter()


def get_orchestrator(
    store: InMemoryStore = Depends(get_store),
    index: VectorIndex | None = Depends(get_vector_index),
    appropriateness_filter: AppropriatenessFilter = Depends(get_appropriateness_filter),
    embedder: EmbeddingProvider = Depends(get_embedder),
) -> MatchingOrchestrator:
    retriever = CandidateRetriever(index, store) if index is not None else None
    return MatchingOrchestrator(
        store,
        appropriateness_filter=appropriateness_filter,
        retriever=retriever,
        embedder=embedder,
        mmr_lambda=settings.mmr_lambda,
        min_score=settings.retrieval_min_score,
    )
