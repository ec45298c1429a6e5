"""Candidate retrieval from the external vector index.

Over-fetches so the diversifier and appropriateness filter have room to
discard near-duplicates: for K final results, at least 2.5 * K candidates
(never fewer than 50) are requested. Index ids that do not resolve to a
stored job are dropped with a warning.
"""

import logging
import math
from typing import Any, NamedTuple

from models.schemas.job import Job
from services.store import JobStore
from services.vector_index import VectorIndex, parse_job_id

logger = logging.getLogger(__name__)

OVERFETCH_FACTOR = 2.5
MIN_CANDIDATES = 50


class RetrievedCandidate(NamedTuple):
    job: Job
    score: float | None


def candidate_pool_size(final_results: int) -> int:
    """Number of candidates to request for `final_results` diversified results."""
    return max(math.ceil(final_results * OVERFETCH_FACTOR), MIN_CANDIDATES)


class CandidateRetriever:
    def __init__(self, index: VectorIndex, store: JobStore) -> None:
        self._index = index
        self._store = store

    async def retrieve(
        self,
        resume_vector: list[float],
        top_k: int,
        industry_filter: list[str] | None = None,
        min_score: float = 0.0,
    ) -> list[RetrievedCandidate]:
        """Return (job, similarity) pairs ordered by similarity, best first.

        Raises ServiceUnavailable if the index query fails.
        """
        request_size = candidate_pool_size(top_k)
        filter: dict[str, Any] | None = None
        if industry_filter:
            filter = {"industry": list(industry_filter)}

        hits = await self._index.query(resume_vector, request_size, filter)
        logger.info("Vector index returned %d of %d requested candidates", len(hits), request_size)

        candidates: list[RetrievedCandidate] = []
        seen: set[int] = set()
        for hit in hits:
            if hit.score < min_score:
                continue
            job_id = parse_job_id(hit.id)
            if job_id is None:
                logger.warning("Dropping unresolvable index id %r", hit.id)
                continue
            if job_id in seen:
                continue
            job: Job | None = await self._store.get_job_by_id(job_id)
            if job is None:
                logger.warning("Dropping index hit for missing job %s", job_id)
                continue
            seen.add(job_id)
            candidates.append(RetrievedCandidate(job=job, score=float(hit.score)))

        candidates.sort(key=lambda c: c.score, reverse=True)
        return candidates
