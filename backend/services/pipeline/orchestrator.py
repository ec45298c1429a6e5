"""Matching orchestrator: wires retrieval, scoring, diversification and filtering.

Flow (one linear pass per request):
    Idle
      → Retrieving    vector index (over-fetched) or the full local corpus
      → Scoring       CompositeScorer per candidate, sorted by score
      → Diversifying  MMR re-rank down to `limit`
      → Filtering     appropriateness filter over the diversified picks
      → Persisting    one append-only match record per returned job
      → Done

A ServiceUnavailable during Retrieving or Filtering moves the run to Failed
and falls back to in-process scoring over the whole corpus with no
diversification or filtering. The response is flagged `degraded`.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum

from models.responses import MatchesResponse, MatchingStats
from models.schemas.filter_decision import FilterOutcome
from models.schemas.match_result import MatchResult
from models.schemas.resume import ParsedProfile, Resume
from services.embeddings import EmbeddingProvider, build_resume_text
from services.errors import InvalidInput, PersistenceFailure, ServiceUnavailable
from services.pipeline.appropriateness import AppropriatenessFilter, KeepAllFilter
from services.pipeline.diversifier import DEFAULT_LAMBDA, MMRDiversifier
from services.pipeline.retriever import CandidateRetriever, RetrievedCandidate
from services.pipeline.scorer import CompositeScorer
from services.store import JobStore

logger = logging.getLogger(__name__)


class MatchingState(str, Enum):
    IDLE = "idle"
    RETRIEVING = "retrieving"
    SCORING = "scoring"
    DIVERSIFYING = "diversifying"
    FILTERING = "filtering"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class MatchingRun:
    """Per-request state. Never shared between requests."""

    resume_id: int
    limit: int
    state: MatchingState = MatchingState.IDLE
    history: list[MatchingState] = field(default_factory=list)

    def advance(self, state: MatchingState) -> None:
        self.history.append(state)
        self.state = state
        logger.info("Matching resume %s: %s", self.resume_id, state.value)


@dataclass
class _PipelineResult:
    matches: list[MatchResult]
    scoring_method: str
    degraded: bool = False
    filter_outcome: FilterOutcome = field(default_factory=FilterOutcome)


class MatchingOrchestrator:
    def __init__(
        self,
        store: JobStore,
        scorer: CompositeScorer | None = None,
        diversifier: MMRDiversifier | None = None,
        appropriateness_filter: AppropriatenessFilter | None = None,
        retriever: CandidateRetriever | None = None,
        embedder: EmbeddingProvider | None = None,
        mmr_lambda: float = DEFAULT_LAMBDA,
        min_score: float = 0.0,
    ) -> None:
        self._store = store
        self._scorer = scorer or CompositeScorer()
        self._diversifier = diversifier or MMRDiversifier()
        self._filter = appropriateness_filter or KeepAllFilter()
        self._retriever = retriever
        self._embedder = embedder
        self._mmr_lambda = mmr_lambda
        self._min_score = min_score

    async def find_matches(
        self,
        resume_id: int,
        limit: int = 5,
        industry_filter: list[str] | None = None,
    ) -> MatchesResponse:
        """Rank, diversify and filter jobs for a resume, persisting the results.

        Raises InvalidInput for an unknown resume, a resume without a parsed
        profile, or a non-positive limit. External service failures never
        propagate; they select the fallback path instead.
        """
        if limit <= 0:
            raise InvalidInput(f"limit must be positive, got {limit}")

        start = time.perf_counter()
        run = MatchingRun(resume_id=resume_id, limit=limit)

        resume = await self._store.get_resume_by_id(resume_id)
        if resume is None:
            raise InvalidInput(f"Resume {resume_id} not found")
        profile = resume.require_profile()
        total_jobs = await self._store.count_jobs()

        result = await self._run_pipeline(run, resume, profile, limit, industry_filter)

        run.advance(MatchingState.PERSISTING)
        await self._persist(resume.id, result.matches)
        run.advance(MatchingState.DONE)

        elapsed = time.perf_counter() - start
        matches = result.matches
        avg = sum(m.match_score for m in matches) / len(matches) if matches else None
        logger.info(
            "Found %d matches for resume %s in %.2fs via %s",
            len(matches), resume_id, elapsed, result.scoring_method,
        )

        return MatchesResponse(
            matches=matches,
            stats=MatchingStats(
                total_jobs=total_jobs,
                matches_found=len(matches),
                avg_match_score=f"{round(avg * 100)}%" if avg is not None else "-",
                processing_time=f"{elapsed:.2f}s",
            ),
            degraded=result.degraded,
            scoring_method=result.scoring_method,
            filter_applied=result.filter_outcome.applied,
            filtered_out=result.filter_outcome.rejected,
        )

    async def _run_pipeline(
        self,
        run: MatchingRun,
        resume: Resume,
        profile: ParsedProfile,
        limit: int,
        industry_filter: list[str] | None,
    ) -> _PipelineResult:
        # --- Retrieving ---
        run.advance(MatchingState.RETRIEVING)
        try:
            resume, candidates, method = await self._retrieve(resume, limit, industry_filter)
        except ServiceUnavailable as e:
            return await self._fallback(run, resume, limit, e)

        # --- Scoring ---
        run.advance(MatchingState.SCORING)
        apply_bonuses = method == "vector_retrieval"
        matches = [
            self._scorer.score(c.job, resume, vector_score=c.score, apply_bonuses=apply_bonuses)
            for c in candidates
        ]
        matches.sort(key=lambda m: m.match_score, reverse=True)

        # --- Diversifying ---
        run.advance(MatchingState.DIVERSIFYING)
        diversified = self._diversifier.diversify(matches, self._mmr_lambda, limit)

        # --- Filtering ---
        run.advance(MatchingState.FILTERING)
        try:
            outcome = await self._filter.filter(profile, diversified, limit)
        except ServiceUnavailable as e:
            return await self._fallback(run, resume, limit, e)

        return _PipelineResult(
            matches=outcome.kept,
            scoring_method=method,
            filter_outcome=outcome,
        )

    async def _retrieve(
        self,
        resume: Resume,
        limit: int,
        industry_filter: list[str] | None,
    ) -> tuple[Resume, list[RetrievedCandidate], str]:
        """Candidates from the vector index, or the whole corpus when none is configured."""
        if self._retriever is None:
            jobs = await self._store.get_all_jobs()
            return resume, [RetrievedCandidate(job=j, score=None) for j in jobs], "local_corpus"

        if resume.vector is None:
            if self._embedder is None:
                raise ServiceUnavailable("embedder", "not configured and resume has no vector")
            vector = await self._embedder.embed(build_resume_text(resume))
            resume = await self._store.attach_resume_vector(resume.id, vector)

        candidates = await self._retriever.retrieve(
            resume.vector,
            limit,
            industry_filter=industry_filter,
            min_score=self._min_score,
        )
        if not candidates:
            raise ServiceUnavailable("vector_index", "no candidates returned")
        return resume, candidates, "vector_retrieval"

    async def _fallback(
        self, run: MatchingRun, resume: Resume, limit: int, error: Exception
    ) -> _PipelineResult:
        run.advance(MatchingState.FAILED)
        logger.warning("Matching degraded for resume %s, using local scoring: %s", resume.id, error)

        # Pick up a vector attached before the failure
        resume = await self._store.get_resume_by_id(resume.id) or resume
        jobs = await self._store.get_all_jobs()
        matches = [self._scorer.score(job, resume) for job in jobs]
        matches.sort(key=lambda m: m.match_score, reverse=True)
        return _PipelineResult(matches=matches[:limit], scoring_method="fallback", degraded=True)

    async def _persist(self, resume_id: int, matches: list[MatchResult]) -> None:
        failures = 0
        for match in matches:
            try:
                await self._store.create_job_match(resume_id, match)
            except PersistenceFailure as e:
                failures += 1
                logger.warning("Could not persist match %s/%s: %s", resume_id, match.job.id, e)
        if failures:
            logger.warning("%d of %d match records were not persisted", failures, len(matches))
