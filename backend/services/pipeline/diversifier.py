"""Greedy Maximal Marginal Relevance (MMR) re-ranking.

Each step picks the remaining candidate maximizing

    lambda * relevance + (1 - lambda) * diversity

where relevance is the match score and diversity starts at 1.0 and is
penalized multiplicatively for repetition among already-selected results:

    company:  * 0.3 ** (same-company picks so far)
    location: * 0.8 once more than 2 picks share the location
    industry: * 0.9 once more than 3 picks share the industry

Greedy, so not globally optimal. Ties keep input order.
"""

import logging
from collections import Counter

from pydantic import BaseModel, ConfigDict

from models.schemas.match_result import MatchResult

logger = logging.getLogger(__name__)

DEFAULT_LAMBDA = 0.7


class DiversityConfig(BaseModel):
    """Penalty constants for the MMR diversity term. Immutable."""

    model_config = ConfigDict(frozen=True)

    company_penalty: float = 0.3
    location_penalty: float = 0.8
    location_threshold: int = 2
    industry_penalty: float = 0.9
    industry_threshold: int = 3


def _key(value: str) -> str:
    return value.strip().lower()


class MMRDiversifier:
    def __init__(self, config: DiversityConfig | None = None) -> None:
        self.config = config or DiversityConfig()

    def diversity(
        self,
        match: MatchResult,
        companies: Counter,
        locations: Counter,
        industries: Counter,
    ) -> float:
        """Diversity term for `match` given the counts of what is already selected."""
        cfg = self.config
        job = match.job
        score = cfg.company_penalty ** companies[_key(job.company)]
        if locations[_key(job.location)] > cfg.location_threshold:
            score *= cfg.location_penalty
        if industries[_key(job.industry)] > cfg.industry_threshold:
            score *= cfg.industry_penalty
        return score

    def diversify(
        self,
        matches: list[MatchResult],
        lambda_: float = DEFAULT_LAMBDA,
        max_results: int = 10,
    ) -> list[MatchResult]:
        """Select up to `max_results` matches, trading relevance against repetition."""
        if not 0.0 <= lambda_ <= 1.0:
            raise ValueError(f"lambda must be within [0, 1], got {lambda_}")
        if max_results <= 0:
            return []

        # One entry per job id, first occurrence wins
        pool: list[MatchResult] = []
        seen_ids: set[int] = set()
        for match in matches:
            if match.job.id not in seen_ids:
                seen_ids.add(match.job.id)
                pool.append(match)

        if len(pool) <= max_results:
            return pool

        companies: Counter = Counter()
        locations: Counter = Counter()
        industries: Counter = Counter()
        selected: list[MatchResult] = []

        def take(index: int) -> None:
            chosen = pool.pop(index)
            selected.append(chosen)
            companies[_key(chosen.job.company)] += 1
            locations[_key(chosen.job.location)] += 1
            industries[_key(chosen.job.industry)] += 1

        # Seed with the single most relevant match
        best_idx = max(range(len(pool)), key=lambda i: (pool[i].match_score, -i))
        take(best_idx)

        while len(selected) < max_results and pool:
            best_idx = 0
            best_value = float("-inf")
            for i, candidate in enumerate(pool):
                value = lambda_ * candidate.match_score + (1 - lambda_) * self.diversity(
                    candidate, companies, locations, industries
                )
                if value > best_value:
                    best_value = value
                    best_idx = i
            take(best_idx)

        logger.info(
            "MMR selected %d of %d matches (lambda=%.2f, %d companies)",
            len(selected), len(selected) + len(pool), lambda_, len(companies),
        )
        return selected
