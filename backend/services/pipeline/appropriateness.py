"""Appropriateness filter: semantic keep/drop/adjust for borderline matches.

The LLM-backed filter sends the candidate profile and up to 20 jobs to the
reasoning service and applies its KEEP / FILTER_OUT decisions plus optional
one-step confidence adjustments. Any failure (error, timeout, malformed or
empty answer) fails open: the original candidates come back unchanged,
truncated to top_k.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from pydantic import ValidationError

from models.schemas.filter_decision import (
    AppropriatenessResponse,
    FilterOutcome,
    RejectedMatch,
)
from models.schemas.match_result import MatchResult
from models.schemas.resume import ParsedProfile
from services import prompt_builder
from services.errors import ServiceUnavailable

logger = logging.getLogger(__name__)

MAX_FILTER_CANDIDATES = 20

_ADJUSTMENT_STEPS = {"INCREASE": 1, "DECREASE": -1}


class AppropriatenessFilter(Protocol):
    async def filter(
        self, profile: ParsedProfile, candidates: list[MatchResult], top_k: int
    ) -> FilterOutcome: ...


class KeepAllFilter:
    """Deterministic filter: keeps everything, truncated to top_k."""

    async def filter(
        self, profile: ParsedProfile, candidates: list[MatchResult], top_k: int
    ) -> FilterOutcome:
        return FilterOutcome(kept=list(candidates[:top_k]), applied=False)


def fail_open(candidates: list[MatchResult], top_k: int) -> FilterOutcome:
    return FilterOutcome(kept=list(candidates[:top_k]), applied=False)


class LLMAppropriatenessFilter:
    """Filter backed by a JSON-returning reasoning service (Gemini by default)."""

    def __init__(
        self,
        generate_json: Callable[[str], Awaitable[dict | None]] | None = None,
        timeout: float = 15.0,
    ) -> None:
        if generate_json is None:
            from services.gemini_client import generate_json
        self._generate_json = generate_json
        self.timeout = timeout

    async def _ask(self, prompt: str) -> dict | None:
        try:
            return await asyncio.wait_for(self._generate_json(prompt), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Appropriateness filter timed out after %.1fs", self.timeout)
            return None
        except ServiceUnavailable as e:
            logger.warning("Appropriateness filter unavailable: %s", e)
            return None
        except Exception as e:
            logger.error("Appropriateness filter call failed: %s", e)
            return None

    async def filter(
        self, profile: ParsedProfile, candidates: list[MatchResult], top_k: int
    ) -> FilterOutcome:
        if not candidates:
            return FilterOutcome(applied=False)

        window = candidates[:MAX_FILTER_CANDIDATES]
        logger.info("Filtering %d job matches for appropriateness", len(window))

        data = await self._ask(prompt_builder.build_appropriateness_prompt(profile, window))
        if data is None:
            logger.warning("Reasoning service gave no answer, returning unfiltered matches")
            return fail_open(candidates, top_k)

        try:
            response = AppropriatenessResponse.model_validate(data)
        except ValidationError as e:
            logger.warning("Malformed filter response, returning unfiltered matches: %s", e)
            return fail_open(candidates, top_k)

        if response.summary:
            logger.info("Filter summary: %s", response.summary)

        kept: list[tuple[int, MatchResult]] = []
        rejected: list[RejectedMatch] = []
        decided: set[int] = set()

        for decision in response.analysis:
            idx = decision.job_id
            if not 0 <= idx < len(window) or idx in decided:
                continue
            decided.add(idx)
            match = window[idx]

            if decision.decision == "KEEP":
                steps = _ADJUSTMENT_STEPS.get(decision.confidence_adjustment or "", 0)
                if steps:
                    match = match.model_copy(update={"confidence": match.confidence.shift(steps)})
                kept.append((idx, match))
                logger.debug("Keeping %s: %s", match.job.title, decision.reason)
            else:
                rejected.append(RejectedMatch(match=match, reason=decision.reason))
                logger.info("Filtering out %s: %s", match.job.title, decision.reason)

        # Keep the incoming rank order
        kept.sort(key=lambda pair: pair[0])
        logger.info(
            "Appropriateness filter kept %d, rejected %d of %d candidates",
            len(kept), len(rejected), len(window),
        )
        return FilterOutcome(kept=[m for _, m in kept[:top_k]], rejected=rejected, applied=True)
