"""Composite match scorer: vector similarity + skill overlap + experience alignment.

With embeddings on both sides (vector score > 0):
    final = 0.5 * vector + 0.3 * skill_overlap + 0.2 * experience
Without:
    final = 0.7 * skill_overlap + 0.3 * experience

The vector-retrieval path may add industry/role bonuses on top. The final
score is clamped to [0, 1] and rounded to two decimals.
"""

import logging

from pydantic import BaseModel, ConfigDict

from models.schemas.job import Job
from models.schemas.match_result import ConfidenceTier, MatchResult
from models.schemas.resume import ParsedProfile, Resume
from services.experience import experience_alignment
from services.similarity import cosine_similarity
from services.skill_extractor import find_matching_skills, skill_overlap_score

logger = logging.getLogger(__name__)


class ScoringConfig(BaseModel):
    """Weights and thresholds for the composite scorer. Immutable."""

    model_config = ConfigDict(frozen=True)

    # Weights when a vector score is available
    vector_weight: float = 0.5
    skill_weight: float = 0.3
    experience_weight: float = 0.2

    # Weights without vectors
    fallback_skill_weight: float = 0.7
    fallback_experience_weight: float = 0.3

    # Confidence thresholds with vectors (on the final score)
    high_score: float = 0.75
    high_min_skills: int = 2
    medium_score: float = 0.55
    medium_min_skills: int = 1

    # Confidence thresholds without vectors (on skill overlap)
    fallback_high_overlap: float = 0.6
    fallback_high_min_skills: int = 3
    fallback_medium_overlap: float = 0.3
    fallback_medium_min_skills: int = 2

    # Retrieval-path relevance bonuses
    industry_bonus: float = 0.10
    role_bonus: float = 0.15


class CompositeScorer:
    """Pure scorer; holds only its immutable config."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def score(
        self,
        job: Job,
        resume: Resume,
        vector_score: float | None = None,
        apply_bonuses: bool = False,
    ) -> MatchResult:
        """Score one job against a resume.

        `vector_score` lets a caller pass a similarity already computed by the
        vector index; otherwise it is computed from the attached embeddings.
        Raises InvalidInput when the resume has no parsed profile and
        DimensionMismatch when the embeddings differ in length.
        """
        profile = resume.require_profile()
        cfg = self.config

        if vector_score is None:
            vector_score = 0.0
            if job.vector and resume.vector:
                vector_score = cosine_similarity(job.vector, resume.vector)

        matching_skills = find_matching_skills(job.skills, profile.skills)
        overlap = skill_overlap_score(matching_skills, job.skills)
        experience = experience_alignment(job.experience_level, profile.experience_level)

        # A non-positive vector score means "unavailable", not "dissimilar"
        has_vector = vector_score > 0
        if has_vector:
            raw = (
                cfg.vector_weight * vector_score
                + cfg.skill_weight * overlap
                + cfg.experience_weight * experience
            )
        else:
            raw = cfg.fallback_skill_weight * overlap + cfg.fallback_experience_weight * experience

        industry_bonus = role_bonus = 0.0
        if apply_bonuses:
            industry_bonus = cfg.industry_bonus if _industry_matches(job, profile) else 0.0
            role_bonus = cfg.role_bonus if _role_matches(job, profile) else 0.0

        final = max(0.0, min(1.0, raw + industry_bonus + role_bonus))
        confidence = self._confidence(final, overlap, len(matching_skills), has_vector)

        logger.debug(
            "Scored job %s: vector=%.3f overlap=%.3f experience=%.3f final=%.3f (%s)",
            job.id, vector_score, overlap, experience, final, confidence.value,
        )

        return MatchResult(
            job=job,
            match_score=round(final, 2),
            matching_skills=matching_skills,
            confidence=confidence,
            explanation=build_explanation(
                vector_score if has_vector else None,
                overlap,
                experience,
                industry_bonus,
                role_bonus,
                matching_skills,
                final,
            ),
            vector_score=round(vector_score, 4) if has_vector else None,
            skill_overlap=round(overlap, 4),
            experience_alignment=round(experience, 4),
        )

    def _confidence(
        self, final: float, overlap: float, n_matches: int, has_vector: bool
    ) -> ConfidenceTier:
        cfg = self.config
        if has_vector:
            if final >= cfg.high_score and n_matches >= cfg.high_min_skills:
                return ConfidenceTier.HIGH
            if final >= cfg.medium_score and n_matches >= cfg.medium_min_skills:
                return ConfidenceTier.MEDIUM
            return ConfidenceTier.LOW

        if overlap >= cfg.fallback_high_overlap and n_matches >= cfg.fallback_high_min_skills:
            return ConfidenceTier.HIGH
        if overlap >= cfg.fallback_medium_overlap and n_matches >= cfg.fallback_medium_min_skills:
            return ConfidenceTier.MEDIUM
        return ConfidenceTier.LOW


def _industry_matches(job: Job, profile: ParsedProfile) -> bool:
    job_industry = job.industry.strip().lower()
    if not job_industry:
        return False
    return any(
        ind.lower() in job_industry or job_industry in ind.lower()
        for ind in profile.industries
    )


def _role_matches(job: Job, profile: ParsedProfile) -> bool:
    role = profile.primary_role.strip().lower()
    title = job.title.strip().lower()
    if not role or not title:
        return False
    return role.split()[0] in title or title.split()[0] in role


def build_explanation(
    vector_score: float | None,
    skill_overlap: float,
    experience: float,
    industry_bonus: float,
    role_bonus: float,
    matching_skills: list[str],
    final: float,
) -> str:
    """Human-readable, pipe-separated breakdown of a match score."""
    parts: list[str] = []
    if vector_score is not None:
        parts.append(f"Vector similarity: {vector_score:.1%}")
    else:
        parts.append("No vector similarity available")
    parts.append(f"Skill overlap: {skill_overlap:.1%}")
    parts.append(f"Experience alignment: {experience:.1%}")

    if industry_bonus > 0:
        parts.append(f"Industry match bonus: +{industry_bonus:.1%}")
    if role_bonus > 0:
        parts.append(f"Role relevance bonus: +{role_bonus:.1%}")

    if matching_skills:
        shown = ", ".join(matching_skills[:3])
        extra = len(matching_skills) - 3
        parts.append(f"Matching skills: {shown}" + (f" +{extra} more" if extra > 0 else ""))

    parts.append(f"Final score: {final:.1%}")
    return " | ".join(parts)
