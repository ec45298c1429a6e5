"""Experience alignment: normalized ordinal distance between two tiers."""

from models.schemas.job import ExperienceTier

_TIER_COUNT = len(ExperienceTier)


def experience_alignment(job_tier, resume_tier) -> float:
    """Score 0.0-1.0; 1.0 for the same tier, 0.0 for opposite ends of the scale.

    Accepts tiers or raw tier names; unknown names count as Entry Level.
    Symmetric in its arguments.
    """
    job_idx = ExperienceTier.parse(job_tier).ordinal
    resume_idx = ExperienceTier.parse(resume_tier).ordinal
    return 1.0 - abs(job_idx - resume_idx) / (_TIER_COUNT - 1)
