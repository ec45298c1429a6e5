"""Domain contracts for the matching pipeline."""

from models.schemas.job import ExperienceTier, Job
from models.schemas.resume import ParsedProfile, Resume
from models.schemas.match_result import ConfidenceTier, JobMatchRecord, MatchResult
from models.schemas.filter_decision import (
    AppropriatenessResponse,
    FilterDecision,
    FilterOutcome,
    RejectedMatch,
)

__all__ = [
    "ExperienceTier",
    "Job",
    "ParsedProfile",
    "Resume",
    "ConfidenceTier",
    "JobMatchRecord",
    "MatchResult",
    "AppropriatenessResponse",
    "FilterDecision",
    "FilterOutcome",
    "RejectedMatch",
]
