"""Composite scorer output: one evaluated (resume, job) pair."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from models.schemas.job import Job


class ConfidenceTier(str, Enum):
    """Ordered confidence classification: LOW < MEDIUM < HIGH."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_ORDER.index(self)

    def shift(self, steps: int) -> "ConfidenceTier":
        """Move up (positive) or down (negative), capped at the enum bounds."""
        idx = max(0, min(len(_CONFIDENCE_ORDER) - 1, self.rank + steps))
        return _CONFIDENCE_ORDER[idx]

    # Ordered by rank, not by value
    def __lt__(self, other):
        if isinstance(other, ConfidenceTier):
            return self.rank < other.rank
        return NotImplemented

    def __le__(self, other):
        if isinstance(other, ConfidenceTier):
            return self.rank <= other.rank
        return NotImplemented

    def __gt__(self, other):
        if isinstance(other, ConfidenceTier):
            return self.rank > other.rank
        return NotImplemented

    def __ge__(self, other):
        if isinstance(other, ConfidenceTier):
            return self.rank >= other.rank
        return NotImplemented


_CONFIDENCE_ORDER = list(ConfidenceTier)


class MatchResult(BaseModel):
    """Score, matched skills, confidence and explanation for one job."""

    model_config = ConfigDict(frozen=True)

    job: Job
    match_score: float = Field(..., ge=0.0, le=1.0)
    matching_skills: list[str] = []
    confidence: ConfidenceTier = ConfidenceTier.LOW
    explanation: str = ""

    # Component signals for interpretability
    vector_score: float | None = None  # None when no embedding was available
    skill_overlap: float = 0.0
    experience_alignment: float = 0.0


class JobMatchRecord(BaseModel):
    """Persisted audit record. Append-only, keyed by (resume_id, job_id)."""

    id: int
    resume_id: int
    job_id: int
    match_score: float
    matching_skills: list[str] = []
    confidence: ConfidenceTier = ConfidenceTier.LOW
    created_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
