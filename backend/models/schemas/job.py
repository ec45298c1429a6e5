"""Job posting contract and the shared experience tier enum."""

from enum import Enum

from pydantic import Field, field_validator, model_validator

from models.schemas.record import RecordModel


class ExperienceTier(str, Enum):
    """Totally ordered seniority tiers. Declaration order is the ordinal."""

    ENTRY = "Entry Level"
    MID = "Mid-Level"
    SENIOR = "Senior Level"
    LEADERSHIP = "Leadership"

    @property
    def ordinal(self) -> int:
        return _TIER_ORDER.index(self)

    @classmethod
    def parse(cls, value) -> "ExperienceTier":
        """Map a tier name or common alias to a tier. Unknown values map to ENTRY."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.ENTRY
        return _TIER_ALIASES.get(value.strip().lower(), cls.ENTRY)


_TIER_ORDER = list(ExperienceTier)

_TIER_ALIASES = {
    "entry level": ExperienceTier.ENTRY,
    "entry-level": ExperienceTier.ENTRY,
    "entry": ExperienceTier.ENTRY,
    "junior": ExperienceTier.ENTRY,
    "intern": ExperienceTier.ENTRY,
    "mid-level": ExperienceTier.MID,
    "mid level": ExperienceTier.MID,
    "mid": ExperienceTier.MID,
    "intermediate": ExperienceTier.MID,
    "senior level": ExperienceTier.SENIOR,
    "senior-level": ExperienceTier.SENIOR,
    "senior": ExperienceTier.SENIOR,
    "leadership": ExperienceTier.LEADERSHIP,
    "lead": ExperienceTier.LEADERSHIP,
    "executive": ExperienceTier.LEADERSHIP,
    "director": ExperienceTier.LEADERSHIP,
}


def clean_strings(values: list[str]) -> list[str]:
    return [v.strip() for v in values if isinstance(v, str) and v.strip()]


class Job(RecordModel):
    """A job posting. Immutable; the embedding is attached via model_copy."""

    id: int
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: str = ""
    industry: str = "Technology"
    experience_level: ExperienceTier = ExperienceTier.ENTRY
    work_type: str = "Full-time"  # Full-time, Part-time, Contract, Remote
    description: str = ""
    requirements: str = ""
    skills: list[str] = []
    salary_min: int | None = None
    salary_max: int | None = None
    posted_date: str = ""
    vector: list[float] | None = Field(default=None, exclude=True)

    @field_validator("experience_level", mode="before")
    @classmethod
    def _parse_tier(cls, v):
        return ExperienceTier.parse(v)

    @field_validator("skills")
    @classmethod
    def _clean_skills(cls, v: list[str]) -> list[str]:
        return clean_strings(v)

    @model_validator(mode="after")
    def _check_salary(self) -> "Job":
        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise ValueError("salary_min must not exceed salary_max")
        return self
