"""Resume contract: raw text plus the externally parsed profile."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.schemas.job import ExperienceTier, clean_strings
from models.schemas.record import RecordModel
from services.errors import InvalidInput


class ParsedProfile(BaseModel):
    """Structured profile produced by the resume parser. Trusted input."""

    model_config = ConfigDict(frozen=True)

    skills: list[str] = []
    primary_role: str = ""
    industries: list[str] = []
    experience_level: ExperienceTier = ExperienceTier.ENTRY
    years_of_experience: float = Field(0.0, ge=0)
    name: str = ""
    recent_title: str = ""
    recent_company: str = ""

    @field_validator("experience_level", mode="before")
    @classmethod
    def _parse_tier(cls, v):
        return ExperienceTier.parse(v)

    @field_validator("skills", "industries")
    @classmethod
    def _clean(cls, v: list[str]) -> list[str]:
        return clean_strings(v)


class Resume(RecordModel):
    id: int
    file_name: str = ""
    original_text: str = ""
    parsed_data: ParsedProfile | None = None
    vector: list[float] | None = Field(default=None, exclude=True)
    uploaded_at: str = ""

    def require_profile(self) -> ParsedProfile:
        if self.parsed_data is None:
            raise InvalidInput(f"Resume {self.id} has no parsed profile")
        return self.parsed_data
