"""Appropriateness filter contracts: the reasoning service's per-job decision."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.schemas.match_result import MatchResult


class FilterDecision(BaseModel):
    """A single KEEP / FILTER_OUT verdict for the job at position `job_id`."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: int = Field(..., alias="jobId")
    decision: Literal["KEEP", "FILTER_OUT"]
    reason: str = ""
    confidence_adjustment: Literal["INCREASE", "DECREASE"] | None = Field(
        default=None, alias="confidenceAdjustment"
    )

    @field_validator("decision", mode="before")
    @classmethod
    def _normalize_decision(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("confidence_adjustment", mode="before")
    @classmethod
    def _normalize_adjustment(cls, v):
        if not isinstance(v, str):
            return v
        v = v.strip().upper()
        return None if v in ("", "NONE", "NULL", "SAME") else v


class AppropriatenessResponse(BaseModel):
    """Structured JSON returned by the reasoning service."""

    analysis: list[FilterDecision] = Field(..., min_length=1)
    summary: str = ""


class RejectedMatch(BaseModel):
    match: MatchResult
    reason: str = ""


class FilterOutcome(BaseModel):
    kept: list[MatchResult] = []
    rejected: list[RejectedMatch] = []
    applied: bool = False  # False when the filter failed open or was skipped
