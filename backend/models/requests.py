from pydantic import BaseModel, Field

from models.schemas.resume import ParsedProfile


class CreateJobRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    company: str = Field(..., min_length=1, max_length=200)
    location: str = ""
    industry: str = "Technology"
    experience_level: str = Field("Entry Level", description="Entry Level, Mid-Level, Senior Level or Leadership")
    work_type: str = "Full-time"
    description: str = Field("", max_length=20000)
    requirements: str = Field("", max_length=10000)
    skills: list[str] = []
    salary_min: int | None = None
    salary_max: int | None = None
    posted_date: str = ""


class CreateResumeRequest(BaseModel):
    file_name: str = Field(..., min_length=1, max_length=255)
    original_text: str = Field(..., max_length=50000, description="Plain text resume content")
    parsed_data: ParsedProfile | None = None


class VectorizeRequest(BaseModel):
    job_ids: list[int] | None = Field(None, description="Jobs to vectorize; all jobs when omitted")
