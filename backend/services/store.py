"""Job / resume / match storage boundary.

`JobStore` is the CRUD surface the matching pipeline depends on.
`InMemoryStore` backs the API and the tests. Match records are
append-only: re-running matching for a resume adds new records and
keeps the history.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from models.schemas.job import ExperienceTier, Job
from models.schemas.match_result import JobMatchRecord, MatchResult
from models.schemas.resume import Resume

logger = logging.getLogger(__name__)


class JobStore(Protocol):
    async def get_all_jobs(self) -> list[Job]: ...

    async def get_job_by_id(self, job_id: int) -> Job | None: ...

    async def count_jobs(self) -> int: ...

    async def get_resume_by_id(self, resume_id: int) -> Resume | None: ...

    async def attach_resume_vector(self, resume_id: int, vector: list[float]) -> Resume: ...

    async def create_job_match(self, resume_id: int, match: MatchResult) -> JobMatchRecord: ...


class InMemoryStore:
    def __init__(self, jobs: list[Job] | None = None, resumes: list[Resume] | None = None) -> None:
        self._jobs: dict[int, Job] = {job.id: job for job in jobs or []}
        self._resumes: dict[int, Resume] = {r.id: r for r in resumes or []}
        self._matches: list[JobMatchRecord] = []
        self._next_job_id = max(self._jobs, default=0) + 1
        self._next_resume_id = max(self._resumes, default=0) + 1
        self._next_match_id = 1

    # --- Jobs ---

    async def get_all_jobs(self) -> list[Job]:
        return list(self._jobs.values())

    async def get_job_by_id(self, job_id: int) -> Job | None:
        return self._jobs.get(job_id)

    async def count_jobs(self) -> int:
        return len(self._jobs)

    async def create_job(self, data: dict[str, Any]) -> Job:
        job = Job.from_record({**data, "id": self._next_job_id})
        self._jobs[job.id] = job
        self._next_job_id += 1
        return job

    async def attach_job_vector(self, job_id: int, vector: list[float]) -> Job:
        job = self._jobs[job_id].model_copy(update={"vector": list(vector)})
        self._jobs[job_id] = job
        return job

    async def search_jobs(
        self,
        query: str | None = None,
        experience_level: str | None = None,
        work_type: str | None = None,
    ) -> list[Job]:
        jobs = list(self._jobs.values())
        if query:
            term = query.lower()
            jobs = [
                j for j in jobs
                if term in j.title.lower()
                or term in j.company.lower()
                or term in j.description.lower()
                or any(term in s.lower() for s in j.skills)
            ]
        if experience_level:
            tier = ExperienceTier.parse(experience_level)
            jobs = [j for j in jobs if j.experience_level == tier]
        if work_type:
            jobs = [j for j in jobs if j.work_type.lower() == work_type.lower()]
        return jobs

    # --- Resumes ---

    async def create_resume(self, data: dict[str, Any]) -> Resume:
        record = {
            "uploaded_at": datetime.now(timezone.utc).isoformat(),
            **data,
            "id": self._next_resume_id,
        }
        resume = Resume.from_record(record)
        self._resumes[resume.id] = resume
        self._next_resume_id += 1
        return resume

    async def get_resume_by_id(self, resume_id: int) -> Resume | None:
        return self._resumes.get(resume_id)

    async def attach_resume_vector(self, resume_id: int, vector: list[float]) -> Resume:
        resume = self._resumes[resume_id].model_copy(update={"vector": list(vector)})
        self._resumes[resume_id] = resume
        return resume

    # --- Matches ---

    async def create_job_match(self, resume_id: int, match: MatchResult) -> JobMatchRecord:
        record = JobMatchRecord(
            id=self._next_match_id,
            resume_id=resume_id,
            job_id=match.job.id,
            match_score=match.match_score,
            matching_skills=list(match.matching_skills),
            confidence=match.confidence,
        )
        self._matches.append(record)
        self._next_match_id += 1
        return record

    async def get_job_matches_by_resume_id(self, resume_id: int) -> list[JobMatchRecord]:
        return [m for m in self._matches if m.resume_id == resume_id]
