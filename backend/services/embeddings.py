"""Embedding provider (sentence-transformers) and batch job vectorization.

The model is loaded lazily on first use and shared by every request that
goes through the same provider instance. Calls run in a worker thread with
a bounded timeout; failures surface as ServiceUnavailable.
"""

import asyncio
import logging
import time
from typing import Protocol

from pydantic import BaseModel

from models.schemas.job import Job
from models.schemas.resume import ParsedProfile, Resume
from services.errors import InvalidInput, MatchingError, ServiceUnavailable
from services.pipeline.base import BaseExternalService
from services.vector_index import job_metadata

logger = logging.getLogger(__name__)

MAX_JOB_TEXT_CHARS = 6000
MAX_RESUME_RAW_CHARS = 4000
MAX_RESUME_TEXT_CHARS = 6000
KEY_DESCRIPTION_CHARS = 400

_KEY_SECTION_HEADINGS = (
    "Key Responsibilities",
    "Responsibilities",
    "What you'll do",
    "Role Overview",
    "About the Role",
)


class EmbeddingProvider(Protocol):
    async def embed(self, text: str) -> list[float]: ...


class SentenceTransformerEmbedder(BaseExternalService):
    service_name = "embedder"

    def __init__(self, model_name: str, timeout: float = 15.0) -> None:
        super().__init__()
        self.model_name = model_name
        self.timeout = timeout
        self._model = None

    def load(self) -> None:
        from sentence_transformers import SentenceTransformer

        self._model = SentenceTransformer(self.model_name)
        logger.info("Embedding model %s loaded", self.model_name)

    def _encode(self, text: str) -> list[float]:
        self.ensure_loaded()
        start = time.perf_counter()
        embedding = self._model.encode(
            text, convert_to_numpy=True, normalize_embeddings=True, show_progress_bar=False
        )
        logger.debug("Embedded %d chars in %.1f ms", len(text), (time.perf_counter() - start) * 1000)
        return embedding.tolist()

    async def embed(self, text: str) -> list[float]:
        if not text.strip():
            raise InvalidInput("Cannot embed empty text")
        try:
            return await asyncio.wait_for(asyncio.to_thread(self._encode, text), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ServiceUnavailable(self.service_name, f"timed out after {self.timeout}s") from e
        except Exception as e:
            logger.warning("Embedding failed: %s", e)
            raise ServiceUnavailable(self.service_name, str(e)) from e


# ---------------------------------------------------------------------------
# Text builders
# ---------------------------------------------------------------------------

def _extract_key_description(description: str) -> str:
    """Text following the first responsibilities-style heading, else the opening."""
    for heading in _KEY_SECTION_HEADINGS:
        if heading in description:
            section = description.split(heading, 1)[1].lstrip(" :\n")
            if section.strip():
                return section[:KEY_DESCRIPTION_CHARS].strip()
    return description[:KEY_DESCRIPTION_CHARS].strip()


def build_job_text(job: Job) -> str:
    """Embedding text for a job, strongest matching signals first."""
    sections = [
        f"Position: {job.title} ({job.experience_level.value})",
        f"Requirements: {job.requirements}" if job.requirements else "",
        f"Skills: {', '.join(job.skills)}" if job.skills else "",
        f"Type: {job.work_type}. Location: {job.location}",
        f"Company: {job.company}. Industry: {job.industry}",
        (
            f"Salary: ${job.salary_min:,} - ${job.salary_max:,}"
            if job.salary_min is not None and job.salary_max is not None
            else ""
        ),
        f"Description: {_extract_key_description(job.description)}" if job.description else "",
    ]
    text = "\n\n".join(s for s in sections if s)
    return text[:MAX_JOB_TEXT_CHARS]


def _profile_text(profile: ParsedProfile) -> str:
    return " ".join(
        [" ".join(profile.skills), profile.primary_role, " ".join(profile.industries)]
    ).strip()


def build_resume_text(resume: Resume) -> str:
    """Embedding text for a resume: truncated raw text plus the parsed profile.

    Falls back to the profile alone (with tier) if the combination is too long.
    """
    profile = resume.require_profile()
    raw = resume.original_text
    if len(raw) > MAX_RESUME_RAW_CHARS:
        raw = raw[:MAX_RESUME_RAW_CHARS] + "..."
    combined = f"{raw} {_profile_text(profile)}".strip()
    if len(combined) > MAX_RESUME_TEXT_CHARS:
        return f"{_profile_text(profile)} {profile.experience_level.value}".strip()
    return combined


# ---------------------------------------------------------------------------
# Batch vectorization
# ---------------------------------------------------------------------------

class VectorizeResult(BaseModel):
    processed: int = 0
    failed_job_ids: list[int] = []
    upserted: int = 0


async def vectorize_jobs(
    jobs: list[Job],
    embedder: EmbeddingProvider,
    store,
    index=None,
    batch_size: int = 10,
    delay_seconds: float = 1.0,
) -> VectorizeResult:
    """Embed jobs in fixed-size batches, attach vectors and upsert them.

    Sleeps `delay_seconds` between batches to respect provider quotas. A
    failed job is skipped and recorded; a failed index upsert is logged and
    the run continues with the next batch.
    """
    result = VectorizeResult()
    total_batches = (len(jobs) + batch_size - 1) // batch_size
    logger.info("Vectorizing %d jobs in %d batches", len(jobs), total_batches)

    for batch_no, start in enumerate(range(0, len(jobs), batch_size), start=1):
        batch = jobs[start:start + batch_size]
        outcomes = await asyncio.gather(
            *(embedder.embed(build_job_text(job)) for job in batch),
            return_exceptions=True,
        )

        records: list[tuple[int, list[float], dict]] = []
        for job, outcome in zip(batch, outcomes):
            if isinstance(outcome, MatchingError):
                logger.warning("Skipping job %s: %s", job.id, outcome)
                result.failed_job_ids.append(job.id)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            await store.attach_job_vector(job.id, outcome)
            records.append((job.id, outcome, job_metadata(job)))
            result.processed += 1

        if index is not None and records:
            try:
                await index.upsert_many(records)
                result.upserted += len(records)
            except MatchingError as e:
                logger.warning("Index upsert failed for batch %d: %s", batch_no, e)

        logger.info(
            "Processed batch %d/%d (%d/%d completed)",
            batch_no, total_batches, result.processed, len(jobs),
        )
        if start + batch_size < len(jobs) and delay_seconds > 0:
            await asyncio.sleep(delay_seconds)

    return result
