"""Shared test configuration, pytest markers, record factories and fakes."""

import pytest

from models.schemas.job import Job
from models.schemas.resume import ParsedProfile, Resume
from services.errors import ServiceUnavailable
from services.similarity import cosine_similarity
from services.vector_index import IndexHit, IndexStats


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: talks to a real (in-process) external client"
    )


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------

def _job(job_id: int = 1, **overrides) -> Job:
    data = {
        "id": job_id,
        "title": f"Software Engineer {job_id}",
        "company": f"Company {job_id}",
        "location": "Remote",
        "industry": "Technology",
        "experience_level": "Mid-Level",
        "skills": ["python"],
    }
    data.update(overrides)
    return Job.model_validate(data)


def _resume(resume_id: int = 1, vector: list[float] | None = None, **profile) -> Resume:
    profile_data = {
        "skills": ["python"],
        "primary_role": "Software Engineer",
        "industries": ["Technology"],
        "experience_level": "Mid-Level",
        "years_of_experience": 4,
    }
    profile_data.update(profile)
    return Resume(
        id=resume_id,
        file_name="resume.pdf",
        original_text="Experienced engineer building web services.",
        parsed_data=ParsedProfile.model_validate(profile_data),
        vector=vector,
    )


@pytest.fixture
def make_job():
    return _job


@pytest.fixture
def make_resume():
    return _resume


# ---------------------------------------------------------------------------
# External service fakes
# ---------------------------------------------------------------------------

class FakeEmbedder:
    """Bag-of-keywords embedder: one dimension per vocabulary word plus a bias."""

    VOCAB = ("python", "react", "node", "aws", "java", "sales", "design", "data")

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.fail = False
        self.fail_on: set[str] = set()

    @property
    def dimension(self) -> int:
        return len(self.VOCAB) + 1

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail or any(marker in text for marker in self.fail_on):
            raise ServiceUnavailable("embedder", "fake outage")
        lowered = text.lower()
        return [1.0 if word in lowered else 0.0 for word in self.VOCAB] + [0.1]


class FakeVectorIndex:
    """Brute-force cosine index over an in-memory dict."""

    def __init__(self) -> None:
        self.points: dict[int | str, tuple[list[float], dict]] = {}
        self.fail = False
        self.queries: list[tuple[int, dict | None]] = []

    def _check(self) -> None:
        if self.fail:
            raise ServiceUnavailable("vector_index", "fake outage")

    async def upsert(self, point_id, vector, metadata) -> None:
        await self.upsert_many([(point_id, vector, metadata)])

    async def upsert_many(self, records) -> None:
        self._check()
        for point_id, vector, metadata in records:
            self.points[point_id] = (list(vector), dict(metadata))

    async def query(self, vector, top_k, filter=None) -> list[IndexHit]:
        self._check()
        self.queries.append((top_k, filter))
        hits = []
        for point_id, (stored, metadata) in self.points.items():
            if filter and not all(
                metadata.get(k) in (v if isinstance(v, list) else [v]) for k, v in filter.items()
            ):
                continue
            hits.append(IndexHit(id=point_id, score=cosine_similarity(vector, stored), metadata=metadata))
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits[:top_k]

    async def delete_all(self) -> None:
        self._check()
        self.points.clear()

    async def stats(self) -> IndexStats:
        self._check()
        dimension = len(next(iter(self.points.values()))[0]) if self.points else 0
        return IndexStats(count=len(self.points), dimension=dimension)


class FakeReasoner:
    """Stands in for gemini_client.generate_json."""

    def __init__(self, response: dict | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    async def __call__(self, prompt: str) -> dict | None:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_embedder():
    return FakeEmbedder()


@pytest.fixture
def fake_index():
    return FakeVectorIndex()


@pytest.fixture
def fake_reasoner():
    return FakeReasoner
