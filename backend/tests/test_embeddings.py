"""Tests for embedding text builders and batch vectorization."""

import pytest

from models.schemas.resume import Resume
from services.embeddings import (
    MAX_JOB_TEXT_CHARS,
    SentenceTransformerEmbedder,
    build_job_text,
    build_resume_text,
    vectorize_jobs,
)
from services.errors import InvalidInput
from services.store import InMemoryStore


class TestTextBuilders:
    def test_job_text_leads_with_title_and_tier(self, make_job):
        job = make_job(title="Data Scientist", experience_level="Senior", skills=["python", "sql"])
        text = build_job_text(job)
        assert text.startswith("Position: Data Scientist (Senior Level)")
        assert "Skills: python, sql" in text
        assert "Salary" not in text

    def test_job_text_includes_salary_range(self, make_job):
        text = build_job_text(make_job(salary_min=90000, salary_max=120000))
        assert "Salary: $90,000 - $120,000" in text

    def test_job_text_uses_responsibilities_section(self, make_job):
        description = "We are a great company. Key Responsibilities: build APIs and mentor."
        text = build_job_text(make_job(description=description))
        assert "Description: build APIs and mentor." in text
        assert "great company" not in text

    def test_job_text_capped(self, make_job):
        text = build_job_text(make_job(requirements="x" * 10000))
        assert len(text) <= MAX_JOB_TEXT_CHARS

    def test_resume_text_combines_raw_and_profile(self, make_resume):
        resume = make_resume(skills=["react", "aws"], primary_role="Frontend Developer")
        text = build_resume_text(resume)
        assert text.startswith("Experienced engineer")
        assert "react aws" in text
        assert "Frontend Developer" in text

    def test_resume_text_truncates_long_raw_text(self, make_resume):
        resume = make_resume().model_copy(update={"original_text": "a" * 5000})
        text = build_resume_text(resume)
        assert "a" * 4000 + "..." in text
        assert "a" * 4001 not in text

    def test_resume_text_requires_profile(self):
        with pytest.raises(InvalidInput):
            build_resume_text(Resume(id=1, original_text="hello"))


class TestSentenceTransformerEmbedder:
    @pytest.mark.asyncio
    async def test_empty_text_rejected_before_loading(self):
        embedder = SentenceTransformerEmbedder("unused-model")
        with pytest.raises(InvalidInput):
            await embedder.embed("   ")
        assert not embedder.is_loaded


class TestVectorizeJobs:
    @pytest.mark.asyncio
    async def test_vectorizes_attaches_and_upserts(self, make_job, fake_embedder, fake_index):
        jobs = [make_job(i, skills=["python"]) for i in range(1, 6)]
        store = InMemoryStore(jobs=jobs)

        result = await vectorize_jobs(jobs, fake_embedder, store, fake_index, batch_size=2, delay_seconds=0)

        assert result.processed == 5
        assert result.upserted == 5
        assert result.failed_job_ids == []
        assert set(fake_index.points) == {1, 2, 3, 4, 5}
        assert fake_index.points[3][1]["company"] == "Company 3"
        assert all(j.vector is not None for j in await store.get_all_jobs())

    @pytest.mark.asyncio
    async def test_failed_items_are_skipped(self, make_job, fake_embedder):
        jobs = [make_job(1), make_job(2, title="Broken Role"), make_job(3)]
        store = InMemoryStore(jobs=jobs)
        fake_embedder.fail_on = {"Broken Role"}

        result = await vectorize_jobs(jobs, fake_embedder, store, batch_size=10, delay_seconds=0)

        assert result.processed == 2
        assert result.failed_job_ids == [2]
        assert result.upserted == 0
        assert (await store.get_job_by_id(2)).vector is None

    @pytest.mark.asyncio
    async def test_index_outage_does_not_stop_run(self, make_job, fake_embedder, fake_index):
        jobs = [make_job(1), make_job(2)]
        store = InMemoryStore(jobs=jobs)
        fake_index.fail = True

        result = await vectorize_jobs(jobs, fake_embedder, store, fake_index, batch_size=1, delay_seconds=0)

        assert result.processed == 2
        assert result.upserted == 0
        assert (await store.get_job_by_id(1)).vector is not None

    @pytest.mark.asyncio
    async def test_empty_job_list(self, fake_embedder):
        result = await vectorize_jobs([], fake_embedder, InMemoryStore(), delay_seconds=0)
        assert result.processed == 0
        assert fake_embedder.calls == []
