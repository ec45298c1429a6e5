"""Tests for the Qdrant vector index adapter (local in-memory mode)."""

import pytest

from services.errors import DimensionMismatch, ServiceUnavailable
from services.vector_index import QdrantVectorIndex, job_metadata, parse_job_id


@pytest.fixture
def index():
    return QdrantVectorIndex(url=":memory:", collection="test_jobs", dimension=4)


class TestParseJobId:
    @pytest.mark.parametrize("raw,expected", [(42, 42), ("42", 42), ("job_42", 42), (" job_7 ", 7)])
    def test_resolvable(self, raw, expected):
        assert parse_job_id(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "job_", "3f2a-uuid"])
    def test_unresolvable(self, raw):
        assert parse_job_id(raw) is None


def test_job_metadata(make_job):
    metadata = job_metadata(make_job(5, industry="Finance", experience_level="senior"))
    assert metadata["job_id"] == 5
    assert metadata["industry"] == "Finance"
    assert metadata["experience_level"] == "Senior Level"


@pytest.mark.integration
class TestQdrantVectorIndex:
    @pytest.mark.asyncio
    async def test_upsert_and_query(self, index):
        await index.upsert_many([
            (1, [1.0, 0.0, 0.0, 0.0], {"industry": "Technology"}),
            (2, [0.0, 1.0, 0.0, 0.0], {"industry": "Finance"}),
            (3, [0.9, 0.1, 0.0, 0.0], {"industry": "Finance"}),
        ])

        hits = await index.query([1.0, 0.0, 0.0, 0.0], top_k=2)
        assert [h.id for h in hits] == [1, 3]
        assert hits[0].score == pytest.approx(1.0, abs=1e-4)
        assert hits[0].metadata["industry"] == "Technology"

    @pytest.mark.asyncio
    async def test_query_with_inclusion_filter(self, index):
        await index.upsert_many([
            (1, [1.0, 0.0, 0.0, 0.0], {"industry": "Technology"}),
            (2, [0.9, 0.1, 0.0, 0.0], {"industry": "Finance"}),
            (3, [0.0, 1.0, 0.0, 0.0], {"industry": "Healthcare"}),
        ])

        hits = await index.query([1.0, 0.0, 0.0, 0.0], top_k=10, filter={"industry": ["Finance", "Healthcare"]})
        assert {h.id for h in hits} == {2, 3}

    @pytest.mark.asyncio
    async def test_upsert_replaces_existing_point(self, index):
        await index.upsert(1, [1.0, 0.0, 0.0, 0.0], {"title": "Old"})
        await index.upsert(1, [0.0, 1.0, 0.0, 0.0], {"title": "New"})

        stats = await index.stats()
        assert stats.count == 1
        hits = await index.query([0.0, 1.0, 0.0, 0.0], top_k=1)
        assert hits[0].metadata["title"] == "New"

    @pytest.mark.asyncio
    async def test_stats_and_delete_all(self, index):
        await index.upsert_many([(i, [1.0, float(i), 0.0, 0.0], {}) for i in range(1, 6)])
        stats = await index.stats()
        assert stats.count == 5
        assert stats.dimension == 4

        await index.delete_all()
        assert (await index.stats()).count == 0

    @pytest.mark.asyncio
    async def test_dimension_checked_before_calling_client(self, index):
        with pytest.raises(DimensionMismatch):
            await index.query([1.0, 0.0], top_k=3)
        with pytest.raises(DimensionMismatch):
            await index.upsert(1, [1.0], {})


class _BrokenClient:
    def collection_exists(self, name):
        raise ConnectionError("connection refused")


class TestQdrantFailures:
    @pytest.mark.asyncio
    async def test_client_error_becomes_service_unavailable(self):
        index = QdrantVectorIndex(dimension=2, client=_BrokenClient())
        with pytest.raises(ServiceUnavailable) as exc:
            await index.stats()
        assert exc.value.service == "vector_index"
