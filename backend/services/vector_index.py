"""Vector index adapter over Qdrant.

Job ids double as Qdrant point ids; job attributes are stored as payload
so queries can filter on them (equality or inclusion). All client calls
run in a worker thread under a timeout and surface failures as
ServiceUnavailable.
"""

import asyncio
import logging
from typing import Any, Protocol

from pydantic import BaseModel

from models.schemas.job import Job
from services.errors import DimensionMismatch, ServiceUnavailable
from services.pipeline.base import BaseExternalService

logger = logging.getLogger(__name__)

UPSERT_BATCH_SIZE = 100


class IndexHit(BaseModel):
    id: int | str
    score: float = 0.0
    metadata: dict[str, Any] = {}


class IndexStats(BaseModel):
    count: int = 0
    dimension: int = 0


class VectorIndex(Protocol):
    async def upsert(self, point_id: int, vector: list[float], metadata: dict[str, Any]) -> None: ...

    async def upsert_many(self, records: list[tuple[int, list[float], dict[str, Any]]]) -> None: ...

    async def query(
        self, vector: list[float], top_k: int, filter: dict[str, Any] | None = None
    ) -> list[IndexHit]: ...

    async def delete_all(self) -> None: ...

    async def stats(self) -> IndexStats: ...


def job_metadata(job: Job) -> dict[str, Any]:
    """Payload stored next to a job's vector."""
    return {
        "job_id": job.id,
        "title": job.title,
        "company": job.company,
        "location": job.location,
        "experience_level": job.experience_level.value,
        "work_type": job.work_type,
        "industry": job.industry,
    }


def parse_job_id(raw: int | str) -> int | None:
    """Map an opaque index id (42, "42" or "job_42") to a job id, or None."""
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if text.startswith("job_"):
        text = text[4:]
    try:
        return int(text)
    except ValueError:
        return None


class QdrantVectorIndex(BaseExternalService):
    service_name = "vector_index"

    def __init__(
        self,
        url: str = ":memory:",
        api_key: str = "",
        collection: str = "jobs",
        dimension: int = 1024,
        timeout: float = 15.0,
        client=None,
    ) -> None:
        super().__init__()
        self.url = url
        self.api_key = api_key
        self.collection = collection
        self.dimension = dimension
        self.timeout = timeout
        self._client = client

    def load(self) -> None:
        from qdrant_client import QdrantClient

        if self._client is None:
            if self.url == ":memory:":
                self._client = QdrantClient(location=":memory:")
            else:
                self._client = QdrantClient(url=self.url, api_key=self.api_key or None)
        if not self._client.collection_exists(self.collection):
            self._create_collection()

    def _create_collection(self) -> None:
        from qdrant_client.models import Distance, VectorParams

        self._client.create_collection(
            collection_name=self.collection,
            vectors_config=VectorParams(size=self.dimension, distance=Distance.COSINE),
        )
        logger.info("Created Qdrant collection %s (dim=%d)", self.collection, self.dimension)

    async def _call(self, operation: str, fn, *args, **kwargs):
        def run():
            self.ensure_loaded()
            return fn(*args, **kwargs)

        try:
            return await asyncio.wait_for(asyncio.to_thread(run), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ServiceUnavailable(self.service_name, f"{operation} timed out after {self.timeout}s") from e
        except Exception as e:
            logger.warning("Qdrant %s failed: %s", operation, e)
            raise ServiceUnavailable(self.service_name, f"{operation} failed: {e}") from e

    # ------------------------------------------------------------------
    # Blocking implementations
    # ------------------------------------------------------------------

    def _upsert_sync(self, records: list[tuple[int, list[float], dict[str, Any]]]) -> None:
        from qdrant_client.models import PointStruct

        total_batches = (len(records) + UPSERT_BATCH_SIZE - 1) // UPSERT_BATCH_SIZE
        for i in range(0, len(records), UPSERT_BATCH_SIZE):
            batch = records[i:i + UPSERT_BATCH_SIZE]
            self._client.upsert(
                collection_name=self.collection,
                points=[
                    PointStruct(id=int(point_id), vector=list(vector), payload=metadata)
                    for point_id, vector, metadata in batch
                ],
            )
            logger.debug("Upserted batch %d/%d", i // UPSERT_BATCH_SIZE + 1, total_batches)

    def _query_sync(
        self, vector: list[float], top_k: int, filter: dict[str, Any] | None
    ) -> list[IndexHit]:
        response = self._client.query_points(
            collection_name=self.collection,
            query=list(vector),
            limit=top_k,
            query_filter=_build_filter(filter),
            with_payload=True,
        )
        return [
            IndexHit(id=point.id, score=float(point.score), metadata=point.payload or {})
            for point in response.points
        ]

    def _delete_all_sync(self) -> None:
        self._client.delete_collection(collection_name=self.collection)
        self._create_collection()

    def _stats_sync(self) -> IndexStats:
        count = self._client.count(collection_name=self.collection, exact=True).count
        info = self._client.get_collection(collection_name=self.collection)
        vectors = info.config.params.vectors
        return IndexStats(count=count, dimension=getattr(vectors, "size", self.dimension))

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def _check_dimension(self, vector: list[float]) -> None:
        if len(vector) != self.dimension:
            raise DimensionMismatch(len(vector), self.dimension)

    async def upsert(self, point_id: int, vector: list[float], metadata: dict[str, Any]) -> None:
        await self.upsert_many([(point_id, vector, metadata)])

    async def upsert_many(self, records: list[tuple[int, list[float], dict[str, Any]]]) -> None:
        for _, vector, _ in records:
            self._check_dimension(vector)
        await self._call("upsert", self._upsert_sync, records)

    async def query(
        self, vector: list[float], top_k: int, filter: dict[str, Any] | None = None
    ) -> list[IndexHit]:
        self._check_dimension(vector)
        return await self._call("query", self._query_sync, vector, top_k, filter)

    async def delete_all(self) -> None:
        await self._call("delete_all", self._delete_all_sync)
        logger.info("All vectors deleted from collection %s", self.collection)

    async def stats(self) -> IndexStats:
        return await self._call("stats", self._stats_sync)


def _build_filter(filter: dict[str, Any] | None):
    """Equality / inclusion predicate over payload fields."""
    if not filter:
        return None
    from qdrant_client.models import FieldCondition, Filter, MatchAny, MatchValue

    conditions = []
    for key, value in filter.items():
        if isinstance(value, (list, tuple, set)):
            conditions.append(FieldCondition(key=key, match=MatchAny(any=list(value))))
        else:
            conditions.append(FieldCondition(key=key, match=MatchValue(value=value)))
    return Filter(must=conditions)
