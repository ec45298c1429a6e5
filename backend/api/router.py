from fastapi import APIRouter, Depends, HTTPException, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_embedder, get_orchestrator, get_store, get_vector_index
from config import settings
from models.requests import CreateJobRequest, CreateResumeRequest, VectorizeRequest
from models.responses import IndexStatsResponse, MatchesResponse, VectorizeResponse
from models.schemas.job import Job
from models.schemas.match_result import JobMatchRecord
from models.schemas.resume import Resume
from services.embeddings import EmbeddingProvider, vectorize_jobs
from services.errors import InvalidInput, ServiceUnavailable
from services.pipeline.orchestrator import MatchingOrchestrator
from services.store import InMemoryStore
from services.vector_index import VectorIndex

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "gemini_configured": bool(settings.gemini_api_key),
        "vector_search_enabled": settings.vector_search_enabled,
    }


# --- Jobs ---

@router.get("/jobs", response_model=list[Job])
async def list_jobs(
    q: str | None = Query(None, max_length=200),
    experience_level: str | None = None,
    work_type: str | None = None,
    store: InMemoryStore = Depends(get_store),
):
    return await store.search_jobs(q, experience_level, work_type)


@router.get("/jobs/{job_id}", response_model=Job)
async def get_job(job_id: int, store: InMemoryStore = Depends(get_store)):
    job = await store.get_job_by_id(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail=f"Job {job_id} not found")
    return job


@router.post("/jobs", response_model=Job, status_code=201)
async def create_job(body: CreateJobRequest, store: InMemoryStore = Depends(get_store)):
    try:
        return await store.create_job(body.model_dump())
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/jobs/vectorize", response_model=VectorizeResponse)
async def vectorize(
    body: VectorizeRequest,
    store: InMemoryStore = Depends(get_store),
    embedder: EmbeddingProvider = Depends(get_embedder),
    index: VectorIndex | None = Depends(get_vector_index),
):
    jobs = await store.get_all_jobs()
    if body.job_ids is not None:
        wanted = set(body.job_ids)
        jobs = [j for j in jobs if j.id in wanted]

    result = await vectorize_jobs(
        jobs,
        embedder,
        store,
        index=index,
        batch_size=settings.embedding_batch_size,
        delay_seconds=settings.embedding_batch_delay_seconds,
    )
    return VectorizeResponse(**result.model_dump())


# --- Resumes ---

@router.post("/resumes", response_model=Resume, status_code=201)
async def create_resume(body: CreateResumeRequest, store: InMemoryStore = Depends(get_store)):
    try:
        return await store.create_resume(body.model_dump(exclude_none=True))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/resumes/{resume_id}", response_model=Resume)
async def get_resume(resume_id: int, store: InMemoryStore = Depends(get_store)):
    resume = await store.get_resume_by_id(resume_id)
    if resume is None:
        raise HTTPException(status_code=404, detail=f"Resume {resume_id} not found")
    return resume


@router.post("/resumes/{resume_id}/matches", response_model=MatchesResponse)
@limiter.limit(settings.match_rate_limit)
async def find_matches(
    request: Request,
    resume_id: int,
    limit: int = Query(settings.default_match_limit, ge=1, le=settings.max_match_limit),
    industry: list[str] | None = Query(None),
    store: InMemoryStore = Depends(get_store),
    orchestrator: MatchingOrchestrator = Depends(get_orchestrator),
):
    if await store.get_resume_by_id(resume_id) is None:
        raise HTTPException(status_code=404, detail=f"Resume {resume_id} not found")
    try:
        return await orchestrator.find_matches(resume_id, limit=limit, industry_filter=industry)
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/resumes/{resume_id}/matches", response_model=list[JobMatchRecord])
async def list_matches(resume_id: int, store: InMemoryStore = Depends(get_store)):
    if await store.get_resume_by_id(resume_id) is None:
        raise HTTPException(status_code=404, detail=f"Resume {resume_id} not found")
    return await store.get_job_matches_by_resume_id(resume_id)


# --- Vector index ---

@router.get("/vector-index/stats", response_model=IndexStatsResponse)
async def index_stats(index: VectorIndex | None = Depends(get_vector_index)):
    if index is None:
        return IndexStatsResponse(enabled=False)
    try:
        stats = await index.stats()
    except ServiceUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return IndexStatsResponse(enabled=True, count=stats.count, dimension=stats.dimension)


@router.delete("/vector-index")
async def delete_index(index: VectorIndex | None = Depends(get_vector_index)):
    if index is None:
        raise HTTPException(status_code=404, detail="Vector search is not enabled")
    try:
        await index.delete_all()
    except ServiceUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"status": "deleted"}
