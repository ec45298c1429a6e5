from pydantic import BaseModel

from models.schemas.filter_decision import RejectedMatch
from models.schemas.match_result import MatchResult


class MatchingStats(BaseModel):
    total_jobs: int = 0
    matches_found: int = 0
    avg_match_score: str = "-"  # e.g. "77%"
    processing_time: str = "0.00s"


class MatchesResponse(BaseModel):
    matches: list[MatchResult] = []
    stats: MatchingStats = MatchingStats()
    # Pipeline transparency fields
    degraded: bool = False
    scoring_method: str = "local_corpus"  # vector_retrieval | local_corpus | fallback
    filter_applied: bool = False
    filtered_out: list[RejectedMatch] = []


class VectorizeResponse(BaseModel):
    processed: int = 0
    failed_job_ids: list[int] = []
    upserted: int = 0


class IndexStatsResponse(BaseModel):
    enabled: bool = False
    count: int = 0
    dimension: int = 0
