import os
from pydantic_settings import BaseSettings


def _parse_cors_origins() -> list[str] | None:
    """Parse CORS_ORIGINS env var as comma-separated string or JSON list."""
    raw = os.environ.get("CORS_ORIGINS")
    if not raw:
        return None
    if raw.startswith("["):
        import json
        return json.loads(raw)
    return [o.strip() for o in raw.split(",") if o.strip()]


class Settings(BaseSettings):
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    debug: bool = False
    log_level: str = "INFO"

    # Embedding provider (sentence-transformers)
    embedding_model: str = "TechWolf/JobBERT-v2"
    embedding_dimension: int = 1024
    embedding_batch_size: int = 10
    embedding_batch_delay_seconds: float = 1.0

    # Vector index (Qdrant). ":memory:" runs the client's local mode.
    vector_search_enabled: bool = False
    qdrant_url: str = ":memory:"
    qdrant_api_key: str = ""
    qdrant_collection: str = "jobs"

    # Matching pipeline
    ai_filter_enabled: bool = True
    mmr_lambda: float = 0.7
    default_match_limit: int = 5
    max_match_limit: int = 20
    retrieval_min_score: float = 0.0
    external_timeout_seconds: float = 15.0
    match_rate_limit: str = "30/minute"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "protected_namespaces": ("settings_",)}


_cors_override = _parse_cors_origins()
settings = Settings(**{"cors_origins": _cors_override} if _cors_override else {})
