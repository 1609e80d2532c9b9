"""
Configuration for toolseeker.

All settings can be overridden with environment variables using the
TOOLSEEKER_ prefix (e.g. TOOLSEEKER_SEARCH_BACKEND=regex) or a local .env file.

Usage:
    from toolseeker.config import settings

    backend = settings.search_backend
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings for search backends and conversation advisors."""

    model_config = SettingsConfigDict(
        env_prefix="TOOLSEEKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # LOGGING
    # ==========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level for the toolseeker logger hierarchy",
    )
    structured_logs: bool = Field(
        default=False,
        description="Emit JSON log lines tagged with the active session id",
    )

    # ==========================================================================
    # SEARCH BACKENDS
    # ==========================================================================
    search_backend: Literal["regex", "keyword", "semantic"] = Field(
        default="keyword",
        description="Which ToolSearcher implementation create_searcher() builds",
    )
    keyword_min_score: float = Field(
        default=0.25,
        ge=0.0,
        description="Minimum BM25 score for keyword search results",
    )
    vector_max_candidates: int = Field(
        default=10,
        ge=1,
        description="Nearest-neighbour candidates fetched before session filtering",
    )
    vector_similarity_threshold: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Minimum cosine similarity for semantic search results",
    )
    embedding_model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="sentence-transformers model used by the default embedder",
    )
    qdrant_location: str = Field(
        default=":memory:",
        description="Qdrant location (':memory:' or a server URL)",
    )
    qdrant_collection: str = Field(
        default="tool_references",
        description="Name of the shared Qdrant collection",
    )

    # ==========================================================================
    # ADVISORS
    # ==========================================================================
    max_results: Optional[int] = Field(
        default=None,
        ge=1,
        le=10,
        description="Advisor-level max results; overrides the model-supplied value",
    )
    accumulate_references: bool = Field(
        default=True,
        description="Union tool references across all search results (False: latest only)",
    )
    system_prompt_suffix: Optional[str] = Field(
        default=None,
        description="Custom text appended to the system prompt by the discovery advisor",
    )
    advisor_order: int = Field(
        default=0,
        description="Relative position among other advisors (lower runs first)",
    )
    session_ttl_seconds: float = Field(
        default=3600.0,
        gt=0,
        description="Idle time after which an unfinished session is swept",
    )
    max_iterations: int = Field(
        default=10,
        ge=1,
        description="Model call cap for one conversation in ToolCallingLoop",
    )


settings = Settings()
