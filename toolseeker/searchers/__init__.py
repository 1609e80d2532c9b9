"""
Tool search backends.

    regex    - pattern matching over names and descriptions
    keyword  - BM25 inverted index per session
    semantic - vector similarity over a shared Qdrant collection
"""

import logging
from typing import Optional

from ..config import Settings, settings
from ..errors import ConfigurationError
from .base import DEFAULT_MAX_RESULTS, ToolSearcher
from .embeddings import Embedder, SentenceTransformerEmbedder
from .keyword_searcher import KeywordToolSearcher
from .regex_searcher import RegexToolSearcher
from .vector_searcher import VectorToolSearcher
from .vector_store import SharedVectorStore

logger = logging.getLogger(__name__)

BACKENDS = ("regex", "keyword", "semantic")


def create_searcher(config: Optional[Settings] = None, embedder: Optional[Embedder] = None) -> ToolSearcher:
    """
    Build the searcher selected by config.search_backend.

    Args:
        config: Settings to read from. Defaults to the module-level settings.
        embedder: Embedder for the semantic backend. Defaults to a
                  SentenceTransformerEmbedder for config.embedding_model.

    Raises:
        ConfigurationError: If the backend name is unknown.
    """
    config = config or settings
    backend = config.search_backend

    if backend == "regex":
        searcher: ToolSearcher = RegexToolSearcher()
    elif backend == "keyword":
        searcher = KeywordToolSearcher(min_score_threshold=config.keyword_min_score)
    elif backend == "semantic":
        searcher = VectorToolSearcher(
            embedder=embedder or SentenceTransformerEmbedder(config.embedding_model),
            store=SharedVectorStore(config.qdrant_location, config.qdrant_collection),
            max_candidates=config.vector_max_candidates,
            similarity_threshold=config.vector_similarity_threshold,
            owns_store=True,
        )
    else:
        raise ConfigurationError("search_backend", backend, list(BACKENDS))

    logger.info(f"Using {searcher!r}")
    return searcher


__all__ = [
    "BACKENDS",
    "DEFAULT_MAX_RESULTS",
    "Embedder",
    "KeywordToolSearcher",
    "RegexToolSearcher",
    "SentenceTransformerEmbedder",
    "SharedVectorStore",
    "ToolSearcher",
    "VectorToolSearcher",
    "create_searcher",
]
