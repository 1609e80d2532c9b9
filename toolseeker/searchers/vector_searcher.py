"""
Vector Tool Searcher - semantic search over tool summaries.

All sessions share one vector store. Every point carries its session id in the
payload and results are post-filtered to the requesting session, so a query
never returns another session's tools. Nearest neighbours are fetched across
the whole collection first, which means a busy store can crowd a session's
matches out of the candidate window (max_candidates).
"""

import logging
import threading
import time
from typing import Dict, List, Optional

from ..models import SearchRequest, SearchResponse, SearchType, ToolReference
from ..sessions import next_entry_id
from .base import ToolSearcher
from .embeddings import Embedder
from .vector_store import SharedVectorStore

logger = logging.getLogger(__name__)

PAYLOAD_ENTRY_ID = "entry_id"
PAYLOAD_SESSION_ID = "session_id"
PAYLOAD_TOOL_NAME = "tool_name"
PAYLOAD_TOOL_DESCRIPTION = "tool_description"

DEFAULT_MAX_CANDIDATES = 10
DEFAULT_SIMILARITY_THRESHOLD = 0.2


class VectorToolSearcher(ToolSearcher):
    """
    Semantic searcher backed by a shared Qdrant collection.

    Args:
        embedder: Produces document and query vectors.
        store: Shared vector store; an in-memory one is created if omitted.
        max_candidates: Nearest neighbours fetched before session filtering.
        similarity_threshold: Minimum cosine similarity (0.0 to 1.0).
        owns_store: Whether close() closes the store. Defaults to True only
                    when the store is created here.
    """

    def __init__(
        self,
        embedder: Embedder,
        store: Optional[SharedVectorStore] = None,
        max_candidates: int = DEFAULT_MAX_CANDIDATES,
        similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        owns_store: Optional[bool] = None,
    ):
        self.embedder = embedder
        self._owns_store = store is None if owns_store is None else owns_store
        self.store = store if store is not None else SharedVectorStore()
        self.max_candidates = max_candidates
        self.similarity_threshold = similarity_threshold
        self._session_ids: Dict[str, List[int]] = {}
        self._lock = threading.Lock()

    def search_type(self) -> SearchType:
        return SearchType.SEMANTIC

    def index_tool(self, session_id: str, tool_reference: ToolReference) -> None:
        if not session_id:
            logger.warning(f"No session id for tool '{tool_reference.tool_name}', not indexed")
            return
        entry_id = next_entry_id()
        self.add(session_id, entry_id, tool_reference.tool_name, tool_reference.summary or "")
        with self._lock:
            self._session_ids.setdefault(session_id, []).append(entry_id)

    def add(self, session_id: str, entry_id: int, tool_name: str, tool_description: str) -> None:
        """Embed and store a single tool; the description is the embedded text."""
        # A tool without a summary is embedded by its name
        vector = self.embedder.embed_document(tool_description or tool_name)
        self.store.upsert(entry_id, vector, {
            PAYLOAD_SESSION_ID: session_id,
            PAYLOAD_ENTRY_ID: entry_id,
            PAYLOAD_TOOL_NAME: tool_name,
            PAYLOAD_TOOL_DESCRIPTION: tool_description,
        })

    def search(self, request: SearchRequest) -> SearchResponse:
        if not request.session_id or not request.session_id.strip():
            logger.warning("No session id in SearchRequest, returning empty results")
            return SearchResponse.empty()

        with self._lock:
            has_entries = bool(self._session_ids.get(request.session_id))
        if not has_entries:
            logger.debug(f"No index found for session: {request.session_id}")
            return SearchResponse.empty()

        started = time.perf_counter()
        hits = self.store.query(
            self.embedder.embed_query(request.query),
            limit=self.max_candidates,
            score_threshold=self.similarity_threshold,
        )

        references = [
            ToolReference(
                tool_name=payload.get(PAYLOAD_TOOL_NAME, ""),
                summary=payload.get(PAYLOAD_TOOL_DESCRIPTION, ""),
                relevance_score=float(score),
            )
            for score, payload in hits
            if payload.get(PAYLOAD_SESSION_ID) == request.session_id
        ]
        if request.max_results is not None:
            references = references[:request.max_results]

        return SearchResponse(
            tool_references=references,
            total_matches=len(references),
            search_metadata=self._metadata(request.query, started),
        )

    def clear_index(self, session_id: str) -> None:
        with self._lock:
            entry_ids = self._session_ids.pop(session_id, None)
        if not entry_ids:
            logger.debug(f"No tools found for session: {session_id}")
            return
        self.store.delete(entry_ids)
        logger.info(f"Cleared {len(entry_ids)} tools for session: {session_id}")

    def delete(self, session_id: str, entry_id: int) -> bool:
        """Remove one tool by entry id. Returns True if it was recorded for the session."""
        with self._lock:
            entry_ids = self._session_ids.get(session_id)
            if not entry_ids or entry_id not in entry_ids:
                return False
            entry_ids.remove(entry_id)
        self.store.delete([entry_id])
        return True

    def size(self, session_id: str) -> int:
        with self._lock:
            return len(self._session_ids.get(session_id, ()))

    def total_size(self) -> int:
        with self._lock:
            return sum(len(ids) for ids in self._session_ids.values())

    def close(self) -> None:
        with self._lock:
            all_ids = [entry_id for ids in self._session_ids.values() for entry_id in ids]
            self._session_ids.clear()
        if self._owns_store:
            self.store.close()
        else:
            self.store.delete(all_ids)
        logger.debug("Closed VectorToolSearcher")
