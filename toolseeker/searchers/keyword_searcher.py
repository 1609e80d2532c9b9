# toolseeker/searchers/keyword_searcher.py
"""
Keyword Tool Searcher - BM25 inverted-index search per session.

Each session owns an isolated index with two sides:
- write side: documents added since the last commit
- read side: an immutable BM25 snapshot over committed documents

A search commits pending documents and reopens the read side only when
something changed since it was last opened, so a session always reads its
own writes without paying the rebuild cost on every query.

Scoring follows a "phrase OR terms" query over the analyzed name and
description:
- term clause: sum of the BM25+ scores of the query terms a document
  contains; terms it lacks add nothing
- phrase clause: documents containing the query tokens contiguously score
  the same amount again
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence, Tuple

import numpy as np
from rank_bm25 import BM25Plus

from ..errors import IndexStorageError
from ..models import SearchRequest, SearchResponse, SearchType, ToolReference
from ..sessions import SessionRegistry, next_entry_id
from .analysis import analyze, analyze_name, contains_phrase
from .base import ToolSearcher

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 0.25


@dataclass(frozen=True)
class _Document:
    entry_id: int
    tool_name: str
    tool_description: str
    name_tokens: Tuple[str, ...]
    description_tokens: Tuple[str, ...]

    @property
    def terms(self) -> List[str]:
        return list(self.name_tokens) + list(self.description_tokens)

    @property
    def term_set(self) -> FrozenSet[str]:
        return frozenset(self.name_tokens) | frozenset(self.description_tokens)


class _IndexReader:
    """Point-in-time BM25 view over committed documents."""

    def __init__(self, documents: List[_Document], k1: float, b: float, delta: float):
        self.documents = documents
        corpus = [doc.terms for doc in documents]
        # BM25 needs at least one non-empty document for its length normalization
        self._bm25: Optional[BM25Plus] = None
        if any(corpus):
            self._bm25 = BM25Plus(corpus, k1=k1, b=b, delta=delta)

    def search(self, query_tokens: Sequence[str], max_results: int) -> List[Tuple[float, _Document]]:
        if self._bm25 is None or not query_tokens:
            return []

        query_set = set(query_tokens)
        term_scores = self._matched_term_scores(query_tokens)

        hits: List[Tuple[float, _Document]] = []
        for i, doc in enumerate(self.documents):
            if not query_set & doc.term_set:
                continue
            score = float(term_scores[i])
            if contains_phrase(doc.name_tokens, query_tokens) or contains_phrase(doc.description_tokens, query_tokens):
                score += float(term_scores[i])
            hits.append((score, doc))

        hits.sort(key=lambda h: h[0], reverse=True)
        return hits[:max_results]

    def _matched_term_scores(self, query_tokens: Sequence[str]) -> np.ndarray:
        # Only the terms a document contains add to its score
        scores = np.zeros(len(self.documents))
        for term in query_tokens:
            present = np.array([term in doc.term_set for doc in self.documents], dtype=float)
            scores += np.asarray(self._bm25.get_scores([term]), dtype=float) * present
        return scores

    def __len__(self) -> int:
        return len(self.documents)


class _KeywordSessionIndex:
    """Write side and read side of one session's index."""

    def __init__(self, session_id: str, k1: float, b: float, delta: float):
        self.session_id = session_id
        self._k1 = k1
        self._b = b
        self._delta = delta
        self._pending: List[_Document] = []
        self._committed: List[_Document] = []
        self._reader: Optional[_IndexReader] = None
        self._changed = False
        self._closed = False
        self._lock = threading.Lock()

    def add(self, doc: _Document) -> None:
        with self._lock:
            if self._closed:
                logger.debug(f"Index for session '{self.session_id}' is closed, dropping '{doc.tool_name}'")
                return
            self._pending.append(doc)

    def delete(self, entry_id: int) -> bool:
        with self._lock:
            before = len(self._pending) + len(self._committed)
            self._pending = [d for d in self._pending if d.entry_id != entry_id]
            self._committed = [d for d in self._committed if d.entry_id != entry_id]
            removed = before != len(self._pending) + len(self._committed)
            if removed:
                self._changed = True
            return removed

    def commit(self) -> None:
        with self._lock:
            self._commit_locked()

    def _commit_locked(self) -> None:
        if self._pending:
            self._committed.extend(self._pending)
            self._pending = []
            self._changed = True

    def _open_reader_locked(self) -> Optional[_IndexReader]:
        """Commit, then reopen the reader only if the index changed."""
        if self._closed:
            return None
        try:
            self._commit_locked()
            if self._reader is None or self._changed:
                self._reader = _IndexReader(list(self._committed), self._k1, self._b, self._delta)
                self._changed = False
        except Exception as e:
            raise IndexStorageError(self.session_id, "open reader for", e) from e
        return self._reader

    def search(self, query_tokens: Sequence[str], max_results: int) -> List[Tuple[float, _Document]]:
        with self._lock:
            reader = self._open_reader_locked()
        if reader is None:
            return []
        return reader.search(query_tokens, max_results)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._pending = []
            self._committed = []
            self._reader = None

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending) + len(self._committed)


class KeywordToolSearcher(ToolSearcher):
    """
    BM25 keyword searcher with one isolated index per session.

    Args:
        min_score_threshold: Results scoring below this are discarded.
        k1: BM25 term frequency saturation.
        b: BM25 document length normalization.
        delta: BM25+ lower bound for a matching term.
    """

    def __init__(
        self,
        min_score_threshold: float = DEFAULT_MIN_SCORE,
        k1: float = 1.5,
        b: float = 0.75,
        delta: float = 1.0,
    ):
        self.min_score_threshold = min_score_threshold
        self._sessions: SessionRegistry[_KeywordSessionIndex] = SessionRegistry(
            factory=lambda session_id: _KeywordSessionIndex(session_id, k1, b, delta),
            on_remove=lambda session_id, index: index.close(),
            name="keyword index",
        )

    def search_type(self) -> SearchType:
        return SearchType.KEYWORD

    def index_tool(self, session_id: str, tool_reference: ToolReference) -> None:
        self.add(session_id, next_entry_id(), tool_reference.tool_name, tool_reference.summary or "")

    def add(self, session_id: str, entry_id: int, tool_name: str, tool_description: str) -> None:
        """Add a single tool document to the index of *session_id*."""
        if not session_id:
            logger.warning(f"No session id for tool '{tool_name}', not indexed")
            return
        doc = _Document(
            entry_id=entry_id,
            tool_name=tool_name,
            tool_description=tool_description,
            name_tokens=tuple(analyze_name(tool_name)),
            description_tokens=tuple(analyze(tool_description)),
        )
        self._sessions.get_or_create(session_id).add(doc)

    def commit(self, session_id: Optional[str] = None) -> None:
        """Commit pending documents for one session, or for all sessions when None."""
        if session_id is None:
            indexes = self._sessions.values()
        else:
            index = self._sessions.get(session_id)
            indexes = [index] if index is not None else []
        for index in indexes:
            try:
                index.commit()
            except Exception as e:
                raise IndexStorageError(index.session_id, "commit", e) from e

    def search(self, request: SearchRequest) -> SearchResponse:
        if not request.session_id or not request.session_id.strip():
            logger.warning("No session id in SearchRequest, returning empty results")
            return SearchResponse.empty()

        index = self._sessions.get(request.session_id)
        if index is None:
            logger.debug(f"No index found for session: {request.session_id}")
            return SearchResponse.empty()

        started = time.perf_counter()
        query_tokens = analyze(request.query)
        hits = index.search(query_tokens, self._max_results(request))

        references = []
        for score, doc in hits:
            logger.debug(f"Score for '{doc.tool_name}': {score:.4f}")
            if score >= self.min_score_threshold:
                references.append(ToolReference(
                    tool_name=doc.tool_name,
                    summary=doc.tool_description,
                    relevance_score=score,
                ))

        return SearchResponse(
            tool_references=references,
            total_matches=len(references),
            search_metadata=self._metadata(request.query, started),
        )

    def delete(self, session_id: str, entry_id: int) -> bool:
        """Remove one document by entry id. Returns True if it existed."""
        index = self._sessions.get(session_id)
        return index.delete(entry_id) if index is not None else False

    def clear_index(self, session_id: str) -> None:
        if self._sessions.remove(session_id) is not None:
            logger.debug(f"Cleared index for session: {session_id}")

    def size(self, session_id: str) -> int:
        index = self._sessions.get(session_id)
        return len(index) if index is not None else 0

    def total_size(self) -> int:
        return sum(len(index) for index in self._sessions.values())

    def close(self) -> None:
        self._sessions.clear()
        logger.debug("Closed KeywordToolSearcher and released all session indexes")
