# toolseeker/searchers/regex_searcher.py
"""
Regex Tool Searcher - pattern matching over tool names and descriptions.

A natural-language query is turned into a case-insensitive alternation of its
meaningful words, e.g. "get the weather forecast" -> "(?i)(get|weather|forecast)".
Every tool of the session is scored against that pattern:

    score = 2 * name_matches + 1 / (1 + first_name_offset * 0.1)
          + 1 * description_matches + 0.5 / (1 + first_description_offset * 0.1)

Tools with a zero score are excluded.
"""

import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

from ..models import SearchRequest, SearchResponse, SearchType, ToolReference
from ..sessions import SessionRegistry, next_entry_id
from .base import ToolSearcher

logger = logging.getLogger(__name__)

MAX_PATTERN_LENGTH = 200
MATCH_ALL_PATTERN = ".*"

QUERY_DELIMITERS = re.compile(r"[\s,;:.!?()\[\]{}\"']+")

STOP_WORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being", "have",
    "has", "had", "do", "does", "did", "will", "would", "could", "should", "may",
    "might", "must", "shall", "can", "need", "dare", "ought", "used", "to", "of",
    "in", "for", "on", "with", "at", "by", "from", "as", "into", "through",
    "during", "before", "after", "above", "below", "between", "and", "or", "but",
    "if", "because", "until", "while", "although", "this", "that", "these",
    "those", "what", "which", "who", "whom", "whose", "i", "me", "my", "we",
    "our", "you", "your", "he", "him", "his", "she", "her", "it", "its", "they",
    "them", "their", "all", "any", "both", "each", "every", "some", "no", "not",
    "only", "just", "also", "very", "too", "so",
})


@dataclass(frozen=True)
class _ToolEntry:
    entry_id: int
    tool_name: str
    tool_description: str


class _PatternSessionIndex:
    """Tool entries registered for one session."""

    def __init__(self):
        self._entries: List[_ToolEntry] = []
        self._lock = threading.Lock()

    def add(self, entry: _ToolEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def snapshot(self) -> List[_ToolEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _build_pattern(tokens: List[str]) -> str:
    return "(?i)(" + "|".join(tokens) + ")"


def _dedupe(tokens: List[str]) -> List[str]:
    return list(dict.fromkeys(tokens))


def convert_query_to_pattern(query: Optional[str]) -> str:
    """
    Convert a natural-language query into a regex pattern.

    1. Lower-case and split on whitespace and punctuation
    2. Drop tokens shorter than 2 characters and English stop words
    3. Escape regex metacharacters and deduplicate
    4. Join as a case-insensitive alternation

    If filtering removes every token, the unfiltered tokens are used. A query
    with no tokens at all matches everything. Trailing tokens are dropped until
    the pattern fits MAX_PATTERN_LENGTH, keeping at least one token.

    Examples:
        "weather tools"      -> "(?i)(weather|tools)"
        "get user data"      -> "(?i)(get|user|data)"
        "the a of"           -> "(?i)(the|a|of)"
    """
    if not query or not query.strip():
        return MATCH_ALL_PATTERN

    raw_tokens = [t for t in QUERY_DELIMITERS.split(query.lower()) if t]

    tokens = _dedupe([
        re.escape(token) for token in raw_tokens
        if len(token) >= 2 and token not in STOP_WORDS
    ])
    if not tokens:
        tokens = _dedupe([re.escape(token) for token in raw_tokens])
    if not tokens:
        return MATCH_ALL_PATTERN

    pattern = _build_pattern(tokens)
    if len(pattern) > MAX_PATTERN_LENGTH:
        while len(pattern) > MAX_PATTERN_LENGTH and len(tokens) > 1:
            tokens.pop()
            pattern = _build_pattern(tokens)
        logger.debug(f"Pattern truncated to {len(tokens)} tokens to fit max length")
    return pattern


def _field_matches(pattern: "re.Pattern[str]", text: str) -> Tuple[int, int]:
    """Return (match count, earliest match offset) of *pattern* in *text*."""
    count = 0
    earliest = -1
    for match in pattern.finditer(text):
        count += 1
        if earliest < 0 or match.start() < earliest:
            earliest = match.start()
    return count, earliest


def calculate_match_score(pattern: "re.Pattern[str]", tool_name: str, tool_description: str) -> float:
    """Score one tool against a compiled pattern; 0.0 means no match."""
    score = 0.0

    name_count, name_pos = _field_matches(pattern, tool_name)
    if name_count > 0:
        score += 2.0 * name_count + 1.0 / (1.0 + name_pos * 0.1)

    desc_count, desc_pos = _field_matches(pattern, tool_description)
    if desc_count > 0:
        score += 1.0 * desc_count + 0.5 / (1.0 + desc_pos * 0.1)

    return score


class RegexToolSearcher(ToolSearcher):
    """
    Pattern-matching tool searcher with one in-memory entry list per session.

    Usage:
        searcher = RegexToolSearcher()
        searcher.index_tool("s1", ToolReference("getWeather", "Weather for a city"))
        searcher.search(SearchRequest(session_id="s1", query="weather"))
    """

    def __init__(self):
        self._sessions: SessionRegistry[_PatternSessionIndex] = SessionRegistry(
            factory=lambda session_id: _PatternSessionIndex(),
            on_remove=lambda session_id, index: index.clear(),
            name="regex index",
        )

    def search_type(self) -> SearchType:
        return SearchType.REGEX

    def index_tool(self, session_id: str, tool_reference: ToolReference) -> None:
        if not session_id:
            logger.warning(f"No session id for tool '{tool_reference.tool_name}', not indexed")
            return
        entry = _ToolEntry(
            entry_id=next_entry_id(),
            tool_name=tool_reference.tool_name,
            tool_description=tool_reference.summary or "",
        )
        self._sessions.get_or_create(session_id).add(entry)
        logger.debug(f"Added tool '{entry.tool_name}' to session '{session_id}' with id {entry.entry_id}")

    def search(self, request: SearchRequest) -> SearchResponse:
        if not request.session_id or not request.session_id.strip():
            logger.warning("No session id in SearchRequest, returning empty results")
            return SearchResponse.empty()

        index = self._sessions.get(request.session_id)
        if index is None:
            logger.debug(f"No index found for session: {request.session_id}")
            return SearchResponse.empty()

        pattern = convert_query_to_pattern(request.query)
        logger.debug(f"Converted query {request.query!r} to pattern {pattern!r}")
        return self._do_search(index, request.query, pattern, self._max_results(request))

    def _do_search(
        self,
        index: _PatternSessionIndex,
        query: str,
        pattern_text: str,
        max_results: int,
    ) -> SearchResponse:
        started = time.perf_counter()
        try:
            pattern = re.compile(pattern_text)
        except re.error as e:
            logger.error(f"Invalid regex pattern {pattern_text!r}: {e}")
            return SearchResponse.empty(self._metadata(query, started))

        matched: List[Tuple[float, _ToolEntry]] = []
        for entry in index.snapshot():
            score = calculate_match_score(pattern, entry.tool_name, entry.tool_description)
            if score > 0:
                matched.append((score, entry))

        # Stable: ties keep registration order
        matched.sort(key=lambda m: m[0], reverse=True)

        references = [
            ToolReference(tool_name=entry.tool_name, summary=entry.tool_description, relevance_score=score)
            for score, entry in matched[:max_results]
        ]
        return SearchResponse(
            tool_references=references,
            total_matches=len(references),
            search_metadata=self._metadata(query, started),
        )

    def clear_index(self, session_id: str) -> None:
        if self._sessions.remove(session_id) is not None:
            logger.debug(f"Cleared index for session: {session_id}")

    def size(self, session_id: str) -> int:
        """Number of tools indexed for *session_id* (0 if unknown)."""
        index = self._sessions.get(session_id)
        return len(index) if index is not None else 0

    def total_size(self) -> int:
        """Number of tools indexed across all sessions."""
        return sum(len(index) for index in self._sessions.values())

    @staticmethod
    def is_valid_pattern(pattern: Optional[str]) -> bool:
        """Check that *pattern* is non-blank, within MAX_PATTERN_LENGTH and compiles."""
        if not pattern or not pattern.strip() or len(pattern) > MAX_PATTERN_LENGTH:
            return False
        try:
            re.compile(pattern)
        except re.error:
            return False
        return True

    def close(self) -> None:
        self._sessions.clear()
        logger.debug("Closed RegexToolSearcher and cleared all session indexes")
