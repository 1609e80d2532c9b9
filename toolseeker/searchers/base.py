"""ToolSearcher interface shared by all search backends."""

import time
from abc import ABC, abstractmethod
from typing import Optional

from ..models import SearchMetadata, SearchRequest, SearchResponse, SearchType, ToolReference

DEFAULT_MAX_RESULTS = 10


class ToolSearcher(ABC):
    """
    Searches and discovers tools on demand.

    Implementations provide different ranking strategies over a catalog that
    is registered per session. Sessions are isolated: a search never returns
    entries indexed under another session id.
    """

    @abstractmethod
    def search_type(self) -> SearchType:
        """Return the ranking strategy this searcher implements."""

    @abstractmethod
    def index_tool(self, session_id: str, tool_reference: ToolReference) -> None:
        """Register a tool in the index of *session_id*, creating the index if needed."""

    @abstractmethod
    def search(self, request: SearchRequest) -> SearchResponse:
        """Return the tools of request.session_id matching request.query."""

    @abstractmethod
    def clear_index(self, session_id: str) -> None:
        """Drop every tool indexed for *session_id*. Unknown sessions are a no-op."""

    def close(self) -> None:
        """Release all resources held by the searcher."""

    def __enter__(self) -> "ToolSearcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Helpers for implementations
    # ------------------------------------------------------------------

    def _metadata(self, query: str, started: Optional[float] = None) -> SearchMetadata:
        elapsed_ms = None
        if started is not None:
            elapsed_ms = int((time.perf_counter() - started) * 1000)
        return SearchMetadata(search_type=self.search_type(), query=query, search_time_ms=elapsed_ms)

    @staticmethod
    def _max_results(request: SearchRequest) -> int:
        return request.max_results if request.max_results is not None else DEFAULT_MAX_RESULTS

    def __repr__(self) -> str:
        return f"{type(self).__name__}(search_type={self.search_type().value})"
