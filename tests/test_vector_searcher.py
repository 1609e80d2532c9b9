# tests/test_vector_searcher.py
"""Tests for the semantic tool searcher against an in-memory Qdrant store."""

import re
import zlib
from unittest.mock import MagicMock

import numpy as np
import pytest

from toolseeker.models import SearchRequest, SearchType, ToolReference
from toolseeker.searchers.embeddings import Embedder, SentenceTransformerEmbedder
from toolseeker.searchers.vector_searcher import VectorToolSearcher
from toolseeker.searchers.vector_store import SharedVectorStore


class HashingEmbedder:
    """Deterministic bag-of-words embedder: identical text gives identical vectors."""

    def __init__(self, dimension: int = 64):
        self.dimension = dimension

    def _vector(self, text):
        vector = np.zeros(self.dimension)
        for token in re.findall(r"\w+", text.lower()):
            vector[zlib.crc32(token.encode()) % self.dimension] += 1.0
        norm = np.linalg.norm(vector)
        return (vector / norm).tolist() if norm else vector.tolist()

    def embed_document(self, text):
        return self._vector(text)

    def embed_query(self, text):
        return self._vector(text)


@pytest.fixture
def store():
    s = SharedVectorStore(location=":memory:", collection_name="test_tools")
    yield s
    s.close()


@pytest.fixture
def searcher(store):
    s = VectorToolSearcher(embedder=HashingEmbedder(), store=store)
    s.index_tool("s1", ToolReference("getWeather", "Get the current weather for a city"))
    s.index_tool("s1", ToolReference("listOrders", "List all orders placed by a customer"))
    return s


def search(searcher, query, session_id="s1", **kwargs):
    return searcher.search(SearchRequest(session_id=session_id, query=query, **kwargs))


class TestVectorToolSearcher:
    """Semantic search over a store shared by all sessions."""

    def test_search_type(self, searcher):
        assert searcher.search_type() == SearchType.SEMANTIC

    def test_identical_text_is_top_match(self, searcher):
        response = search(searcher, "Get the current weather for a city")
        assert response.tool_names()[0] == "getWeather"
        assert response.tool_references[0].relevance_score == pytest.approx(1.0, abs=1e-4)
        assert response.tool_references[0].summary == "Get the current weather for a city"

    def test_sessions_isolated_in_shared_store(self, searcher, store):
        searcher.index_tool("s2", ToolReference("weatherAlerts", "Get the current weather for a city"))

        s1 = search(searcher, "Get the current weather for a city", "s1")
        s2 = search(searcher, "Get the current weather for a city", "s2")

        assert "weatherAlerts" not in s1.tool_names()
        assert s2.tool_names() == ["weatherAlerts"]
        assert store.count() == 3

    def test_session_without_entries_skips_store(self, searcher):
        searcher.store = MagicMock(wraps=searcher.store)
        response = search(searcher, "weather", "nobody")

        assert response.tool_references == []
        searcher.store.query.assert_not_called()

    def test_blank_session_returns_empty(self, searcher):
        assert search(searcher, "weather", "").tool_references == []

    def test_max_results_truncates(self, searcher):
        searcher.index_tool("s1", ToolReference("getForecast", "Get the weather forecast for a city"))
        response = search(searcher, "Get the current weather for a city", max_results=1)
        assert len(response.tool_references) == 1

    def test_clear_index_deletes_points(self, searcher, store):
        searcher.index_tool("s2", ToolReference("other", "Something else entirely"))

        searcher.clear_index("s1")
        searcher.clear_index("s1")

        assert searcher.size("s1") == 0
        assert store.count() == 1
        assert search(searcher, "Get the current weather for a city").tool_references == []

    def test_tool_without_summary_is_searchable(self, store):
        searcher = VectorToolSearcher(embedder=HashingEmbedder(), store=store)
        searcher.index_tool("s1", ToolReference("weather"))
        assert search(searcher, "weather").tool_names() == ["weather"]

    def test_delete_single_entry(self, store):
        searcher = VectorToolSearcher(embedder=HashingEmbedder(), store=store)
        searcher.add("s1", 777, "getWeather", "Get the weather")
        searcher._session_ids["s1"] = [777]

        assert searcher.delete("s1", 777)
        assert not searcher.delete("s1", 777)
        assert store.count() == 0

    def test_close_keeps_shared_store_open(self, searcher, store):
        searcher.close()
        assert searcher.total_size() == 0
        assert store.count() == 0


class TestSharedVectorStore:
    """Collection management."""

    def test_empty_store(self, store):
        assert store.dimension is None
        assert store.count() == 0
        assert store.query([1.0, 0.0], limit=5) == []

    def test_dimension_change_recreates_collection(self, store):
        store.upsert(1, [1.0, 0.0, 0.0], {"session_id": "s1"})
        store._dimension = None
        store.upsert(2, [1.0, 0.0, 0.0, 0.0], {"session_id": "s1"})

        assert store.dimension == 4
        assert store.count() == 1


class TestSentenceTransformerEmbedder:
    """Lazy model loading."""

    def test_protocol(self):
        assert isinstance(HashingEmbedder(), Embedder)
        assert isinstance(SentenceTransformerEmbedder(model=MagicMock()), Embedder)

    def test_uses_injected_model(self):
        model = MagicMock()
        model.encode.return_value = np.array([0.5, 0.25], dtype=np.float32)
        embedder = SentenceTransformerEmbedder(model_name="unused", model=model)

        assert embedder.embed_query("hello") == [0.5, 0.25]
        model.encode.assert_called_once_with("hello", convert_to_numpy=True)
