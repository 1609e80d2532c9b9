# tests/test_regex_searcher.py
"""Tests for the regex (pattern) tool searcher."""

from unittest.mock import patch

import pytest

from toolseeker.models import SearchRequest, SearchType, ToolReference
from toolseeker.searchers.regex_searcher import (
    MATCH_ALL_PATTERN,
    MAX_PATTERN_LENGTH,
    RegexToolSearcher,
    convert_query_to_pattern,
)


@pytest.fixture
def searcher():
    s = RegexToolSearcher()
    s.index_tool("s1", ToolReference("getWeather", "Get the current weather for a city"))
    s.index_tool("s1", ToolReference("listOrders", "List orders, including weather related delays"))
    s.index_tool("s1", ToolReference("currentTime", "Get the current time"))
    yield s
    s.close()


class TestConvertQueryToPattern:
    """Query to pattern conversion."""

    def test_basic_query(self):
        assert convert_query_to_pattern("weather tools") == "(?i)(weather|tools)"

    def test_stop_words_removed(self):
        assert convert_query_to_pattern("get the weather for a city") == "(?i)(get|weather|city)"

    def test_falls_back_to_unfiltered_tokens(self):
        """Only stop words left: use them rather than matching everything."""
        assert convert_query_to_pattern("the a of") == "(?i)(the|a|of)"

    def test_blank_query_matches_everything(self):
        assert convert_query_to_pattern("") == MATCH_ALL_PATTERN
        assert convert_query_to_pattern("   ") == MATCH_ALL_PATTERN
        assert convert_query_to_pattern(None) == MATCH_ALL_PATTERN

    def test_duplicates_removed(self):
        assert convert_query_to_pattern("weather Weather WEATHER") == "(?i)(weather)"

    def test_metacharacters_escaped(self):
        assert convert_query_to_pattern("c++ compiler") == r"(?i)(c\+\+|compiler)"

    def test_pattern_length_bounded(self):
        query = " ".join(f"keyword{i}" for i in range(100))
        pattern = convert_query_to_pattern(query)
        assert len(pattern) <= MAX_PATTERN_LENGTH
        assert pattern.startswith("(?i)(keyword0|keyword1|")


class TestRegexToolSearcher:
    """Indexing, ranking and session handling."""

    def test_search_type(self, searcher):
        assert searcher.search_type() == SearchType.REGEX

    def test_name_match_ranks_first(self, searcher):
        response = searcher.search(SearchRequest(session_id="s1", query="weather"))
        assert response.tool_names() == ["getWeather", "listOrders"]
        assert response.total_matches == 2
        scores = [r.relevance_score for r in response.tool_references]
        assert scores[0] > scores[1] > 0

    def test_metadata_populated(self, searcher):
        response = searcher.search(SearchRequest(session_id="s1", query="weather"))
        assert response.search_metadata.search_type == SearchType.REGEX
        assert response.search_metadata.query == "weather"
        assert response.search_metadata.search_time_ms is not None

    def test_max_results_truncates(self, searcher):
        response = searcher.search(SearchRequest(session_id="s1", query="weather", max_results=1))
        assert response.tool_names() == ["getWeather"]

    def test_no_match_returns_empty(self, searcher):
        response = searcher.search(SearchRequest(session_id="s1", query="database migration"))
        assert response.tool_references == []
        assert response.total_matches == 0

    def test_blank_query_returns_all_tools(self, searcher):
        response = searcher.search(SearchRequest(session_id="s1", query=""))
        assert set(response.tool_names()) == {"getWeather", "listOrders", "currentTime"}

    def test_sessions_isolated(self, searcher):
        searcher.index_tool("s2", ToolReference("weatherAlerts", "Severe weather alerts"))

        s1 = searcher.search(SearchRequest(session_id="s1", query="weather"))
        s2 = searcher.search(SearchRequest(session_id="s2", query="weather"))

        assert "weatherAlerts" not in s1.tool_names()
        assert s2.tool_names() == ["weatherAlerts"]

    def test_unknown_session_returns_empty(self, searcher):
        response = searcher.search(SearchRequest(session_id="nobody", query="weather"))
        assert response.tool_references == []

    def test_blank_session_id_returns_empty(self, searcher):
        response = searcher.search(SearchRequest(session_id=" ", query="weather"))
        assert response.tool_references == []

    def test_blank_session_id_not_indexed(self, searcher):
        before = searcher.total_size()
        searcher.index_tool("", ToolReference("orphan", "never stored"))
        assert searcher.total_size() == before

    def test_clear_index_is_idempotent(self, searcher):
        searcher.clear_index("s1")
        searcher.clear_index("s1")
        searcher.clear_index("never-existed")

        assert searcher.size("s1") == 0
        assert searcher.search(SearchRequest(session_id="s1", query="weather")).tool_references == []

    def test_duplicate_index_creates_two_entries(self):
        searcher = RegexToolSearcher()
        searcher.index_tool("s1", ToolReference("getWeather", "weather"))
        searcher.index_tool("s1", ToolReference("getWeather", "weather"))

        assert searcher.size("s1") == 2
        response = searcher.search(SearchRequest(session_id="s1", query="weather"))
        assert response.tool_names() == ["getWeather", "getWeather"]

    def test_invalid_pattern_returns_empty_with_metadata(self, searcher):
        with patch(
            "toolseeker.searchers.regex_searcher.convert_query_to_pattern",
            return_value="(?i)(unclosed",
        ):
            response = searcher.search(SearchRequest(session_id="s1", query="weather"))

        assert response.tool_references == []
        assert response.search_metadata is not None
        assert response.search_metadata.query == "weather"

    def test_is_valid_pattern(self):
        assert RegexToolSearcher.is_valid_pattern("(?i)(weather)")
        assert not RegexToolSearcher.is_valid_pattern("(unclosed")
        assert not RegexToolSearcher.is_valid_pattern("")
        assert not RegexToolSearcher.is_valid_pattern("a" * (MAX_PATTERN_LENGTH + 1))

    def test_sizes(self, searcher):
        searcher.index_tool("s2", ToolReference("x", "y"))
        assert searcher.size("s1") == 3
        assert searcher.size("s2") == 1
        assert searcher.total_size() == 4
