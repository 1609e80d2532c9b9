# tests/test_prompt_templates.py
"""Tests for the tool discovery system prompt text."""

from toolseeker.advisors.search_tool import TOOL_SEARCH_TOOL_NAME
from toolseeker.prompt_templates import (
    DEFAULT_SYSTEM_PROMPT_SUFFIX,
    TOOL_SEARCH_SECTIONS,
    tool_search_suffix,
)


class TestToolSearchSuffix:
    """System prompt text for tool discovery."""

    def test_default_suffix_names_search_tool(self):
        assert DEFAULT_SYSTEM_PROMPT_SUFFIX.startswith("\n\n")
        assert f"`{TOOL_SEARCH_TOOL_NAME}`" in DEFAULT_SYSTEM_PROMPT_SUFFIX

    def test_custom_tool_name(self):
        suffix = tool_search_suffix("findTools")
        assert "`findTools`" in suffix
        assert "toolSearchTool" not in suffix

    def test_sections_separated_by_blank_lines(self):
        suffix = tool_search_suffix("findTools")
        assert len(suffix.strip().split("\n\n")) == len(TOOL_SEARCH_SECTIONS)
        assert "{search_tool_name}" not in suffix
