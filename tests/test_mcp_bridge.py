"""Tests for MCP interop."""

from mcp import types as mt

from toolseeker.advisors.search_tool import TOOL_SEARCH_TOOL_NAME, ToolSearchTool
from toolseeker.mcp_bridge import (
    McpToolCallback,
    callbacks_from_mcp_tools,
    definition_from_mcp_tool,
    search_tool_as_mcp,
    to_mcp_tool,
)
from toolseeker.models import ToolCallback, ToolDefinition
from toolseeker.searchers.regex_searcher import RegexToolSearcher

WEATHER_SCHEMA = {
    "type": "object",
    "properties": {"city": {"type": "string"}},
    "required": ["city"],
}


class TestConversions:
    """MCP tool listings and ToolDefinitions."""

    def test_definition_from_mcp_tool(self):
        tool = mt.Tool(name="getWeather", description="Weather for a city", inputSchema=WEATHER_SCHEMA)
        definition = definition_from_mcp_tool(tool)

        assert definition == ToolDefinition("getWeather", "Weather for a city", WEATHER_SCHEMA)

    def test_installed_tool_model_uses_camel_case_schema(self):
        """The bridge reads and writes Tool.inputSchema."""
        assert "inputSchema" in mt.Tool.model_fields

    def test_missing_description(self):
        tool = mt.Tool(name="ping", inputSchema={"type": "object"})
        assert definition_from_mcp_tool(tool).description == ""

    def test_to_mcp_tool(self):
        tool = to_mcp_tool(ToolDefinition("getWeather", "Weather", WEATHER_SCHEMA))
        assert isinstance(tool, mt.Tool)
        assert tool.inputSchema["required"] == ["city"]

    def test_search_tool_as_mcp(self):
        tool = search_tool_as_mcp(ToolSearchTool(RegexToolSearcher()))
        assert tool.name == TOOL_SEARCH_TOOL_NAME
        assert tool.inputSchema["required"] == ["query"]


class TestMcpToolCallback:
    """Calling tools served over MCP."""

    def test_flattens_text_content(self):
        calls = []

        def call_tool(name, arguments):
            calls.append((name, arguments))
            return mt.CallToolResult(content=[mt.TextContent(type="text", text="rain, 9C")])

        tool = mt.Tool(name="getWeather", description="Weather", inputSchema=WEATHER_SCHEMA)
        callback = McpToolCallback(tool, call_tool)

        assert isinstance(callback, ToolCallback)
        assert callback.call({"city": "Amsterdam"}) == "rain, 9C"
        assert calls == [("getWeather", {"city": "Amsterdam"})]

    def test_prefers_structured_content(self):
        def call_tool(name, arguments):
            return mt.CallToolResult(
                content=[mt.TextContent(type="text", text="ignored")],
                structuredContent={"temperature": 9},
            )

        tool = mt.Tool(name="getWeather", inputSchema=WEATHER_SCHEMA)
        assert McpToolCallback(tool, call_tool).call({"city": "x"}) == {"temperature": 9}

    def test_plain_results_passed_through(self):
        tools = [
            mt.Tool(name="a", inputSchema={"type": "object"}),
            mt.Tool(name="b", inputSchema={"type": "object"}),
        ]
        callbacks = callbacks_from_mcp_tools(tools, lambda name, arguments: f"called {name}")

        assert [cb.definition.name for cb in callbacks] == ["a", "b"]
        assert callbacks[1].call({}) == "called b"
