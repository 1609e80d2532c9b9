"""
MCP interop: tool catalogs from MCP servers, and the search tool as an MCP tool.

An MCP client lists tools as mcp.types.Tool; McpToolCallback wraps one of them
together with a function that performs the actual tools/call, so MCP tools can
be indexed and exposed by the advisors like any other ToolCallback.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from mcp import types as mt

from .advisors.search_tool import ToolSearchTool
from .models import ToolDefinition

logger = logging.getLogger(__name__)

# (tool name, arguments) -> result
McpCallFunction = Callable[[str, Dict[str, Any]], Any]


def definition_from_mcp_tool(tool: mt.Tool) -> ToolDefinition:
    """Convert an MCP tool listing into a ToolDefinition."""
    return ToolDefinition(
        name=tool.name,
        description=tool.description or "",
        input_schema=dict(tool.inputSchema or {"type": "object", "properties": {}}),
    )


def to_mcp_tool(definition: ToolDefinition) -> mt.Tool:
    """Convert a ToolDefinition into an MCP tool listing."""
    return mt.Tool(
        name=definition.name,
        description=definition.description,
        inputSchema=dict(definition.input_schema),
    )


def search_tool_as_mcp(search_tool: ToolSearchTool) -> mt.Tool:
    """The tool search tool, ready to be listed by an MCP server."""
    return to_mcp_tool(search_tool.definition)


def _content_to_result(result: mt.CallToolResult) -> Any:
    if result.structuredContent is not None:
        return result.structuredContent
    texts = [block.text for block in result.content if isinstance(block, mt.TextContent)]
    return "\n".join(texts)


class McpToolCallback:
    """
    ToolCallback for a tool served by an MCP server.

    Args:
        tool: The tool as listed by the server.
        call_function: Performs the tools/call request. May return a
                       CallToolResult, which is flattened to its structured
                       content or its text blocks.
    """

    def __init__(self, tool: mt.Tool, call_function: McpCallFunction):
        self.tool = tool
        self._call_function = call_function
        self._definition = definition_from_mcp_tool(tool)

    @property
    def definition(self) -> ToolDefinition:
        return self._definition

    def call(self, arguments: Dict[str, Any], tool_context: Optional[Dict[str, Any]] = None) -> Any:
        result = self._call_function(self.tool.name, arguments)
        if isinstance(result, mt.CallToolResult):
            if result.isError:
                logger.warning(f"MCP tool '{self.tool.name}' returned an error result")
            return _content_to_result(result)
        return result

    def __repr__(self) -> str:
        return f"McpToolCallback(name={self.tool.name!r})"


def callbacks_from_mcp_tools(tools: Iterable[mt.Tool], call_function: McpCallFunction) -> List[McpToolCallback]:
    """Wrap every listed MCP tool as a callback sharing one call function."""
    return [McpToolCallback(tool, call_function) for tool in tools]
