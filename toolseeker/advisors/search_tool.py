"""
The synthetic tool search tool exposed to the model by ToolSearchAdvisor.

The model calls it with a natural-language query; it answers with a JSON array
of matching tool names. The advisor later reads those arrays back out of the
conversation to decide which tools to expose.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ..errors import SearchPayloadError
from ..models import SearchRequest, ToolDefinition
from ..searchers.base import ToolSearcher
from .base import SESSION_ID_KEY

logger = logging.getLogger(__name__)

TOOL_SEARCH_TOOL_NAME = "toolSearchTool"

DEFAULT_TOOL_MAX_RESULTS = 5
MIN_TOOL_MAX_RESULTS = 1
MAX_TOOL_MAX_RESULTS = 10

TOOL_SEARCH_DESCRIPTION = (
    "Search for tools in the tool registry to discover capabilities for completing the current task. "
    "Use this when you need functionality not provided by your currently available tools. "
    "The search queries against tool names, descriptions, and parameter information to find the most "
    "relevant tools. Returns references to matching tools which will be expanded into full definitions "
    "you can then invoke."
)

TOOL_SEARCH_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "query": {
            "type": "string",
            "description": (
                "A natural language search query describing the tool capability you need. "
                "Be specific and include relevant keywords."
            ),
        },
        "maxResults": {
            "type": "integer",
            "minimum": MIN_TOOL_MAX_RESULTS,
            "maximum": MAX_TOOL_MAX_RESULTS,
            "description": "Maximum number of tool references to return (1-10). Default is 5.",
        },
        "categoryFilter": {
            "type": "string",
            "description": "Optional filter to narrow search to a specific tool category.",
        },
    },
    "required": ["query"],
}


def _clamp_max_results(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return DEFAULT_TOOL_MAX_RESULTS
    try:
        requested = int(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-integer maxResults: {value!r}")
        return DEFAULT_TOOL_MAX_RESULTS
    return max(MIN_TOOL_MAX_RESULTS, min(MAX_TOOL_MAX_RESULTS, requested))


class ToolSearchTool:
    """
    ToolCallback that searches the conversation's catalog.

    Args:
        searcher: Backend holding the indexed catalog.
        max_results: Configured default; when set it overrides the
                     model-supplied maxResults.
    """

    def __init__(self, searcher: ToolSearcher, max_results: Optional[int] = None):
        self.searcher = searcher
        self.max_results = max_results
        self._definition = ToolDefinition(
            name=TOOL_SEARCH_TOOL_NAME,
            description=TOOL_SEARCH_DESCRIPTION,
            input_schema=TOOL_SEARCH_SCHEMA,
        )

    @property
    def definition(self) -> ToolDefinition:
        return self._definition

    def call(self, arguments: Dict[str, Any], tool_context: Optional[Dict[str, Any]] = None) -> List[str]:
        """Return the names of the tools matching arguments["query"]."""
        session_id = (tool_context or {}).get(SESSION_ID_KEY)
        if not session_id:
            logger.warning("Tool search called without a session id in the tool context")
            return []

        max_results = self.max_results if self.max_results is not None else _clamp_max_results(
            arguments.get("maxResults")
        )
        response = self.searcher.search(SearchRequest(
            session_id=str(session_id),
            query=str(arguments.get("query") or ""),
            max_results=max_results,
            category_filter=arguments.get("categoryFilter"),
        ))
        names = response.tool_names()
        logger.debug(f"Tool search {arguments.get('query')!r} matched {names}")
        return names

    def __repr__(self) -> str:
        return f"ToolSearchTool(searcher={self.searcher!r})"


def is_search_tool_response(name: str) -> bool:
    return name.lower() == TOOL_SEARCH_TOOL_NAME.lower()


def parse_tool_names(payload: str) -> List[str]:
    """
    Parse a tool search response payload into tool names.

    Raises:
        SearchPayloadError: If the payload is not a JSON array of strings.
    """
    try:
        value = json.loads(payload)
    except (TypeError, ValueError) as e:
        raise SearchPayloadError(str(payload), f"not JSON: {e}") from e
    if not isinstance(value, list):
        raise SearchPayloadError(payload, f"expected array, got {type(value).__name__}")
    if not all(isinstance(item, str) for item in value):
        raise SearchPayloadError(payload, "array items must be strings")
    return value
