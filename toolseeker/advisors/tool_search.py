# toolseeker/advisors/tool_search.py
"""
Tool Search Advisor - progressive tool disclosure.

Instead of sending the model every tool definition, the model starts with only
the tool search tool. Each turn, the tool names returned by earlier searches
are read back from the conversation and exposed next to the search tool:

    turn 1: [toolSearchTool]                     model searches "weather"
    turn 2: [toolSearchTool, getWeather]         model calls getWeather
    ...

With accumulate=True every name ever returned stays exposed; with
accumulate=False only the names from the latest search are exposed.
"""

import logging
from typing import Dict, List, Optional

from ..config import settings
from ..errors import ConfigurationError, SearchPayloadError
from ..logging_config import session_scope
from ..models import ChatRequest, Message, Role, ToolResponse
from ..prompt_templates import DEFAULT_SYSTEM_PROMPT_SUFFIX
from ..registry import ToolRegistry
from ..searchers.base import ToolSearcher
from .base import SESSION_ID_KEY, CatalogAdvisor
from .search_tool import (
    MAX_TOOL_MAX_RESULTS,
    MIN_TOOL_MAX_RESULTS,
    ToolSearchTool,
    is_search_tool_response,
    parse_tool_names,
)

logger = logging.getLogger(__name__)


def extract_tool_name_references(messages: List[Message], accumulate: bool = True) -> List[str]:
    """
    Tool names referenced by tool search responses in *messages*.

    Malformed payloads are logged and skipped. Names are returned once, in
    first-seen order.
    """
    responses: List[ToolResponse] = [
        response
        for message in messages if message.role == Role.TOOL
        for response in message.tool_responses
        if is_search_tool_response(response.name)
    ]
    if not responses:
        return []
    if not accumulate:
        responses = responses[-1:]

    names: Dict[str, None] = {}
    for response in responses:
        try:
            for name in parse_tool_names(response.response_data):
                names.setdefault(name, None)
        except SearchPayloadError as e:
            logger.warning(f"Skipping tool search response {response.id}: {e}")
    return list(names)


class ToolSearchAdvisor(CatalogAdvisor):
    """
    Exposes the tool search tool plus the tools it has discovered so far.

    Args:
        searcher: Search backend the catalog is indexed into.
        tool_registry: Host registry used to resolve tool definitions and names.
        max_results: Fixed result count for every search (1-10); overrides
                     the model-supplied maxResults.
        accumulate: Union names across all searches (False: latest only).
        system_prompt_suffix: Text appended to the system prompt.
        order: Position among advisors (lower runs first).
        session_ttl_seconds: Idle time after which unfinished sessions are swept.
    """

    def __init__(
        self,
        searcher: ToolSearcher,
        tool_registry: Optional[ToolRegistry] = None,
        max_results: Optional[int] = None,
        accumulate: Optional[bool] = None,
        system_prompt_suffix: Optional[str] = None,
        order: Optional[int] = None,
        session_ttl_seconds: Optional[float] = None,
    ):
        super().__init__(searcher, tool_registry, order=order, session_ttl_seconds=session_ttl_seconds)

        max_results = settings.max_results if max_results is None else max_results
        if max_results is not None and not MIN_TOOL_MAX_RESULTS <= max_results <= MAX_TOOL_MAX_RESULTS:
            raise ConfigurationError(
                "max_results", max_results,
                [str(n) for n in range(MIN_TOOL_MAX_RESULTS, MAX_TOOL_MAX_RESULTS + 1)],
            )

        self.accumulate = settings.accumulate_references if accumulate is None else accumulate
        suffix = system_prompt_suffix if system_prompt_suffix is not None else settings.system_prompt_suffix
        self.system_prompt_suffix = suffix if suffix and suffix.strip() else DEFAULT_SYSTEM_PROMPT_SUFFIX
        self.search_tool = ToolSearchTool(searcher, max_results=max_results)

    def on_conversation_start(self, request: ChatRequest) -> ChatRequest:
        if request.options is None:
            return request
        request = super().on_conversation_start(request)
        # Until something is discovered, the search tool is the only tool
        return request.mutate(
            system=request.system + self.system_prompt_suffix,
            options=self._expose(
                request.options,
                [self.search_tool],
                set(),
                {SESSION_ID_KEY: request.context[SESSION_ID_KEY]},
            ),
        )

    def before_model_call(self, request: ChatRequest) -> ChatRequest:
        session_id = self._session_of(request)
        if request.options is None or session_id is None:
            return request

        with session_scope(session_id):
            names = extract_tool_name_references(request.messages, self.accumulate)
            callbacks, bare_names = self._select(session_id, names)
            logger.debug(f"Exposing {len(callbacks) + len(bare_names)} discovered tools")

        exposed = self._expose(
            request.options,
            [self.search_tool] + callbacks,
            bare_names,
            {SESSION_ID_KEY: session_id},
        )
        return request.mutate(options=exposed)
