"""
Pre-Select Advisor - choose tools from the user's messages, no search tool.

Before every model call the text of all user messages is used as the search
query and exactly the matching tools are exposed. Nothing is carried over
between turns.
"""

import logging

from ..logging_config import session_scope
from ..models import ChatRequest, SearchRequest
from .base import CatalogAdvisor

logger = logging.getLogger(__name__)


class PreSelectAdvisor(CatalogAdvisor):
    """Exposes the tools matching the conversation's user messages."""

    def before_model_call(self, request: ChatRequest) -> ChatRequest:
        session_id = self._session_of(request)
        if request.options is None or session_id is None:
            return request

        query = "\n".join(m.content for m in request.user_messages())
        with session_scope(session_id):
            response = self.searcher.search(SearchRequest(session_id=session_id, query=query))
            callbacks, bare_names = self._select(session_id, response.tool_names())
            logger.debug(f"Pre-selected tools: {response.tool_names()}")

        return request.mutate(options=self._expose(request.options, callbacks, bare_names))
