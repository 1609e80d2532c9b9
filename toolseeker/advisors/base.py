"""
Conversation advisors: hooks around a host's tool-calling loop.

A ConversationAdvisor sees a conversation at three points:

    on_conversation_start  once, before the first model call
    before_model_call      before every model call, may change the exposed tools
    on_conversation_end    once, always, even when the loop stops early

CatalogAdvisor implements the part shared by the discovery and pre-select
advisors: indexing the host catalog into a searcher under a per-conversation
session id, caching directly supplied callbacks, and tearing the session down.
"""

import logging
import secrets
from abc import ABC
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..config import settings
from ..logging_config import session_scope
from ..models import ChatRequest, ChatResponse, ToolCallback, ToolOptions, ToolReference
from ..registry import ToolRegistry
from ..searchers.base import ToolSearcher
from ..sessions import SessionRegistry

logger = logging.getLogger(__name__)

# Host-supplied conversation id (request context key)
CONVERSATION_ID_KEY = "conversation_id"

# Session id under which the catalog was indexed (request and tool context key)
SESSION_ID_KEY = "tool_search_session_id"

SWEEP_INTERVAL_SECONDS = 60.0


def resolve_session_id(context: Dict[str, object]) -> str:
    """Conversation id from *context*, or a fresh ``default-<random>`` id."""
    conversation_id = context.get(CONVERSATION_ID_KEY)
    if conversation_id is not None and str(conversation_id).strip():
        return str(conversation_id)
    return f"default-{secrets.randbelow(2**31)}"


class ConversationAdvisor(ABC):
    """Base class for conversation hooks. Every hook defaults to a pass-through."""

    order: int = 0

    @property
    def name(self) -> str:
        return type(self).__name__

    def on_conversation_start(self, request: ChatRequest) -> ChatRequest:
        return request

    def before_model_call(self, request: ChatRequest) -> ChatRequest:
        return request

    def on_conversation_end(self, response: ChatResponse) -> ChatResponse:
        return response


@dataclass
class SessionState:
    """Per-conversation state kept by a CatalogAdvisor."""
    session_id: str
    callbacks: Dict[str, ToolCallback] = field(default_factory=dict)


class CatalogAdvisor(ConversationAdvisor):
    """
    Indexes the conversation's tool catalog and owns its session lifecycle.

    Args:
        searcher: Search backend the catalog is indexed into.
        tool_registry: Host registry used to resolve tool definitions and names.
        order: Position among advisors (lower runs first).
        session_ttl_seconds: Idle time after which unfinished sessions are swept.
    """

    def __init__(
        self,
        searcher: ToolSearcher,
        tool_registry: Optional[ToolRegistry] = None,
        order: Optional[int] = None,
        session_ttl_seconds: Optional[float] = None,
    ):
        self.searcher = searcher
        self.tool_registry = tool_registry if tool_registry is not None else ToolRegistry()
        self.order = settings.advisor_order if order is None else order
        self.session_ttl_seconds = (
            settings.session_ttl_seconds if session_ttl_seconds is None else session_ttl_seconds
        )
        self._sessions: SessionRegistry[SessionState] = SessionRegistry(
            factory=SessionState,
            on_remove=lambda session_id, state: self.searcher.clear_index(session_id),
            name=f"{self.name} session",
        )

    @property
    def active_sessions(self) -> List[str]:
        return self._sessions.session_ids()

    def on_conversation_start(self, request: ChatRequest) -> ChatRequest:
        if request.options is None:
            return request

        self._sessions.maybe_evict_stale(self.session_ttl_seconds, SWEEP_INTERVAL_SECONDS)

        session_id = resolve_session_id(request.context)
        with session_scope(session_id):
            # A reused conversation id must not see the previous catalog
            if self._sessions.remove(session_id) is None:
                self.searcher.clear_index(session_id)

            definitions = self.tool_registry.resolve_tool_definitions(request.options)
            for definition in definitions:
                self.searcher.index_tool(
                    session_id,
                    ToolReference(tool_name=definition.name, summary=definition.description),
                )

            state = self._sessions.get_or_create(session_id)
            for callback in request.options.tool_callbacks:
                state.callbacks.setdefault(callback.definition.name, callback)

            request.context[SESSION_ID_KEY] = session_id
            logger.info(f"Indexed {len(definitions)} tools for {self.name}")
        return request

    def on_conversation_end(self, response: ChatResponse) -> ChatResponse:
        session_id = response.context.get(SESSION_ID_KEY)
        if session_id is None:
            return response
        with session_scope(str(session_id)):
            if self._sessions.remove(str(session_id)) is None:
                self.searcher.clear_index(str(session_id))
            logger.debug(f"Finalized {self.name} session")
        return response

    def _session_of(self, request: ChatRequest) -> Optional[str]:
        session_id = request.context.get(SESSION_ID_KEY)
        return str(session_id) if session_id is not None else None

    def _select(self, session_id: str, names: Iterable[str]) -> Tuple[List[ToolCallback], Set[str]]:
        """Split *names* into cached callbacks and bare names for the host to resolve."""
        state = self._sessions.get(session_id)
        cached = state.callbacks if state is not None else {}
        callbacks: List[ToolCallback] = []
        bare: Set[str] = set()
        for name in names:
            callback = cached.get(name)
            if callback is None:
                bare.add(name)
            elif callback not in callbacks:
                callbacks.append(callback)
        return callbacks, bare

    @staticmethod
    def _expose(
        options: ToolOptions,
        callbacks: List[ToolCallback],
        names: Set[str],
        tool_context: Optional[Dict[str, object]] = None,
    ) -> ToolOptions:
        exposed = options.copy()
        exposed.tool_callbacks = callbacks
        exposed.tool_names = names
        if tool_context:
            exposed.tool_context.update(tool_context)
        return exposed
