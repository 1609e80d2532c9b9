# toolseeker/models.py
"""
Data model for tool search and for the narrow host-framework adapter.

Search types (ToolReference, SearchRequest, SearchResponse) are what the
searchers index and return. Chat types (Message, ChatRequest, ToolOptions, ...)
are the minimal view of a host conversation that advisors need: the message
history, the system prompt, and the set of tools exposed to the next model call.
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol, Set, runtime_checkable


# ============================================================================
# SEARCH MODEL
# ============================================================================

class SearchType(str, Enum):
    """Ranking strategy implemented by a ToolSearcher."""
    REGEX = "regex"
    KEYWORD = "keyword"
    SEMANTIC = "semantic"


@dataclass(frozen=True)
class ToolReference:
    """An indexed (or matched) tool: its name, summary and optional score."""
    tool_name: str
    summary: str = ""
    relevance_score: Optional[float] = None


@dataclass(frozen=True)
class SearchRequest:
    """A search for tools within one session's catalog."""
    session_id: str
    query: str
    max_results: Optional[int] = None
    category_filter: Optional[str] = None


@dataclass(frozen=True)
class SearchMetadata:
    search_type: SearchType
    query: str
    search_time_ms: Optional[int] = None


@dataclass(frozen=True)
class SearchResponse:
    """Ranked search results, best match first."""
    tool_references: List[ToolReference] = field(default_factory=list)
    total_matches: int = 0
    search_metadata: Optional[SearchMetadata] = None

    @classmethod
    def empty(cls, metadata: Optional[SearchMetadata] = None) -> "SearchResponse":
        return cls(tool_references=[], total_matches=0, search_metadata=metadata)

    def tool_names(self) -> List[str]:
        return [ref.tool_name for ref in self.tool_references]


# ============================================================================
# HOST ADAPTER MODEL
# ============================================================================

@dataclass(frozen=True)
class ToolDefinition:
    """Schema-level description of a tool, as shown to the model."""
    name: str
    description: str = ""
    input_schema: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})


@runtime_checkable
class ToolCallback(Protocol):
    """A resolved, executable tool."""

    @property
    def definition(self) -> ToolDefinition:
        ...

    def call(self, arguments: Dict[str, Any], tool_context: Optional[Dict[str, Any]] = None) -> Any:
        ...


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model."""
    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResponse:
    """The serialized result of one tool invocation."""
    id: str
    name: str
    response_data: str


@dataclass
class Message:
    """One message of a conversation."""
    role: Role
    content: str = ""
    tool_calls: List[ToolCall] = field(default_factory=list)
    tool_responses: List[ToolResponse] = field(default_factory=list)

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role=Role.USER, content=text)

    @classmethod
    def assistant(cls, text: str = "", tool_calls: Optional[List[ToolCall]] = None) -> "Message":
        return cls(role=Role.ASSISTANT, content=text, tool_calls=list(tool_calls or []))

    @classmethod
    def tool(cls, responses: List[ToolResponse]) -> "Message":
        return cls(role=Role.TOOL, tool_responses=list(responses))


@dataclass
class ToolOptions:
    """
    The tools exposed to the next model call.

    tool_callbacks are resolved tools; tool_names are bare names the host
    resolves itself. tool_context is passed to every tool invocation.
    """
    tool_callbacks: List[ToolCallback] = field(default_factory=list)
    tool_names: Set[str] = field(default_factory=set)
    tool_context: Dict[str, Any] = field(default_factory=dict)

    def copy(self) -> "ToolOptions":
        return ToolOptions(
            tool_callbacks=list(self.tool_callbacks),
            tool_names=set(self.tool_names),
            tool_context=dict(self.tool_context),
        )

    def exposed_names(self) -> Set[str]:
        """Names of every tool exposed by these options."""
        return {cb.definition.name for cb in self.tool_callbacks} | set(self.tool_names)


@dataclass
class ChatRequest:
    """A request about to be sent to the model."""
    messages: List[Message] = field(default_factory=list)
    system: str = ""
    options: Optional[ToolOptions] = None
    context: Dict[str, Any] = field(default_factory=dict)

    def user_messages(self) -> List[Message]:
        return [m for m in self.messages if m.role == Role.USER]

    def mutate(self, **changes: Any) -> "ChatRequest":
        """Return a copy with *changes* applied; the context dict is shared."""
        return dataclasses.replace(self, **changes)


@dataclass
class ChatResponse:
    """The model's reply to a ChatRequest."""
    message: Message
    context: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.message.tool_calls)
