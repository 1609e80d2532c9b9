"""
toolseeker - progressive tool disclosure for LLM tool use.

The model starts with a single tool search tool; concrete tools are indexed per
conversation and revealed as the model discovers them.
"""

from .advisors import ConversationAdvisor, PreSelectAdvisor, ToolSearchAdvisor
from .config import Settings, settings
from .errors import (
    ConfigurationError,
    IndexStorageError,
    SearchPayloadError,
    ToolNotFoundError,
    ToolSeekerError,
)
from .loop import ToolCallingLoop
from .models import (
    ChatRequest,
    ChatResponse,
    Message,
    SearchRequest,
    SearchResponse,
    SearchType,
    ToolCall,
    ToolDefinition,
    ToolOptions,
    ToolReference,
    ToolResponse,
)
from .registry import FunctionTool, ToolRegistry
from .searchers import (
    KeywordToolSearcher,
    RegexToolSearcher,
    ToolSearcher,
    VectorToolSearcher,
    create_searcher,
)

__version__ = "0.1.0"

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ConfigurationError",
    "ConversationAdvisor",
    "FunctionTool",
    "IndexStorageError",
    "KeywordToolSearcher",
    "Message",
    "PreSelectAdvisor",
    "RegexToolSearcher",
    "SearchPayloadError",
    "SearchRequest",
    "SearchResponse",
    "SearchType",
    "Settings",
    "ToolCall",
    "ToolCallingLoop",
    "ToolDefinition",
    "ToolNotFoundError",
    "ToolOptions",
    "ToolReference",
    "ToolRegistry",
    "ToolResponse",
    "ToolSearchAdvisor",
    "ToolSearcher",
    "ToolSeekerError",
    "VectorToolSearcher",
    "create_searcher",
    "settings",
]
