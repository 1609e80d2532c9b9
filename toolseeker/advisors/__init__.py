"""Conversation advisors that decide which tools the model sees."""

from .base import (
    CONVERSATION_ID_KEY,
    SESSION_ID_KEY,
    CatalogAdvisor,
    ConversationAdvisor,
    resolve_session_id,
)
from .pre_select import PreSelectAdvisor
from .search_tool import TOOL_SEARCH_TOOL_NAME, ToolSearchTool, parse_tool_names
from .tool_search import ToolSearchAdvisor, extract_tool_name_references

__all__ = [
    "CONVERSATION_ID_KEY",
    "SESSION_ID_KEY",
    "TOOL_SEARCH_TOOL_NAME",
    "CatalogAdvisor",
    "ConversationAdvisor",
    "PreSelectAdvisor",
    "ToolSearchAdvisor",
    "ToolSearchTool",
    "extract_tool_name_references",
    "parse_tool_names",
    "resolve_session_id",
]
