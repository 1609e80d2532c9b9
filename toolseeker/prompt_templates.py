# toolseeker/prompt_templates.py
"""
Prompt text appended to the system prompt by the discovery advisor.

The suffix is a list of paragraphs, each formatted with the search tool
name and joined by blank lines.
"""

from typing import Tuple

TOOL_SEARCH_SECTIONS: Tuple[str, ...] = (
    # role
    "## Tool Discovery\n"
    "You start with a single tool, `{search_tool_name}`. Other tools exist "
    "but are not loaded until you search for them.",
    # workflow
    "When your current tools cannot complete the task:\n"
    "1. Call `{search_tool_name}` with a specific natural language query "
    "describing the capability you need.\n"
    "2. The tools it returns become available on your next turn.\n"
    "3. Invoke the discovered tools directly.",
    # rules
    "Search again with different keywords if no relevant tool is found. "
    "Do not guess tool names; only call tools that are available to you.",
)


def tool_search_suffix(search_tool_name: str) -> str:
    """Render the system prompt suffix for the given search tool name."""
    sections = [section.format(search_tool_name=search_tool_name) for section in TOOL_SEARCH_SECTIONS]
    return "\n\n" + "\n\n".join(sections)


DEFAULT_SYSTEM_PROMPT_SUFFIX = tool_search_suffix("toolSearchTool")
