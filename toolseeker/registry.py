"""
Host-side tool catalog.

FunctionTool wraps a plain Python function as a ToolCallback, deriving its
JSON schema from the signature with a generated pydantic model. ToolRegistry
resolves tool names to callbacks, which is how bare names selected by the
advisors are turned into executable tools.
"""

import inspect
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, create_model

from .errors import ToolNotFoundError
from .models import ToolCallback, ToolDefinition, ToolOptions

logger = logging.getLogger(__name__)

TOOL_CONTEXT_PARAM = "tool_context"


def _arguments_model(func: Callable[..., Any], name: str) -> type:
    fields: Dict[str, Any] = {}
    for param in inspect.signature(func).parameters.values():
        if param.name == TOOL_CONTEXT_PARAM or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = Any if param.annotation is inspect.Parameter.empty else param.annotation
        default = ... if param.default is inspect.Parameter.empty else param.default
        fields[param.name] = (annotation, default)
    return create_model(f"{name}Arguments", **fields)


class FunctionTool:
    """
    A Python function exposed as a tool.

    The description defaults to the first paragraph of the docstring. If the
    function declares a ``tool_context`` parameter it receives the tool context
    of the current request.
    """

    def __init__(
        self,
        func: Callable[..., Any],
        name: Optional[str] = None,
        description: Optional[str] = None,
    ):
        self.func = func
        tool_name = name or func.__name__
        if description is None:
            doc = inspect.getdoc(func) or ""
            description = doc.split("\n\n")[0].strip()
        self._arguments: type = _arguments_model(func, tool_name)
        self._wants_context = TOOL_CONTEXT_PARAM in inspect.signature(func).parameters
        self._definition = ToolDefinition(
            name=tool_name,
            description=description,
            input_schema=self._arguments.model_json_schema(),
        )

    @property
    def definition(self) -> ToolDefinition:
        return self._definition

    def call(self, arguments: Dict[str, Any], tool_context: Optional[Dict[str, Any]] = None) -> Any:
        """Validate *arguments* against the signature and invoke the function."""
        validated: BaseModel = self._arguments.model_validate(arguments or {})
        kwargs = {field: getattr(validated, field) for field in type(validated).model_fields}
        if self._wants_context:
            kwargs[TOOL_CONTEXT_PARAM] = dict(tool_context or {})
        return self.func(**kwargs)

    def __repr__(self) -> str:
        return f"FunctionTool(name={self._definition.name!r})"


class ToolRegistry:
    """
    Name -> ToolCallback resolution for the host.

    Usage:
        registry = ToolRegistry()

        @registry.tool()
        def get_weather(city: str) -> str:
            \"\"\"Current weather for a city.\"\"\"
            ...
    """

    def __init__(self, callbacks: Optional[Iterable[ToolCallback]] = None):
        self._callbacks: Dict[str, ToolCallback] = {}
        for callback in callbacks or []:
            self.register(callback)

    def register(self, callback: ToolCallback) -> ToolCallback:
        name = callback.definition.name
        if name in self._callbacks:
            logger.warning(f"Tool '{name}' registered twice, replacing previous definition")
        self._callbacks[name] = callback
        return callback

    def tool(self, name: Optional[str] = None, description: Optional[str] = None):
        """Decorator registering a function as a FunctionTool."""
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(FunctionTool(func, name=name, description=description))
            return func
        return decorator

    def resolve(self, name: str) -> ToolCallback:
        """
        Return the callback registered under *name*.

        Raises:
            ToolNotFoundError: If no tool has that name.
        """
        callback = self._callbacks.get(name)
        if callback is None:
            raise ToolNotFoundError(name, available=list(self._callbacks))
        return callback

    def resolve_tool_definitions(self, options: ToolOptions) -> List[ToolDefinition]:
        """
        Definitions of every tool named by *options*.

        Callbacks supplied directly come first, then bare names resolved
        against the registry. Duplicate names are reported once.
        """
        definitions: List[ToolDefinition] = []
        seen = set()
        for callback in options.tool_callbacks:
            definition = callback.definition
            if definition.name not in seen:
                seen.add(definition.name)
                definitions.append(definition)
        for name in sorted(options.tool_names):
            if name not in seen:
                seen.add(name)
                definitions.append(self.resolve(name).definition)
        return definitions

    def callbacks(self) -> List[ToolCallback]:
        return list(self._callbacks.values())

    def names(self) -> List[str]:
        return list(self._callbacks)

    def __contains__(self, name: object) -> bool:
        return name in self._callbacks

    def __len__(self) -> int:
        return len(self._callbacks)
