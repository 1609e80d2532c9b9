# toolseeker/loop.py
"""
Tool-calling loop - drives a model through tool calls with advisors attached.

    request -> on_conversation_start (each advisor, by order)
            -> [before_model_call -> model -> execute tool calls] * n
            -> on_conversation_end (reverse order, always)

The loop stops when the model answers without tool calls or after
max_iterations model calls. on_conversation_end runs in every case,
including errors raised by the model or a tool.
"""

import json
import logging
from typing import Any, Callable, Iterable, List, Optional

from .advisors.base import ConversationAdvisor
from .config import settings
from .errors import ToolNotFoundError
from .models import (
    ChatRequest,
    ChatResponse,
    Message,
    ToolCall,
    ToolCallback,
    ToolDefinition,
    ToolOptions,
    ToolResponse,
)
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

# Receives the request and the definitions of the exposed tools,
# returns the assistant message.
ChatModel = Callable[[ChatRequest, List[ToolDefinition]], Message]

# Response context key holding the number of model calls made
ITERATIONS_KEY = "tool_calling_iterations"


def serialize_result(result: Any) -> str:
    """Tool results are sent back to the model as text; non-strings become JSON."""
    if isinstance(result, str):
        return result
    return json.dumps(result, default=str)


class ToolCallingLoop:
    """
    Runs a conversation against *model* with the given advisors.

    Args:
        model: The chat model callable.
        advisors: Conversation advisors; applied in ascending ``order``.
        tool_registry: Host registry resolving bare tool names.
        max_iterations: Cap on model calls per conversation.
    """

    def __init__(
        self,
        model: ChatModel,
        advisors: Optional[Iterable[ConversationAdvisor]] = None,
        tool_registry: Optional[ToolRegistry] = None,
        max_iterations: Optional[int] = None,
    ):
        self.model = model
        self.advisors = sorted(advisors or [], key=lambda a: a.order)
        self.tool_registry = tool_registry if tool_registry is not None else ToolRegistry()
        self.max_iterations = settings.max_iterations if max_iterations is None else max_iterations

    def call(self, request: ChatRequest) -> ChatResponse:
        request = request.mutate(messages=list(request.messages), context=dict(request.context))
        response: Optional[ChatResponse] = None
        iterations = 0

        try:
            for advisor in self.advisors:
                request = advisor.on_conversation_start(request)

            while iterations < self.max_iterations:
                call_request = request
                for advisor in self.advisors:
                    call_request = advisor.before_model_call(call_request)

                options = call_request.options or ToolOptions()
                message = self.model(call_request, self.tool_registry.resolve_tool_definitions(options))
                iterations += 1
                response = ChatResponse(message=message, context=request.context)

                if not message.tool_calls:
                    break

                tool_message = Message.tool([self._execute(call, options) for call in message.tool_calls])
                request = request.mutate(messages=request.messages + [message, tool_message])
            else:
                logger.warning(f"Stopped after {self.max_iterations} model calls")
        finally:
            final = response if response is not None else ChatResponse(
                message=Message.assistant(), context=request.context
            )
            final.context[ITERATIONS_KEY] = iterations
            for advisor in reversed(self.advisors):
                final = advisor.on_conversation_end(final)

        return final

    def _resolve(self, name: str, options: ToolOptions) -> ToolCallback:
        for callback in options.tool_callbacks:
            if callback.definition.name == name:
                return callback
        if name in options.tool_names:
            return self.tool_registry.resolve(name)
        raise ToolNotFoundError(name, available=sorted(options.exposed_names()))

    def _execute(self, call: ToolCall, options: ToolOptions) -> ToolResponse:
        try:
            callback = self._resolve(call.name, options)
        except ToolNotFoundError as e:
            # Returned to the model so it can search again
            logger.warning(str(e))
            return ToolResponse(
                id=call.id,
                name=call.name,
                response_data=json.dumps({"error": str(e), "recovery_hint": e.recovery_hint}),
            )

        logger.debug(f"Calling tool '{call.name}' with {call.arguments}")
        result = callback.call(call.arguments, options.tool_context)
        return ToolResponse(id=call.id, name=call.name, response_data=serialize_result(result))
