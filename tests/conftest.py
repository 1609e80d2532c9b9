"""Shared fixtures: a small tool catalog registered as FunctionTools."""

import pytest

from toolseeker.models import ToolOptions
from toolseeker.registry import ToolRegistry
from toolseeker.searchers.regex_searcher import RegexToolSearcher


def build_registry() -> ToolRegistry:
    registry = ToolRegistry()

    @registry.tool(name="getWeather")
    def get_weather(city: str) -> dict:
        """Get the current weather for a city."""
        return {"city": city, "temperature": 9, "conditions": "rain"}

    @registry.tool(name="getClothing")
    def get_clothing(conditions: str, temperature: int) -> list:
        """Suggest clothing to wear for the given conditions and temperature."""
        if conditions == "rain":
            return ["raincoat", "umbrella", "boots"]
        return ["t-shirt"]

    @registry.tool(name="currentTime")
    def current_time() -> str:
        """Get the current time of day."""
        return "14:30"

    @registry.tool(name="listOrders")
    def list_orders(customer: str) -> list:
        """List all orders placed by a customer."""
        return []

    return registry


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def catalog_options(registry):
    return ToolOptions(tool_callbacks=registry.callbacks())


@pytest.fixture
def searcher():
    s = RegexToolSearcher()
    yield s
    s.close()
