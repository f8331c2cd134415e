"""Base class for tools."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from types import MappingProxyType
from typing import ClassVar

from pydantic import BaseModel

from .models import ToolSpec


class BaseTool(ABC):
    """Abstract base class for all tools.

    Each tool declares a Pydantic ``Arguments`` model; arguments are
    validated against it before ``run`` is called.
    """

    name: ClassVar[str] = "base"
    description: ClassVar[str] = "Base tool"
    Arguments: ClassVar[type[BaseModel]]
    # Deterministic tools have their results cached
    deterministic: ClassVar[bool] = False

    @abstractmethod
    async def run(self, args: BaseModel) -> str:
        """Execute the tool.

        Args:
            args: Validated instance of ``Arguments``.

        Returns:
            Text output for the model.

        Raises:
            ValueError: If the arguments are valid but cannot be evaluated.
        """

    def spec(self) -> ToolSpec:
        return ToolSpec(
            name=self.name,
            description=self.description,
            parameters=self.Arguments.model_json_schema(),
        )


class ToolRegistry:
    """Read-only registry of tool instances, built once at startup."""

    def __init__(self, tools: Iterable[BaseTool] = ()):
        self._tools = MappingProxyType({tool.name: tool for tool in tools})

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> BaseTool | None:
        """Get a tool by name.

        Args:
            name: Tool name.

        Returns:
            Tool instance or None if not found.
        """
        return self._tools.get(name)

    def list_tools(self) -> list[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def specs(self) -> list[ToolSpec]:
        return [tool.spec() for tool in self._tools.values()]
