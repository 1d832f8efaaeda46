"""Tool Registry - central registry for all available tools"""

import logging
from typing import Dict, Optional
from .base import Tool


class ToolRegistry:
    """Central registry for all tools"""

    def __init__(self):
        self._tools: Dict[str, Tool] = {}

    def register(self, tool: Tool):
        """Register a tool"""
        if not isinstance(tool, Tool):
            raise TypeError("Tool must inherit from Tool base class")

        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        if "launches_browser" in (tool.side_effects or []) and not tool.requires_session:
            logging.warning(
                f"Tool '{tool.name}' launches a browser but does not declare "
                f"requires_session=True. Recommend declaring explicitly."
            )

        self._tools[tool.name] = tool

    def get(self, tool_name: str) -> Optional[Tool]:
        """Get a tool by name"""
        return self._tools.get(tool_name)

    def has(self, tool_name: str) -> bool:
        """Check if tool exists"""
        return tool_name in self._tools

    def list_all(self) -> Dict[str, Dict[str, object]]:
        """List all registered tools with metadata"""
        return {
            name: tool.to_dict()
            for name, tool in self._tools.items()
        }


# Global registry instance
_registry: Optional[ToolRegistry] = None


def get_registry() -> ToolRegistry:
    """Get global tool registry"""
    global _registry
    if _registry is None:
        _registry = ToolRegistry()
    return _registry


def load_all_tools() -> ToolRegistry:
    """Register the built-in tools (idempotent)."""
    from pip_anywhere.tools.browsers.session_open import SessionOpen
    from pip_anywhere.tools.browsers.trigger_pip import TriggerPip

    registry = get_registry()
    for tool in (SessionOpen(), TriggerPip()):
        if not registry.has(tool.name):
            registry.register(tool)
    return registry
