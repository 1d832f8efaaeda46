"""Tool base class - ALL tools must inherit from this

Tools are the trigger surface: deterministic Python, one attempt, a
structured result dict.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class Tool(ABC):
    """Base class for all tools

    Tools:
    - Have a name and description
    - Define their input schema (JSON Schema)
    - Execute deterministically
    - Return structured results
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Tool name (must be unique)"""
        raise NotImplementedError

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable tool description"""
        raise NotImplementedError

    @property
    @abstractmethod
    def schema(self) -> Dict[str, Any]:
        """JSON Schema for tool arguments"""
        raise NotImplementedError

    @property
    def risk_level(self) -> str:
        """Risk level: 'none', 'low', 'medium', 'high'"""
        return "medium"

    @property
    def side_effects(self) -> list[str]:
        """List of side effects (e.g., 'launches_browser', 'page_state_change')"""
        return []

    @property
    def capability_class(self) -> str:
        """One of "actuate", "observe", "query". Default is "actuate"."""
        return "actuate"

    @property
    def requires_session(self) -> bool:
        """True if the tool operates on a live browser session."""
        return False

    @property
    def failure_class(self) -> str:
        """Default classification of this tool's failure mode.

        One of "environmental", "logical", "permission", "unknown".
        Tools may override per execution by returning "failure_class"
        in their result dictionary.
        """
        return "unknown"

    @abstractmethod
    def execute(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Execute the tool with given arguments

        Returns:
            Dict with execution result. Must include "status" key.
            Example: {"status": "success", "content": "..."}
        """
        raise NotImplementedError

    def validate_args(self, args: Dict[str, Any]) -> bool:
        """Validate arguments against schema (basic validation)"""
        if not isinstance(args, dict):
            return False

        required = self.schema.get("required", [])
        for field in required:
            if field not in args:
                return False

        properties = self.schema.get("properties", {})
        for key, value in args.items():
            if key in properties:
                expected_type = properties[key].get("type")
                if expected_type == "string" and not isinstance(value, str):
                    return False
                elif expected_type == "integer" and not isinstance(value, int):
                    return False
                elif expected_type == "boolean" and not isinstance(value, bool):
                    return False
                enum = properties[key].get("enum")
                if enum and value not in enum:
                    return False

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Export tool metadata"""
        return {
            "name": self.name,
            "description": self.description,
            "schema": self.schema,
            "risk_level": self.risk_level,
            "side_effects": self.side_effects,
            "capability_class": self.capability_class,
            "requires_session": self.requires_session,
        }
