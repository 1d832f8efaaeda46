"""Tool: browsers.trigger_pip

Fires one PiP trigger at the active tab: the Dispatcher forwards
{"type": "TRIGGER_PIP"} to the tab's page agent and reports the verdict.

Pass "command" to go through the keyboard-shortcut path instead; only
"trigger-pip" fires, any other command is reported and ignored.

Risk Level: low
Side Effects: page_state_change

INVARIANT: exactly one attempt per call. No retries.
"""

from typing import Dict, Any
from pip_anywhere.core.errors import (
    CapabilityUnavailable,
    DeliveryFailure,
    IneligiblePage,
    NoActiveTarget,
)
from pip_anywhere.tools.base import Tool

_FAILURE_CLASSES = {
    NoActiveTarget.reason: NoActiveTarget.failure_class,
    IneligiblePage.reason: IneligiblePage.failure_class,
    DeliveryFailure.reason: DeliveryFailure.failure_class,
    CapabilityUnavailable.reason: CapabilityUnavailable.failure_class,
}


class TriggerPip(Tool):
    """Put the main video of the active tab into picture-in-picture."""

    @property
    def name(self) -> str:
        return "browsers.trigger_pip"

    @property
    def description(self) -> str:
        return "Finds the main video in the active tab and puts it into picture-in-picture."

    @property
    def risk_level(self) -> str:
        return "low"

    @property
    def side_effects(self) -> list[str]:
        return ["page_state_change"]

    @property
    def requires_session(self) -> bool:
        return True

    @property
    def failure_class(self) -> str:
        return "environmental"

    @property
    def schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "source": {
                    "type": "string",
                    "enum": ["toolbar", "shortcut"],
                    "description": "Which trigger fired. Defaults to toolbar."
                },
                "command": {
                    "type": "string",
                    "description": "Shortcut command name, e.g. 'trigger-pip'. Overrides source."
                }
            },
            "required": []
        }

    def execute(self, args: Dict[str, Any]) -> Dict[str, Any]:
        if not self.validate_args(args):
            return {"status": "error", "success": False, "error": "Invalid arguments",
                    "failure_class": "logical", "content": ""}

        from pip_anywhere.core.controller import PipController

        controller = PipController.get()
        command = args.get("command")
        if command is not None:
            result = controller.handle_command(command)
            if result is None:
                return {"status": "error", "success": False, "reason": "unknown_command",
                        "error": f"Unknown command: {command}",
                        "failure_class": "logical", "content": ""}
        else:
            result = controller.trigger(source=args.get("source", "toolbar"))

        if result.success:
            return {
                "status": "success",
                "success": True,
                "reason": result.reason,
                "tab_id": result.tab_id,
                "content": "Picture-in-Picture started",
            }

        return {
            "status": "error",
            "success": False,
            "reason": result.reason,
            "tab_id": result.tab_id,
            "error": result.detail or result.reason,
            "failure_class": _FAILURE_CLASSES.get(result.reason, self.failure_class),
            "content": "",
        }
