"""Tool: browsers.session.open

Opens (or reuses) the controlled browser and optionally loads a page.
Every tab of the session gets a page agent as it loads.

Risk Level: medium
Side Effects: launches_browser
"""

import logging
from typing import Dict, Any
from pip_anywhere.tools.base import Tool


class SessionOpen(Tool):
    """Open or attach to the browser session."""

    @property
    def name(self) -> str:
        return "browsers.session.open"

    @property
    def description(self) -> str:
        return "Opens the controlled browser (or reuses it) and optionally navigates to a URL."

    @property
    def side_effects(self) -> list[str]:
        return ["launches_browser"]

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
                "browser": {
                    "type": "string",
                    "enum": ["chromium", "chrome", "edge", "firefox"],
                    "description": "Browser to launch. Defaults to config value."
                },
                "url": {
                    "type": "string",
                    "description": "Optional URL to navigate to after opening."
                }
            },
            "required": []
        }

    def execute(self, args: Dict[str, Any]) -> Dict[str, Any]:
        """Open browser session."""
        if not self.validate_args(args):
            return {"status": "error", "error": "Invalid arguments", "failure_class": "logical", "content": ""}

        try:
            from pip_anywhere.core.controller import PipController

            controller = PipController.get()
            session = controller.open(url=args.get("url"), browser_type=args.get("browser"))

            return {
                "status": "success",
                "session_id": session.session_id,
                "browser_type": session.browser_type,
                "headless": session.headless,
                "content": f"Browser session opened: {session.session_id}"
            }

        except RuntimeError as e:
            return {
                "status": "error",
                "error": str(e),
                "error_type": "dependency",
                "failure_class": "environmental",
                "content": ""
            }
        except Exception as e:
            logging.error(f"Session open failed: {e}")
            error_str = str(e).lower()
            if "permission" in error_str or "access" in error_str:
                failure_class = "permission"
            else:
                failure_class = "environmental"
            return {
                "status": "error",
                "error": f"Failed to open browser session: {e}",
                "failure_class": failure_class,
                "content": ""
            }
