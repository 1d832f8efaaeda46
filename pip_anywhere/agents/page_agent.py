"""Page Agent - responder that lives with one tab

Receives TRIGGER_PIP, runs Locator -> Selector -> Activator against the
page and answers {"success": bool}.

INVARIANTS:
- Malformed or foreign messages are ignored (no reply, no error)
- A valid request gets exactly one reply, even if the pipeline raises
- A reply that cannot be delivered is logged, never raised
"""

import logging
from typing import Any, Callable, Dict, Optional

from pip_anywhere.agents.activator import ActivationResult, Activator
from pip_anywhere.agents.dom import DocumentScope, PiPCapability
from pip_anywhere.agents.locator import collect_candidates, collect_top_level
from pip_anywhere.agents.selector import select_main, select_main_legacy
from pip_anywhere.core.channel import ReplySlot
from pip_anywhere.core.errors import MalformedMessage, NoCandidates, PipError, ResponseChannelClosed
from pip_anywhere.core.pip_config import PipConfig, PipSettings
from pip_anywhere.core.protocol import TriggerResponse, require_request


class PageAgent:
    """Page-side handler for one tab.

    Args:
        scope_factory: returns the page's top DocumentScope; called fresh
            on every trigger so the pass reflects the current DOM
        capability: the page's PiP slot
        settings: policy snapshot (defaults to PipConfig)
        controller_id: id of the controller allowed to talk to us
    """

    def __init__(
        self,
        scope_factory: Callable[[], Optional[DocumentScope]],
        capability: PiPCapability,
        settings: Optional[PipSettings] = None,
        controller_id: Optional[str] = None,
    ):
        self.scope_factory = scope_factory
        self.capability = capability
        self.settings = settings or PipConfig.get().settings
        self.controller_id = controller_id
        self.last_result: Optional[ActivationResult] = None

    def on_message(self, message: Dict[str, Any], sender_id: Optional[str], reply: ReplySlot) -> None:
        """Channel entry point."""
        try:
            require_request(message)
        except MalformedMessage as e:
            logging.debug(f"Ignoring message: {e}")
            return

        if sender_id and self.controller_id and sender_id != self.controller_id:
            logging.warning("Received message from unexpected sender id; ignoring.")
            return

        result = self.run_trigger()
        self.last_result = result

        try:
            reply.send(TriggerResponse(result.success).to_message())
        except ResponseChannelClosed as e:
            logging.warning(f"Failed to send response for TRIGGER_PIP: {e}")

    def run_trigger(self) -> ActivationResult:
        """One selection-and-activation pass. Never raises."""
        try:
            return self._run()
        except PipError as e:
            logging.warning(f"Trigger failed: {e}")
            return ActivationResult.failed(e)
        except Exception as e:
            logging.error(f"Unexpected error while handling TRIGGER_PIP: {e}")
            return ActivationResult(False, "internal_error", str(e))

    def _run(self) -> ActivationResult:
        settings = self.settings

        if settings.already_active == "succeed" and self.capability.active_element_key() is not None:
            logging.info("A video is already in Picture-in-Picture.")
            return ActivationResult.ok("already_active")

        root = self.scope_factory()
        try:
            return self._select_and_activate(root)
        finally:
            if root is not None:
                root.release()

    def _select_and_activate(self, root: Optional[DocumentScope]) -> ActivationResult:
        settings = self.settings

        try:
            candidates = collect_candidates(root)
        except PipError:
            raise
        except Exception as e:
            # Frames can detach mid-walk; the top-level pass below still works
            logging.warning(f"Exhaustive video search failed: {e}")
            candidates = []

        video = select_main(candidates, settings.min_ready_state)

        if video is None and settings.fallback_strategy:
            logging.info("Falling back to legacy video detection logic.")
            video = select_main_legacy(collect_top_level(root))

        if video is None:
            raise NoCandidates("Could not find a suitable video for PiP.")

        activator = Activator(
            self.capability,
            exit_existing=settings.exit_existing_pip,
            clear_block=settings.clear_disable_attribute,
        )
        return activator.activate(video)
