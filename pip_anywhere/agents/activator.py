"""Activator - drive the chosen video into picture-in-picture

State machine over PiP ownership, read immediately before acting:

    INACTIVE          -> request on target
    ACTIVE_ON_OTHER   -> [exit first, if policy says so] -> request on target
    ACTIVE_ON_TARGET  -> success, no request (idempotent)

The PiP slot is page-global and has no lock; a page that changes PiP
state between the read and the request races benignly with us.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pip_anywhere.agents.dom import CandidateElement, PiPCapability
from pip_anywhere.core.errors import CapabilityUnavailable, EntryRejected, PipError


class PiPState(Enum):
    INACTIVE = "inactive"
    ACTIVE_ON_OTHER = "active_on_other"
    ACTIVE_ON_TARGET = "active_on_target"


@dataclass(frozen=True)
class ActivationResult:
    """Outcome of one activation attempt, with diagnostic detail."""
    success: bool
    reason: str = "ok"
    detail: str = ""

    def __bool__(self) -> bool:
        return self.success

    @classmethod
    def ok(cls, reason: str = "ok", detail: str = "") -> "ActivationResult":
        return cls(True, reason, detail)

    @classmethod
    def failed(cls, error: PipError) -> "ActivationResult":
        return cls(False, error.reason, str(error))


class Activator:
    """Enters PiP through an injected capability.

    Args:
        capability: the page's PiP slot
        exit_existing: exit another element's PiP before requesting
        clear_block: remove disablePictureInPicture from the target
    """

    def __init__(
        self,
        capability: PiPCapability,
        exit_existing: bool = False,
        clear_block: bool = True,
    ):
        self.capability = capability
        self.exit_existing = exit_existing
        self.clear_block = clear_block

    def state_for(self, element: CandidateElement) -> PiPState:
        active_key = self.capability.active_element_key()
        if active_key is None:
            return PiPState.INACTIVE
        if active_key == element.element_key:
            return PiPState.ACTIVE_ON_TARGET
        return PiPState.ACTIVE_ON_OTHER

    def activate(self, element: Optional[CandidateElement]) -> ActivationResult:
        """Put element into PiP. Never raises for page-level failures.

        NOTE: must only run downstream of a user gesture; clearing the
        page's opt-out relies on that.
        """
        if element is None:
            logging.warning("activate() called without a video element.")
            return ActivationResult(False, "no_candidates", "no element")

        state = self.state_for(element)
        if state is PiPState.ACTIVE_ON_TARGET:
            logging.info(f"{element.describe()} is already in Picture-in-Picture.")
            return ActivationResult.ok("already_active")

        if not self.capability.enabled():
            error = CapabilityUnavailable("Picture-in-Picture is not enabled in this browser.")
            logging.warning(str(error))
            return ActivationResult.failed(error)

        if state is PiPState.ACTIVE_ON_OTHER and self.exit_existing:
            try:
                self.capability.exit()
                logging.info("Exited existing Picture-in-Picture before switching video.")
            except PipError as e:
                # Browser still enforces a single PiP window on the next request
                logging.warning(f"Could not exit existing Picture-in-Picture: {e}")

        if self.clear_block and element.pip_blocked():
            logging.warning(
                "Video has disablePictureInPicture attribute, attempting to remove it."
            )
            element.clear_pip_block()

        try:
            self.capability.request(element)
        except EntryRejected as e:
            logging.error(f"Failed to start Picture-in-Picture. {e.detail or e}")
            return ActivationResult.failed(e)

        logging.info("Picture-in-Picture started.")
        return ActivationResult.ok()
