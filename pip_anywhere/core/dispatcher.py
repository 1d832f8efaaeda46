"""Dispatcher - controller side of one trigger

Per trigger:

    IDLE -> AWAITING_ACTIVE_TAB -> AWAITING_PAGE_RESPONSE -> RESOLVED

- No active tab: failure, nothing forwarded
- Denylisted URL: failure, nothing forwarded
- Exactly one TriggerRequest forwarded; no retries, no timeout

Delivery failure, explicit {"success": false} and malformed responses are
kept apart in the reason code but all resolve to success=False.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from pip_anywhere.core.channel import MessageChannel
from pip_anywhere.core.eligibility import EligibilityChecker
from pip_anywhere.core.errors import DeliveryFailure, IneligiblePage, NoActiveTarget, PipError
from pip_anywhere.core.protocol import (
    OUTCOME_FAILURE,
    OUTCOME_SUCCESS,
    TriggerRequest,
    interpret_response,
)

TRIGGER_COMMAND = "trigger-pip"
TRIGGER_SOURCES = ("toolbar", "shortcut")


class DispatchState(Enum):
    IDLE = "idle"
    AWAITING_ACTIVE_TAB = "awaiting_active_tab"
    AWAITING_PAGE_RESPONSE = "awaiting_page_response"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class TabInfo:
    """What the Dispatcher needs to know about the frontmost tab."""
    tab_id: str
    url: str


@dataclass(frozen=True)
class DispatchResult:
    success: bool
    reason: str
    detail: str = ""
    tab_id: Optional[str] = None
    source: str = "toolbar"

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self):
        return {
            "success": self.success,
            "reason": self.reason,
            "detail": self.detail,
            "tab_id": self.tab_id,
            "source": self.source,
        }


class Dispatcher:
    """Relays one trigger from a trigger source to the active tab's agent.

    Holds no per-trigger state; concurrent triggers are independent.
    """

    def __init__(
        self,
        resolve_active_tab: Callable[[], Optional[TabInfo]],
        channel: MessageChannel,
        eligibility: Optional[EligibilityChecker] = None,
        controller_id: Optional[str] = None,
    ):
        self.resolve_active_tab = resolve_active_tab
        self.channel = channel
        self.eligibility = eligibility or EligibilityChecker()
        self.controller_id = controller_id

    def handle_command(self, command: str) -> Optional[DispatchResult]:
        """Keyboard shortcut entry point; unknown commands are ignored."""
        if command != TRIGGER_COMMAND:
            logging.debug(f"Ignoring unknown command: {command}")
            return None
        return self.trigger(source="shortcut")

    def trigger(self, source: str = "toolbar") -> DispatchResult:
        """Run one trigger round trip. Never raises."""
        try:
            return self._trigger(source)
        except PipError as e:
            return self._resolve(False, e.reason, str(e), source=source, level=logging.WARNING)
        except Exception as e:
            logging.error(f"Failed to trigger PiP in active tab: {e}")
            return self._resolve(False, "internal_error", str(e), source=source, level=None)

    def _trigger(self, source: str) -> DispatchResult:
        self._transition(DispatchState.AWAITING_ACTIVE_TAB, source)
        tab = self.resolve_active_tab()
        if tab is None or not tab.tab_id:
            raise NoActiveTarget("No active tab found.")

        blocked = self.eligibility.blocked_by(tab.url)
        if blocked is not None:
            error = IneligiblePage(tab.url)
            logging.warning(f"{error}; matches '{blocked}', not delivering")
            return self._resolve(False, error.reason, str(error), tab.tab_id, source, level=None)

        self._transition(DispatchState.AWAITING_PAGE_RESPONSE, source)
        try:
            response = self.channel.send(
                tab.tab_id,
                TriggerRequest().to_message(),
                sender_id=self.controller_id,
            )
        except DeliveryFailure as e:
            logging.warning(f"Could not contact page agent: {e}")
            return self._resolve(False, e.reason, str(e), tab.tab_id, source, level=None)

        outcome = interpret_response(response)
        if outcome == OUTCOME_SUCCESS:
            logging.info("PiP triggered successfully.")
            return self._resolve(True, "ok", "", tab.tab_id, source, level=None)
        if outcome == OUTCOME_FAILURE:
            return self._resolve(
                False, "page_failure", "Page agent reported PiP failure.",
                tab.tab_id, source,
            )
        return self._resolve(
            False, "indeterminate", f"Unexpected response: {response!r}",
            tab.tab_id, source,
        )

    def _transition(self, state: DispatchState, source: str) -> None:
        logging.debug(f"Dispatcher[{source}] -> {state.value}")

    def _resolve(
        self,
        success: bool,
        reason: str,
        detail: str,
        tab_id: Optional[str] = None,
        source: str = "toolbar",
        level: Optional[int] = logging.WARNING,
    ) -> DispatchResult:
        if level is not None and detail:
            logging.log(level, detail)
        self._transition(DispatchState.RESOLVED, source)
        return DispatchResult(success, reason, detail, tab_id, source)
