"""Trigger Failure Hierarchy

Every failure is local to one trigger. Exceptions are raised at the seam
where the condition is detected and converted into a result value by the
Dispatcher (controller side) or the PageAgent (page side). Nothing here
is ever allowed to escape a trigger.

Each class carries:
- reason: stable diagnostic code reported alongside the boolean outcome
- failure_class: "environmental" | "logical" | "permission"
"""


class PipError(RuntimeError):
    """Base class for all trigger failures."""

    reason = "internal_error"
    failure_class = "unknown"

    def __init__(self, message: str = "", detail: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.detail = detail

    def __str__(self):
        base = super().__str__()
        if self.detail:
            return f"{base} ({self.detail})"
        return base


class NoActiveTarget(PipError):
    """No frontmost tab could be resolved."""
    reason = "no_active_tab"
    failure_class = "environmental"


class IneligiblePage(PipError):
    """The active tab's URL is on the denylist; nothing is delivered."""
    reason = "ineligible_page"
    failure_class = "permission"

    def __init__(self, url: str):
        super().__init__(f"Page is not eligible: {url}")
        self.url = url


class DeliveryFailure(PipError):
    """No responder is present for the tab (agent never loaded, or gone)."""
    reason = "delivery_failure"
    failure_class = "environmental"


class NoCandidates(PipError):
    """No media element could be selected on the page."""
    reason = "no_candidates"
    failure_class = "logical"


class CapabilityUnavailable(PipError):
    """Picture-in-Picture is disabled page-wide."""
    reason = "capability_unavailable"
    failure_class = "permission"


class EntryRejected(PipError):
    """The page rejected requestPictureInPicture().

    The detail is for diagnostics only. It never alters control flow.
    """
    reason = "entry_rejected"
    failure_class = "environmental"


class MalformedMessage(PipError):
    """A message that does not follow the TRIGGER_PIP schema."""
    reason = "malformed_message"
    failure_class = "logical"


class ResponseChannelClosed(PipError):
    """The reply slot was already used or closed before the response."""
    reason = "response_channel_closed"
    failure_class = "environmental"
