"""Cross-context message schema

The one wire contract between the controller and the page agent:

    request:  {"type": "TRIGGER_PIP"}
    response: {"success": <bool>}

Anything that does not carry the exact discriminant is ignored by the
receiver. A response without a boolean "success" is indeterminate and
the caller treats it as failure.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pip_anywhere.core.errors import MalformedMessage

TRIGGER_PIP = "TRIGGER_PIP"

# Outcomes of interpreting a response from the page
OUTCOME_SUCCESS = "success"
OUTCOME_FAILURE = "failure"
OUTCOME_INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class TriggerRequest:
    """Request for the page agent to run one selection pass."""

    type: str = TRIGGER_PIP

    def to_message(self) -> Dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class TriggerResponse:
    """Boolean verdict from the page agent."""

    success: bool

    def to_message(self) -> Dict[str, Any]:
        return {"success": bool(self.success)}


def require_request(message: Any) -> TriggerRequest:
    """Strict form of parse_request.

    Extra keys are tolerated; only the discriminant matters.

    Raises:
        MalformedMessage: message is not a dict or has the wrong "type"
    """
    if not isinstance(message, dict):
        raise MalformedMessage("Message is not an object", detail=type(message).__name__)
    if message.get("type") != TRIGGER_PIP:
        raise MalformedMessage("Unexpected message type", detail=repr(message.get("type")))
    return TriggerRequest()


def parse_request(message: Any) -> Optional[TriggerRequest]:
    """Return a TriggerRequest if message is {"type": "TRIGGER_PIP"}, else None."""
    try:
        return require_request(message)
    except MalformedMessage:
        return None


def interpret_response(response: Any) -> str:
    """Classify a raw response as success, failure or indeterminate."""
    if not isinstance(response, dict):
        return OUTCOME_INDETERMINATE
    success = response.get("success")
    # bool only: 1 / "true" are not accepted as success
    if not isinstance(success, bool):
        return OUTCOME_INDETERMINATE
    return OUTCOME_SUCCESS if success else OUTCOME_FAILURE
