"""Wire schema and the one-shot message channel."""

import pytest

from pip_anywhere.core.channel import MessageChannel, ReplySlot
from pip_anywhere.core.errors import DeliveryFailure, MalformedMessage, ResponseChannelClosed
from pip_anywhere.core.protocol import (
    OUTCOME_FAILURE,
    OUTCOME_INDETERMINATE,
    OUTCOME_SUCCESS,
    TriggerRequest,
    TriggerResponse,
    interpret_response,
    parse_request,
    require_request,
)


def test_request_wire_format_is_exact():
    assert TriggerRequest().to_message() == {"type": "TRIGGER_PIP"}


def test_response_wire_format_is_exact():
    assert TriggerResponse(True).to_message() == {"success": True}
    assert TriggerResponse(False).to_message() == {"success": False}


def test_parse_request_accepts_only_exact_discriminant():
    assert parse_request({"type": "TRIGGER_PIP"}) == TriggerRequest()
    assert parse_request({"type": "TRIGGER_PIP", "extra": 1}) == TriggerRequest()
    assert parse_request({"type": "trigger_pip"}) is None
    assert parse_request(["TRIGGER_PIP"]) is None
    assert parse_request(None) is None


def test_require_request_raises_malformed_message():
    assert require_request({"type": "TRIGGER_PIP"}) == TriggerRequest()

    with pytest.raises(MalformedMessage) as info:
        require_request({"type": "OTHER"})
    assert info.value.reason == "malformed_message"
    assert "OTHER" in str(info.value)

    with pytest.raises(MalformedMessage):
        require_request("TRIGGER_PIP")


@pytest.mark.parametrize("response,expected", [
    ({"success": True}, OUTCOME_SUCCESS),
    ({"success": False}, OUTCOME_FAILURE),
    ({"success": 1}, OUTCOME_INDETERMINATE),
    ({"success": "true"}, OUTCOME_INDETERMINATE),
    ({}, OUTCOME_INDETERMINATE),
    (None, OUTCOME_INDETERMINATE),
    (True, OUTCOME_INDETERMINATE),
])
def test_interpret_response(response, expected):
    assert interpret_response(response) == expected


def test_reply_slot_accepts_one_value():
    slot = ReplySlot("t")
    slot.send({"success": True})
    with pytest.raises(ResponseChannelClosed):
        slot.send({"success": False})
    assert slot.value == {"success": True}


def test_send_without_responder_fails_synchronously():
    channel = MessageChannel()
    with pytest.raises(DeliveryFailure):
        channel.send("missing", {"type": "TRIGGER_PIP"})


def test_send_returns_responder_reply_and_passes_sender():
    channel = MessageChannel()
    seen = {}

    def responder(message, sender_id, reply):
        seen["message"] = message
        seen["sender"] = sender_id
        reply.send({"success": True})

    channel.register("t", responder)
    assert channel.send("t", {"type": "TRIGGER_PIP"}, sender_id="ctl") == {"success": True}
    assert seen == {"message": {"type": "TRIGGER_PIP"}, "sender": "ctl"}


def test_silent_responder_yields_none():
    channel = MessageChannel()
    channel.register("t", lambda message, sender_id, reply: None)
    assert channel.send("t", {"type": "OTHER"}) is None


def test_unregister_closes_pending_reply():
    channel = MessageChannel()
    errors = []

    def navigating_away(message, sender_id, reply):
        channel.unregister("t")
        try:
            reply.send({"success": True})
        except ResponseChannelClosed as e:
            errors.append(e)

    channel.register("t", navigating_away)
    assert channel.send("t", {"type": "TRIGGER_PIP"}) is None
    assert len(errors) == 1
    assert not channel.has_responder("t")
