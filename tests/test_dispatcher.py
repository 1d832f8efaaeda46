"""Dispatcher: active tab, denylist, delivery and the full round trip."""

import logging

from pip_anywhere.agents.page_agent import PageAgent
from pip_anywhere.core.channel import MessageChannel
from pip_anywhere.core.dispatcher import Dispatcher, TabInfo

from conftest import FakeCapability, FakeScope, FakeVideo, make_settings, playing_video


def make_dispatcher(tab=None, channel=None):
    channel = channel or MessageChannel()
    return Dispatcher(lambda: tab, channel, controller_id="ctl"), channel


def register_agent(channel, tab_id, root, capability, **overrides):
    agent = PageAgent(
        scope_factory=lambda: root,
        capability=capability,
        settings=make_settings(**overrides),
        controller_id="ctl",
    )
    channel.register(tab_id, agent.on_message)
    return agent


def test_round_trip_selects_main_video():
    root = FakeScope("doc", videos=[
        playing_video("hd", intrinsic=(1920, 1080), rect=(1280, 720)),
        FakeVideo("sd", intrinsic=(640, 360), rect=(640, 360)),
    ])
    capability = FakeCapability()
    dispatcher, channel = make_dispatcher(TabInfo("t1", "https://video.example.com/watch"))
    register_agent(channel, "t1", root, capability)

    result = dispatcher.trigger()

    assert result.success is True
    assert result.reason == "ok"
    assert result.tab_id == "t1"
    assert capability.requests == ["hd"]


def test_no_active_tab_fails_without_delivery():
    dispatcher, channel = make_dispatcher(tab=None)
    calls = []
    channel.register("t1", lambda *args: calls.append(args))

    result = dispatcher.trigger()

    assert result.success is False
    assert result.reason == "no_active_tab"
    assert calls == []


def test_resolver_error_is_internal_failure():
    def broken():
        raise RuntimeError("browser gone")

    dispatcher = Dispatcher(broken, MessageChannel())
    result = dispatcher.trigger()

    assert result.success is False
    assert result.reason == "internal_error"


def test_denylisted_page_is_never_contacted():
    root = FakeScope("doc", videos=[playing_video("v")])
    capability = FakeCapability()
    dispatcher, channel = make_dispatcher(TabInfo("t1", "chrome://extensions"))
    register_agent(channel, "t1", root, capability)

    result = dispatcher.trigger()

    assert result.success is False
    assert result.reason == "ineligible_page"
    assert root.visits == 0
    assert capability.requests == []


def test_missing_responder_is_delivery_failure(caplog):
    dispatcher, _ = make_dispatcher(TabInfo("t1", "https://example.com"))

    with caplog.at_level(logging.WARNING):
        result = dispatcher.trigger()

    assert result.success is False
    assert result.reason == "delivery_failure"
    assert "Could not contact page agent" in caplog.text


def test_explicit_page_failure_is_distinguished_from_delivery():
    dispatcher, channel = make_dispatcher(TabInfo("t1", "https://example.com"))
    register_agent(channel, "t1", FakeScope("doc"), FakeCapability())

    result = dispatcher.trigger()

    assert result.success is False
    assert result.reason == "page_failure"


def test_malformed_response_is_indeterminate():
    dispatcher, channel = make_dispatcher(TabInfo("t1", "https://example.com"))
    channel.register("t1", lambda message, sender, reply: reply.send({"success": "yes"}))

    result = dispatcher.trigger()

    assert result.success is False
    assert result.reason == "indeterminate"


def test_silent_responder_is_indeterminate():
    dispatcher, channel = make_dispatcher(TabInfo("t1", "https://example.com"))
    channel.register("t1", lambda message, sender, reply: None)

    assert dispatcher.trigger().reason == "indeterminate"


def test_request_carries_exact_message_and_sender():
    seen = []
    dispatcher, channel = make_dispatcher(TabInfo("t1", "https://example.com"))

    def responder(message, sender, reply):
        seen.append((message, sender))
        reply.send({"success": True})

    channel.register("t1", responder)
    assert dispatcher.trigger().success
    assert seen == [({"type": "TRIGGER_PIP"}, "ctl")]


def test_capability_disabled_round_trip_fails():
    dispatcher, channel = make_dispatcher(TabInfo("t1", "https://example.com"))
    agent = register_agent(channel, "t1", FakeScope("doc", videos=[playing_video("v")]),
                           FakeCapability(enabled=False))

    assert dispatcher.trigger().success is False
    assert agent.last_result.reason == "capability_unavailable"


def test_shortcut_command_triggers_and_unknown_is_ignored():
    dispatcher, channel = make_dispatcher(TabInfo("t1", "https://example.com"))
    register_agent(channel, "t1", FakeScope("doc", videos=[playing_video("v")]), FakeCapability())

    assert dispatcher.handle_command("other-command") is None

    result = dispatcher.handle_command("trigger-pip")
    assert result.success is True
    assert result.source == "shortcut"


def test_system_stays_ready_after_failure():
    tab = {"info": TabInfo("t1", "about:blank")}
    channel = MessageChannel()
    dispatcher = Dispatcher(lambda: tab["info"], channel)
    register_agent(channel, "t1", FakeScope("doc", videos=[playing_video("v")]), FakeCapability())

    assert dispatcher.trigger().success is False

    tab["info"] = TabInfo("t1", "https://example.com/watch")
    assert dispatcher.trigger().success is True
