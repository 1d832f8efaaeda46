import pytest

from pip_anywhere.agents.dom import (
    CandidateElement,
    DocumentScope,
    PiPCapability,
    PlaybackState,
    Rect,
)
from pip_anywhere.core.errors import EntryRejected
from pip_anywhere.core.pip_config import PipConfig, PipSettings


class FakeVideo(CandidateElement):
    """In-memory <video> with fixed geometry and playback state."""

    def __init__(self, key, intrinsic=(0, 0), rect=(0, 0), paused=True, ended=False,
                 ready_state=0, blocked=False):
        self.key = key
        self.intrinsic = intrinsic
        self.rect = Rect(0, 0, rect[0], rect[1])
        self.state = PlaybackState(paused=paused, ended=ended, ready_state=ready_state)
        self.blocked = blocked
        self.cleared = False

    @property
    def element_key(self):
        return self.key

    def intrinsic_size(self):
        return self.intrinsic

    def layout_rect(self):
        return self.rect

    def playback_state(self):
        return self.state

    def pip_blocked(self):
        return self.blocked

    def clear_pip_block(self):
        self.blocked = False
        self.cleared = True


def playing_video(key, intrinsic=(0, 0), rect=(640, 360), **kwargs):
    kwargs.setdefault("ready_state", 4)
    return FakeVideo(key, intrinsic=intrinsic, rect=rect, paused=False, **kwargs)


class FakeScope(DocumentScope):
    """Document / shadow root / frame document with fixed children."""

    def __init__(self, key, videos=None, shadows=None, frames=None, kind="document"):
        self.key = key
        self.kind = kind
        self.videos = list(videos or [])
        self.shadows = list(shadows or [])
        self.frames = list(frames or [])
        self.visits = 0
        self.released = 0

    @property
    def scope_key(self):
        return self.key

    def media_elements(self):
        self.visits += 1
        return list(self.videos)

    def shadow_roots(self):
        return list(self.shadows)

    def frame_documents(self):
        return list(self.frames)

    def release(self):
        self.released += 1


class FakeCapability(PiPCapability):
    """PiP slot that records requests instead of opening a window."""

    def __init__(self, enabled=True, active=None, reject=None):
        self._enabled = enabled
        self.active = active
        self.reject = reject
        self.requests = []
        self.exits = 0

    def enabled(self):
        return self._enabled

    def active_element_key(self):
        return self.active

    def request(self, element):
        self.requests.append(element.element_key)
        if self.reject:
            raise EntryRejected("requestPictureInPicture() rejected", detail=self.reject)
        self.active = element.element_key

    def exit(self):
        self.exits += 1
        self.active = None


def make_settings(**overrides):
    values = dict(PipConfig.DEFAULTS)
    values.update(overrides)
    values["denylist_extra"] = tuple(values["denylist_extra"])
    return PipSettings(**values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture(autouse=True)
def reset_singletons(monkeypatch):
    """Each test starts from a fresh config; sessions/controller are never real."""
    from pip_anywhere.core.browser_session_manager import BrowserSessionManager
    from pip_anywhere.core.controller import PipController

    monkeypatch.delenv("PIP_ANYWHERE_CONFIG", raising=False)
    monkeypatch.setattr(PipConfig, "_instance", None)
    monkeypatch.setattr(PipConfig, "_settings", None)
    monkeypatch.setattr(PipConfig, "_path_override", None)
    monkeypatch.setattr(BrowserSessionManager, "_instance", None)
    monkeypatch.setattr(PipController, "_instance", None)
    yield


