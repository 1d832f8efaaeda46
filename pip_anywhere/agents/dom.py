"""Abstract Page Model

Private abstraction over the live page, modeled on the engine's
AbstractBrowserBackend. The Locator, Selector and Activator only ever
see these interfaces; the Playwright adapters implement them and tests
substitute fakes.

RESPONSIBILITY:
- Describe candidate media elements (geometry, playback, PiP opt-out)
- Describe traversable scopes (document, shadow root, frame document)
- Describe the page-wide PiP capability (the single PiP slot)

DOES NOT:
- Decide anything (Selector / Activator do)
- Hold references past one selection pass
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Hashable, Iterable, Optional, Tuple, Union


class ReadyState(IntEnum):
    """HTMLMediaElement.readyState ordinals."""
    HAVE_NOTHING = 0
    HAVE_METADATA = 1
    HAVE_CURRENT_DATA = 2
    HAVE_FUTURE_DATA = 3
    HAVE_ENOUGH_DATA = 4


@dataclass(frozen=True)
class Rect:
    """Layout rectangle at query time (getBoundingClientRect)."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass(frozen=True)
class PlaybackState:
    paused: bool = True
    ended: bool = False
    ready_state: int = ReadyState.HAVE_NOTHING


class CandidateElement(ABC):
    """A playable-media node, referenced for the duration of one pass."""

    @property
    @abstractmethod
    def element_key(self) -> Hashable:
        """Stable identity of the node within the page lifetime."""
        raise NotImplementedError

    @abstractmethod
    def intrinsic_size(self) -> Tuple[int, int]:
        """(videoWidth, videoHeight); (0, 0) if not yet loaded."""
        raise NotImplementedError

    @abstractmethod
    def layout_rect(self) -> Rect:
        raise NotImplementedError

    @abstractmethod
    def playback_state(self) -> PlaybackState:
        raise NotImplementedError

    @abstractmethod
    def pip_blocked(self) -> bool:
        """True if the page set disablePictureInPicture on the node."""
        raise NotImplementedError

    @abstractmethod
    def clear_pip_block(self) -> None:
        raise NotImplementedError

    def describe(self) -> str:
        """Short label for logs."""
        width, height = self.intrinsic_size()
        return f"<video #{self.element_key} {width}x{height}>"


class InaccessibleScope:
    """A frame whose document cannot be read (cross-origin).

    Returned in place of a DocumentScope so traversal can skip it as an
    ordinary value.
    """

    _instance: Optional["InaccessibleScope"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "INACCESSIBLE"


INACCESSIBLE = InaccessibleScope()


class DocumentScope(ABC):
    """A traversable root: top document, shadow root or frame document."""

    kind: str = "document"  # document | shadow | frame

    @property
    @abstractmethod
    def scope_key(self) -> Hashable:
        """Identity used by the visited-set guard."""
        raise NotImplementedError

    @abstractmethod
    def media_elements(self) -> Iterable[CandidateElement]:
        """<video> nodes that are direct members of this scope, in document order."""
        raise NotImplementedError

    @abstractmethod
    def shadow_roots(self) -> Iterable["DocumentScope"]:
        """Shadow roots hosted by elements in this scope."""
        raise NotImplementedError

    @abstractmethod
    def frame_documents(self) -> Iterable[Union["DocumentScope", InaccessibleScope]]:
        """Content documents of embedded frames, or INACCESSIBLE."""
        raise NotImplementedError

    def release(self) -> None:
        """End of pass: drop everything reached from this scope.

        Called on the root only. Elements and scopes handed out during the
        pass must not be used afterwards.
        """


class PiPCapability(ABC):
    """The page-wide picture-in-picture slot.

    Injected into the Activator; the only mutator of PiP state.
    """

    @abstractmethod
    def enabled(self) -> bool:
        """document.pictureInPictureEnabled"""
        raise NotImplementedError

    @abstractmethod
    def active_element_key(self) -> Optional[Hashable]:
        """Key of document.pictureInPictureElement, or None."""
        raise NotImplementedError

    @abstractmethod
    def request(self, element: CandidateElement) -> None:
        """Enter PiP for element.

        Raises:
            EntryRejected: the page rejected the request
        """
        raise NotImplementedError

    @abstractmethod
    def exit(self) -> None:
        """Leave PiP, if any element holds it."""
        raise NotImplementedError
