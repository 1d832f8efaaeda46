"""Playwright adapters for the page model

Implements DocumentScope / CandidateElement / PiPCapability over
Playwright JS and element handles. Every read goes to the live page, so
geometry and playback state are current at call time.

Node identity: a WeakMap installed on the top window hands out integer
keys, so the same node (or shadow root / frame document) always maps to
the same key for the lifetime of the page.
"""

import logging
from typing import Any, Dict, Hashable, Iterator, List, Optional, Tuple, Union

from pip_anywhere.agents.dom import (
    INACCESSIBLE,
    CandidateElement,
    DocumentScope,
    InaccessibleScope,
    PiPCapability,
    PlaybackState,
    Rect,
)
from pip_anywhere.core.errors import EntryRejected, PipError


_KEY_OF = """
(node) => {
    const top = window;
    if (!top.__pipAnywhereKeyOf) {
        const keys = new WeakMap();
        let next = 1;
        top.__pipAnywhereKeyOf = (n) => {
            if (!keys.has(n)) keys.set(n, next++);
            return keys.get(n);
        };
    }
    return top.__pipAnywhereKeyOf(node);
}
"""

_MEDIA_ELEMENTS = """
(root) => Array.from(root.querySelectorAll('video')).filter((el) => {
    const view = (el.ownerDocument && el.ownerDocument.defaultView) || window;
    return el instanceof view.HTMLVideoElement;
})
"""

_SHADOW_ROOTS = """
(root) => Array.from(root.querySelectorAll('*'))
    .map((el) => el.shadowRoot)
    .filter(Boolean)
"""

# null for cross-origin frames (contentDocument is null or throws)
_FRAME_DOCUMENTS = """
(root) => Array.from(root.querySelectorAll('iframe, frame')).map((frame) => {
    try {
        return frame.contentDocument || null;
    } catch (err) {
        return null;
    }
})
"""

_PROBE = """
(el) => {
    const rect = el.getBoundingClientRect();
    return {
        videoWidth: el.videoWidth || 0,
        videoHeight: el.videoHeight || 0,
        rect: {x: rect.x, y: rect.y, width: rect.width, height: rect.height},
        paused: el.paused,
        ended: el.ended,
        readyState: el.readyState,
        blocked: el.hasAttribute('disablePictureInPicture'),
    };
}
"""

_FIND_PIP_ELEMENT = """
() => {
    const seen = new Set();
    const find = (doc) => {
        let el = doc.pictureInPictureElement;
        while (el && el.shadowRoot && el.shadowRoot.pictureInPictureElement) {
            el = el.shadowRoot.pictureInPictureElement;
        }
        if (el) return el;
        for (const frame of doc.querySelectorAll('iframe, frame')) {
            let inner = null;
            try { inner = frame.contentDocument; } catch (err) { inner = null; }
            if (inner && !seen.has(inner)) {
                seen.add(inner);
                const found = find(inner);
                if (found) return found;
            }
        }
        return null;
    };
    return find(document);
}
"""

_REQUEST_PIP = """
(el) => el.requestPictureInPicture().then(
    () => null,
    (err) => String((err && err.message) || err)
)
"""

_EXIT_PIP = """
() => document.pictureInPictureElement
    ? document.exitPictureInPicture().then(() => null, (err) => String((err && err.message) || err))
    : null
"""


def _key_of(handle: Any) -> int:
    return handle.evaluate(_KEY_OF)


def _array_items(array_handle: Any) -> List[Any]:
    """Split a JS array handle into item handles, in index order."""
    properties: Dict[str, Any] = array_handle.get_properties()
    indexed = sorted(
        ((int(name), item) for name, item in properties.items() if name.isdigit()),
        key=lambda pair: pair[0],
    )
    array_handle.dispose()
    return [item for _, item in indexed]


class PlaywrightVideoElement(CandidateElement):
    """A <video> behind a Playwright ElementHandle."""

    def __init__(self, handle: Any):
        self.handle = handle
        self._key: Optional[int] = None

    @property
    def element_key(self) -> Hashable:
        if self._key is None:
            self._key = _key_of(self.handle)
        return self._key

    def _probe(self) -> Dict[str, Any]:
        return self.handle.evaluate(_PROBE)

    def intrinsic_size(self) -> Tuple[int, int]:
        probe = self._probe()
        return int(probe["videoWidth"]), int(probe["videoHeight"])

    def layout_rect(self) -> Rect:
        rect = self._probe()["rect"]
        return Rect(rect["x"], rect["y"], rect["width"], rect["height"])

    def playback_state(self) -> PlaybackState:
        probe = self._probe()
        return PlaybackState(
            paused=bool(probe["paused"]),
            ended=bool(probe["ended"]),
            ready_state=int(probe["readyState"]),
        )

    def pip_blocked(self) -> bool:
        return bool(self._probe()["blocked"])

    def clear_pip_block(self) -> None:
        self.handle.evaluate("(el) => el.removeAttribute('disablePictureInPicture')")


class PlaywrightDocumentScope(DocumentScope):
    """A Document or ShadowRoot behind a Playwright JSHandle.

    Handles created while walking down from a root are recorded on the
    root's list and disposed together by release().
    """

    def __init__(self, handle: Any, kind: str = "document", owned: Optional[List[Any]] = None):
        self.handle = handle
        self.kind = kind
        self._key: Optional[int] = None
        # Child scopes share the root's list; their handles are already on it
        self._owned: List[Any] = owned if owned is not None else [handle]

    @property
    def scope_key(self) -> Hashable:
        if self._key is None:
            self._key = _key_of(self.handle)
        return self._key

    def _items(self, script: str) -> List[Any]:
        items = _array_items(self.handle.evaluate_handle(script))
        self._owned.extend(items)
        return items

    def media_elements(self) -> Iterator[CandidateElement]:
        for item in self._items(_MEDIA_ELEMENTS):
            element = item.as_element()
            if element is not None:
                yield PlaywrightVideoElement(element)

    def shadow_roots(self) -> Iterator[DocumentScope]:
        for item in self._items(_SHADOW_ROOTS):
            yield PlaywrightDocumentScope(item, kind="shadow", owned=self._owned)

    def frame_documents(self) -> Iterator[Union[DocumentScope, InaccessibleScope]]:
        for item in self._items(_FRAME_DOCUMENTS):
            if item.evaluate("(doc) => doc === null"):
                yield INACCESSIBLE
            else:
                yield PlaywrightDocumentScope(item, kind="frame", owned=self._owned)

    def release(self) -> None:
        released = 0
        while self._owned:
            handle = self._owned.pop()
            try:
                handle.dispose()
                released += 1
            except Exception as e:
                # Page navigated or closed; the handle is gone already
                logging.debug(f"Could not dispose handle: {e}")
        logging.debug(f"Released {released} page handle(s)")


class PlaywrightPiPCapability(PiPCapability):
    """document.pictureInPicture* surface of a Playwright page."""

    def __init__(self, page: Any):
        self.page = page

    def enabled(self) -> bool:
        return bool(self.page.evaluate("() => document.pictureInPictureEnabled === true"))

    def active_element_key(self) -> Optional[Hashable]:
        handle = self.page.evaluate_handle(_FIND_PIP_ELEMENT)
        try:
            element = handle.as_element()
            if element is None:
                return None
            return _key_of(element)
        finally:
            handle.dispose()

    def request(self, element: CandidateElement) -> None:
        if not isinstance(element, PlaywrightVideoElement):
            raise EntryRejected("requestPictureInPicture() needs a page video element")
        try:
            rejection = element.handle.evaluate(_REQUEST_PIP)
        except Exception as e:
            # Execution context destroyed, element detached, ...
            raise EntryRejected("requestPictureInPicture() failed", detail=str(e))
        if rejection is not None:
            raise EntryRejected("requestPictureInPicture() rejected", detail=str(rejection))

    def exit(self) -> None:
        try:
            rejection = self.page.evaluate(_EXIT_PIP)
        except Exception as e:
            raise PipError("exitPictureInPicture() failed", detail=str(e))
        if rejection is not None:
            raise PipError("exitPictureInPicture() rejected", detail=str(rejection))
        logging.debug("exitPictureInPicture() resolved")
