"""Message Channel - controller <-> page agent transport

Mirrors the extension messaging model: one responder per tab, one request
and one response per delivery.

RESPONSIBILITY:
- Track tab_id -> responder
- Deliver a message and hand the responder a one-shot ReplySlot
- Report absence of a responder synchronously (DeliveryFailure)

DOES NOT:
- Interpret messages (protocol's job)
- Retry (no retries anywhere in the pipeline)
"""

import logging
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from pip_anywhere.core.errors import DeliveryFailure, ResponseChannelClosed


_UNSET = object()


class ReplySlot:
    """One-shot response handle passed to a responder.

    INVARIANT: at most one value is ever accepted.
    """

    def __init__(self, tab_id: str):
        self.tab_id = tab_id
        self._value: Any = _UNSET
        self._closed = False
        self._lock = Lock()

    def send(self, value: Any) -> None:
        with self._lock:
            if self._closed:
                raise ResponseChannelClosed(f"Reply channel for tab {self.tab_id} is closed")
            if self._value is not _UNSET:
                raise ResponseChannelClosed(f"Reply for tab {self.tab_id} already sent")
            self._value = value

    def close(self) -> None:
        with self._lock:
            self._closed = True

    @property
    def answered(self) -> bool:
        return self._value is not _UNSET

    @property
    def value(self) -> Any:
        """The response, or None if the responder never answered."""
        return None if self._value is _UNSET else self._value


# responder(message, sender_id, reply) -> None
Responder = Callable[[Dict[str, Any], Optional[str], ReplySlot], None]


class MessageChannel:
    """Routes messages from the controller to per-tab responders."""

    def __init__(self):
        self._responders: Dict[str, Responder] = {}
        self._pending: Dict[str, List[ReplySlot]] = {}
        self._lock = Lock()

    def register(self, tab_id: str, responder: Responder) -> None:
        with self._lock:
            self._responders[tab_id] = responder
        logging.debug(f"Responder registered for tab {tab_id}")

    def unregister(self, tab_id: str) -> None:
        """Remove a tab's responder and close any reply still outstanding."""
        with self._lock:
            self._responders.pop(tab_id, None)
            pending = self._pending.pop(tab_id, [])
        for slot in pending:
            slot.close()
        logging.debug(f"Responder removed for tab {tab_id}")

    def has_responder(self, tab_id: str) -> bool:
        return tab_id in self._responders

    def send(self, tab_id: str, message: Dict[str, Any], sender_id: Optional[str] = None) -> Any:
        """Deliver message to the tab's responder and return its reply.

        Raises:
            DeliveryFailure: no responder for tab_id
        """
        with self._lock:
            responder = self._responders.get(tab_id)
            if responder is None:
                raise DeliveryFailure(
                    "Could not establish connection. Receiving end does not exist.",
                    detail=f"tab {tab_id}",
                )
            slot = ReplySlot(tab_id)
            self._pending.setdefault(tab_id, []).append(slot)

        try:
            responder(message, sender_id, slot)
        finally:
            with self._lock:
                pending = self._pending.get(tab_id)
                if pending and slot in pending:
                    pending.remove(slot)
            slot.close()

        if not slot.answered:
            logging.debug(f"Responder for tab {tab_id} returned without replying")
        return slot.value
