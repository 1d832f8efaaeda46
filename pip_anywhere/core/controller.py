"""PiP Controller - composition root of the controller context

Owns the message channel, the agent injector and the Dispatcher, and ties
them to the session manager.

Usage:
    controller = PipController.get()
    controller.open("https://example.com/watch")
    result = controller.trigger("toolbar")
"""

import logging
import uuid
from threading import Lock
from typing import Optional

from pip_anywhere.agents.injector import AgentInjector
from pip_anywhere.core.browser_session_manager import BrowserSession, BrowserSessionManager
from pip_anywhere.core.channel import MessageChannel
from pip_anywhere.core.dispatcher import DispatchResult, Dispatcher
from pip_anywhere.core.eligibility import EligibilityChecker
from pip_anywhere.core.pip_config import PipConfig


class PipController:
    """Singleton controller."""

    _instance: Optional["PipController"] = None
    _lock = Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._setup()
                    cls._instance = instance
        return cls._instance

    @classmethod
    def get(cls) -> "PipController":
        return cls()

    def _setup(self) -> None:
        self.controller_id = f"pip-anywhere-{uuid.uuid4().hex[:8]}"
        self.manager = BrowserSessionManager.get()
        self.channel = MessageChannel()
        self.injector = AgentInjector(self.channel, self.manager.engine, self.controller_id)
        self.manager.on_session_created(self.injector.attach)
        self.dispatcher = Dispatcher(
            resolve_active_tab=self.manager.active_tab,
            channel=self.channel,
            eligibility=EligibilityChecker(PipConfig.get().settings.denylist_extra),
            controller_id=self.controller_id,
        )

    def open(self, url: Optional[str] = None, browser_type: Optional[str] = None) -> BrowserSession:
        """Ensure a browser session exists and optionally load url in its current tab."""
        session = self.manager.get_or_create(browser_type=browser_type)
        if url:
            timeout_ms = PipConfig.get().settings.timeout_ms
            if not self.manager.engine.navigate(session.page, url, timeout_ms=timeout_ms):
                logging.warning(f"Could not load {url}")
        return session

    def trigger(self, source: str = "toolbar") -> DispatchResult:
        return self.dispatcher.trigger(source=source)

    def handle_command(self, command: str) -> Optional[DispatchResult]:
        return self.dispatcher.handle_command(command)

    def shutdown(self) -> None:
        self.manager.shutdown()

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton (for testing)."""
        with cls._lock:
            cls._instance = None
