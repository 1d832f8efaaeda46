"""Browser Session Manager - Single Authority for Browser Sessions

Tracks the browser the controller drives and the tabs inside it.

RESPONSIBILITY:
- Create/retrieve browser sessions
- Give every page (tab) a stable tab_id
- Resolve the frontmost tab for the Dispatcher

DOES NOT:
- Decide browser settings (PipConfig's job)
- Deliver messages (MessageChannel's job)
- Know about tools
"""

import itertools
import logging
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Any
from threading import Lock

from pip_anywhere.core.dispatcher import TabInfo


@dataclass
class BrowserSession:
    """A tracked browser session.

    INVARIANT: session_id is always present, even for default sessions.
    """
    session_id: str
    browser_type: str  # chromium, chrome, edge, firefox
    page: Any = None  # Playwright Page object (typed loosely for abstraction)
    context: Any = None  # Playwright BrowserContext
    browser: Any = None  # Playwright Browser instance
    headless: bool = False
    _tab_ids: Dict[int, str] = field(default_factory=dict, repr=False)
    _tab_counter: Any = field(default_factory=lambda: itertools.count(1), repr=False)

    def is_active(self) -> bool:
        """Check if session is still usable.

        Persistent-profile launches return (None, context, page), so a
        missing browser handle alone does NOT mean inactive.
        """
        try:
            if self.browser:
                try:
                    if not self.browser.is_connected():
                        return False
                except Exception:
                    return False

            if not self.context:
                return False

            if not self.page or self.page.is_closed():
                return False

            _ = self.context.pages

            return True
        except Exception:
            return False

    def ensure_page(self) -> bool:
        """Ensure the session has a live page, attempting to heal from context.

        Returns False if the session cannot be healed (no context/browser).
        """
        try:
            if self.context:
                try:
                    pages = list(getattr(self.context, "pages", []) or [])

                    # 1) Cached page is valid only if still in context.pages and open
                    if self.page and any(self.page is p for p in pages):
                        try:
                            if not self.page.is_closed():
                                return True
                        except Exception:
                            pass

                    # 2) Reattach to most-recent live page from context
                    for p in reversed(pages):
                        try:
                            if not p.is_closed():
                                self.page = p
                                logging.info(
                                    f"Healed session {self.session_id}: attached to existing context page"
                                )
                                return True
                        except Exception:
                            continue

                    # 3) No live page found in context; create a new one
                    self.page = self.context.new_page()
                    logging.info(
                        f"Healed session {self.session_id}: created new page from context"
                    )
                    return True
                except Exception as e:
                    logging.info(
                        f"Failed to heal session {self.session_id} from context: {e}"
                    )
                    return False

            if self.page and not getattr(self.page, "is_closed", lambda: False)():
                return True

            return False
        except Exception:
            return False

    def tab_id_for(self, page: Any) -> str:
        """Stable tab id for a page object (assigned on first sight)."""
        key = id(page)
        if key not in self._tab_ids:
            self._tab_ids[key] = f"{self.session_id}-tab{next(self._tab_counter)}"
        return self._tab_ids[key]

    def forget_tab(self, page: Any) -> None:
        self._tab_ids.pop(id(page), None)

    def live_pages(self) -> List[Any]:
        pages = list(getattr(self.context, "pages", []) or []) if self.context else []
        if not pages and self.page is not None:
            pages = [self.page]
        live = []
        for p in pages:
            try:
                if not p.is_closed():
                    live.append(p)
            except Exception:
                continue
        return live

    def active_page(self, probe: Callable[[Any], Any]) -> Optional[Any]:
        """Frontmost page: focused beats visible; the cached page wins ties.

        Args:
            probe: page -> (visible, focused)
        """
        pages = self.live_pages()
        if not pages:
            return None

        ordered = list(reversed(pages))
        if self.page in ordered:
            ordered.remove(self.page)
            ordered.insert(0, self.page)

        first_visible = None
        for p in ordered:
            visible, focused = probe(p)
            if visible and focused:
                return p
            if visible and first_visible is None:
                first_visible = p
        return first_visible


class BrowserSessionManager:
    """Singleton session authority.

    Usage:
        manager = BrowserSessionManager.get()
        session = manager.get_or_create()
        tab = manager.active_tab()
    """

    _instance: Optional["BrowserSessionManager"] = None
    _lock = Lock()

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._sessions: Dict[str, BrowserSession] = {}
                    cls._instance._default_session_id: Optional[str] = None
                    cls._instance._engine = None
                    cls._instance._on_created: List[Callable[[BrowserSession], None]] = []
        return cls._instance

    @classmethod
    def get(cls) -> "BrowserSessionManager":
        """Get singleton instance."""
        return cls()

    @property
    def engine(self):
        """Lazily initialize browser engine."""
        if self._engine is None:
            from pip_anywhere.tools.browsers._engine.playwright import PlaywrightEngine
            self._engine = PlaywrightEngine()
        return self._engine

    def on_session_created(self, callback: Callable[[BrowserSession], None]) -> None:
        """Run callback for every session created from now on."""
        self._on_created.append(callback)

    def get_or_create(
        self,
        session_id: Optional[str] = None,
        browser_type: Optional[str] = None
    ) -> BrowserSession:
        """Get existing session or create new one.

        Args:
            session_id: Optional specific session to retrieve/create.
                        If None, uses the default session (creates if needed).
            browser_type: Override default browser (from PipConfig).
        """
        from pip_anywhere.core.pip_config import PipConfig
        config = PipConfig.get().settings

        if session_id is None:
            session_id = self._default_session_id or str(uuid.uuid4())[:8]

        if session_id in self._sessions:
            existing = self._sessions[session_id]
            try:
                if existing.ensure_page():
                    logging.info(f"Reusing existing session: {session_id}")
                    return existing
                else:
                    logging.info(f"Session {session_id} not recoverable, recreating")
                    self._cleanup_session(session_id)
            except Exception as e:
                logging.info(f"Error while attempting to heal session {session_id}: {e}")
                self._cleanup_session(session_id)

        browser_type = browser_type or config.default_browser

        browser, context, page = self.engine.launch(
            browser_type=browser_type,
            headless=config.headless,
            user_data_dir=config.user_data_dir
        )

        session = BrowserSession(
            session_id=session_id,
            browser_type=browser_type,
            page=page,
            context=context,
            browser=browser,
            headless=config.headless
        )

        self._sessions[session_id] = session
        if self._default_session_id is None:
            self._default_session_id = session_id

        logging.info(f"Created new browser session: {session_id} ({browser_type})")

        for callback in self._on_created:
            callback(session)
        return session

    def get_session(self, session_id: Optional[str] = None) -> Optional[BrowserSession]:
        """Get a session by ID, or the default one (None if not found/inactive)."""
        session_id = session_id or self._default_session_id
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session:
            if session.is_active() or session.ensure_page():
                return session
            self._sessions.pop(session_id, None)
            if self._default_session_id == session_id:
                self._default_session_id = None
        return None

    def active_tab(self, session_id: Optional[str] = None) -> Optional[TabInfo]:
        """Frontmost tab of a session, or None if there is none."""
        session = self.get_session(session_id)
        if session is None:
            return None
        page = session.active_page(self.engine.is_foreground)
        if page is None:
            return None
        return TabInfo(tab_id=session.tab_id_for(page), url=self.engine.get_url(page))

    def close_session(self, session_id: str) -> bool:
        """Close and untrack a session."""
        if session_id not in self._sessions:
            return False

        self._cleanup_session(session_id)
        logging.info(f"Closed browser session: {session_id}")
        return True

    def _cleanup_session(self, session_id: str) -> None:
        if session_id not in self._sessions:
            return

        session = self._sessions[session_id]

        try:
            if session.context:
                session.context.close()
            if session.browser:
                self.engine.close(session.browser)
        except Exception as e:
            logging.warning(f"Error closing session {session_id}: {e}")

        del self._sessions[session_id]

        if self._default_session_id == session_id:
            self._default_session_id = None

    def close_all(self) -> int:
        """Close all sessions (for cleanup/shutdown)."""
        count = 0
        for session_id in list(self._sessions.keys()):
            if self.close_session(session_id):
                count += 1
        return count

    def shutdown(self) -> None:
        """Gracefully shut down all sessions and Playwright.

        CRITICAL: sync_playwright().start() MUST be matched with .stop().
        Call this on program exit.
        """
        self.close_all()

        if self._engine:
            try:
                self._engine.shutdown()
            except Exception as e:
                logging.warning(f"Error shutting down engine: {e}")
            self._engine = None

        logging.info("BrowserSessionManager shutdown complete")
