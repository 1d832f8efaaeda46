"""Abstract Browser Backend Interface

Private abstraction layer for browser automation.
NOT a tool. NOT user-configurable directly.

RESPONSIBILITY:
- Define interface for browser operations
- Hand out the page model (scopes, PiP capability) for a page
- Allow backend swapping without agent changes

DOES NOT:
- Make policy decisions (PipConfig's job)
- Track sessions (BrowserSessionManager's job)
- Select or activate videos (agents' job)
"""

from abc import ABC, abstractmethod
from typing import Any, Tuple, Optional

from pip_anywhere.agents.dom import DocumentScope, PiPCapability


class AbstractBrowserBackend(ABC):
    """Interface for browser automation backends.

    Implementations:
    - PlaywrightEngine (playwright.py)

    All methods are synchronous.
    """

    @abstractmethod
    def launch(
        self,
        browser_type: str,
        headless: bool = False,
        user_data_dir: str = "auto"
    ) -> Tuple[Any, Any, Any]:
        """Launch a browser and return (browser, context, page).

        Args:
            browser_type: chromium | chrome | edge | firefox
            headless: Run in headless mode
            user_data_dir: "auto" | "isolated" | path

        Returns:
            (browser_instance, browser_context, page)
        """
        raise NotImplementedError

    @abstractmethod
    def navigate(self, page: Any, url: str, timeout_ms: int = 10000) -> bool:
        """Navigate to URL. True if the page ended up on url."""
        raise NotImplementedError

    @abstractmethod
    def get_url(self, page: Any) -> str:
        """Get current page URL."""
        raise NotImplementedError

    @abstractmethod
    def is_foreground(self, page: Any) -> Tuple[bool, bool]:
        """(visible, focused) for a page; (False, False) if it cannot be probed."""
        raise NotImplementedError

    @abstractmethod
    def document_scope(self, page: Any) -> Optional[DocumentScope]:
        """Top DocumentScope of the page, fresh for this call."""
        raise NotImplementedError

    @abstractmethod
    def pip_capability(self, page: Any) -> PiPCapability:
        """The page's picture-in-picture slot."""
        raise NotImplementedError

    @abstractmethod
    def close(self, browser: Any) -> None:
        """Close browser instance."""
        raise NotImplementedError
