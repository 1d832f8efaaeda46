"""Page eligibility - which tabs can never receive a trigger

Browser-internal pages, extension pages and extension marketplaces do not
allow code in the page. The Dispatcher short-circuits to failure for them
without attempting delivery.

Eligibility is DERIVED from the URL, never stored.
"""

import logging
from typing import Iterable, Optional, Tuple
from urllib.parse import urlsplit


DENIED_SCHEMES = frozenset({
    "about",
    "brave",
    "chrome",
    "chrome-extension",
    "chrome-search",
    "chrome-untrusted",
    "devtools",
    "edge",
    "extension",
    "moz-extension",
    "opera",
    "view-source",
    "vivaldi",
})

# host, or host + path prefix
DENIED_LOCATIONS = (
    "chromewebstore.google.com",
    "chrome.google.com/webstore",
    "microsoftedge.microsoft.com/addons",
    "addons.mozilla.org",
    "addons.opera.com",
)


class EligibilityChecker:
    """Denylist matcher for tab URLs."""

    def __init__(self, extra: Iterable[str] = ()):
        self._extra: Tuple[str, ...] = tuple(e.strip().lower() for e in extra if e and e.strip())

    def is_eligible(self, url: Optional[str]) -> bool:
        """True if a trigger may be delivered to a page at this URL."""
        return self.blocked_by(url) is None

    def blocked_by(self, url: Optional[str]) -> Optional[str]:
        """Return the denylist entry matching url, or None if eligible."""
        if not url:
            return "<empty url>"

        lowered = url.strip().lower()
        try:
            parts = urlsplit(lowered)
        except ValueError as e:
            logging.debug(f"Unparseable URL treated as ineligible: {e}")
            return "<unparseable url>"

        if parts.scheme in DENIED_SCHEMES:
            return f"{parts.scheme}:"

        location = f"{parts.hostname or ''}{parts.path or ''}"
        for entry in DENIED_LOCATIONS:
            if _location_matches(location, entry):
                return entry

        for entry in self._extra:
            if lowered.startswith(entry) or _location_matches(location, entry):
                return entry

        return None


def _location_matches(location: str, entry: str) -> bool:
    if location == entry:
        return True
    # Prefix match only on a path/host boundary
    return location.startswith(entry) and location[len(entry)] in "/?#"
