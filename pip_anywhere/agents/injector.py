"""Agent Injector - keeps one PageAgent registered per loaded tab

Behaves like a content script declaration: every top-level navigation to
an http(s)/file page gets a fresh agent; navigating anywhere else, or
closing the tab, leaves the tab without a responder. Replies still owed
by the old agent are closed when it is replaced.
"""

import logging
from typing import Any, Optional

from pip_anywhere.agents.page_agent import PageAgent
from pip_anywhere.core.channel import MessageChannel
from pip_anywhere.core.pip_config import PipConfig

INJECTABLE_SCHEMES = ("http://", "https://", "file://")


def is_injectable(url: Optional[str]) -> bool:
    return bool(url) and url.lower().startswith(INJECTABLE_SCHEMES)


class AgentInjector:
    """Wires PageAgents for every tab of a session into the channel.

    Args:
        channel: where agents are registered
        engine: backend that hands out the page model for a page
        controller_id: sender id agents accept
    """

    def __init__(self, channel: MessageChannel, engine: Any, controller_id: Optional[str] = None):
        self.channel = channel
        self.engine = engine
        self.controller_id = controller_id

    def attach(self, session: Any) -> None:
        """Inject into the session's current tabs and every future one."""
        for page in session.live_pages():
            self.watch(session, page)
        if session.context is not None:
            session.context.on("page", lambda page: self.watch(session, page))

    def watch(self, session: Any, page: Any) -> None:
        tab_id = session.tab_id_for(page)

        def on_navigated(frame):
            if getattr(frame, "parent_frame", None) is None:
                self.reinject(tab_id, page)

        def on_close(_page=None):
            self.channel.unregister(tab_id)
            session.forget_tab(page)
            logging.debug(f"Tab {tab_id} closed")

        page.on("framenavigated", on_navigated)
        page.on("close", on_close)
        self.reinject(tab_id, page)

    def reinject(self, tab_id: str, page: Any) -> Optional[PageAgent]:
        """Replace the tab's agent to match the page now loaded."""
        self.channel.unregister(tab_id)

        url = self.engine.get_url(page)
        if not is_injectable(url):
            logging.debug(f"Not injecting into {tab_id} ({url})")
            return None

        agent = PageAgent(
            scope_factory=lambda: self.engine.document_scope(page),
            capability=self.engine.pip_capability(page),
            settings=PipConfig.get().settings,
            controller_id=self.controller_id,
        )
        self.channel.register(tab_id, agent.on_message)
        logging.debug(f"Injected page agent into {tab_id} ({url})")
        return agent
