"""
Browser Manager - attach to a running Chrome and hand out page handles.

Handles:
- Listing page targets over the remote-debugging HTTP endpoint
- Opening and closing tabs
- Owning the session cache for those tabs (detach on close)
"""

import logging
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote

import httpx

from .cdp import CDPClient
from .config import Settings
from .session import SessionCache

logger = logging.getLogger(__name__)


class BrowserError(Exception):
    """Browser-related error."""
    pass


@dataclass(frozen=True)
class Page:
    """A page target. Identity is the target id."""

    target_id: str
    ws_url: str = field(compare=False)
    title: str = field(default="", compare=False)
    url: str = field(default="", compare=False)

    @classmethod
    def from_target(cls, target: dict) -> "Page":
        return cls(
            target_id=target["id"],
            ws_url=target.get("webSocketDebuggerUrl", ""),
            title=target.get("title", ""),
            url=target.get("url", ""),
        )


class BrowserManager:
    """
    Manages the debugging endpoint and the sessions of its tabs.

    The browser must already be running with ``--remote-debugging-port``.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.sessions = SessionCache(self._connect_page)
        self._pages: dict[str, Page] = {}
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _connect_page(self, page: Page) -> CDPClient:
        """Session factory for pages of this browser."""
        if not page.ws_url:
            raise BrowserError(f"Tab {page.target_id} has no WebSocket debugger URL")
        client = CDPClient(timeout=self.settings.command_timeout)
        await client.connect(page.ws_url)
        return client

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(
                base_url=self.settings.http_url,
                timeout=self.settings.http_timeout,
            )
        return self._http_client

    async def _get_targets(self) -> list[dict]:
        """Get list of available CDP targets."""
        client = await self._get_http_client()
        try:
            response = await client.get("/json/list")
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise BrowserError(
                f"Cannot reach Chrome at {self.settings.http_url}: {e}"
            ) from e
        return response.json()

    async def get_pages(self) -> list[Page]:
        """List open tabs as page handles."""
        targets = await self._get_targets()
        pages = [Page.from_target(t) for t in targets if t.get("type") == "page"]
        self._pages = {page.target_id: page for page in pages}
        return pages

    async def get_page(self, tab_id: Optional[str] = None) -> Page:
        """
        Resolve a tab id to a page handle.

        Args:
            tab_id: Target id, or None for the first open tab

        Raises:
            BrowserError: If there is no such tab
        """
        if tab_id is not None and tab_id in self._pages:
            return self._pages[tab_id]

        pages = await self.get_pages()
        if tab_id is None:
            if not pages:
                raise BrowserError("No open tabs")
            return pages[0]

        if tab_id not in self._pages:
            raise BrowserError(f"Tab not found: {tab_id}")
        return self._pages[tab_id]

    async def new_tab(self, url: Optional[str] = None) -> Page:
        """Open a new tab."""
        client = await self._get_http_client()

        path = "/json/new"
        if url:
            # the whole URL is the query string; keep "#" from ending it
            path += "?" + quote(url, safe=":/?&=")

        try:
            response = await client.put(path)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise BrowserError(f"Failed to open tab: {e}") from e
        page = Page.from_target(response.json())
        self._pages[page.target_id] = page
        logger.info(f"Opened tab {page.target_id}")
        return page

    async def close_tab(self, page: Page) -> bool:
        """Detach the tab's session, then close the tab."""
        await self.sessions.detach_session(page)
        self._pages.pop(page.target_id, None)

        client = await self._get_http_client()
        try:
            response = await client.get(f"/json/close/{page.target_id}")
        except httpx.HTTPError as e:
            raise BrowserError(f"Failed to close tab {page.target_id}: {e}") from e
        return response.status_code == 200

    async def close(self) -> None:
        """Detach all sessions and release the HTTP client."""
        await self.sessions.detach_all()
        self._pages.clear()

        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

        logger.info("Browser manager closed")


# Singleton instance for use across tools
browser_manager = BrowserManager(Settings.from_env())
