"""
Session cache - one CDP session per page handle.

The cache is an explicit object owned by whatever manages the tabs'
lifetime (``BrowserManager`` for tabs this package attaches to itself,
or the caller when driving pages of a host framework).
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol
from collections.abc import Awaitable, Hashable

logger = logging.getLogger(__name__)


class CDPSession(Protocol):
    """What a command needs from a session object."""

    async def send(self, method: str, params: Optional[dict] = None) -> dict[str, Any]:
        ...

    async def detach(self) -> None:
        ...


SessionFactory = Callable[[Any], Awaitable[CDPSession]]


async def new_host_session(page: Any) -> CDPSession:
    """Open a session through a Playwright-style host page."""
    return await page.context.new_cdp_session(page)


class SessionCache:
    """
    Lazily creates and memoizes one CDP session per page handle.

    Creation is serialized per handle, so concurrent first access for the
    same handle still yields a single session while other handles attach
    independently.
    """

    def __init__(self, factory: Optional[SessionFactory] = None):
        self._factory: SessionFactory = factory or new_host_session
        self._sessions: dict[Hashable, CDPSession] = {}
        self._locks: dict[Hashable, asyncio.Lock] = {}

    def __contains__(self, page: Hashable) -> bool:
        return page in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    async def get_session(self, page: Hashable) -> CDPSession:
        """Return the session for ``page``, creating it on first use."""
        session = self._sessions.get(page)
        if session is not None:
            return session

        lock = self._locks.setdefault(page, asyncio.Lock())
        async with lock:
            # another caller may have created it while we waited
            if page not in self._sessions:
                logger.debug(f"Creating CDP session for {page!r}")
                self._sessions[page] = await self._factory(page)
            return self._sessions[page]

    async def detach_session(self, page: Hashable) -> None:
        """
        Detach the session for ``page`` and forget it.

        Does nothing when no session exists for the handle. This normally
        happens when the tab closes.
        """
        session = self._sessions.pop(page, None)
        lock = self._locks.get(page)
        if lock is not None and not lock.locked():
            del self._locks[page]
        if session is None:
            return
        logger.debug(f"Detaching CDP session for {page!r}")
        await session.detach()

    async def detach_all(self) -> None:
        """Detach every cached session."""
        pages = list(self._sessions)
        for page in pages:
            await self.detach_session(page)
