"""
Navigation tools for webdriver-cdp.

Provides tools for:
- URL navigation
- Current URL and title
"""

from typing import Any, Optional

from ..session import SessionCache


async def navigate(sessions: SessionCache, page: Any, url: str) -> Optional[str]:
    """
    Navigate to a URL.

    Does not wait for the load event.

    Returns:
        The id of the navigated frame
    """
    session = await sessions.get_session(page)
    result = await session.send("Page.navigate", {"url": url})
    return result.get("frameId")


async def get_current_url(sessions: SessionCache, page: Any) -> str:
    """URL of the current navigation history entry."""
    session = await sessions.get_session(page)
    history = await session.send("Page.getNavigationHistory")
    return history["entries"][history["currentIndex"]]["url"]


async def get_title(sessions: SessionCache, page: Any) -> str:
    """Get the current page title."""
    session = await sessions.get_session(page)
    result = await session.send(
        "Runtime.evaluate",
        {"expression": "document.title", "returnByValue": True}
    )
    return result["result"]["value"]
