"""
webdriver-cdp: WebDriver element commands over Chrome DevTools Protocol.

Each command takes a session cache and a page handle, fetches the page's
single CDP session from the cache and issues a few protocol calls.
"""

from .browser import browser_manager, BrowserError, BrowserManager, Page
from .cdp import CDPClient, CDPError
from .config import Settings
from .dom import ELEMENT_KEY, ContentQuad
from .session import SessionCache

__version__ = "0.1.0"
__all__ = [
    "browser_manager",
    "BrowserError",
    "BrowserManager",
    "Page",
    "CDPClient",
    "CDPError",
    "Settings",
    "ELEMENT_KEY",
    "ContentQuad",
    "SessionCache",
]
