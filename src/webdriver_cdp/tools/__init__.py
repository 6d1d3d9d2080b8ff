"""
WebDriver command tools for webdriver-cdp.
"""

from . import navigation
from . import input
from . import inspection

__all__ = ["navigation", "input", "inspection"]
