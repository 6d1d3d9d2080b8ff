"""Tests for navigation tools."""

import pytest

from webdriver_cdp.tools.navigation import get_current_url, get_title, navigate


class TestNavigation:
    @pytest.mark.asyncio
    async def test_navigate_returns_frame(self, session, sessions, page):
        session.responses["Page.navigate"] = {"frameId": "F1", "loaderId": "L1"}

        assert await navigate(sessions, page, "https://example.com") == "F1"
        assert session.calls == [("Page.navigate", {"url": "https://example.com"})]

    @pytest.mark.asyncio
    async def test_current_url_follows_history_index(self, session, sessions, page):
        session.responses["Page.getNavigationHistory"] = {
            "currentIndex": 1,
            "entries": [
                {"id": 1, "url": "https://example.com/"},
                {"id": 2, "url": "https://example.com/next"},
                {"id": 3, "url": "https://example.com/forward"},
            ],
        }

        assert await get_current_url(sessions, page) == "https://example.com/next"

    @pytest.mark.asyncio
    async def test_title(self, session, sessions, page):
        session.responses["Runtime.evaluate"] = {"result": {"type": "string", "value": "Example Domain"}}

        assert await get_title(sessions, page) == "Example Domain"
        assert session.params_for("Runtime.evaluate")[0]["expression"] == "document.title"
