"""
webdriver-cdp MCP Server

Exposes WebDriver element commands as MCP tools. Every tool takes an
optional ``tab_id``; without one the first open tab is used.
"""

import dataclasses
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastmcp import FastMCP

from .browser import browser_manager
from .dom import scroll_into_view, get_content_quads
from .tools import navigation, input, inspection

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(server: FastMCP):
    """Detach every CDP session when the server stops."""
    try:
        yield {}
    finally:
        await cleanup()


# Create MCP server
mcp = FastMCP(
    "webdriver-cdp",
    instructions="WebDriver element commands executed over Chrome DevTools Protocol sessions.",
    lifespan=lifespan,
)


async def _page(tab_id: Optional[str]):
    return await browser_manager.get_page(tab_id)


# =============================================================================
# Tab Tools
# =============================================================================

@mcp.tool()
async def webdriver_tabs() -> list[dict]:
    """List open browser tabs."""
    pages = await browser_manager.get_pages()
    return [
        {
            "id": page.target_id,
            "url": page.url,
            "title": page.title,
            "attached": page in browser_manager.sessions,
        }
        for page in pages
    ]


@mcp.tool()
async def webdriver_tab_new(url: Optional[str] = None) -> dict:
    """
    Open a new browser tab.

    Args:
        url: Optional URL to load in the new tab
    """
    page = await browser_manager.new_tab(url)
    return {"id": page.target_id, "url": page.url}


@mcp.tool()
async def webdriver_tab_close(tab_id: str) -> dict:
    """
    Close a tab and detach its CDP session.

    Args:
        tab_id: ID of the tab to close (from webdriver_tabs)
    """
    page = await _page(tab_id)
    return {"success": await browser_manager.close_tab(page)}


# =============================================================================
# Navigation Tools
# =============================================================================

@mcp.tool()
async def webdriver_navigate(url: str, tab_id: Optional[str] = None) -> dict:
    """
    Navigate a tab to a URL.

    Args:
        url: The URL to navigate to
        tab_id: Target tab (first tab if not specified)
    """
    frame_id = await navigation.navigate(browser_manager.sessions, await _page(tab_id), url)
    return {"frame_id": frame_id}


@mcp.tool()
async def webdriver_current_url(tab_id: Optional[str] = None) -> str:
    """Get the URL of the current history entry."""
    return await navigation.get_current_url(browser_manager.sessions, await _page(tab_id))


@mcp.tool()
async def webdriver_title(tab_id: Optional[str] = None) -> str:
    """Get the page title."""
    return await navigation.get_title(browser_manager.sessions, await _page(tab_id))


# =============================================================================
# Input Tools
# =============================================================================

@mcp.tool()
async def webdriver_click_element(element_id: str, tab_id: Optional[str] = None) -> bool:
    """
    Click the center of an element.

    Args:
        element_id: Backend node id or remote object id
        tab_id: Target tab
    """
    return await input.click_element(browser_manager.sessions, await _page(tab_id), element_id)


@mcp.tool()
async def webdriver_hover_element(element_id: str, tab_id: Optional[str] = None) -> bool:
    """Move the mouse over the center of an element."""
    return await input.hover_element(browser_manager.sessions, await _page(tab_id), element_id)


@mcp.tool()
async def webdriver_click_location(x: float, y: float, tab_id: Optional[str] = None) -> bool:
    """Hover over and click a viewport coordinate."""
    return await input.click_location(browser_manager.sessions, await _page(tab_id), x, y)


@mcp.tool()
async def webdriver_hover_location(x: float, y: float, tab_id: Optional[str] = None) -> bool:
    """Move the mouse to a viewport coordinate."""
    return await input.hover_location(browser_manager.sessions, await _page(tab_id), x, y)


@mcp.tool()
async def webdriver_send_keys_to_element(
    element_id: str,
    value: str,
    tab_id: Optional[str] = None,
) -> bool:
    """
    Focus an element and type text into it.

    Args:
        element_id: Backend node id or remote object id
        value: Text to type
        tab_id: Target tab
    """
    return await input.send_keys_to_element(
        browser_manager.sessions, await _page(tab_id), element_id, value
    )


@mcp.tool()
async def webdriver_send_keys(value: str, tab_id: Optional[str] = None) -> bool:
    """Type text into the focused element."""
    return await input.send_keys(browser_manager.sessions, await _page(tab_id), value)


@mcp.tool()
async def webdriver_keypress_enter(tab_id: Optional[str] = None) -> bool:
    """Press Enter."""
    return await input.keypress_enter(browser_manager.sessions, await _page(tab_id))


@mcp.tool()
async def webdriver_clear_element(element_id: str, tab_id: Optional[str] = None) -> dict:
    """Clear an element's value."""
    await input.clear_element(browser_manager.sessions, await _page(tab_id), element_id)
    return {"success": True}


@mcp.tool()
async def webdriver_scroll_page(target: str, tab_id: Optional[str] = None) -> dict:
    """
    Scroll the page.

    Args:
        target: "top", "bottom", "up" or "down" (relative scrolls move 75% of the viewport)
        tab_id: Target tab
    """
    await input.scroll_page(browser_manager.sessions, await _page(tab_id), target)
    return {"success": True, "target": target}


@mcp.tool()
async def webdriver_scroll_into_view(element_id: str, tab_id: Optional[str] = None) -> dict:
    """Scroll an element into view if it is not visible."""
    await scroll_into_view(browser_manager.sessions, await _page(tab_id), element_id)
    return {"success": True}


# =============================================================================
# Inspection Tools
# =============================================================================

@mcp.tool()
async def webdriver_find_elements(
    using: str,
    value: str,
    tab_id: Optional[str] = None,
) -> list[dict]:
    """
    Find elements.

    Args:
        using: Locator strategy - "css selector" or "tag name"
        value: Selector or tag name
        tab_id: Target tab
    """
    return await inspection.find_elements(browser_manager.sessions, await _page(tab_id), using, value)


@mcp.tool()
async def webdriver_get_element_attribute(
    element_id: str,
    name: str,
    tab_id: Optional[str] = None,
) -> Optional[str]:
    """Read an element attribute (null when absent)."""
    return await inspection.get_element_attribute(
        browser_manager.sessions, await _page(tab_id), element_id, name
    )


@mcp.tool()
async def webdriver_get_element_tag_name(element_id: str, tab_id: Optional[str] = None) -> str:
    """Get an element's tag name."""
    return await inspection.get_element_tag_name(
        browser_manager.sessions, await _page(tab_id), element_id
    )


@mcp.tool()
async def webdriver_get_element_rect(element_id: str, tab_id: Optional[str] = None) -> dict:
    """Get an element's bounding client rect."""
    return await inspection.get_element_rect(
        browser_manager.sessions, await _page(tab_id), element_id
    )


@mcp.tool()
async def webdriver_get_content_quads(element_id: str, tab_id: Optional[str] = None) -> dict:
    """Get an element's rendered corners, size and center."""
    quad = await get_content_quads(browser_manager.sessions, await _page(tab_id), element_id)
    return quad.as_dict()


@mcp.tool()
async def webdriver_execute_script(
    script: str,
    args: Optional[list[Any]] = None,
    tab_id: Optional[str] = None,
) -> Any:
    """
    Execute a WebDriver script body in the page.

    Args:
        script: Function body; use ``arguments`` to read args and ``return`` a result
        args: Arguments; element references are passed as live elements
        tab_id: Target tab
    """
    return await inspection.execute_script(
        browser_manager.sessions, await _page(tab_id), script, args or []
    )


@mcp.tool()
async def webdriver_snapshot(tab_id: Optional[str] = None) -> dict:
    """Capture DOM snapshot, screenshot and viewport metadata."""
    snapshot = await inspection.get_snapshot(browser_manager.sessions, await _page(tab_id))
    return dataclasses.asdict(snapshot)


@mcp.tool()
async def webdriver_screenshot(tab_id: Optional[str] = None) -> dict:
    """Take a viewport screenshot (base64 PNG)."""
    image = await inspection.get_screenshot(browser_manager.sessions, await _page(tab_id))
    return {"format": "png", "image": image}


# =============================================================================
# Server Lifecycle
# =============================================================================

async def cleanup():
    """Detach sessions on shutdown."""
    logger.info("Shutting down webdriver-cdp...")
    await browser_manager.close()


def main():
    """Entry point for the MCP server."""
    logging.basicConfig(
        level=browser_manager.settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    logger.info("Starting webdriver-cdp MCP server...")
    mcp.run()


if __name__ == "__main__":
    main()
