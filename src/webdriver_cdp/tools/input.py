"""
Input tools for webdriver-cdp.

Provides tools for:
- Mouse clicks and hover, on elements or coordinates
- Keyboard input
- Clearing form fields
- Page scrolling
"""

import json
import logging
from enum import Enum
from typing import Any, Union

from ..dom import focus_element, get_content_quads, request_node
from ..session import SessionCache

logger = logging.getLogger(__name__)

# Fraction of the viewport height moved by a relative scroll
RELATIVE_SCROLL_FRACTION = 0.75

# Used when window.visualViewport is unavailable
DEFAULT_VIEWPORT_HEIGHT = 720

ENTER_KEY = {"key": "Enter", "code": "Enter", "keyCode": 13, "windowsVirtualKeyCode": 13}


class UnsupportedScrollTargetError(ValueError):
    """Scroll target is not one of top, bottom, up, down."""
    pass


class ScrollTarget(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"
    UP = "up"
    DOWN = "down"

    @classmethod
    def parse(cls, target: Union[str, "ScrollTarget"]) -> "ScrollTarget":
        try:
            return cls(target)
        except ValueError:
            raise UnsupportedScrollTargetError(f"Unsupported scroll target {target}") from None


SCROLL_SCRIPTS = {
    ScrollTarget.TOP: "el.scrollTo({top: 0})",
    ScrollTarget.BOTTOM: "el.scrollTo({top: el.scrollHeight})",
    ScrollTarget.UP: "el.scrollBy({top: -distance})",
    ScrollTarget.DOWN: "el.scrollBy({top: distance})",
}


async def _press_and_release(session, x: float, y: float) -> None:
    for event_type in ("mousePressed", "mouseReleased"):
        await session.send("Input.dispatchMouseEvent", {
            "type": event_type,
            "x": x,
            "y": y,
            "button": "left",
            "clickCount": 1,
            "buttons": 1,
        })


async def click_element(sessions: SessionCache, page: Any, element_id: str) -> bool:
    """
    Click the center of an element.

    Args:
        sessions: Session cache
        page: Page handle
        element_id: Backend node id or remote object id

    Returns:
        True once the press and release have been dispatched
    """
    quad = await get_content_quads(sessions, page, element_id)
    session = await sessions.get_session(page)
    logger.debug(f"Clicking element {element_id} at ({quad.center_x}, {quad.center_y})")
    await _press_and_release(session, quad.center_x, quad.center_y)
    return True


async def hover_element(sessions: SessionCache, page: Any, element_id: str) -> bool:
    """Move the mouse to the center of an element."""
    quad = await get_content_quads(sessions, page, element_id)
    return await hover_location(sessions, page, quad.center_x, quad.center_y)


async def hover_location(sessions: SessionCache, page: Any, x: float, y: float) -> bool:
    """Move the mouse to a viewport coordinate."""
    session = await sessions.get_session(page)
    await session.send("Input.dispatchMouseEvent", {
        "type": "mouseMoved",
        "x": x,
        "y": y,
    })
    return True


async def click_location(sessions: SessionCache, page: Any, x: float, y: float) -> bool:
    """Hover over a viewport coordinate, then click it."""
    await hover_location(sessions, page, x, y)
    session = await sessions.get_session(page)
    await _press_and_release(session, x, y)
    return True


async def send_keys(sessions: SessionCache, page: Any, value: Union[str, list[str]]) -> bool:
    """
    Type into whatever element has focus.

    Args:
        value: Text, or a WebDriver-style list of strings which is joined

    Returns:
        True once every character has been dispatched
    """
    text = value if isinstance(value, str) else "".join(value)
    session = await sessions.get_session(page)
    for char in text:
        await session.send("Input.dispatchKeyEvent", {
            "type": "char",
            "text": char,
        })
    return True


async def send_keys_to_element(
    sessions: SessionCache,
    page: Any,
    element_id: str,
    value: Union[str, list[str]],
) -> bool:
    """Focus an element, then type into it one character at a time."""
    await focus_element(sessions, page, element_id)
    return await send_keys(sessions, page, value)


async def keypress_enter(sessions: SessionCache, page: Any) -> bool:
    """Press and release Enter."""
    session = await sessions.get_session(page)
    await session.send("Input.dispatchKeyEvent", {"type": "keyDown", **ENTER_KEY})
    await session.send("Input.dispatchKeyEvent", {"type": "char", "text": "\r"})
    await session.send("Input.dispatchKeyEvent", {"type": "keyUp", **ENTER_KEY})
    return True


async def clear_element(sessions: SessionCache, page: Any, element_id: str) -> None:
    """Set an element's value attribute to the empty string."""
    node_id = await request_node(sessions, page, element_id)
    session = await sessions.get_session(page)
    await session.send("DOM.setAttributeValue", {
        "nodeId": node_id,
        "name": "value",
        "value": "",
    })


def scroll_expression(target: ScrollTarget) -> str:
    """JavaScript that scrolls the page's scrolling element."""
    return f"""
        (() => {{
            const viewportHeight = window.visualViewport
                ? window.visualViewport.height
                : {DEFAULT_VIEWPORT_HEIGHT};
            const distance = {RELATIVE_SCROLL_FRACTION} * viewportHeight;
            const el = document.scrollingElement || document.body;
            {SCROLL_SCRIPTS[target]};
            return {json.dumps(target.value)};
        }})()
    """


async def scroll_page(
    sessions: SessionCache,
    page: Any,
    target: Union[str, ScrollTarget],
) -> None:
    """
    Scroll the page.

    Args:
        target: "top", "bottom", or "up"/"down" by 75% of the viewport height

    Raises:
        UnsupportedScrollTargetError: For any other target, before scrolling
    """
    scroll_target = ScrollTarget.parse(target)
    session = await sessions.get_session(page)
    await session.send("Runtime.evaluate", {
        "expression": scroll_expression(scroll_target),
        "returnByValue": True,
    })
