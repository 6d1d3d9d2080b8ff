"""
Inspection tools for webdriver-cdp.

Provides tools for:
- Element attributes, tag name and bounding rect
- Finding elements
- Script execution with WebDriver argument and result marshaling
- Page snapshots (DOM, screenshot, viewport)
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from ..dom import ELEMENT_KEY, element_ref, get_object_id, query_selector_all, request_node
from ..session import SessionCache

logger = logging.getLogger(__name__)

SUPPORTED_STRATEGIES = ("css selector", "tag name")

# Frame lookups are answered with no matches instead of querying.
# Remove once the WebDriver backend stops switching frames.
FRAME_LOOKUP = "iframe"

VIEWPORT_EXPRESSION = """
    ({
        viewportWidth: window.visualViewport ? window.visualViewport.width : 0,
        viewportHeight: window.visualViewport ? window.visualViewport.height : 0,
        pixelRatio: window.devicePixelRatio,
    })
"""


class UnsupportedStrategyError(ValueError):
    """Locator strategy other than css selector or tag name."""
    pass


# =============================================================================
# Script arguments
# =============================================================================

@dataclass(frozen=True)
class Primitive:
    """String, number or boolean, passed by value."""
    value: Union[str, int, float, bool]

    def to_call_argument(self) -> dict:
        return {"value": self.value}


@dataclass(frozen=True)
class ElementArgument:
    """WebDriver element, passed by remote object id."""
    object_id: str

    def to_call_argument(self) -> dict:
        return {"objectId": self.object_id}


@dataclass(frozen=True)
class Undefined:
    """Anything else. An empty CallArgument is undefined in the page."""

    def to_call_argument(self) -> dict:
        return {}


ScriptArgument = Union[Primitive, ElementArgument, Undefined]


def marshal_argument(arg: Any) -> ScriptArgument:
    """Classify a WebDriver script argument."""
    if isinstance(arg, (bool, str, int, float)):
        return Primitive(arg)
    if isinstance(arg, dict) and ELEMENT_KEY in arg:
        return ElementArgument(arg[ELEMENT_KEY])
    return Undefined()


# =============================================================================
# Element tools
# =============================================================================

async def get_element_attribute(
    sessions: SessionCache,
    page: Any,
    element_id: str,
    name: str,
) -> Optional[str]:
    """
    Read one attribute of an element.

    Returns:
        The attribute value, or None if the element has no such attribute
    """
    node_id = await request_node(sessions, page, element_id)
    session = await sessions.get_session(page)
    result = await session.send("DOM.getAttributes", {"nodeId": node_id})

    # flattened as [name1, value1, name2, value2, ...]
    attributes = result.get("attributes", [])
    for i in range(0, len(attributes) - 1, 2):
        if attributes[i] == name:
            return attributes[i + 1]
    return None


async def run_function_on(
    sessions: SessionCache,
    page: Any,
    function_declaration: str,
    object_id: str,
    return_by_value: bool = False,
) -> dict:
    """Call a function with ``this`` bound to a remote object."""
    session = await sessions.get_session(page)
    params = {
        "functionDeclaration": function_declaration,
        "objectId": object_id,
    }
    if return_by_value:
        params["returnByValue"] = True
    result = await session.send("Runtime.callFunctionOn", params)
    return result["result"]


async def get_element_tag_name(sessions: SessionCache, page: Any, element_id: str) -> str:
    """Get an element's tag name (upper case for HTML elements)."""
    object_id = await get_object_id(sessions, page, element_id)
    result = await run_function_on(
        sessions, page,
        "function() {return this.tagName}",
        object_id,
        return_by_value=True,
    )
    return result.get("value")


async def get_element_rect(sessions: SessionCache, page: Any, element_id: str) -> dict:
    """Get an element's bounding client rect."""
    object_id = await get_object_id(sessions, page, element_id)
    result = await run_function_on(
        sessions, page,
        "function() {return JSON.parse(JSON.stringify(this.getBoundingClientRect()))}",
        object_id,
        return_by_value=True,
    )
    return result.get("value")


async def find_elements(
    sessions: SessionCache,
    page: Any,
    using: str,
    value: str,
) -> list[dict]:
    """
    Find elements with a WebDriver locator.

    Args:
        using: Locator strategy - "css selector" or "tag name"
        value: Selector or tag name

    Returns:
        WebDriver element references

    Raises:
        UnsupportedStrategyError: For any other strategy
    """
    if FRAME_LOOKUP in (using, value):
        return []

    if using not in SUPPORTED_STRATEGIES:
        raise UnsupportedStrategyError(f"Unsupported findElements strategy {using}")

    return await query_selector_all(sessions, page, value)


async def execute_script(
    sessions: SessionCache,
    page: Any,
    script: str,
    args: Optional[list] = None,
) -> Any:
    """
    Run a WebDriver script body in the page.

    The script runs as the body of a function called on ``window``.
    Node lists come back as lists of element references and the root
    ``<html>`` element as a single reference. Everything else is
    returned by value.
    """
    function_declaration = f"function() {{ {script} }}"
    call_arguments = [marshal_argument(arg).to_call_argument() for arg in args or []]

    session = await sessions.get_session(page)
    await session.send("Runtime.enable")
    window = await session.send("Runtime.evaluate", {"expression": "window"})
    window_id = window["result"]["objectId"]

    returned = await session.send("Runtime.callFunctionOn", {
        "objectId": window_id,
        "functionDeclaration": function_declaration,
        "arguments": call_arguments,
    })
    remote = returned["result"]
    class_name = remote.get("className")

    if class_name == "NodeList":
        properties = await session.send("Runtime.getProperties", {
            "objectId": remote["objectId"],
            "ownProperties": True,
        })
        return [
            element_ref(prop.get("value", {}).get("objectId"))
            for prop in properties["result"]
            if prop["name"].isascii() and prop["name"].isdigit()
        ]

    if class_name == "HTMLHtmlElement":
        return element_ref(remote["objectId"])

    returned = await session.send("Runtime.callFunctionOn", {
        "objectId": window_id,
        "functionDeclaration": function_declaration,
        "arguments": call_arguments,
        "returnByValue": True,
    })
    return returned["result"].get("value")


# =============================================================================
# Page tools
# =============================================================================

@dataclass(frozen=True)
class ViewportMetadata:
    viewport_width: float
    viewport_height: float
    pixel_ratio: float


@dataclass(frozen=True)
class PageSnapshot:
    dom: str
    screenshot: str
    viewport_width: float
    viewport_height: float
    pixel_ratio: float


async def get_screenshot(sessions: SessionCache, page: Any) -> str:
    """Capture the viewport. Returns base64-encoded PNG data."""
    session = await sessions.get_session(page)
    result = await session.send("Page.captureScreenshot")
    return result["data"]


async def get_dom_snapshot(sessions: SessionCache, page: Any) -> dict:
    """Capture a full DOM snapshot without computed styles."""
    session = await sessions.get_session(page)
    return await session.send("DOMSnapshot.captureSnapshot", {"computedStyles": []})


async def get_viewport_metadata(sessions: SessionCache, page: Any) -> ViewportMetadata:
    """Read the visual viewport size and device pixel ratio."""
    session = await sessions.get_session(page)
    result = await session.send("Runtime.evaluate", {
        "expression": VIEWPORT_EXPRESSION,
        "returnByValue": True,
    })
    value = result["result"]["value"]
    return ViewportMetadata(
        viewport_width=value["viewportWidth"],
        viewport_height=value["viewportHeight"],
        pixel_ratio=value["pixelRatio"],
    )


async def get_snapshot(sessions: SessionCache, page: Any) -> PageSnapshot:
    """
    Capture DOM, screenshot and viewport metadata together.

    The three fetches run concurrently.
    """
    dom, screenshot, viewport = await asyncio.gather(
        get_dom_snapshot(sessions, page),
        get_screenshot(sessions, page),
        get_viewport_metadata(sessions, page),
    )
    return PageSnapshot(
        dom=json.dumps(dom),
        screenshot=screenshot,
        viewport_width=viewport.viewport_width,
        viewport_height=viewport.viewport_height,
        pixel_ratio=viewport.pixel_ratio,
    )
