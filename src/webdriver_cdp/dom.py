"""
DOM helpers shared by the command tools.

Provides:
- Element id conversion (backend node id vs. remote object id)
- Content-quad geometry
- Node resolution, focus and scrolling
- CSS query returning WebDriver element references
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from .session import SessionCache

logger = logging.getLogger(__name__)

# W3C WebDriver web element identifier
ELEMENT_KEY = "element-6066-11e4-a52e-4f735466cecf"


def element_ref(object_id: str) -> dict:
    """Wrap a remote object id the way a WebDriver client expects it."""
    return {ELEMENT_KEY: object_id}


def node_params(element_id: str) -> dict:
    """
    Map an element id to DOM method parameters.

    Digit-only ids are backend node ids and go over the wire as integers.
    Anything else is a Runtime remote object id.
    """
    if element_id.isascii() and element_id.isdigit():
        return {"backendNodeId": int(element_id)}
    return {"objectId": element_id}


@dataclass(frozen=True)
class ContentQuad:
    """Corners of the first content quad plus derived size and center."""

    top_left_x: float
    top_left_y: float
    top_right_x: float
    top_right_y: float
    bottom_right_x: float
    bottom_right_y: float
    bottom_left_x: float
    bottom_left_y: float

    @classmethod
    def from_quad(cls, quad: list[float]) -> "ContentQuad":
        # quad is [x1, y1, x2, y2, x3, y3, x4, y4], clockwise from top-left
        return cls(*quad[:8])

    @property
    def width(self) -> float:
        return self.top_right_x - self.top_left_x

    @property
    def height(self) -> float:
        return self.bottom_right_y - self.top_right_y

    @property
    def center_x(self) -> float:
        return self.top_left_x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top_right_y + self.height / 2

    def as_dict(self) -> dict:
        return {
            "topLeftX": self.top_left_x,
            "topLeftY": self.top_left_y,
            "topRightX": self.top_right_x,
            "topRightY": self.top_right_y,
            "bottomRightX": self.bottom_right_x,
            "bottomRightY": self.bottom_right_y,
            "bottomLeftX": self.bottom_left_x,
            "bottomLeftY": self.bottom_left_y,
            "width": self.width,
            "height": self.height,
            "centerX": self.center_x,
            "centerY": self.center_y,
        }


async def get_content_quads(sessions: SessionCache, page: Any, element_id: str) -> ContentQuad:
    """
    Get the rendered geometry of an element.

    Args:
        sessions: Session cache
        page: Page handle
        element_id: Backend node id or remote object id

    Returns:
        ContentQuad built from the first quad in the response
    """
    session = await sessions.get_session(page)
    result = await session.send("DOM.getContentQuads", node_params(element_id))
    return ContentQuad.from_quad(result["quads"][0])


async def focus_element(sessions: SessionCache, page: Any, element_id: str) -> None:
    """Focus an element."""
    session = await sessions.get_session(page)
    await session.send("DOM.focus", node_params(element_id))


async def scroll_into_view(sessions: SessionCache, page: Any, element_id: str) -> None:
    """Scroll element into view."""
    session = await sessions.get_session(page)
    await session.send("DOM.scrollIntoViewIfNeeded", node_params(element_id))


async def resolve_node(
    sessions: SessionCache,
    page: Any,
    node_id: Optional[int] = None,
    backend_node_id: Optional[int] = None,
    object_id: Optional[str] = None,
) -> dict:
    """Resolve a node to its Runtime remote object."""
    params = {}
    if node_id is not None:
        params["nodeId"] = node_id
    if backend_node_id is not None:
        params["backendNodeId"] = backend_node_id
    if object_id is not None:
        params["objectId"] = object_id

    session = await sessions.get_session(page)
    result = await session.send("DOM.resolveNode", params)
    return result["object"]


async def get_object_id(sessions: SessionCache, page: Any, element_id: str) -> str:
    """
    Get a remote object id for an element.

    Runtime methods only accept object ids, so a backend node id is
    resolved to one first.
    """
    params = node_params(element_id)
    if "backendNodeId" not in params:
        return element_id
    remote = await resolve_node(sessions, page, backend_node_id=params["backendNodeId"])
    return remote["objectId"]


async def request_node(sessions: SessionCache, page: Any, element_id: str) -> int:
    """Get a DOM node id for an element."""
    object_id = await get_object_id(sessions, page, element_id)
    session = await sessions.get_session(page)
    result = await session.send("DOM.requestNode", {"objectId": object_id})
    return result["nodeId"]


async def query_selector_all(sessions: SessionCache, page: Any, selector: str) -> list[dict]:
    """
    Run a CSS query against the whole document.

    Returns:
        WebDriver element references, in document order
    """
    session = await sessions.get_session(page)

    doc = await session.send("DOM.getDocument", {"depth": -1})
    result = await session.send(
        "DOM.querySelectorAll",
        {"nodeId": doc["root"]["nodeId"], "selector": selector},
    )
    node_ids = result.get("nodeIds", [])
    logger.debug(f"{selector!r} matched {len(node_ids)} nodes")

    resolved = await asyncio.gather(*(
        session.send("DOM.resolveNode", {"nodeId": node_id})
        for node_id in node_ids
    ))
    return [element_ref(node["object"]["objectId"]) for node in resolved]
