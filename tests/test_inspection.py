"""Tests for inspection tools: attributes, finding, scripts, snapshots."""

import json

import pytest

from webdriver_cdp.dom import ELEMENT_KEY
from webdriver_cdp.tools.inspection import (
    ElementArgument,
    PageSnapshot,
    Primitive,
    Undefined,
    UnsupportedStrategyError,
    execute_script,
    find_elements,
    get_element_attribute,
    get_element_rect,
    get_element_tag_name,
    get_snapshot,
    marshal_argument,
)


class TestGetElementAttribute:
    @pytest.mark.asyncio
    async def test_returns_value_after_name(self, session, sessions, page):
        session.responses["DOM.requestNode"] = {"nodeId": 2}
        session.responses["DOM.getAttributes"] = {"attributes": ["id", "foo"]}

        assert await get_element_attribute(sessions, page, "obj-1", "id") == "foo"
        assert session.params_for("DOM.getAttributes") == [{"nodeId": 2}]

    @pytest.mark.asyncio
    async def test_missing_attribute_is_none(self, session, sessions, page):
        session.responses["DOM.requestNode"] = {"nodeId": 2}
        session.responses["DOM.getAttributes"] = {"attributes": ["id", "foo"]}

        assert await get_element_attribute(sessions, page, "obj-1", "href") is None

    @pytest.mark.asyncio
    async def test_values_are_not_matched_as_names(self, session, sessions, page):
        session.responses["DOM.requestNode"] = {"nodeId": 2}
        session.responses["DOM.getAttributes"] = {"attributes": ["title", "class", "class", "btn"]}

        assert await get_element_attribute(sessions, page, "obj-1", "class") == "btn"


class TestElementFunctions:
    @pytest.mark.asyncio
    async def test_tag_name(self, session, sessions, page):
        session.responses["Runtime.callFunctionOn"] = {"result": {"type": "string", "value": "INPUT"}}

        assert await get_element_tag_name(sessions, page, "obj-1") == "INPUT"
        params = session.params_for("Runtime.callFunctionOn")[0]
        assert params["objectId"] == "obj-1"
        assert params["returnByValue"] is True
        assert "this.tagName" in params["functionDeclaration"]

    @pytest.mark.asyncio
    async def test_rect(self, session, sessions, page):
        rect = {"x": 1, "y": 2, "width": 3, "height": 4, "top": 2, "left": 1, "right": 4, "bottom": 6}
        session.responses["Runtime.callFunctionOn"] = {"result": {"type": "object", "value": rect}}

        assert await get_element_rect(sessions, page, "obj-1") == rect
        assert "getBoundingClientRect" in session.params_for("Runtime.callFunctionOn")[0]["functionDeclaration"]

    @pytest.mark.asyncio
    async def test_backend_id_is_resolved_to_object(self, session, sessions, page):
        session.responses["DOM.resolveNode"] = {"object": {"objectId": "obj-7"}}
        session.responses["Runtime.callFunctionOn"] = {"result": {"value": "DIV"}}

        assert await get_element_tag_name(sessions, page, "7") == "DIV"
        assert session.params_for("Runtime.callFunctionOn")[0]["objectId"] == "obj-7"


class TestFindElements:
    """Test locator strategies."""

    @pytest.mark.asyncio
    async def test_css_selector(self, session, sessions, page):
        session.responses["DOM.getDocument"] = {"root": {"nodeId": 1}}
        session.responses["DOM.querySelectorAll"] = {"nodeIds": [5]}
        session.responses["DOM.resolveNode"] = {"object": {"objectId": "obj-5"}}

        result = await find_elements(sessions, page, "css selector", "#main")

        assert result == [{ELEMENT_KEY: "obj-5"}]

    @pytest.mark.asyncio
    async def test_tag_name_is_a_selector(self, session, sessions, page):
        session.responses["DOM.getDocument"] = {"root": {"nodeId": 1}}
        session.responses["DOM.querySelectorAll"] = {"nodeIds": []}

        await find_elements(sessions, page, "tag name", "button")

        assert session.params_for("DOM.querySelectorAll")[0]["selector"] == "button"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("using,value", [
        ("iframe", "anything"),
        ("iframe", ""),
        ("tag name", "iframe"),
    ])
    async def test_frame_lookup_is_empty_without_query(self, session, sessions, page, using, value):
        assert await find_elements(sessions, page, using, value) == []
        assert session.calls == []

    @pytest.mark.asyncio
    async def test_unsupported_strategy(self, session, sessions, page):
        with pytest.raises(UnsupportedStrategyError, match="xpath"):
            await find_elements(sessions, page, "xpath", "//a")
        assert session.calls == []


class TestMarshalArgument:
    """Test script argument classification."""

    @pytest.mark.parametrize("value", ["text", 3, 2.5, True, False])
    def test_primitives_pass_by_value(self, value):
        arg = marshal_argument(value)
        assert arg == Primitive(value)
        assert arg.to_call_argument() == {"value": value}

    def test_element_passes_by_object_id(self):
        arg = marshal_argument({ELEMENT_KEY: "obj-3"})
        assert arg == ElementArgument("obj-3")
        assert arg.to_call_argument() == {"objectId": "obj-3"}

    @pytest.mark.parametrize("value", [None, {"other": 1}, [1, 2]])
    def test_anything_else_is_undefined(self, value):
        arg = marshal_argument(value)
        assert isinstance(arg, Undefined)
        assert arg.to_call_argument() == {}


def script_responses(session, remote, by_value=None):
    session.responses["Runtime.evaluate"] = {"result": {"type": "object", "objectId": "window-1"}}

    def call_function_on(params):
        if params.get("returnByValue"):
            return {"result": {"value": by_value}}
        return {"result": remote}

    session.responses["Runtime.callFunctionOn"] = call_function_on


class TestExecuteScript:
    """Test script wrapping and result conversion."""

    @pytest.mark.asyncio
    async def test_plain_value(self, session, sessions, page):
        script_responses(session, {"type": "number", "value": 2}, by_value=2)

        result = await execute_script(sessions, page, "return 1 + 1", [])

        assert result == 2
        assert session.methods == [
            "Runtime.enable",
            "Runtime.evaluate",
            "Runtime.callFunctionOn",
            "Runtime.callFunctionOn",
        ]
        first, second = session.params_for("Runtime.callFunctionOn")
        assert first["functionDeclaration"] == "function() { return 1 + 1 }"
        assert first["objectId"] == "window-1"
        assert "returnByValue" not in first
        assert second["returnByValue"] is True

    @pytest.mark.asyncio
    async def test_arguments_are_marshaled(self, session, sessions, page):
        script_responses(session, {"type": "undefined"})

        await execute_script(
            sessions, page, "arguments[1].click()",
            ["a", {ELEMENT_KEY: "obj-9"}, {"nested": True}],
        )

        params = session.params_for("Runtime.callFunctionOn")[0]
        assert params["arguments"] == [{"value": "a"}, {"objectId": "obj-9"}, {}]

    @pytest.mark.asyncio
    async def test_node_list_becomes_element_list(self, session, sessions, page):
        script_responses(session, {"type": "object", "className": "NodeList", "objectId": "list-1"})
        session.responses["Runtime.getProperties"] = {"result": [
            {"name": "0", "value": {"objectId": "obj-a"}},
            {"name": "1", "value": {"objectId": "obj-b"}},
            {"name": "length", "value": {"value": 2}},
        ]}

        result = await execute_script(sessions, page, "return document.querySelectorAll('p')")

        assert result == [{ELEMENT_KEY: "obj-a"}, {ELEMENT_KEY: "obj-b"}]
        assert session.params_for("Runtime.getProperties") == [
            {"objectId": "list-1", "ownProperties": True}
        ]
        assert len(session.params_for("Runtime.callFunctionOn")) == 1

    @pytest.mark.asyncio
    async def test_html_element_becomes_element(self, session, sessions, page):
        script_responses(session, {"type": "object", "className": "HTMLHtmlElement", "objectId": "html-1"})

        result = await execute_script(sessions, page, "return document.documentElement")

        assert result == {ELEMENT_KEY: "html-1"}
        assert len(session.params_for("Runtime.callFunctionOn")) == 1


class TestSnapshot:
    @pytest.mark.asyncio
    async def test_collects_all_parts(self, session, sessions, page):
        session.responses["DOMSnapshot.captureSnapshot"] = {"documents": [], "strings": ["html"]}
        session.responses["Page.captureScreenshot"] = {"data": "iVBORw0KGgo="}
        session.responses["Runtime.evaluate"] = {"result": {"value": {
            "viewportWidth": 1280, "viewportHeight": 720, "pixelRatio": 2,
        }}}

        snapshot = await get_snapshot(sessions, page)

        assert snapshot == PageSnapshot(
            dom=json.dumps({"documents": [], "strings": ["html"]}),
            screenshot="iVBORw0KGgo=",
            viewport_width=1280,
            viewport_height=720,
            pixel_ratio=2,
        )
        assert session.params_for("DOMSnapshot.captureSnapshot") == [{"computedStyles": []}]
