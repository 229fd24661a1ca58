"""Tests for JSON serialization of document trees."""

import json

import pytest

from deltatree import parse
from deltatree.nodes import TNode, block, root, text
from deltatree.serialization import from_dict, from_json, to_dict, to_json

DELTA = [
    {"insert": "Title"},
    {"insert": "\n", "attributes": {"header": 1}},
    {"insert": "bold", "attributes": {"bold": True}},
    {"insert": {"image": "a.png"}, "attributes": {"alt": "A"}},
    {"insert": "\n"},
    {"insert": "item"},
    {"insert": "\n", "attributes": {"list": "ordered"}},
    {"insert": {"video": {"url": "v.mp4"}}},
]


class TestToDict:
    def test_empty_fields_omitted(self) -> None:
        assert to_dict(block("paragraph")) == {"type": "paragraph"}

    def test_text_leaf(self) -> None:
        assert to_dict(text("x", bold=True)) == {
            "type": "text",
            "attributes": {"bold": True},
            "data": "x",
            "is_inline": True,
        }

    def test_nested(self) -> None:
        result = to_dict(root(block("header", text("T"), header=2)))
        assert result["children"][0]["attributes"] == {"header": 2}
        assert result["children"][0]["children"][0]["data"] == "T"

    def test_frozenset_values_sorted(self) -> None:
        node = TNode("widget", data={"tags": frozenset({"b", "a"})})
        assert to_dict(node)["data"] == {"tags": ["a", "b"]}


class TestRoundTrip:
    def test_parsed_tree(self) -> None:
        tree = parse(DELTA)
        assert from_json(to_json(tree)) == tree

    def test_deterministic(self) -> None:
        assert to_json(parse(DELTA)) == to_json(parse(DELTA))

    def test_indent(self) -> None:
        out = to_json(root(block("paragraph")), indent=2)
        assert "\n" in out
        assert json.loads(out) == {"children": [{"type": "paragraph"}], "type": "root"}

    def test_restored_attributes_read_only(self) -> None:
        restored = from_json(to_json(parse(DELTA)))
        with pytest.raises(TypeError):
            restored.children[0].attributes["header"] = 3  # type: ignore[index]


class TestFromDictErrors:
    def test_missing_type(self) -> None:
        with pytest.raises(ValueError, match="type"):
            from_dict({"children": []})

    def test_bad_attributes(self) -> None:
        with pytest.raises(ValueError, match="attributes"):
            from_dict({"type": "paragraph", "attributes": [1, 2]})

    def test_bad_children(self) -> None:
        with pytest.raises(ValueError, match="children"):
            from_dict({"type": "paragraph", "children": "abc"})

    def test_from_json_requires_root(self) -> None:
        with pytest.raises(ValueError, match="root"):
            from_json('{"type": "paragraph"}')
