"""Tests for the generic render engine and its configuration."""

from typing import Any

import pytest

from deltatree import (
    DEFAULT_MARK_PRIORITIES,
    BlockDescriptor,
    ConfigError,
    RendererConfig,
    RendererConfigBuilder,
    ResolvedAttrs,
    TagMark,
    TreeRenderer,
    render,
)
from deltatree.nodes import TNode, block, root, text


def _tag(name: str, content: str, attrs: ResolvedAttrs | None) -> str:
    suffix = ""
    if attrs:
        suffix = " " + ",".join([*attrs.classes, *(f"{k}={v}" for k, v in attrs.style.items())])
    return f"[{name}{suffix}]{content}[/{name}]"


def _builder() -> RendererConfigBuilder[str]:
    return RendererConfigBuilder(
        join="".join,
        text=lambda s, node: s,
        tag=_tag,
        wrap_attrs=lambda content, attrs: _tag("span", content, attrs),
    )


# =============================================================================
# Dispatch
# =============================================================================


class TestDispatch:
    """Override, block handler, fallback, then joined children."""

    def test_no_handlers_joins_text(self) -> None:
        config = RendererConfig(join="".join, text=lambda s, node: s)
        tree = root(block("paragraph", text("a")), block("mystery", text("b")))
        assert render(tree, config) == "ab"

    def test_block_handler(self) -> None:
        config = _builder().block("paragraph", lambda n, c, a: f"<{c}>").build()
        assert render(root(block("paragraph", text("x"))), config) == "<x>"

    def test_block_descriptor(self) -> None:
        config = (
            _builder()
            .block("header", BlockDescriptor(lambda n: f"h{n.attributes['header']}"))
            .build()
        )
        assert render(root(block("header", text("T"), header=2)), config) == "[h2]T[/h2]"

    def test_children_rendered_before_parent(self) -> None:
        order: list[str] = []

        def record(name: str) -> Any:
            def handler(node: TNode, children: str, attrs: ResolvedAttrs) -> str:
                order.append(name)
                return children

            return handler

        config = _builder().block("outer", record("outer")).block("inner", record("inner")).build()
        render(root(block("outer", block("inner"))), config)
        assert order == ["inner", "outer"]

    def test_node_override_controls_subtree(self) -> None:
        def numbered(node: TNode, render_node: Any) -> str:
            return "|".join(f"{i}:{render_node(c)}" for i, c in enumerate(node.children, 1))

        config = _builder().node_override("list", numbered).build()
        tree = root(block("list", block("list-item", text("a")), block("list-item", text("b"))))
        assert render(tree, config) == "1:a|2:b"

    def test_override_beats_block_handler(self) -> None:
        config = (
            _builder()
            .block("paragraph", lambda n, c, a: "block")
            .node_override("paragraph", lambda n, r: "override")
            .build()
        )
        assert render(root(block("paragraph")), config) == "override"

    def test_unknown_node_fallback(self) -> None:
        """Nodes without a handler use the single-argument fallback."""
        config = _builder().on_unknown_node(lambda node: f"?{node.type}").build()
        tree = root(block("paragraph", text("a"), TNode("widget", data=1, is_inline=True)))
        assert render(tree, config) == "?paragraph"

    def test_fallback_skips_root_and_text(self) -> None:
        config = (
            _builder()
            .block("paragraph", lambda n, c, a: c)
            .on_unknown_node(lambda node: f"?{node.type}")
            .build()
        )
        tree = root(block("paragraph", text("a"), TNode("widget", is_inline=True)))
        assert render(tree, config) == "a?widget"

    def test_missing_handler_is_not_an_error(self) -> None:
        config = _builder().build()
        assert render(root(block("table", block("table-row", text("x")))), config) == "x"

    def test_block_attribute_resolvers(self) -> None:
        seen: list[ResolvedAttrs] = []

        def handler(node: TNode, children: str, attrs: ResolvedAttrs) -> str:
            seen.append(attrs)
            return children

        config = (
            _builder()
            .block("paragraph", handler)
            .block_attribute_resolver(lambda n: ResolvedAttrs(classes=("a",), style={"x": "1"}))
            .block_attribute_resolver(lambda n: None)
            .block_attribute_resolver(lambda n: ResolvedAttrs(classes=("b",), style={"x": "2"}))
            .build()
        )
        render(root(block("paragraph")), config)
        assert seen[0].classes == ("a", "b")
        assert seen[0].style["x"] == "2"

    def test_tree_renderer_holds_config(self) -> None:
        config = _builder().build()
        renderer = TreeRenderer(config)
        assert renderer.config is config
        assert renderer.render(root(block("paragraph", text("a")))) == "a"

    def test_non_string_output(self) -> None:
        """The engine is agnostic to the output type."""
        config: RendererConfig[list[Any]] = (
            RendererConfigBuilder(
                join=lambda parts: [x for part in parts for x in part],
                text=lambda s, node: [s],
            )
            .block("paragraph", lambda n, c, a: [("p", c)])
            .build()
        )
        tree = root(block("paragraph", text("a"), text("b")))
        assert render(tree, config) == [("p", ["a", "b"])]


# =============================================================================
# Hooks
# =============================================================================


class TestHooks:
    """before_render / after_render around classified nodes."""

    def test_before_render_replaces_output(self) -> None:
        calls: list[str] = []

        def before(group: str, node: TNode) -> str | None:
            calls.append(group)
            return "<replaced>" if node.type == "list" else None

        config = (
            _builder()
            .block("paragraph", lambda n, c, a: f"p({c})")
            .block("list", lambda n, c, a: "never")
            .before_render(before)
            .build()
        )
        tree = root(block("paragraph", text("a")), block("list", block("list-item", text("b"))))
        assert render(tree, config) == "p(a)<replaced>"
        assert calls == ["block", "list"]

    def test_after_render_sees_every_classified_node(self) -> None:
        seen: list[tuple[str, str]] = []

        def after(group: str, output: str) -> str:
            seen.append((group, output))
            return output.upper()

        config = _builder().after_render(after).build()
        tree = root(
            block("paragraph", text("a")),
            block("table", block("table-row", block("table-cell", text("c")))),
            TNode("video", data="v.mp4"),
        )
        assert render(tree, config) == "AC"
        assert [g for g, _ in seen] == ["block", "block", "block", "table", "video"]

    def test_after_render_applies_to_replaced_output(self) -> None:
        config = (
            _builder()
            .before_render(lambda g, n: "x")
            .after_render(lambda g, o: o + "!")
            .build()
        )
        assert render(root(block("paragraph")), config) == "x!"

    def test_inline_nodes_not_classified(self) -> None:
        groups: list[str] = []
        config = _builder().before_render(lambda g, n: groups.append(g)).build()
        render(root(block("paragraph", text("a"), TNode("image", is_inline=True))), config)
        assert groups == ["block"]


# =============================================================================
# Configuration
# =============================================================================


class TestRendererConfig:
    def test_default_priorities(self) -> None:
        config = RendererConfig(join="".join, text=lambda s, node: s)
        assert config.mark_priorities == DEFAULT_MARK_PRIORITIES
        assert config.priority("link") == 100
        assert config.priority("unlisted") == 0

    def test_default_priority_table(self) -> None:
        assert dict(DEFAULT_MARK_PRIORITIES) == {
            "link": 100,
            "background": 50,
            "color": 40,
            "bold": 10,
            "italic": 10,
            "underline": 10,
            "strike": 10,
            "script": 5,
        }

    def test_frozen(self) -> None:
        config = _builder().build()
        with pytest.raises(AttributeError):
            config.join = "".join  # type: ignore[misc]
        with pytest.raises(TypeError):
            config.blocks["x"] = lambda n, c, a: c  # type: ignore[index]

    def test_builder_does_not_share_state(self) -> None:
        builder = _builder().block("paragraph", lambda n, c, a: "1")
        first = builder.build()
        builder.block("header", lambda n, c, a: "2")
        assert "header" not in first.blocks

    def test_replace(self) -> None:
        builder = _builder().block("paragraph", lambda n, c, a: "old")
        config = builder.block("paragraph", lambda n, c, a: "new", replace=True).build()
        assert render(root(block("paragraph")), config) == "new"

    def test_replace_mark_with_attributor(self) -> None:
        builder = _builder().mark("color", TagMark("font"))
        config = builder.attributor("color", lambda v, n: None, replace=True).build()
        assert "color" in config.attributors
        assert "color" not in config.marks

    def test_priority_registration(self) -> None:
        config = (
            _builder().mark("highlight", TagMark("mark"), priority=7).priority("bold", 3).build()
        )
        assert config.priority("highlight") == 7
        assert config.priority("bold") == 3
        assert DEFAULT_MARK_PRIORITIES["bold"] == 10

    def test_from_config_extends(self) -> None:
        base = _builder().block("paragraph", lambda n, c, a: "p").build()
        extended = (
            RendererConfigBuilder.from_config(base).mark("bold", TagMark("b")).build()
        )
        assert set(extended.blocks) == {"paragraph"}
        assert extended.has_mark("bold")
        assert not base.has_mark("bold")
        with pytest.raises(ConfigError):
            RendererConfigBuilder.from_config(base).block("paragraph", lambda n, c, a: "")

    def test_custom_priority_table(self) -> None:
        builder: RendererConfigBuilder[str] = RendererConfigBuilder(
            join="".join, text=lambda s, node: s, mark_priorities={"a": 1}
        )
        assert dict(builder.build().mark_priorities) == {"a": 1}
