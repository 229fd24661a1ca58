"""Error-path and malformed input tests.

Tests that exercise the error taxonomy: ParseError for malformed operations,
ConfigError for conflicting renderer configurations, RenderError for bad
render input, and unchanged propagation of handler exceptions.
"""

import pytest

from deltatree import (
    ConfigError,
    DeltaTreeError,
    HtmlRenderer,
    ParseError,
    RenderError,
    RendererConfig,
    RendererConfigBuilder,
    TagMark,
    build,
    parse,
    render,
)
from deltatree.nodes import block, root, text

# =========================================================================
# Error construction and formatting
# =========================================================================


class TestErrorFormatting:
    """Verify the error classes produce well-formatted messages."""

    def test_parse_error_message_only(self) -> None:
        err = ParseError("unexpected shape")
        assert str(err) == "unexpected shape"
        assert err.op_index is None

    def test_parse_error_with_index(self) -> None:
        err = ParseError("operation has no 'insert'", 3)
        assert err.op_index == 3
        assert str(err) == "op 3: operation has no 'insert'"

    def test_config_error_with_name(self) -> None:
        err = ConfigError("already registered", name="bold")
        assert err.name == "bold"
        assert str(err) == "'bold': already registered"

    def test_hierarchy(self) -> None:
        for err in (ParseError("x"), ConfigError("x"), RenderError("x")):
            assert isinstance(err, DeltaTreeError)


# =========================================================================
# ParseError from malformed operations
# =========================================================================


class TestMalformedOperations:
    """The builder fails on the first malformed operation and returns nothing."""

    def test_missing_insert_reports_index(self) -> None:
        """An op without insert at index 3 fails with op_index 3."""
        ops = [
            {"insert": "a"},
            {"insert": "\n"},
            {"insert": "b\n"},
            {"attributes": {"bold": True}},
            {"insert": "c\n"},
        ]
        with pytest.raises(ParseError) as exc_info:
            build(ops)
        assert exc_info.value.op_index == 3

    def test_retain_and_delete_ops_rejected(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            build([{"insert": "a\n"}, {"retain": 5}])
        assert exc_info.value.op_index == 1

        with pytest.raises(ParseError) as exc_info:
            build([{"delete": 1}])
        assert exc_info.value.op_index == 0

    def test_non_mapping_operation(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            build([{"insert": "a\n"}, "b"])  # type: ignore[list-item]
        assert exc_info.value.op_index == 1

    def test_attributes_not_mapping(self) -> None:
        with pytest.raises(ParseError, match="'attributes' must be a mapping"):
            build([{"insert": "a", "attributes": ["bold"]}])

    def test_insert_of_wrong_type(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            build([{"insert": 42}])
        assert exc_info.value.op_index == 0

    def test_embed_with_two_keys(self) -> None:
        with pytest.raises(ParseError, match="exactly one key"):
            build([{"insert": {"image": "a.png", "video": "b.mp4"}}])

    def test_empty_embed(self) -> None:
        with pytest.raises(ParseError, match="exactly one key"):
            build([{"insert": {}}])

    @pytest.mark.parametrize(
        "attributes",
        [
            {"header": 7},
            {"header": "big"},
            {"header": True},
            {"indent": -1},
            {"list": ""},
            {"list": {"type": "bullet"}},
            {"code-block": 3},
            {"table": True},
        ],
    )
    def test_malshaped_block_attribute(self, attributes: dict) -> None:
        ops = [{"insert": "x"}, {"insert": "\n", "attributes": attributes}]
        with pytest.raises(ParseError) as exc_info:
            build(ops)
        assert exc_info.value.op_index == 1

    def test_delta_without_ops(self) -> None:
        with pytest.raises(ParseError, match="no 'ops'"):
            build({"insert": "x"})

    def test_delta_of_wrong_type(self) -> None:
        with pytest.raises(ParseError):
            build("Hello\n")  # type: ignore[arg-type]

    def test_parse_propagates(self) -> None:
        """The grouping pipeline never runs on a failed build."""
        with pytest.raises(ParseError):
            parse([{"insert": "a\n", "attributes": {"list": ""}}])


# =========================================================================
# ConfigError from conflicting registrations
# =========================================================================


def _builder() -> RendererConfigBuilder[str]:
    return RendererConfigBuilder(
        join="".join,
        text=lambda s, node: s,
        tag=lambda t, c, a: f"<{t}>{c}</{t}>",
        wrap_attrs=lambda c, a: c,
    )


class TestConfigErrors:
    """Invalid renderer configurations fail at construction, never during render."""

    def test_duplicate_block(self) -> None:
        builder = _builder().block("paragraph", lambda n, c, a: c)
        with pytest.raises(ConfigError) as exc_info:
            builder.block("paragraph", lambda n, c, a: c)
        assert exc_info.value.name == "paragraph"

    def test_duplicate_mark(self) -> None:
        builder = _builder().mark("bold", TagMark("b"))
        with pytest.raises(ConfigError):
            builder.mark("bold", TagMark("strong"))

    def test_mark_then_attributor(self) -> None:
        builder = _builder().mark("color", TagMark("font"))
        with pytest.raises(ConfigError):
            builder.attributor("color", lambda v, n: None)

    def test_duplicate_node_override(self) -> None:
        builder = _builder().node_override("list", lambda n, r: "")
        with pytest.raises(ConfigError):
            builder.node_override("list", lambda n, r: "")

    def test_mark_and_attributor_in_one_config(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            RendererConfig(
                join="".join,
                text=lambda s, node: s,
                wrap_attrs=lambda c, a: c,
                marks={"color": lambda c, v, n, a: c},
                attributors={"color": lambda v, n: None},
            )
        assert exc_info.value.name == "color"

    def test_tag_mark_without_tag_primitive(self) -> None:
        with pytest.raises(ConfigError, match="TagMark"):
            RendererConfig(join="".join, text=lambda s, node: s, marks={"bold": TagMark("b")})

    def test_attributor_without_wrap_attrs(self) -> None:
        with pytest.raises(ConfigError, match="wrap_attrs"):
            RendererConfig(
                join="".join, text=lambda s, node: s, attributors={"color": lambda v, n: None}
            )

    def test_non_int_priority(self) -> None:
        with pytest.raises(ConfigError):
            RendererConfig(join="".join, text=lambda s, node: s, mark_priorities={"bold": "high"})

    def test_non_callable_primitive(self) -> None:
        with pytest.raises(ConfigError):
            RendererConfig(join="".join, text="text")  # type: ignore[arg-type]


# =========================================================================
# Render failures
# =========================================================================


class TestRenderFailures:
    """Handler exceptions propagate unchanged; no partial output."""

    def test_render_non_node(self) -> None:
        with pytest.raises(RenderError):
            HtmlRenderer().render({"type": "root"})  # type: ignore[arg-type]

    def test_handler_exception_propagates_unchanged(self) -> None:
        class Boom(Exception):
            pass

        def explode(node, children, attrs):  # type: ignore[no-untyped-def]
            raise Boom("paragraph handler failed")

        config = _builder().block("paragraph", explode).build()
        with pytest.raises(Boom, match="paragraph handler failed"):
            render(root(block("paragraph", text("x"))), config)

    def test_mark_exception_propagates(self) -> None:
        def explode(content, value, node, attrs):  # type: ignore[no-untyped-def]
            raise KeyError(value)

        config = _builder().mark("bold", explode).build()
        with pytest.raises(KeyError):
            render(root(block("paragraph", text("x", bold=True))), config)

    def test_hook_exception_propagates(self) -> None:
        def explode(group, node):  # type: ignore[no-untyped-def]
            raise ValueError(group)

        renderer = HtmlRenderer(before_render=explode)
        with pytest.raises(ValueError, match="block"):
            renderer.render(parse([{"insert": "x\n"}]))
