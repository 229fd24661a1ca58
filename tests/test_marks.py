"""Tests for mark resolution: element mark nesting and attributor merging."""

from deltatree import RendererConfigBuilder, ResolvedAttrs, TagMark, render
from deltatree.nodes import TNode, block, root, text
from deltatree.renderers.attrs import EMPTY_ATTRS, merge_all
from deltatree.renderers.marks import apply_marks, collect_attributor_attrs, element_marks


def _tag(name: str, content: str, attrs: ResolvedAttrs | None) -> str:
    if not attrs:
        return f"<{name}>{content}</{name}>"
    parts = [*attrs.classes, *(f"{k}:{v}" for k, v in attrs.style.items())]
    parts.extend(f"{k}={v}" for k, v in attrs.attrs.items())
    return f"<{name} {' '.join(parts)}>{content}</{name}>"


def _config():  # type: ignore[no-untyped-def]
    return (
        RendererConfigBuilder(
            join="".join,
            text=lambda s, node: s,
            tag=_tag,
            wrap_attrs=lambda content, attrs: _tag("span", content, attrs),
        )
        .mark("bold", TagMark("b"))
        .mark("italic", TagMark("i"))
        .mark("underline", TagMark("u"))
        .mark("script", TagMark(lambda v: "sup" if v == "super" else "sub"))
        .mark("link", lambda content, value, node, attrs: _tag(f"a:{value}", content, attrs))
        .attributor("color", lambda v, n: ResolvedAttrs(style={"color": v}))
        .attributor("background", lambda v, n: ResolvedAttrs(style={"background": v}))
        .attributor("size", lambda v, n: ResolvedAttrs(classes=(f"size-{v}",)))
        .build()
    )


def _render(leaf: TNode) -> str:
    return render(root(block("paragraph", leaf)), _config())


class TestElementMarks:
    """Nesting order: descending priority, ties alphabetical."""

    def test_single_mark(self) -> None:
        assert _render(text("x", bold=True)) == "<b>x</b>"

    def test_higher_priority_outside(self) -> None:
        """link (100) wraps bold (10) wraps script (5)."""
        leaf = text("x", script="super", bold=True, link="/u")
        assert _render(leaf) == "<a:/u><b><sup>x</sup></b></a:/u>"

    def test_equal_priority_alphabetical(self) -> None:
        """bold, italic and underline share a priority; earlier names wrap outside."""
        leaf = text("x", underline=True, italic=True, bold=True)
        assert _render(leaf) == "<b><i><u>x</u></i></b>"

    def test_declaration_order_irrelevant(self) -> None:
        a = text("x", bold=True, italic=True, link="/u")
        b = text("x", link="/u", italic=True, bold=True)
        assert _render(a) == _render(b)

    def test_unset_marks_ignored(self) -> None:
        assert _render(text("x", bold=False, italic=None)) == "x"

    def test_unknown_marks_pass_through(self) -> None:
        assert _render(text("x", spellcheck=True)) == "x"

    def test_element_marks_outermost_first(self) -> None:
        leaf = text("x", italic=True, link="/u", bold=True)
        assert [name for name, _ in element_marks(leaf, _config())] == ["link", "bold", "italic"]

    def test_custom_priority_changes_nesting(self) -> None:
        config = (
            RendererConfigBuilder.from_config(_config()).priority("italic", 20).build()
        )
        out = render(root(block("paragraph", text("x", bold=True, italic=True))), config)
        assert out == "<i><b>x</b></i>"


class TestAttributors:
    """Attributor contributions go to the innermost element, never their own layer."""

    def test_attributor_on_innermost_mark(self) -> None:
        leaf = text("x", link="/u", bold=True, color="red")
        assert _render(leaf) == "<a:/u><b color:red>x</b></a:/u>"

    def test_color_and_link_single_element(self) -> None:
        """A color on a link decorates the link element itself."""
        assert _render(text("x", link="/u", color="red")) == "<a:/u color:red>x</a:/u>"

    def test_attributor_only_uses_wrap_attrs(self) -> None:
        assert _render(text("x", color="red")) == "<span color:red>x</span>"

    def test_classes_union(self) -> None:
        leaf = text("x", size="large", color="red", background="blue")
        assert _render(leaf) == "<span size-large color:red background:blue>x</span>"

    def test_later_attributor_wins_conflicts(self) -> None:
        """Attributors merge in ascending priority; the higher one overrides."""
        config = (
            RendererConfigBuilder.from_config(_config())
            .attributor("highlight", lambda v, n: ResolvedAttrs(style={"color": v}), priority=45)
            .build()
        )
        leaf = text("x", color="red", highlight="yellow")
        assert collect_attributor_attrs(leaf, config).style["color"] == "yellow"

    def test_attributor_returning_none(self) -> None:
        config = (
            RendererConfigBuilder.from_config(_config())
            .attributor("font", lambda v, n: None)
            .build()
        )
        assert apply_marks(text("x", font="serif"), "x", config) == "x"

    def test_unset_attributor_ignored(self) -> None:
        assert _render(text("x", color=None, bold=True)) == "<b>x</b>"


class TestResolvedAttrs:
    def test_empty_is_falsy(self) -> None:
        assert not EMPTY_ATTRS
        assert ResolvedAttrs(classes=("a",))

    def test_merge(self) -> None:
        a = ResolvedAttrs(classes=("a", "b"), style={"color": "red"}, attrs={"id": "1"})
        b = ResolvedAttrs(classes=("b", "c"), style={"color": "blue"})
        merged = a.merge(b)
        assert merged.classes == ("a", "b", "c")
        assert dict(merged.style) == {"color": "blue"}
        assert dict(merged.attrs) == {"id": "1"}

    def test_duplicate_classes_removed(self) -> None:
        assert ResolvedAttrs(classes=("a", "a", "b")).classes == ("a", "b")

    def test_merge_all_skips_none(self) -> None:
        merged = merge_all([None, ResolvedAttrs(style={"a": "1"}), None])
        assert dict(merged.style) == {"a": "1"}
        assert merge_all([]) is EMPTY_ATTRS
