"""HTML adapter: a RendererConfig producing Quill-compatible semantic HTML.

Blocks map to their natural elements (``<p>``, ``<h1>``..``<h6>``,
``<blockquote>``, nested ``<ol>``/``<ul>``, ``<table><tbody>``), code
snippets become one ``<pre>`` each, and layout attributes (indent, align,
direction) become prefixed classes (``ql-indent-1``, ``ql-align-center``).

Color and background are attributors: they add ``style`` to the element
created by the innermost element mark (or a ``<span>`` when there is
none) instead of wrapping text in an extra element.

Thread Safety:
HtmlRenderer is immutable after construction. Multiple threads can safely
share a single instance and call render() concurrently.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from deltatree.attributes import (
    get_align,
    get_code_language,
    get_direction,
    get_header_level,
    get_indent,
    get_list_type,
    get_row_id,
    resolve_checked_state,
)
from deltatree.config import ParseConfig
from deltatree.embeds import resolve_embed_source, resolve_formula, resolve_mention
from deltatree.nodes import TNode
from deltatree.renderers.attrs import ResolvedAttrs
from deltatree.renderers.config import (
    AfterRender,
    BeforeRender,
    RendererConfig,
    RendererConfigBuilder,
    TagMark,
)
from deltatree.renderers.engine import TreeRenderer
from deltatree.sanitize import UrlSanitizer, strip_dangerous_urls
from deltatree.utils.text import escape_html

_BULLET_TYPES = frozenset(("bullet", "checked", "unchecked"))


@dataclass(frozen=True, slots=True)
class HtmlOptions:
    """Presentation options for the HTML adapter.

    Attributes:
        class_prefix: Prefix of every generated class (``ql-indent-1``)
        paragraph_tag: Element for paragraphs
        link_target: ``target`` of links; None omits it
        link_rel: ``rel`` of links; None omits it
        encode_html: Escape text content. Turn off only for trusted input.
        url_sanitizer: Applied to every emitted URL; ``None`` result drops it

    """

    class_prefix: str = "ql"
    paragraph_tag: str = "p"
    link_target: str | None = "_blank"
    link_rel: str | None = None
    encode_html: bool = True
    url_sanitizer: UrlSanitizer | None = strip_dangerous_urls

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "HtmlOptions":
        """Create HtmlOptions from a dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        return cls(**{k: v for k, v in options.items() if k in valid_fields})


def build_attr_string(
    attrs: Mapping[str, str | None] | None = None,
    resolved: ResolvedAttrs | None = None,
    *,
    classes: Sequence[str] = (),
) -> str:
    """Serialize element attributes, leading space included.

    Order: ``class``, then ``attrs``, then ``style``, then the resolved
    named attributes. ``None`` values are skipped.

    Example:
        >>> build_attr_string({"href": "/a"}, ResolvedAttrs(style={"color": "red"}))
        ' href="/a" style="color:red"'
    """
    all_classes = list(classes)
    if resolved is not None:
        all_classes.extend(resolved.classes)

    parts: list[str] = []
    if all_classes:
        parts.append(f'class="{escape_html(" ".join(dict.fromkeys(all_classes)))}"')
    for name, value in (attrs or {}).items():
        if value is not None:
            parts.append(f'{name}="{escape_html(value)}"')
    if resolved is not None:
        if resolved.style:
            style = ";".join(f"{prop}:{value}" for prop, value in resolved.style.items())
            parts.append(f'style="{escape_html(style)}"')
        for name, value in resolved.attrs.items():
            parts.append(f'{name}="{escape_html(value)}"')
    return "".join(" " + part for part in parts)


def layout_classes(node: TNode, prefix: str) -> list[str]:
    """Classes for the block layout attributes: indent, align, direction."""
    classes: list[str] = []
    if (indent := get_indent(node)) > 0:
        classes.append(f"{prefix}-indent-{indent}")
    if align := get_align(node):
        classes.append(f"{prefix}-align-{align}")
    if direction := get_direction(node):
        classes.append(f"{prefix}-direction-{direction}")
    return classes


class HtmlRenderer:
    """Render document trees to HTML.

    Usage:
        >>> from deltatree import parse
        >>> HtmlRenderer().render(parse([{"insert": "Hi", "attributes": {"bold": True}},
        ...                              {"insert": "\\n"}]))
        '<p><strong>Hi</strong></p>'

    Extending:
        Build on the default config and hand it back::

            config = (
                RendererConfigBuilder.from_config(HtmlRenderer().config)
                .mark("highlight", TagMark("mark"))
                .build()
            )
            renderer = HtmlRenderer(config=config)

    Thread Safety:
        Multiple threads can safely share a single HtmlRenderer instance.
    """

    __slots__ = ("_options", "_renderer")

    def __init__(
        self,
        options: HtmlOptions | None = None,
        *,
        config: RendererConfig[str] | None = None,
        before_render: BeforeRender[str] | None = None,
        after_render: AfterRender[str] | None = None,
        on_unknown_node: Callable[[TNode], str] | None = None,
    ) -> None:
        """Initialize HTML renderer.

        Args:
            options: Presentation options
            config: Replaces the generated config entirely (hooks below still apply)
            before_render: Hook for classified nodes; non-None output replaces the default
            after_render: Post-processes every classified node's output
            on_unknown_node: Fallback for node types without a handler
        """
        self._options = options or HtmlOptions()
        builder = RendererConfigBuilder.from_config(config or self._build_config())
        if before_render is not None:
            builder.before_render(before_render)
        if after_render is not None:
            builder.after_render(after_render)
        if on_unknown_node is not None:
            builder.on_unknown_node(on_unknown_node)
        self._renderer = TreeRenderer(builder.build())

    @property
    def options(self) -> HtmlOptions:
        return self._options

    @property
    def config(self) -> RendererConfig[str]:
        return self._renderer.config

    def render(self, tree: TNode) -> str:
        """Render a tree to an HTML string."""
        return self._renderer.render(tree)

    # =========================================================================
    # Config
    # =========================================================================

    def _build_config(self) -> RendererConfig[str]:
        prefix = self._options.class_prefix
        builder: RendererConfigBuilder[str] = RendererConfigBuilder(
            join="".join,
            text=self._text,
            tag=self._tag,
            wrap_attrs=self._wrap_attrs,
        )
        builder.block_attribute_resolver(
            lambda node: ResolvedAttrs(classes=tuple(layout_classes(node, prefix)))
        )

        # Blocks
        builder.block("paragraph", self._simple_block(lambda node: self._options.paragraph_tag))
        builder.block("header", self._simple_block(lambda node: f"h{get_header_level(node) or 1}"))
        builder.block("blockquote", self._simple_block(lambda node: "blockquote"))
        builder.block("list", self._render_list)
        builder.block("list-item", self._render_list_item)
        builder.block(
            "table", lambda node, children, attrs: f"<table><tbody>{children}</tbody></table>"
        )
        builder.block("table-row", lambda node, children, attrs: f"<tr>{children}</tr>")
        builder.block("table-cell", self._render_table_cell)
        builder.block("code-block", self._render_code_line)

        # Embeds
        builder.block("image", self._render_image)
        builder.block("video", self._render_video)
        builder.block("formula", self._render_formula)
        builder.block("mention", self._render_mention)

        builder.node_override("code-block-container", self._render_code_container)
        builder.node_override("line-break", lambda node, render_node: "<br/>")

        # Element marks
        builder.mark("bold", TagMark("strong"))
        builder.mark("italic", TagMark("em"))
        builder.mark("underline", TagMark("u"))
        builder.mark("strike", TagMark("s"))
        builder.mark("code", TagMark("code"))
        builder.mark("script", TagMark(lambda value: "sup" if value == "super" else "sub"))
        builder.mark("link", self._render_link)

        # Attributors
        builder.attributor("color", lambda value, node: ResolvedAttrs(style={"color": str(value)}))
        builder.attributor(
            "background", lambda value, node: ResolvedAttrs(style={"background-color": str(value)})
        )
        for name in ("font", "size"):
            builder.attributor(name, _class_attributor(f"{prefix}-{name}"))

        return builder.build()

    # -- Output primitives ----------------------------------------------------

    def _text(self, content: str, node: TNode) -> str:
        return escape_html(content, quote=False) if self._options.encode_html else content

    def _tag(self, name: str, content: str, attrs: ResolvedAttrs | None) -> str:
        return f"<{name}{build_attr_string(None, attrs)}>{content}</{name}>"

    def _wrap_attrs(self, content: str, attrs: ResolvedAttrs) -> str:
        return f"<span{build_attr_string(None, attrs)}>{content}</span>"

    def _url(self, url: str) -> str:
        sanitizer = self._options.url_sanitizer
        if sanitizer is None:
            return url
        return sanitizer(url) or ""

    # -- Blocks ---------------------------------------------------------------

    def _simple_block(
        self, tag_for: Callable[[TNode], str]
    ) -> Callable[[TNode, str, ResolvedAttrs], str]:
        """Handler wrapping children in one element; empty blocks render ``<br/>``."""

        def render_block(node: TNode, children: str, attrs: ResolvedAttrs) -> str:
            tag = tag_for(node)
            return f"<{tag}{build_attr_string(None, attrs)}>{children or '<br/>'}</{tag}>"

        return render_block

    def _render_list(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        tag = "ul" if get_list_type(node) in _BULLET_TYPES else "ol"
        return f"<{tag}{build_attr_string(None, attrs)}>{children}</{tag}>"

    def _render_list_item(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        checked = resolve_checked_state(node)
        extra = {"data-checked": None if checked is None else str(checked).lower()}
        return f"<li{build_attr_string(extra, attrs)}>{children or '<br/>'}</li>"

    def _render_table_cell(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        return f"<td{build_attr_string({'data-row': get_row_id(node)}, attrs)}>{children}</td>"

    def _code_block(self, language: str | None, content: str, attrs: ResolvedAttrs | None) -> str:
        classes = [f"{self._options.class_prefix}-syntax"]
        if language:
            classes.append(f"language-{language}")
        extra = {"data-language": language, "spellcheck": "false"}
        return f"<pre{build_attr_string(extra, attrs, classes=classes)}>{content}</pre>"

    def _render_code_line(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        return self._code_block(get_code_language(node), children, attrs)

    def _render_code_container(self, node: TNode, render_node: Callable[[TNode], str]) -> str:
        lines = ["".join(render_node(child) for child in line.children) for line in node.children]
        return self._code_block(get_code_language(node), "\n".join(lines), None)

    # -- Embeds ---------------------------------------------------------------

    def _render_image(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        src = self._url(resolve_embed_source(node))
        if not src:
            return ""
        alt = node.attributes.get("alt")
        image_attrs = {
            "src": src,
            "width": _str_or_none(node.attributes.get("width")),
            "height": _str_or_none(node.attributes.get("height")),
            "alt": "" if alt is None else str(alt),
        }
        image = f"<img{build_attr_string(image_attrs, attrs)}/>"

        link = node.attributes.get("link")
        href = self._url(link) if isinstance(link, str) else ""
        if not href:
            return image
        link_attrs = {
            "href": href,
            "target": self._options.link_target,
            "rel": self._options.link_rel,
        }
        return f"<a{build_attr_string(link_attrs)}>{image}</a>"

    def _render_video(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        src = self._url(resolve_embed_source(node))
        if not src:
            return ""
        video_attrs = {
            "src": src,
            "frameborder": "0",
            "allowfullscreen": "true",
            "width": _str_or_none(node.attributes.get("width")),
            "height": _str_or_none(node.attributes.get("height")),
        }
        classes = [f"{self._options.class_prefix}-video"]
        return f"<iframe{build_attr_string(video_attrs, attrs, classes=classes)}></iframe>"

    def _render_formula(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        classes = [f"{self._options.class_prefix}-formula"]
        content = self._text(resolve_formula(node), node)
        return f"<span{build_attr_string(None, attrs, classes=classes)}>{content}</span>"

    def _render_mention(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        mention = resolve_mention(node)
        classes = [mention.class_name] if mention.class_name else []
        mention_attrs = {"href": self._url(mention.href) or "about:blank", "target": mention.target}
        content = self._text(mention.name, node)
        return f"<a{build_attr_string(mention_attrs, attrs, classes=classes)}>{content}</a>"

    # -- Marks ----------------------------------------------------------------

    def _render_link(
        self, content: str, value: Any, node: TNode, attrs: ResolvedAttrs | None
    ) -> str:
        href = self._url(str(value))
        if not href:
            # Rejected URL: keep the text and whatever the attributors contributed
            return self._wrap_attrs(content, attrs) if attrs else content
        target = node.attributes.get("target")
        rel = node.attributes.get("rel")
        link_attrs = {
            "href": href,
            "target": target if isinstance(target, str) else self._options.link_target,
            "rel": rel if isinstance(rel, str) else self._options.link_rel,
        }
        return f"<a{build_attr_string(link_attrs, attrs)}>{content}</a>"


def _class_attributor(stem: str) -> Callable[[Any, TNode], ResolvedAttrs]:
    def contribute(value: Any, node: TNode) -> ResolvedAttrs:
        return ResolvedAttrs(classes=(f"{stem}-{value}",))

    return contribute


def _str_or_none(value: Any) -> str | None:
    return None if value is None else str(value)


def render_delta(
    delta: Sequence[Mapping[str, Any]] | Mapping[str, Any],
    options: HtmlOptions | None = None,
    *,
    parse_config: ParseConfig | None = None,
) -> str:
    """Parse a delta with the standard grouping pipeline and render it to HTML.

    Example:
        >>> render_delta([{"insert": "Title"}, {"insert": "\\n", "attributes": {"header": 2}}])
        '<h2>Title</h2>'
    """
    from deltatree.pipeline import parse

    return HtmlRenderer(options).render(parse(delta, config=parse_config))
