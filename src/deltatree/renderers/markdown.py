"""Markdown adapter: a RendererConfig producing plain Markdown text.

Blocks are separated by single newlines, so an empty paragraph in the
delta becomes a blank line in the output. Lists render as nested
Markdown lists, code snippets as fenced blocks and tables as GFM pipe
tables with the first row as header.

Markdown has no inline styling: underline, script, color, background,
font and size have no handler here and pass their text through unchanged.

Thread Safety:
MarkdownRenderer is immutable after construction and safe to share.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from deltatree.attributes import (
    get_code_language,
    get_header_level,
    get_list_type,
    get_ordered_index,
)
from deltatree.config import ParseConfig
from deltatree.embeds import resolve_embed_source, resolve_formula, resolve_mention
from deltatree.nodes import LIST, TNode
from deltatree.renderers.attrs import ResolvedAttrs
from deltatree.renderers.config import (
    AfterRender,
    BeforeRender,
    RendererConfig,
    RendererConfigBuilder,
)
from deltatree.renderers.engine import TreeRenderer
from deltatree.utils.text import indent_lines

type RenderNode = Callable[[TNode], str]


@dataclass(frozen=True, slots=True)
class MarkdownOptions:
    """Presentation options for the Markdown adapter.

    Attributes:
        bullet_char: Marker of bullet list items
        bullet_padding: Space between the bullet marker and the item text
        indent_string: Indentation per nested list level
        hr_string: Horizontal rule (``divider`` embeds)
        fence: Code fence

    """

    bullet_char: str = "*"
    bullet_padding: str = "   "
    indent_string: str = "    "
    hr_string: str = "* * *"
    fence: str = "```"

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "MarkdownOptions":
        """Create MarkdownOptions from a dictionary, ignoring unknown keys."""
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        return cls(**{k: v for k, v in options.items() if k in valid_fields})


class MarkdownRenderer:
    """Render document trees to Markdown.

    Usage:
        >>> from deltatree import parse
        >>> MarkdownRenderer().render(parse([{"insert": "Title"},
        ...                                  {"insert": "\\n", "attributes": {"header": 1}}]))
        '# Title'

    """

    __slots__ = ("_options", "_renderer")

    def __init__(
        self,
        options: MarkdownOptions | None = None,
        *,
        config: RendererConfig[str] | None = None,
        before_render: BeforeRender[str] | None = None,
        after_render: AfterRender[str] | None = None,
        on_unknown_node: Callable[[TNode], str] | None = None,
    ) -> None:
        self._options = options or MarkdownOptions()
        builder = RendererConfigBuilder.from_config(config or self._build_config())
        if before_render is not None:
            builder.before_render(before_render)
        if after_render is not None:
            builder.after_render(after_render)
        if on_unknown_node is not None:
            builder.on_unknown_node(on_unknown_node)
        self._renderer = TreeRenderer(builder.build())

    @property
    def options(self) -> MarkdownOptions:
        return self._options

    @property
    def config(self) -> RendererConfig[str]:
        return self._renderer.config

    def render(self, tree: TNode) -> str:
        """Render a tree to a Markdown string."""
        return self._renderer.render(tree)

    # =========================================================================
    # Config
    # =========================================================================

    def _build_config(self) -> RendererConfig[str]:
        opts = self._options
        builder: RendererConfigBuilder[str] = RendererConfigBuilder(
            join="".join,
            text=lambda content, node: content,
        )

        builder.node_override(
            "root", lambda node, render_node: "\n".join(render_node(c) for c in node.children)
        )
        builder.node_override("list", self._render_list)
        builder.node_override("code-block-container", self._render_code_container)
        builder.node_override("table", self._render_table)
        builder.node_override("line-break", lambda node, render_node: "\n")

        builder.block("paragraph", lambda node, children, attrs: children)
        builder.block("list-item", lambda node, children, attrs: children)
        builder.block("header", self._render_header)
        builder.block("blockquote", self._render_blockquote)
        builder.block("code-block", self._render_code_line)

        builder.block("image", self._render_image)
        builder.block("video", lambda node, children, attrs: resolve_embed_source(node))
        builder.block("divider", lambda node, children, attrs: opts.hr_string)
        builder.block("formula", lambda node, children, attrs: resolve_formula(node))
        builder.block("mention", self._render_mention)

        builder.mark("bold", lambda content, value, node, attrs: f"**{content}**")
        builder.mark("italic", lambda content, value, node, attrs: f"_{content}_")
        builder.mark("strike", lambda content, value, node, attrs: f"~~{content}~~")
        builder.mark("code", lambda content, value, node, attrs: f"`{content}`")
        builder.mark("link", lambda content, value, node, attrs: f"[{content}]({value})")

        return builder.build()

    # -- Blocks ---------------------------------------------------------------

    def _render_header(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        return f"{'#' * (get_header_level(node) or 1)} {children}"

    def _render_blockquote(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        return "\n".join(f"> {line}" for line in children.split("\n"))

    def _fenced(self, language: str | None, content: str) -> str:
        fence = self._options.fence
        return f"{fence}{language or ''}\n{content}\n{fence}"

    def _render_code_line(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        return self._fenced(get_code_language(node), children)

    def _render_code_container(self, node: TNode, render_node: RenderNode) -> str:
        lines = ["".join(render_node(child) for child in line.children) for line in node.children]
        return self._fenced(get_code_language(node), "\n".join(lines))

    def _render_list(self, node: TNode, render_node: RenderNode) -> str:
        """Nested Markdown list.

        Each item's own content renders through the engine as a ``list-item``
        block and is then prefixed with its marker. Sublists are rendered by
        the engine and indented.
        """
        opts = self._options
        lines: list[str] = []
        for position, item in enumerate(node.children, start=1):
            content = render_node(item.with_children([c for c in item.children if c.type != LIST]))
            marker = self._marker(item, position)
            lines.append(marker + content.replace("\n", "\n" + " " * len(marker)))
            for sublist in (c for c in item.children if c.type == LIST):
                lines.append(indent_lines(render_node(sublist), opts.indent_string))
        return "\n".join(lines)

    def _marker(self, item: TNode, position: int) -> str:
        match get_list_type(item):
            case "ordered":
                return f"{get_ordered_index(item) or position}. "
            case "checked":
                return "- [x] "
            case "unchecked":
                return "- [ ] "
            case _:
                return self._options.bullet_char + self._options.bullet_padding

    def _render_table(self, node: TNode, render_node: RenderNode) -> str:
        rows = [[self._cell(cell, render_node) for cell in row.children] for row in node.children]
        if not rows:
            return ""
        width = max(len(row) for row in rows)
        rows = [row + [""] * (width - len(row)) for row in rows]
        lines = [_table_line(rows[0]), _table_line(["---"] * width)]
        lines.extend(_table_line(row) for row in rows[1:])
        return "\n".join(lines)

    def _cell(self, cell: TNode, render_node: RenderNode) -> str:
        content = "".join(render_node(child) for child in cell.children)
        return content.replace("|", "\\|").replace("\n", " ")

    # -- Embeds ---------------------------------------------------------------

    def _render_image(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        src = resolve_embed_source(node)
        if not src:
            return ""
        alt = node.attributes.get("alt")
        return f"![{'' if alt is None else alt}]({src})"

    def _render_mention(self, node: TNode, children: str, attrs: ResolvedAttrs) -> str:
        mention = resolve_mention(node)
        return f"[@{mention.name}]({mention.href})"


def _table_line(cells: Sequence[str]) -> str:
    return "| " + " | ".join(cells) + " |"


def render_delta(
    delta: Sequence[Mapping[str, Any]] | Mapping[str, Any],
    options: MarkdownOptions | None = None,
    *,
    parse_config: ParseConfig | None = None,
) -> str:
    """Parse a delta with the standard grouping pipeline and render it to Markdown.

    Example:
        >>> render_delta([{"insert": "a"}, {"insert": "\\n", "attributes": {"list": "ordered"}}])
        '1. a'
    """
    from deltatree.pipeline import parse

    return MarkdownRenderer(options).render(parse(delta, config=parse_config))
