"""
deltatree: rich-text deltas to document trees to any output format

Turns the flat, attributed operation log of a Quill-style editor into a
structured document tree (blocks, nested lists, tables, code snippets),
then renders that tree through a declarative, pluggable configuration.
Zero runtime dependencies.

Quick Start:
    >>> from deltatree import parse, HtmlRenderer
    >>> tree = parse([{"insert": "Hello"}, {"insert": "\\n", "attributes": {"header": 1}}])
    >>> HtmlRenderer().render(tree)
    '<h1>Hello</h1>'

    >>> # Or use the high-level converter
    >>> from deltatree import DeltaConverter
    >>> convert = DeltaConverter()
    >>> convert([{"insert": "Hi", "attributes": {"bold": True}}, {"insert": "\\n"}])
    '<p><strong>Hi</strong></p>'

Custom Formats:
    >>> from deltatree import RendererConfigBuilder, TagMark, render
    >>> config = (
    ...     RendererConfigBuilder(join="".join, text=lambda s, node: s,
    ...                           tag=lambda t, c, a: f"[{t}]{c}[/{t}]")
    ...     .mark("bold", TagMark("b"))
    ...     .build()
    ... )
    >>> render(parse([{"insert": "x", "attributes": {"bold": True}}]), config)
    '[b]x[/b]'

Installation:
    pip install deltatree
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from deltatree.config import (
    ParseConfig,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from deltatree.errors import ConfigError, DeltaTreeError, ParseError, RenderError
from deltatree.nodes import (
    BLOCKQUOTE,
    CODE_BLOCK,
    CODE_BLOCK_CONTAINER,
    HEADER,
    LINE_BREAK,
    LIST,
    LIST_ITEM,
    PARAGRAPH,
    ROOT,
    TABLE,
    TABLE_CELL,
    TABLE_ROW,
    TEXT,
    TNode,
    block,
    group_class,
    iter_text,
    plain_text,
    root,
    text,
)
from deltatree.parser import DeltaParser, build
from deltatree.pipeline import parse
from deltatree.renderers import (
    DEFAULT_MARK_PRIORITIES,
    ASTRenderer,
    BlockDescriptor,
    HtmlOptions,
    HtmlRenderer,
    MarkdownOptions,
    MarkdownRenderer,
    RendererConfig,
    RendererConfigBuilder,
    ResolvedAttrs,
    TagMark,
    TreeRenderer,
    render,
)
from deltatree.serialization import from_dict, from_json, to_dict, to_json
from deltatree.transformers import (
    STANDARD_TRANSFORMERS,
    Transformer,
    apply_transformers,
    code_block_grouper,
    compose_transformers,
    flat_list_grouper,
    list_grouper,
    table_grouper,
)
from deltatree.visitor import transform, walk

__version__ = "0.1.0"


class DeltaConverter[O]:
    """High-level converter combining the tree pipeline and a renderer.

    Usage:
        >>> convert = DeltaConverter()
        >>> convert([{"insert": "a"}, {"insert": "\\n", "attributes": {"list": "bullet"}}])
        '<ul><li>a</li></ul>'

        >>> # Any ASTRenderer works
        >>> to_md = DeltaConverter(MarkdownRenderer())
        >>> to_md([{"insert": "a"}, {"insert": "\\n", "attributes": {"list": "bullet"}}])
        '*   a'

    Thread Safety:
        Holds only immutable configuration. Safe to share across threads.

    """

    __slots__ = ("_config", "_renderer", "_transformers")

    def __init__(
        self,
        renderer: ASTRenderer[O] | None = None,
        *,
        config: ParseConfig | None = None,
        transformers: Iterable[Transformer] | None = None,
    ) -> None:
        """Initialize converter.

        Args:
            renderer: Output renderer (HtmlRenderer if None)
            config: Ingestion config (the active ContextVar config if None)
            transformers: Grouping pipeline (the standard one if None)
        """
        self._renderer: ASTRenderer[Any] = renderer if renderer is not None else HtmlRenderer()
        self._config = config
        self._transformers = None if transformers is None else tuple(transformers)

    def __call__(self, delta: Sequence[Mapping[str, Any]] | Mapping[str, Any]) -> O:
        """Parse and render a delta in one call."""
        return self._renderer.render(self.parse(delta))

    def parse(self, delta: Sequence[Mapping[str, Any]] | Mapping[str, Any]) -> TNode:
        """Build and group a delta without rendering it."""
        return parse(delta, config=self._config, transformers=self._transformers)


__all__ = [  # noqa: RUF022 - grouped by category
    # Version
    "__version__",
    # Core API
    "build",
    "parse",
    "render",
    "DeltaConverter",
    "DeltaParser",
    # Tree
    "TNode",
    "block",
    "root",
    "text",
    "group_class",
    "iter_text",
    "plain_text",
    "ROOT",
    "TEXT",
    "LINE_BREAK",
    "PARAGRAPH",
    "HEADER",
    "BLOCKQUOTE",
    "CODE_BLOCK",
    "CODE_BLOCK_CONTAINER",
    "LIST",
    "LIST_ITEM",
    "TABLE",
    "TABLE_ROW",
    "TABLE_CELL",
    # Grouping transformers
    "STANDARD_TRANSFORMERS",
    "Transformer",
    "apply_transformers",
    "compose_transformers",
    "code_block_grouper",
    "flat_list_grouper",
    "list_grouper",
    "table_grouper",
    # Render engine
    "ASTRenderer",
    "BlockDescriptor",
    "DEFAULT_MARK_PRIORITIES",
    "RendererConfig",
    "RendererConfigBuilder",
    "ResolvedAttrs",
    "TagMark",
    "TreeRenderer",
    # Adapters
    "HtmlOptions",
    "HtmlRenderer",
    "MarkdownOptions",
    "MarkdownRenderer",
    # Visitor + Transform
    "transform",
    "walk",
    # Serialization
    "to_dict",
    "from_dict",
    "to_json",
    "from_json",
    # Configuration (ContextVar-based)
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
    # Errors
    "DeltaTreeError",
    "ParseError",
    "ConfigError",
    "RenderError",
]
