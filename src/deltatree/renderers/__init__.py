"""deltatree renderers.

The render engine walks a document tree and produces output purely by
consulting a ``RendererConfig``. Adapters supply that config.

Available Renderers:
- HtmlRenderer: Quill-compatible semantic HTML
- MarkdownRenderer: Markdown with nested lists, fenced code and GFM tables

Thread Safety:
Configs and renderers are immutable after construction.
Safe for concurrent use from multiple threads.

"""

from deltatree.renderers.attrs import EMPTY_ATTRS, ResolvedAttrs
from deltatree.renderers.config import (
    DEFAULT_MARK_PRIORITIES,
    BlockDescriptor,
    RendererConfig,
    RendererConfigBuilder,
    TagMark,
)
from deltatree.renderers.engine import TreeRenderer, render
from deltatree.renderers.html import HtmlOptions, HtmlRenderer
from deltatree.renderers.markdown import MarkdownOptions, MarkdownRenderer
from deltatree.renderers.protocol import ASTRenderer

__all__ = [
    "ASTRenderer",
    "BlockDescriptor",
    "DEFAULT_MARK_PRIORITIES",
    "EMPTY_ATTRS",
    "HtmlOptions",
    "HtmlRenderer",
    "MarkdownOptions",
    "MarkdownRenderer",
    "RendererConfig",
    "RendererConfigBuilder",
    "ResolvedAttrs",
    "TagMark",
    "TreeRenderer",
    "render",
]
