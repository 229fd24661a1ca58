"""Generic tree renderer driven by a RendererConfig.

For every node the engine:

1. classifies it (``list``, ``table``, ``video``, ``block`` or nothing);
2. for classified nodes, calls ``before_render``; a non-None result
   replaces the default rendering;
3. otherwise dispatches: node override, then text leaf (marks applied),
   then block handler (children rendered first, block attribute resolvers
   merged), then ``on_unknown_node``, then the joined children;
4. for classified nodes, passes the output through ``after_render``.

The engine holds nothing but the config. Exceptions raised by handlers
and hooks propagate unchanged; there is no partial output.

Thread Safety:
TreeRenderer is immutable. One instance may render many trees from many
threads at once.

"""

from deltatree.errors import RenderError
from deltatree.nodes import ROOT, TEXT, TNode, group_class
from deltatree.renderers.attrs import ResolvedAttrs, merge_all
from deltatree.renderers.config import BlockDescriptor, RendererConfig
from deltatree.renderers.marks import apply_marks
from deltatree.utils.logger import get_logger

logger = get_logger(__name__)


class TreeRenderer[O]:
    """Render document trees with a fixed configuration.

    Usage:
        renderer = TreeRenderer(HtmlRenderer().config)
        html = renderer.render(tree)

    """

    __slots__ = ("_config",)

    def __init__(self, config: RendererConfig[O]) -> None:
        self._config = config

    @property
    def config(self) -> RendererConfig[O]:
        return self._config

    def render(self, tree: TNode) -> O:
        """Render a tree (usually a ``root``) to the configured output type.

        Raises:
            RenderError: If ``tree`` is not a TNode
        """
        if not isinstance(tree, TNode):
            raise RenderError(f"expected a TNode to render, got {type(tree).__name__}")
        return self.render_node(tree)

    def render_node(self, node: TNode) -> O:
        """Render one node and its subtree, running the render hooks."""
        config = self._config
        group = group_class(node)
        if group is None:
            return self._dispatch(node)

        output: O | None = None
        if config.before_render is not None:
            output = config.before_render(group, node)
        if output is None:
            output = self._dispatch(node)
        if config.after_render is not None:
            output = config.after_render(group, output)
        return output

    def render_children(self, node: TNode) -> O:
        """Render the children of ``node`` and join them."""
        return self._config.join([self.render_node(child) for child in node.children])

    def resolve_block_attrs(self, node: TNode) -> ResolvedAttrs:
        """Merge the contributions of every block attribute resolver."""
        return merge_all(resolver(node) for resolver in self._config.block_attribute_resolvers)

    def _dispatch(self, node: TNode) -> O:
        config = self._config

        override = config.node_overrides.get(node.type)
        if override is not None:
            return override(node, self.render_node)

        if node.type == TEXT:
            content = node.data if isinstance(node.data, str) else ""
            return apply_marks(node, config.text(content, node), config)

        handler = config.blocks.get(node.type)
        if handler is not None:
            children = self.render_children(node)
            resolved = self.resolve_block_attrs(node)
            if isinstance(handler, BlockDescriptor):
                assert config.tag is not None
                return config.tag(handler.resolve(node), children, resolved or None)
            return handler(node, children, resolved)

        if node.type != ROOT and config.on_unknown_node is not None:
            logger.debug("No handler for node type %r, using fallback", node.type)
            return config.on_unknown_node(node)

        return self.render_children(node)


def render[O](tree: TNode, config: RendererConfig[O]) -> O:
    """Render ``tree`` with ``config``.

    Example:
        >>> from deltatree.nodes import root, block, text
        >>> from deltatree.renderers.config import RendererConfig
        >>> cfg = RendererConfig(join="".join, text=lambda s, node: s)
        >>> render(root(block("paragraph", text("hi"))), cfg)
        'hi'
    """
    return TreeRenderer(config).render(tree)
