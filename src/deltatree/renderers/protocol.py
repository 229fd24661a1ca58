"""ASTRenderer protocol: stable interface for tree renderers.

Any renderer that implements ``render(tree)`` conforms to this protocol.
The built-in ``HtmlRenderer`` and ``MarkdownRenderer`` are the reference
implementations.

Example:
    from deltatree.renderers.protocol import ASTRenderer

    def render_page(renderer: ASTRenderer[str], tree: TNode) -> str:
        return renderer.render(tree)

"""

from typing import Protocol

from deltatree.nodes import TNode


class ASTRenderer[O](Protocol):
    """Protocol for tree renderers.

    Implementations must accept a tree and return a rendered value.

    """

    def render(self, tree: TNode) -> O:
        """Render a document tree.

        Args:
            tree: The (usually grouped) tree to render.

        Returns:
            Rendered output.

        """
        ...
