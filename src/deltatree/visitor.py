"""Tree walking and immutable rewriting for deltatree.

Example, collect all headers:

    headers = [n for n in walk(tree) if n.type == "header"]

Example, drop empty paragraphs:

    def drop_empty(node: TNode) -> TNode | None:
        if node.type == "paragraph" and not node.children:
            return None
        return node

    new_tree = transform(tree, drop_empty)

Thread Safety:
    Both functions are pure and safe to call from any thread.

"""

from collections.abc import Callable, Iterator

from deltatree.nodes import TNode


def walk(node: TNode) -> Iterator[TNode]:
    """Yield ``node`` and every descendant in pre-order (document order)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def transform(tree: TNode, fn: Callable[[TNode], TNode | None]) -> TNode:
    """Apply a function to every node in the tree, returning a new tree.

    The function ``fn`` is called bottom-up: children are transformed first,
    then the parent is transformed with its new children. This ensures ``fn``
    always receives nodes with already-transformed children.

    Return ``None`` from ``fn`` to remove a node from the tree. The root
    cannot be removed; returning None for it raises TypeError.

    Nodes whose subtree is unchanged are passed to ``fn`` as the original
    objects, so identity checks stay cheap for untouched branches.

    Args:
        tree: The tree to transform.
        fn: Function that receives a node and returns a (possibly new) node,
            or None to remove the node from the tree.

    Returns:
        A new tree with the transformation applied.

    """
    result = _transform_node(tree, fn)
    if result is None:
        msg = "transform fn must return a node for the root (cannot remove root)"
        raise TypeError(msg)
    return result


def _transform_node(node: TNode, fn: Callable[[TNode], TNode | None]) -> TNode | None:
    """Transform a single node bottom-up: children first, then self."""
    if node.children:
        new_children = tuple(
            result for c in node.children
            if (result := _transform_node(c, fn)) is not None
        )
        if new_children != node.children:
            node = node.with_children(new_children)
    return fn(node)
