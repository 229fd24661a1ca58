"""Shared machinery for grouping transformers.

A grouping transformer looks at the children of every parent, finds runs
of adjacent siblings that belong together, and replaces each run with a
container. The containers a pass produces are *sealed* for that pass: it
never looks inside them again, so running a pass on its own output finds
nothing left to group.
"""

from collections.abc import Callable, Iterable, Sequence

from deltatree.nodes import TNode

type Transformer = Callable[[TNode], TNode]
type GroupFn = Callable[[Sequence[TNode]], Sequence[TNode]]


def group_consecutive[T](
    items: Iterable[T], predicate: Callable[[T, T], bool]
) -> list[list[T]]:
    """Split ``items`` into runs where each element satisfies ``predicate(curr, prev)``.

    Every element lands in exactly one run; order is preserved.

    Example:
        >>> group_consecutive([1, 2, 4, 5, 7], lambda c, p: c == p + 1)
        [[1, 2], [4, 5], [7]]
    """
    runs: list[list[T]] = []
    for item in items:
        if runs and predicate(item, runs[-1][-1]):
            runs[-1].append(item)
        else:
            runs.append([item])
    return runs


def split_runs(
    children: Sequence[TNode], matches: Callable[[TNode], bool]
) -> list[tuple[bool, list[TNode]]]:
    """Maximal runs of siblings, each tagged with whether it ``matches``."""
    runs = group_consecutive(children, lambda curr, prev: matches(curr) == matches(prev))
    return [(matches(run[0]), run) for run in runs]


def regroup_children(
    tree: TNode, group_fn: GroupFn, sealed: frozenset[str] = frozenset()
) -> TNode:
    """Apply ``group_fn`` to the children of every parent, bottom-up.

    Nodes whose type is in ``sealed`` are left exactly as they are, children
    included. Unchanged subtrees are returned as the original objects.

    Args:
        tree: Tree to regroup
        group_fn: Receives a parent's (already regrouped) children and
            returns the new children
        sealed: Node types the pass must not descend into

    Returns:
        The regrouped tree.
    """

    def visit(node: TNode) -> TNode:
        if node.type in sealed or not node.children:
            return node
        children = tuple(visit(child) for child in node.children)
        grouped = tuple(group_fn(children))
        if grouped == node.children:
            return node
        return node.with_children(grouped)

    return visit(tree)
