"""Flat list grouper: every run of ``list-item`` blocks in one flat ``list``.

This mirrors the DOM an editor produces itself: one ``<ol>`` per run,
items of any type and depth side by side, nesting expressed only through
indent classes.
"""

from collections.abc import Sequence

from deltatree.nodes import LIST, LIST_ITEM, TNode
from deltatree.transformers.grouping import regroup_children, split_runs


def _group_flat(children: Sequence[TNode]) -> list[TNode]:
    result: list[TNode] = []
    for is_item, run in split_runs(children, lambda n: n.type == LIST_ITEM):
        if is_item:
            result.append(TNode(type=LIST, children=tuple(run)))
        else:
            result.extend(run)
    return result


def flat_list_grouper(tree: TNode) -> TNode:
    """Wrap each run of adjacent ``list-item`` blocks in one ``list`` node."""
    return regroup_children(tree, _group_flat, frozenset((LIST,)))
