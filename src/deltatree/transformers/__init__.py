"""Grouping transformers for deltatree.

Each transformer is a pure ``TNode -> TNode`` function that rebuilds one
kind of structure the flat delta cannot express directly. They are
independent of each other, idempotent, and can be chained in any order.

Example:
    from deltatree.transformers import STANDARD_TRANSFORMERS, apply_transformers

    grouped = apply_transformers(build(ops), STANDARD_TRANSFORMERS)

"""

from collections.abc import Iterable

from deltatree.nodes import TNode
from deltatree.transformers.code_blocks import code_block_grouper
from deltatree.transformers.flat_lists import flat_list_grouper
from deltatree.transformers.grouping import (
    Transformer,
    group_consecutive,
    regroup_children,
    split_runs,
)
from deltatree.transformers.lists import list_grouper
from deltatree.transformers.tables import table_grouper

# The pipeline ``parse()`` applies by default
STANDARD_TRANSFORMERS: tuple[Transformer, ...] = (
    list_grouper,
    table_grouper,
    code_block_grouper,
)


def apply_transformers(tree: TNode, transformers: Iterable[Transformer]) -> TNode:
    """Apply ``transformers`` to ``tree`` left to right."""
    for transformer in transformers:
        tree = transformer(tree)
    return tree


def compose_transformers(*transformers: Transformer) -> Transformer:
    """Chain transformers into one: ``compose(a, b)(t) == b(a(t))``."""
    chain = tuple(transformers)

    def composed(tree: TNode) -> TNode:
        return apply_transformers(tree, chain)

    return composed


__all__ = [
    "STANDARD_TRANSFORMERS",
    "Transformer",
    "apply_transformers",
    "code_block_grouper",
    "compose_transformers",
    "flat_list_grouper",
    "group_consecutive",
    "list_grouper",
    "regroup_children",
    "split_runs",
    "table_grouper",
]
