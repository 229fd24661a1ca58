"""Build-and-group pipeline: delta operations to a grouped document tree."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from deltatree.config import ParseConfig
from deltatree.nodes import TNode
from deltatree.parser import Operation, build
from deltatree.transformers import STANDARD_TRANSFORMERS, Transformer, apply_transformers


def parse(
    delta: Sequence[Operation] | Mapping[str, Any],
    *,
    config: ParseConfig | None = None,
    transformers: Iterable[Transformer] | None = None,
    extra_transformers: Iterable[Transformer] = (),
) -> TNode:
    """Build a tree from ``delta`` and run the grouping transformers over it.

    Args:
        delta: Operation list, or a mapping with an ``ops`` list
        config: Ingestion config (the active ContextVar config if None)
        transformers: Replaces the standard pipeline (list, table, code-block
            grouping) when given; pass ``()`` for the raw tree
        extra_transformers: Run after the pipeline

    Returns:
        Root node of the grouped tree

    Raises:
        ParseError: On the first malformed operation.

    Example:
        >>> tree = parse([{"insert": "a"}, {"insert": "\\n", "attributes": {"list": "bullet"}}])
        >>> tree.children[0].type
        'list'
    """
    tree = build(delta, config)
    pipeline = STANDARD_TRANSFORMERS if transformers is None else tuple(transformers)
    return apply_transformers(tree, (*pipeline, *extra_transformers))
