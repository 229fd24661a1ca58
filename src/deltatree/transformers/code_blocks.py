"""Code-block grouper: per-line ``code-block`` blocks to one container per snippet.

Editors store every line of a code snippet as its own ``code-block``
block. Adjacent lines with the same language (plain code counts as one
language) are wrapped in a ``code-block-container`` that carries the
run's ``code-block`` attribute. Each line keeps its block attributes and
its text, with inline marks dropped.
"""

from collections.abc import Sequence

from deltatree.attributes import CODE_BLOCK as CODE_BLOCK_ATTR
from deltatree.attributes import get_code_language
from deltatree.nodes import CODE_BLOCK, CODE_BLOCK_CONTAINER, TEXT, TNode, plain_text
from deltatree.transformers.grouping import group_consecutive, regroup_children, split_runs
from deltatree.utils.logger import get_logger

logger = get_logger(__name__)

_SEALED = frozenset((CODE_BLOCK_CONTAINER,))


def _line(node: TNode) -> TNode:
    content = plain_text(node)
    children = (TNode(type=TEXT, data=content, is_inline=True),) if content else ()
    return node.with_children(children)


def _container(lines: list[TNode]) -> TNode:
    language = lines[0].attributes.get(CODE_BLOCK_ATTR, True)
    return TNode(
        type=CODE_BLOCK_CONTAINER,
        attributes={CODE_BLOCK_ATTR: language},
        children=tuple(_line(line) for line in lines),
    )


def _group_code_blocks(children: Sequence[TNode]) -> list[TNode]:
    result: list[TNode] = []
    for is_code, run in split_runs(children, lambda n: n.type == CODE_BLOCK):
        if not is_code:
            result.extend(run)
            continue
        snippets = group_consecutive(
            run, lambda curr, prev: get_code_language(curr) == get_code_language(prev)
        )
        result.extend(_container(lines) for lines in snippets)
    return result


def code_block_grouper(tree: TNode) -> TNode:
    """Wrap runs of same-language ``code-block`` lines in ``code-block-container`` nodes."""
    logger.debug("Grouping code blocks")
    return regroup_children(tree, _group_code_blocks, _SEALED)
