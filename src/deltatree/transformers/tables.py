"""Table grouper: flat ``table-cell`` blocks to ``table > table-row > table-cell``.

Each cell carries the id of the row it belongs to in its ``table``
attribute. Adjacent cells with the same row id share a row; a cell
without a row id always starts a row of its own.
"""

from collections.abc import Sequence

from deltatree.attributes import get_row_id
from deltatree.nodes import TABLE, TABLE_CELL, TABLE_ROW, TNode
from deltatree.transformers.grouping import group_consecutive, regroup_children, split_runs
from deltatree.utils.logger import get_logger

logger = get_logger(__name__)

_SEALED = frozenset((TABLE, TABLE_ROW))


def _same_row(curr: TNode, prev: TNode) -> bool:
    row_id = get_row_id(curr)
    return row_id is not None and row_id == get_row_id(prev)


def _group_tables(children: Sequence[TNode]) -> list[TNode]:
    result: list[TNode] = []
    for is_cell, run in split_runs(children, lambda n: n.type == TABLE_CELL):
        if not is_cell:
            result.extend(run)
            continue
        rows = tuple(
            TNode(type=TABLE_ROW, children=tuple(cells))
            for cells in group_consecutive(run, _same_row)
        )
        result.append(TNode(type=TABLE, children=rows))
    return result


def table_grouper(tree: TNode) -> TNode:
    """Wrap runs of ``table-cell`` blocks in ``table`` and ``table-row`` nodes."""
    logger.debug("Grouping tables")
    return regroup_children(tree, _group_tables, _SEALED)
