"""List grouper: flat ``list-item`` blocks to nested ``list`` trees.

Editors store a list as a run of ``list-item`` blocks, each carrying its
list type and an ``indent`` depth. This pass rebuilds the nesting with a
stack of open lists, one frame per open depth:

- an item deeper than the innermost open list opens a new list inside the
  last item of that list (a jump of several levels opens a single list);
- a shallower item closes lists until its depth is reached;
- an item at the same depth but of another list family closes the open
  list and starts a sibling list next to it.

Checked and unchecked items form one family. Ordered items receive a
1-based ``index`` attribute counted per parent slot (the parent item, or
the run at top level), so interleaved bullet lists at the same depth do
not restart the numbering. This holds at top level too: ``1. a``, a bullet
``b``, then ordered ``c`` numbers ``c`` as 2, even though it opens a new
``list`` node after the bullet list. A non-list block between items ends
the run and restarts the count.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from deltatree.attributes import (
    INDEX,
    get_indent,
    get_list_type,
    same_list_family,
)
from deltatree.attributes import LIST as LIST_ATTR
from deltatree.nodes import LIST, LIST_ITEM, TNode
from deltatree.transformers.grouping import regroup_children, split_runs
from deltatree.utils.logger import get_logger

logger = get_logger(__name__)

_SEALED = frozenset((LIST,))


@dataclass(slots=True)
class _ItemFrame:
    node: TNode
    sublists: list["_ListFrame"] = field(default_factory=list)
    ordered_count: int = 0


@dataclass(slots=True)
class _ListFrame:
    depth: int
    type: str
    items: list[_ItemFrame] = field(default_factory=list)


@dataclass(slots=True)
class _Slot:
    """Where new lists open: a parent item, or the top level of the run."""

    lists: list[_ListFrame]
    owner: _ItemFrame | None = None
    top_count: int = 0

    def next_index(self) -> int:
        if self.owner is not None:
            self.owner.ordered_count += 1
            return self.owner.ordered_count
        self.top_count += 1
        return self.top_count


def _nest_run(items: Sequence[TNode]) -> list[TNode]:
    top = _Slot(lists=[])
    stack: list[tuple[_ListFrame, _Slot]] = []

    for item in items:
        depth = get_indent(item)
        list_type = get_list_type(item)

        while stack and stack[-1][0].depth > depth:
            stack.pop()

        if stack and stack[-1][0].depth == depth:
            current, slot = stack[-1]
            if not same_list_family(current.type, list_type):
                stack.pop()
                current = _open_list(slot, depth, list_type)
                stack.append((current, slot))
        else:
            if stack:
                parent = stack[-1][0].items[-1]
                slot = _Slot(lists=parent.sublists, owner=parent)
            else:
                slot = top
            current = _open_list(slot, depth, list_type)
            stack.append((current, slot))

        if list_type == "ordered":
            item = item.with_attributes(**{INDEX: slot.next_index()})
        current.items.append(_ItemFrame(node=item))

    return [_to_node(frame) for frame in top.lists]


def _open_list(slot: _Slot, depth: int, list_type: str) -> _ListFrame:
    """Reopen the slot's last list when it is of the same family, else start a new one."""
    if slot.lists and same_list_family(slot.lists[-1].type, list_type):
        frame = slot.lists[-1]
        frame.depth = depth
        return frame
    frame = _ListFrame(depth=depth, type=list_type)
    slot.lists.append(frame)
    return frame


def _to_node(frame: _ListFrame) -> TNode:
    return TNode(
        type=LIST,
        attributes={LIST_ATTR: frame.type},
        children=tuple(
            item.node.with_children(item.node.children + tuple(_to_node(s) for s in item.sublists))
            if item.sublists
            else item.node
            for item in frame.items
        ),
    )


def _group_lists(children: Sequence[TNode]) -> list[TNode]:
    result: list[TNode] = []
    for is_item, run in split_runs(children, lambda n: n.type == LIST_ITEM):
        if is_item:
            result.extend(_nest_run(run))
        else:
            result.extend(run)
    return result


def list_grouper(tree: TNode) -> TNode:
    """Wrap runs of ``list-item`` blocks in nested ``list`` nodes.

    Example:
        >>> from deltatree.nodes import block, root, text
        >>> tree = root(block("list-item", text("a"), list="bullet"))
        >>> list_grouper(tree).children[0].type
        'list'
    """
    logger.debug("Grouping lists")
    return regroup_children(tree, _group_lists, _SEALED)
