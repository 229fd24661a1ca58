"""Document tree nodes for deltatree.

Every node in a document tree is a ``TNode``: a frozen, slotted dataclass
with a type tag, a read-only attribute mapping, a tuple of children, an
optional payload and an inline flag. Using one node shape for every type
keeps the tree a plain contract between the builder, the grouping
transformers and any output adapter.

Node types:
root
├── paragraph / header / blockquote / code-block / table-cell
│   └── text, line-break, inline embeds (image, formula, mention, ...)
├── list
│   └── list-item
│       └── list (nested)
├── table
│   └── table-row
│       └── table-cell
├── code-block-container
│   └── code-block
└── block embeds (video, ...)

Thread Safety:
Nodes are frozen and their attribute mappings are read-only proxies.
Trees are safe to share across threads.

"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Literal

ROOT = "root"
TEXT = "text"
LINE_BREAK = "line-break"
PARAGRAPH = "paragraph"
HEADER = "header"
BLOCKQUOTE = "blockquote"
CODE_BLOCK = "code-block"
CODE_BLOCK_CONTAINER = "code-block-container"
LIST = "list"
LIST_ITEM = "list-item"
TABLE = "table"
TABLE_ROW = "table-row"
TABLE_CELL = "table-cell"
VIDEO = "video"

type GroupClass = Literal["list", "table", "video", "block"]

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class TNode:
    """A node in the document tree.

    Attributes:
        type: Node type tag (``"paragraph"``, ``"list-item"``, ``"text"``, an embed key...)
        attributes: Read-only mapping of attribute name to value. For ``text``
            leaves these are the inline marks; for blocks the block-level format.
        children: Child nodes in source order
        data: Leaf payload: the literal text for ``text`` leaves, the embed
            payload for embeds, ``None`` otherwise
        is_inline: True for text leaves and inline embeds

    Nodes compare structurally but are not hashable: attributes and embed
    payloads are mappings. Use ``to_json`` for a stable key.

    """

    type: str
    attributes: Mapping[str, Any] = _EMPTY
    children: tuple["TNode", ...] = ()
    data: Any = None
    is_inline: bool = False

    __hash__ = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if not isinstance(self.attributes, MappingProxyType):
            object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    def __repr__(self) -> str:
        parts = [f"type={self.type!r}"]
        if self.attributes:
            parts.append(f"attributes={dict(self.attributes)!r}")
        if self.children:
            parts.append(f"children={self.children!r}")
        if self.data is not None:
            parts.append(f"data={self.data!r}")
        if self.is_inline:
            parts.append("is_inline=True")
        return f"TNode({', '.join(parts)})"

    def with_children(self, children: tuple["TNode", ...] | list["TNode"]) -> "TNode":
        """Return a copy of this node with different children."""
        return TNode(
            type=self.type,
            attributes=self.attributes,
            children=tuple(children),
            data=self.data,
            is_inline=self.is_inline,
        )

    def with_attributes(self, **updates: Any) -> "TNode":
        """Return a copy of this node with attributes added or replaced."""
        return TNode(
            type=self.type,
            attributes={**self.attributes, **updates},
            children=self.children,
            data=self.data,
            is_inline=self.is_inline,
        )


# =============================================================================
# Constructors
# =============================================================================


def root(*children: TNode) -> TNode:
    """Create a document root."""
    return TNode(type=ROOT, children=children)


def text(content: str, **marks: Any) -> TNode:
    """Create a text leaf carrying ``marks``.

    Example:
        >>> text("Hi", bold=True).attributes["bold"]
        True
    """
    return TNode(type=TEXT, attributes=marks, data=content, is_inline=True)


def block(
    type: str, *children: TNode, attributes: Mapping[str, Any] | None = None, **attrs: Any
) -> TNode:
    """Create a block node.

    Attribute names that are not identifiers (``code-block``) go in ``attributes``.

    Example:
        >>> block("header", text("Title"), header=1).attributes["header"]
        1
    """
    return TNode(type=type, attributes={**(attributes or {}), **attrs}, children=children)


# =============================================================================
# Queries
# =============================================================================


def group_class(node: TNode) -> GroupClass | None:
    """Classify a node for the before/after render hooks.

    The classification depends on the node type alone. Text leaves, inline
    embeds and the document root never classify.
    """
    if node.type == TEXT or node.type == ROOT or node.is_inline:
        return None
    match node.type:
        case "list":
            return "list"
        case "table":
            return "table"
        case "video":
            return "video"
        case _:
            return "block"


def iter_text(node: TNode) -> Iterator[str]:
    """Yield the literal text of every ``text`` leaf under ``node``, in order."""
    if node.type == TEXT:
        if isinstance(node.data, str):
            yield node.data
        return
    for child in node.children:
        yield from iter_text(child)


def plain_text(node: TNode) -> str:
    """Concatenated plain text of a subtree."""
    return "".join(iter_text(node))
