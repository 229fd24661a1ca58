"""Block attribute normalization and typed accessors.

Delta producers do not agree on the shape of block attributes: a list item
may arrive as ``{"list": "bullet"}`` or as ``{"list": {"list": "bullet"}}``,
an indent as ``2`` or ``"2"``. Normalizers run once at ingestion so every
downstream consumer sees one canonical shape per attribute name:

=============  ==========================================
attribute      canonical value
=============  ==========================================
header         int, 1..6
list           non-empty str
indent         int >= 0
align          str
direction      str
blockquote     True
code-block     True, or the language as str
table          row id as str
=============  ==========================================

Accessors never raise. They return a documented fallback when the
attribute is missing, so adapters can read nodes built by hand as well.
"""

from collections.abc import Callable, Mapping
from typing import Any

from deltatree.nodes import TNode

HEADER = "header"
LIST = "list"
INDENT = "indent"
ALIGN = "align"
DIRECTION = "direction"
BLOCKQUOTE = "blockquote"
CODE_BLOCK = "code-block"
TABLE = "table"
INDEX = "index"

CHECKLIST_TYPES = frozenset(("checked", "unchecked"))


class AttributeShapeError(ValueError):
    """A block attribute value has a shape its normalizer does not accept."""


def _unwrap(name: str, value: Any) -> Any:
    # {"list": {"list": "bullet"}} carries the real value under its own name
    if isinstance(value, Mapping):
        if name not in value:
            raise AttributeShapeError(f"attribute {name!r} mapping has no {name!r} key")
        return value[name]
    return value


def _as_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise AttributeShapeError(f"attribute {name!r} must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise AttributeShapeError(f"attribute {name!r} must be an integer, got {value!r}")


def _as_str(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise AttributeShapeError(f"attribute {name!r} must be a non-empty string, got {value!r}")
    return value


def _header(value: Any) -> int:
    level = _as_int(HEADER, value)
    if not 1 <= level <= 6:
        raise AttributeShapeError(f"header level must be between 1 and 6, got {level}")
    return level


def _indent(value: Any) -> int:
    level = _as_int(INDENT, value)
    if level < 0:
        raise AttributeShapeError(f"indent must be >= 0, got {level}")
    return level


def _code_block(value: Any) -> bool | str:
    if value is True or value == "true":
        return True
    if isinstance(value, str) and value:
        return value
    raise AttributeShapeError(f"attribute 'code-block' must be true or a language, got {value!r}")


def _table(value: Any) -> str:
    if isinstance(value, bool):
        raise AttributeShapeError("attribute 'table' must be a row id, got bool")
    if isinstance(value, int):
        return str(value)
    return _as_str(TABLE, value)


NORMALIZERS: dict[str, Callable[[Any], Any]] = {
    HEADER: _header,
    LIST: lambda v: _as_str(LIST, v),
    INDENT: _indent,
    ALIGN: lambda v: _as_str(ALIGN, v),
    DIRECTION: lambda v: _as_str(DIRECTION, v),
    BLOCKQUOTE: lambda v: True,
    CODE_BLOCK: _code_block,
    TABLE: _table,
}


def normalize_block_attribute(name: str, value: Any) -> Any:
    """Return the canonical value for a block attribute.

    Unknown attribute names pass through unchanged.

    Raises:
        AttributeShapeError: If the value cannot be brought into canonical shape.

    Example:
        >>> normalize_block_attribute("list", {"list": "bullet"})
        'bullet'
        >>> normalize_block_attribute("indent", "2")
        2
    """
    normalizer = NORMALIZERS.get(name)
    if normalizer is None:
        return value
    return normalizer(_unwrap(name, value))


# =============================================================================
# Accessors
# =============================================================================


def get_header_level(node: TNode) -> int:
    """Header level 1..6, or 0 when missing."""
    value = node.attributes.get(HEADER)
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def get_list_type(node: TNode) -> str:
    """``ordered``, ``bullet``, ``checked``, ``unchecked``, or ``""`` when missing."""
    value = node.attributes.get(LIST)
    return value if isinstance(value, str) else ""


def get_indent(node: TNode) -> int:
    """Nesting depth; an absent indent is depth 0."""
    value = node.attributes.get(INDENT)
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def get_align(node: TNode) -> str | None:
    value = node.attributes.get(ALIGN)
    return value if isinstance(value, str) else None


def get_direction(node: TNode) -> str | None:
    value = node.attributes.get(DIRECTION)
    return value if isinstance(value, str) else None


def get_row_id(node: TNode) -> str | None:
    """Table row identifier of a cell, if any."""
    value = node.attributes.get(TABLE)
    return value if isinstance(value, str) else None


def get_code_language(node: TNode) -> str | None:
    """Language of a code line or container; ``None`` for plain code.

    ``True``, ``"true"`` and ``"plain"`` all mean plain code.
    """
    value = node.attributes.get(CODE_BLOCK)
    if isinstance(value, str) and value not in ("true", "plain"):
        return value
    return None


def get_ordered_index(node: TNode) -> int | None:
    """1-based position assigned to ordered list items by the list grouper."""
    value = node.attributes.get(INDEX)
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def is_checklist(list_type: str) -> bool:
    return list_type in CHECKLIST_TYPES


def same_list_family(a: str, b: str) -> bool:
    """Whether two list types belong in one list. Checked and unchecked share a list."""
    if not a or not b:
        return False
    if is_checklist(a) and is_checklist(b):
        return True
    return a == b


def resolve_checked_state(node: TNode) -> bool | None:
    """True for checked items, False for unchecked, None for other items."""
    match get_list_type(node):
        case "checked":
            return True
        case "unchecked":
            return False
        case _:
            return None
