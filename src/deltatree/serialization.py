"""Tree serialization: JSON round-trip for document trees.

Converts ``TNode`` trees to/from JSON-compatible dicts. Useful for:
- Caching grouped trees between requests
- Shipping trees to a client-side renderer
- Debugging and inspection (``to_json(tree, indent=2)``)

All output is deterministic (sorted keys) for cache-key stability.

Example:
    from deltatree import parse
    from deltatree.serialization import to_json, from_json

    tree = parse([{"insert": "Hello\\n"}])
    restored = from_json(to_json(tree))
    assert tree == restored

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import json
from collections.abc import Mapping
from typing import Any

from deltatree.nodes import ROOT, TNode


def to_dict(node: TNode) -> dict[str, Any]:
    """Convert a node and its subtree to a JSON-compatible dict.

    Empty fields are omitted; ``type`` is always present.

    Args:
        node: Any TNode.

    Returns:
        Dict with ``type`` and the node's non-empty fields.

    """
    result: dict[str, Any] = {"type": node.type}
    if node.attributes:
        result["attributes"] = _serialize_value(node.attributes)
    if node.children:
        result["children"] = [to_dict(child) for child in node.children]
    if node.data is not None:
        result["data"] = _serialize_value(node.data)
    if node.is_inline:
        result["is_inline"] = True
    return result


def _serialize_value(value: Any) -> Any:
    """Serialize an attribute value or embed payload."""
    if isinstance(value, Mapping):
        return {str(k): _serialize_value(v) for k, v in value.items()}
    if isinstance(value, (tuple, list)):
        return [_serialize_value(item) for item in value]
    if isinstance(value, frozenset):
        return sorted(value)
    # Primitives: str, int, float, bool, None
    return value


def from_dict(data: Mapping[str, Any]) -> TNode:
    """Reconstruct a node from a dict produced by ``to_dict``.

    Args:
        data: Dict with ``type`` and optional node fields.

    Returns:
        TNode (frozen dataclass).

    Raises:
        ValueError: If ``type`` is missing or the shape is wrong.

    """
    node_type = data.get("type")
    if not isinstance(node_type, str):
        msg = "Missing 'type' field in serialized node"
        raise ValueError(msg)

    attributes = data.get("attributes", {})
    if not isinstance(attributes, Mapping):
        msg = f"'attributes' of {node_type!r} node must be a mapping"
        raise ValueError(msg)

    children = data.get("children", [])
    if not isinstance(children, list):
        msg = f"'children' of {node_type!r} node must be a list"
        raise ValueError(msg)

    return TNode(
        type=node_type,
        attributes=attributes,
        children=tuple(from_dict(child) for child in children),
        data=data.get("data"),
        is_inline=bool(data.get("is_inline", False)),
    )


def to_json(tree: TNode, *, indent: int | None = None) -> str:
    """Serialize a tree to a JSON string.

    Output is deterministic (sorted keys) for cache-key stability.

    Args:
        tree: Tree to serialize.
        indent: JSON indentation level (None for compact).

    Returns:
        JSON string.

    """
    return json.dumps(to_dict(tree), sort_keys=True, indent=indent)


def from_json(data: str) -> TNode:
    """Deserialize a tree from a JSON string.

    Args:
        data: JSON string (as produced by to_json).

    Returns:
        Root node of the tree.

    Raises:
        ValueError: If the JSON doesn't represent a root node.

    """
    node = from_dict(json.loads(data))
    if node.type != ROOT:
        msg = f"Expected a root node, got {node.type!r}"
        raise ValueError(msg)
    return node
