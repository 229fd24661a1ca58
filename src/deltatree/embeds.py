"""Embed payload helpers.

Embed payloads are whatever the editor stored under the embed key:
``{"image": "https://..."}``, ``{"video": {"url": "..."}}``,
``{"mention": {"name": "Ada", "slug": "ada", "end-point": "/users"}}``.

Source extraction uses one permissive, documented coercion:

1. a string payload is used verbatim;
2. a mapping payload yields its ``url`` field when present;
3. anything else is stringified (``None`` becomes the empty string).

An empty result means "no embed": adapters render nothing for it rather
than failing.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from deltatree.nodes import TNode


def resolve_embed_source(node: TNode) -> str:
    """Source URL (or text) of an embed node, coerced as described above.

    Examples:
        >>> from deltatree.nodes import TNode
        >>> resolve_embed_source(TNode("image", data="a.png"))
        'a.png'
        >>> resolve_embed_source(TNode("video", data={"url": "v.mp4"}))
        'v.mp4'
        >>> resolve_embed_source(TNode("image", data=""))
        ''
    """
    data = node.data
    if isinstance(data, str):
        return data
    if isinstance(data, Mapping) and "url" in data:
        url = data["url"]
        return "" if url is None else str(url)
    if data is None:
        return ""
    return str(data)


def resolve_formula(node: TNode) -> str:
    """Formula source text of a formula embed."""
    data = node.data
    return data if isinstance(data, str) else str(data)


@dataclass(frozen=True, slots=True)
class MentionData:
    name: str
    href: str
    class_name: str | None = None
    target: str | None = None


def resolve_mention(node: TNode) -> MentionData:
    """Extract mention properties from a mention embed.

    The href joins ``end-point`` and ``slug``; when either is missing the
    mention points at ``about:blank``.
    """
    raw: Any = node.data if node.data is not None else node.attributes.get("mention")
    if not isinstance(raw, Mapping):
        raw = {}
    slug = raw.get("slug")
    endpoint = raw.get("end-point")
    href = f"{endpoint}/{slug}" if endpoint and slug else "about:blank"
    class_name = raw.get("class")
    target = raw.get("target")
    return MentionData(
        name=str(raw.get("name") or ""),
        href=href,
        class_name=class_name if isinstance(class_name, str) else None,
        target=target if isinstance(target, str) else None,
    )
