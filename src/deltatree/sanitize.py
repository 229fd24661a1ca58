"""URL sanitization for rendered links and embeds.

Adapters pass every URL they emit (link hrefs, image and video sources)
through a sanitizer: a ``str -> str | None`` function where ``None`` means
"drop this URL". The default drops ``javascript:``, ``data:`` and
``vbscript:`` URLs.

Example:
    >>> strip_dangerous_urls("javascript:alert(1)") is None
    True
    >>> https_only = make_url_sanitizer("https")
    >>> https_only("http://example.com") is None
    True
"""

import re
from collections.abc import Callable

from deltatree.embeds import resolve_embed_source
from deltatree.nodes import TNode
from deltatree.visitor import transform

type UrlSanitizer = Callable[[str], str | None]

_DANGEROUS_SCHEMES = frozenset(("javascript:", "data:", "vbscript:"))

_DEFAULT_ALLOWED_SCHEMES = frozenset(("https", "http", "mailto"))

# Browsers ignore control characters and whitespace inside a scheme ("java\tscript:")
_IGNORED_IN_SCHEME = re.compile(r"[\x00-\x20]+")

_HAS_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")


def _normalized(url: str) -> str:
    return _IGNORED_IN_SCHEME.sub("", url).lower()


def is_dangerous_url(url: str) -> bool:
    """Check if URL uses a dangerous scheme."""
    lower = _normalized(url)
    return any(lower.startswith(s) for s in _DANGEROUS_SCHEMES)


def strip_dangerous_urls(url: str) -> str | None:
    """Default sanitizer: ``None`` for dangerous URLs, the URL unchanged otherwise."""
    return None if is_dangerous_url(url) else url


def make_url_sanitizer(*schemes: str) -> UrlSanitizer:
    """Build a sanitizer that keeps only URLs with the given schemes.

    Relative URLs (no scheme) are kept. Default schemes: https, http, mailto.
    """
    allowed = frozenset(s.lower() for s in schemes) if schemes else _DEFAULT_ALLOWED_SCHEMES

    def sanitize(url: str) -> str | None:
        lower = _normalized(url)
        if not _HAS_SCHEME.match(lower):
            return url
        for scheme in allowed:
            if lower.startswith(scheme + ":"):
                return url
        return None

    return sanitize


def sanitize_tree(tree: TNode, sanitizer: UrlSanitizer = strip_dangerous_urls) -> TNode:
    """Drop rejected ``link`` marks and embeds with rejected sources from a tree.

    Text keeps its content when its link is rejected; only the mark goes.
    """
    def fn(node: TNode) -> TNode | None:
        link = node.attributes.get("link")
        if isinstance(link, str) and sanitizer(link) is None:
            node = TNode(
                type=node.type,
                attributes={k: v for k, v in node.attributes.items() if k != "link"},
                children=node.children,
                data=node.data,
                is_inline=node.is_inline,
            )
        if node.type in ("image", "video"):
            source = resolve_embed_source(node)
            if source and sanitizer(source) is None:
                return None
        return node

    return transform(tree, fn)
