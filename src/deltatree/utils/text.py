"""Text helpers shared by the output adapters."""

from __future__ import annotations

import html as html_module


def escape_html(text: str, quote: bool = True) -> str:
    """Escape HTML special characters.

    Escapes ``&``, ``<``, ``>`` and, when ``quote`` is set, ``"``.
    Single quotes are left alone since attribute values are always
    double-quoted by the HTML adapter.

    Examples:
        >>> escape_html('<a href="x">')
        '&lt;a href=&quot;x&quot;&gt;'
        >>> escape_html("it's")
        "it's"
    """
    escaped = html_module.escape(text, quote=False)
    if quote:
        escaped = escaped.replace('"', "&quot;")
    return escaped


def indent_lines(text: str, prefix: str) -> str:
    """Prefix every non-empty line of ``text`` with ``prefix``."""
    return "\n".join(prefix + line if line else line for line in text.split("\n"))
