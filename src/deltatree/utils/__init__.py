"""Utility modules for deltatree.

Provides:
- text: escape_html, indent_lines for the output adapters
- logger: get_logger for logging
"""

from deltatree.utils.logger import get_logger
from deltatree.utils.text import escape_html, indent_lines

__all__ = [
    "escape_html",
    "get_logger",
    "indent_lines",
]
