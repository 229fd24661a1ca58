"""Exception classes for deltatree.

Provides standardized exceptions for error handling throughout deltatree.
"""

from __future__ import annotations


class DeltaTreeError(Exception):
    """Base exception for all deltatree errors.

    Subclass this for specific error categories.
    """

    pass


class ParseError(DeltaTreeError):
    """Error while building a tree from delta operations.

    Raised when an operation is malformed: missing ``insert``, an embed
    that is not a single-key mapping, or a block attribute of the wrong shape.
    No partial tree is ever returned alongside this error.
    """

    def __init__(self, message: str, op_index: int | None = None) -> None:
        """Initialize parse error with the offending operation index.

        Args:
            message: Error description
            op_index: Zero-based index of the operation in the delta (optional)
        """
        self.message = message
        self.op_index = op_index

        location = f"op {op_index}: " if op_index is not None else ""
        super().__init__(f"{location}{message}")


class ConfigError(DeltaTreeError):
    """Invalid or conflicting renderer configuration.

    Raised at configuration construction time, never during render.
    """

    def __init__(self, message: str, name: str | None = None) -> None:
        """Initialize config error.

        Args:
            message: Description of the problem
            name: Registration name involved (block type, mark name), if any
        """
        self.name = name
        prefix = f"'{name}': " if name else ""
        super().__init__(f"{prefix}{message}")


class RenderError(DeltaTreeError):
    """Error during rendering.

    Raised when the engine is handed something that is not a tree node.
    Exceptions from caller-supplied handlers are never wrapped in this
    class; they propagate unchanged.
    """

    pass
