"""ContextVar-based ingestion configuration for deltatree.

Provides thread-local configuration using Python's ContextVars (PEP 567).
``build()`` reads the active config when none is passed explicitly.

Thread Safety:
    Each thread has its own ContextVar storage, so no locks are needed.

Usage:
    # Explicit config
    tree = build(ops, ParseConfig(block_embeds=frozenset({"video", "divider"})))

    # Or set it for a context
    with parse_config_context(ParseConfig(soft_line_breaks=True)):
        tree = build(ops)

"""

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from deltatree.errors import ConfigError

DEFAULT_BLOCK_ATTRIBUTES: frozenset[str] = frozenset(
    (
        "header",
        "list",
        "blockquote",
        "code-block",
        "table",
        "align",
        "direction",
        "indent",
    )
)

DEFAULT_BLOCK_EMBEDS: frozenset[str] = frozenset(("video",))


@dataclass(frozen=True, slots=True)
class ParseConfig:
    """Immutable ingestion configuration.

    Attributes:
        block_attributes: Attribute names that describe block-level format when
            carried by a newline. Everything else is an inline mark.
        block_embeds: Embed types that stand as blocks on their own instead of
            joining the pending paragraph.
        soft_line_breaks: Newlines inside one plain text insert that are not its
            final character become ``line-break`` leaves instead of closing a
            paragraph (``"A\\nB\\n"`` -> one paragraph ``A<br>B``).
        custom_blocks: Custom block attribute name -> block type. Consulted after
            the built-in rules; these names are block-level implicitly.

    """

    block_attributes: frozenset[str] = DEFAULT_BLOCK_ATTRIBUTES
    block_embeds: frozenset[str] = DEFAULT_BLOCK_EMBEDS
    soft_line_breaks: bool = False
    custom_blocks: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        for name in ("block_attributes", "block_embeds"):
            value = getattr(self, name)
            if isinstance(value, str) or not all(isinstance(v, str) for v in value):
                raise ConfigError("must be a collection of strings", name=name)
            if not isinstance(value, frozenset):
                object.__setattr__(self, name, frozenset(value))
        for name, block_type in self.custom_blocks.items():
            if not isinstance(block_type, str) or not block_type:
                raise ConfigError("custom block type must be a non-empty string", name=name)
        if not isinstance(self.custom_blocks, MappingProxyType):
            object.__setattr__(self, "custom_blocks", MappingProxyType(dict(self.custom_blocks)))

    @property
    def all_block_attributes(self) -> frozenset[str]:
        """Allow-listed block attributes plus the custom block names."""
        return self.block_attributes | frozenset(self.custom_blocks)

    @classmethod
    def from_dict(cls, config_dict: Mapping[str, Any]) -> "ParseConfig":
        """Create ParseConfig from a dictionary.

        Only includes keys that are valid ParseConfig fields; unknown keys
        are silently ignored. List values are converted to frozensets.

        Example:
            >>> config = ParseConfig.from_dict({
            ...     "block_embeds": ["video", "divider"],
            ...     "unknown_key": "ignored",
            ... })
            >>> sorted(config.block_embeds)
            ['divider', 'video']

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


# Shared default; reset_parse_config() reinstalls this instance
_DEFAULT_CONFIG: ParseConfig = ParseConfig()

_parse_config: ContextVar[ParseConfig] = ContextVar(
    "deltatree_parse_config",
    default=_DEFAULT_CONFIG,
)


def get_parse_config() -> ParseConfig:
    """The ParseConfig ``build()`` uses when none is passed."""
    return _parse_config.get()


def set_parse_config(config: ParseConfig) -> None:
    """Make ``config`` the active ingestion config of the current context."""
    _parse_config.set(config)


def reset_parse_config() -> None:
    """Restore the default ingestion config in the current context."""
    _parse_config.set(_DEFAULT_CONFIG)


@contextmanager
def parse_config_context(config: ParseConfig) -> Iterator[None]:
    """Activate ``config`` for the body of a ``with`` block.

    The previous config comes back on exit, including on errors.

    Example:
        >>> with parse_config_context(ParseConfig(soft_line_breaks=True)):
        ...     get_parse_config().soft_line_breaks
        True
    """
    token = _parse_config.set(config)
    try:
        yield
    finally:
        _parse_config.reset(token)


__all__ = [
    "DEFAULT_BLOCK_ATTRIBUTES",
    "DEFAULT_BLOCK_EMBEDS",
    "ParseConfig",
    "get_parse_config",
    "parse_config_context",
    "reset_parse_config",
    "set_parse_config",
]
