"""Tree builder: flat delta operations to a document tree.

A delta is an ordered list of operations. Text inserts may contain newlines;
every newline closes the block being assembled, and the attributes on the
operation that carries the newline describe that block. Everything else is
inline content waiting for its newline.

Block type resolution (first match wins):

    header > list-item > blockquote > code-block > table-cell
           > custom blocks (declaration order) > paragraph

Usage:
    >>> from deltatree.parser import build
    >>> tree = build([{"insert": "Hello"}, {"insert": "\\n", "attributes": {"header": 1}}])
    >>> tree.children[0].type
    'header'

Thread Safety:
    DeltaParser instances hold per-call state and must not be shared.
    ``build()`` creates a fresh parser per call and is safe to call concurrently.

"""

from collections.abc import Mapping, Sequence
from typing import Any

from deltatree.attributes import AttributeShapeError, normalize_block_attribute
from deltatree.config import ParseConfig, get_parse_config
from deltatree.errors import ParseError
from deltatree.nodes import LINE_BREAK, PARAGRAPH, ROOT, TEXT, TNode
from deltatree.utils.logger import get_logger

logger = get_logger(__name__)

# Built-in rules in precedence order: attribute name -> block type
_BLOCK_RULES: tuple[tuple[str, str], ...] = (
    ("header", "header"),
    ("list", "list-item"),
    ("blockquote", "blockquote"),
    ("code-block", "code-block"),
    ("table", "table-cell"),
)

type Operation = Mapping[str, Any]


def _coerce_ops(delta: Sequence[Operation] | Mapping[str, Any]) -> Sequence[Operation]:
    """Accept either a bare op list or a ``{"ops": [...]}`` delta."""
    if isinstance(delta, Mapping):
        if "ops" not in delta:
            raise ParseError("delta mapping has no 'ops' list")
        delta = delta["ops"]
    if isinstance(delta, (str, bytes)) or not isinstance(delta, Sequence):
        raise ParseError(f"delta must be a sequence of operations, got {type(delta).__name__}")
    return delta


class DeltaParser:
    """Single-pass builder of a document tree from delta operations.

    Usage:
        >>> parser = DeltaParser([{"insert": "Hi\\n"}])
        >>> parser.parse().children[0].type
        'paragraph'

    """

    __slots__ = ("_ops", "_config", "_blocks", "_pending", "_block_names")

    def __init__(
        self,
        delta: Sequence[Operation] | Mapping[str, Any],
        config: ParseConfig | None = None,
    ) -> None:
        """Initialize parser.

        Args:
            delta: Operation list, or a mapping with an ``ops`` list
            config: Ingestion config (the active ContextVar config if None)
        """
        self._ops = _coerce_ops(delta)
        self._config = config or get_parse_config()
        self._block_names = self._config.all_block_attributes
        self._blocks: list[TNode] = []
        self._pending: list[TNode] = []

    def parse(self) -> TNode:
        """Build the tree.

        Returns:
            A ``root`` node whose children are the blocks in source order.

        Raises:
            ParseError: On the first malformed operation. No partial tree
                is returned.
        """
        self._blocks = []
        self._pending = []

        for index, op in enumerate(self._ops):
            if not isinstance(op, Mapping):
                raise ParseError(f"operation must be a mapping, got {type(op).__name__}", index)
            if "insert" not in op:
                raise ParseError("operation has no 'insert'", index)

            raw_attrs = op.get("attributes")
            if raw_attrs is None:
                raw_attrs = {}
            elif not isinstance(raw_attrs, Mapping):
                raise ParseError(
                    f"'attributes' must be a mapping, got {type(raw_attrs).__name__}", index
                )

            insert = op["insert"]
            if isinstance(insert, str):
                inline_attrs, block_attrs = self._split_attributes(raw_attrs, index)
                self._parse_text(insert, inline_attrs, block_attrs)
            elif isinstance(insert, Mapping):
                self._parse_embed(insert, raw_attrs, index)
            else:
                raise ParseError(
                    f"'insert' must be a string or an embed mapping, got {type(insert).__name__}",
                    index,
                )

        # Well-formed deltas end with a newline; flush whatever is left
        if self._pending:
            self._close_block({})

        logger.debug("Built %d blocks from %d operations", len(self._blocks), len(self._ops))
        return TNode(type=ROOT, children=tuple(self._blocks))

    # =========================================================================
    # Operations
    # =========================================================================

    def _split_attributes(
        self, attrs: Mapping[str, Any], index: int
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Separate inline marks from normalized block attributes.

        ``None`` means "format removed" and is dropped. ``False`` is dropped
        for block attributes and kept on inline marks, where it reads as unset.
        """
        inline: dict[str, Any] = {}
        block: dict[str, Any] = {}
        for name, value in attrs.items():
            if value is None:
                continue
            if name in self._block_names:
                if value is False:
                    continue
                try:
                    block[name] = normalize_block_attribute(name, value)
                except AttributeShapeError as e:
                    raise ParseError(str(e), index) from e
            else:
                inline[name] = value
        return inline, block

    def _parse_text(
        self, insert: str, inline_attrs: dict[str, Any], block_attrs: dict[str, Any]
    ) -> None:
        """Split a text insert on newlines; each newline closes a block."""
        segments = insert.split("\n")
        last_newline = len(segments) - 2
        soft = self._config.soft_line_breaks and not block_attrs

        for i, segment in enumerate(segments):
            if segment:
                self._pending.append(
                    TNode(type=TEXT, attributes=inline_attrs, data=segment, is_inline=True)
                )
            if i > last_newline:
                break
            # The final character of a soft-break insert still closes the paragraph
            if soft and not (i == last_newline and segments[-1] == ""):
                self._pending.append(TNode(type=LINE_BREAK, is_inline=True))
            else:
                self._close_block(block_attrs)

    def _parse_embed(self, insert: Mapping[str, Any], attrs: Mapping[str, Any], index: int) -> None:
        if len(insert) != 1:
            raise ParseError(
                f"embed must have exactly one key, got {sorted(map(str, insert))!r}", index
            )
        ((embed_type, payload),) = insert.items()
        if not isinstance(embed_type, str) or not embed_type:
            raise ParseError(f"embed key must be a non-empty string, got {embed_type!r}", index)

        inline_attrs, block_attrs = self._split_attributes(attrs, index)
        is_block = embed_type in self._config.block_embeds
        node = TNode(
            type=embed_type,
            attributes={**inline_attrs, **block_attrs},
            data=payload,
            is_inline=not is_block,
        )
        if is_block:
            self._blocks.append(node)
        else:
            self._pending.append(node)

    def _close_block(self, block_attrs: dict[str, Any]) -> None:
        self._blocks.append(
            TNode(
                type=self._resolve_block_type(block_attrs),
                attributes=block_attrs,
                children=tuple(self._pending),
            )
        )
        self._pending.clear()

    def _resolve_block_type(self, block_attrs: Mapping[str, Any]) -> str:
        for name, block_type in _BLOCK_RULES:
            if name in block_attrs:
                return block_type
        for name, block_type in self._config.custom_blocks.items():
            if name in block_attrs:
                return block_type
        return PARAGRAPH


def build(
    delta: Sequence[Operation] | Mapping[str, Any],
    config: ParseConfig | None = None,
) -> TNode:
    """Build a document tree from delta operations.

    Args:
        delta: Operation list, or a mapping with an ``ops`` list
        config: Ingestion config (the active ContextVar config if None)

    Returns:
        Root node of the raw (ungrouped) tree

    Raises:
        ParseError: On the first malformed operation, carrying its index.
    """
    return DeltaParser(delta, config).parse()
