"""Renderer configuration: the contract between the engine and an adapter.

The render engine knows nothing about any output format. An adapter
describes its format entirely through a ``RendererConfig``:

- four output primitives (``join``, ``text``, ``tag``, ``wrap_attrs``);
- block handlers and declarative ``BlockDescriptor`` entries per node type;
- element marks (handlers or declarative ``TagMark`` entries) and
  attributors per mark name, ordered by ``mark_priorities``;
- block attribute resolvers, node overrides, an unknown-node fallback and
  before/after render hooks.

Configs are frozen. Use ``RendererConfigBuilder`` to accumulate
registrations, then ``build()`` once before rendering starts.

Thread Safety:
RendererConfig is immutable after creation. Safe to share across threads.
RendererConfigBuilder is mutable and meant for single-threaded setup.

Example:
    >>> builder = RendererConfigBuilder(join="".join, text=lambda s, node: s,
    ...                                 tag=lambda t, c, a: f"<{t}>{c}</{t}>")
    >>> config = builder.mark("bold", TagMark("b")).build()
    >>> config.has_mark("bold")
    True

"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Self

from deltatree.errors import ConfigError
from deltatree.nodes import GroupClass, TNode
from deltatree.renderers.attrs import ResolvedAttrs

type BlockHandler[O] = Callable[[TNode, O, ResolvedAttrs], O]
type MarkHandler[O] = Callable[[O, Any, TNode, ResolvedAttrs | None], O]
type Attributor = Callable[[Any, TNode], ResolvedAttrs | None]
type BlockAttributeResolver = Callable[[TNode], ResolvedAttrs | None]
type NodeOverride[O] = Callable[[TNode, Callable[[TNode], O]], O]
type BeforeRender[O] = Callable[[GroupClass, TNode], O | None]
type AfterRender[O] = Callable[[GroupClass, O], O]

DEFAULT_MARK_PRIORITIES: Mapping[str, int] = MappingProxyType(
    {
        "link": 100,
        "background": 50,
        "color": 40,
        "bold": 10,
        "italic": 10,
        "underline": 10,
        "strike": 10,
        "script": 5,
    }
)


@dataclass(frozen=True, slots=True)
class TagMark:
    """Declarative element mark: wrap content in one tag.

    ``tag`` is a literal tag name or a function of the mark value
    (``TagMark(lambda v: "sup" if v == "super" else "sub")``).
    """

    tag: str | Callable[[Any], str]

    def resolve(self, value: Any) -> str:
        return self.tag(value) if callable(self.tag) else self.tag


@dataclass(frozen=True, slots=True)
class BlockDescriptor:
    """Declarative block: wrap rendered children in one tag.

    ``tag`` is a literal tag name or a function of the node.
    """

    tag: str | Callable[[TNode], str]

    def resolve(self, node: TNode) -> str:
        return self.tag(node) if callable(self.tag) else self.tag


def _frozen(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    if isinstance(mapping, MappingProxyType):
        return mapping
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, slots=True)
class RendererConfig[O]:
    """Immutable description of an output format.

    Attributes:
        join: Combine rendered children into one output value
        text: Render the literal text of a ``text`` leaf
        tag: Wrap content in a named element, with optional attrs; required
            by ``TagMark`` and ``BlockDescriptor`` entries
        wrap_attrs: Host attributor contributions when a text leaf carries no
            element mark; required when any attributor is registered
        mark_priorities: Mark name -> priority. Higher wraps further out;
            unlisted marks have priority 0
        blocks: Node type -> handler or ``BlockDescriptor``
        marks: Mark name -> element mark handler or ``TagMark``
        attributors: Mark name -> contribution function
        block_attribute_resolvers: Contributions merged, in order, into the
            attrs passed to every block handler
        node_overrides: Node type -> full traversal override, receiving the
            node and a callback that renders any node
        on_unknown_node: Fallback for non-text nodes without a handler
        before_render: Hook called for classified nodes; a non-None result
            replaces the node's default rendering
        after_render: Hook that post-processes every classified node's output

    """

    join: Callable[[list[O]], O]
    text: Callable[[str, TNode], O]
    tag: Callable[[str, O, ResolvedAttrs | None], O] | None = None
    wrap_attrs: Callable[[O, ResolvedAttrs], O] | None = None
    mark_priorities: Mapping[str, int] = field(default_factory=lambda: DEFAULT_MARK_PRIORITIES)
    blocks: Mapping[str, BlockHandler[O] | BlockDescriptor] = field(default_factory=dict)
    marks: Mapping[str, MarkHandler[O] | TagMark] = field(default_factory=dict)
    attributors: Mapping[str, Attributor] = field(default_factory=dict)
    block_attribute_resolvers: tuple[BlockAttributeResolver, ...] = ()
    node_overrides: Mapping[str, NodeOverride[O]] = field(default_factory=dict)
    on_unknown_node: Callable[[TNode], O] | None = None
    before_render: BeforeRender[O] | None = None
    after_render: AfterRender[O] | None = None

    def __post_init__(self) -> None:
        for name in ("mark_priorities", "blocks", "marks", "attributors", "node_overrides"):
            object.__setattr__(self, name, _frozen(getattr(self, name)))
        if not isinstance(self.block_attribute_resolvers, tuple):
            object.__setattr__(
                self, "block_attribute_resolvers", tuple(self.block_attribute_resolvers)
            )
        self._validate()

    def _validate(self) -> None:
        for name in ("join", "text"):
            if not callable(getattr(self, name)):
                raise ConfigError("output primitive must be callable", name=name)

        for name, priority in self.mark_priorities.items():
            if isinstance(priority, bool) or not isinstance(priority, int):
                raise ConfigError(f"mark priority must be an int, got {priority!r}", name=name)

        overlap = self.marks.keys() & self.attributors.keys()
        if overlap:
            raise ConfigError(
                "registered both as an element mark and as an attributor", name=min(overlap)
            )

        if self.tag is None:
            for name, mark in self.marks.items():
                if isinstance(mark, TagMark):
                    raise ConfigError("TagMark needs a 'tag' output primitive", name=name)
            for block_type, handler in self.blocks.items():
                if isinstance(handler, BlockDescriptor):
                    raise ConfigError(
                        "BlockDescriptor needs a 'tag' output primitive", name=block_type
                    )

        if self.attributors and self.wrap_attrs is None:
            name = next(iter(self.attributors))
            raise ConfigError("attributors need a 'wrap_attrs' output primitive", name=name)

    def priority(self, name: str) -> int:
        """Configured priority of a mark; 0 when unlisted."""
        return self.mark_priorities.get(name, 0)

    def has_mark(self, name: str) -> bool:
        return name in self.marks or name in self.attributors


class RendererConfigBuilder[O]:
    """Mutable builder for RendererConfig.

    Registering the same name twice raises ``ConfigError`` unless
    ``replace=True`` is passed. A name is either an element mark or an
    attributor; replacing one with the other drops the old registration.

    Example:
        >>> builder = RendererConfigBuilder(join="".join, text=lambda s, node: s)
        >>> config = builder.block("paragraph", lambda node, out, attrs: out + "\\n").build()
        >>> sorted(config.blocks)
        ['paragraph']

    """

    __slots__ = (
        "_join",
        "_text",
        "_tag",
        "_wrap_attrs",
        "_priorities",
        "_blocks",
        "_marks",
        "_attributors",
        "_resolvers",
        "_overrides",
        "_on_unknown_node",
        "_before_render",
        "_after_render",
    )

    def __init__(
        self,
        *,
        join: Callable[[list[O]], O],
        text: Callable[[str, TNode], O],
        tag: Callable[[str, O, ResolvedAttrs | None], O] | None = None,
        wrap_attrs: Callable[[O, ResolvedAttrs], O] | None = None,
        mark_priorities: Mapping[str, int] | None = None,
    ) -> None:
        """Initialize builder with the output primitives.

        Args:
            join: Combine rendered children into one output value
            text: Render literal text
            tag: Wrap content in a named element
            wrap_attrs: Host attributor contributions without an element mark
            mark_priorities: Initial priorities (defaults to DEFAULT_MARK_PRIORITIES)
        """
        self._join = join
        self._text = text
        self._tag = tag
        self._wrap_attrs = wrap_attrs
        base = DEFAULT_MARK_PRIORITIES if mark_priorities is None else mark_priorities
        self._priorities: dict[str, int] = dict(base)
        self._blocks: dict[str, BlockHandler[O] | BlockDescriptor] = {}
        self._marks: dict[str, MarkHandler[O] | TagMark] = {}
        self._attributors: dict[str, Attributor] = {}
        self._resolvers: list[BlockAttributeResolver] = []
        self._overrides: dict[str, NodeOverride[O]] = {}
        self._on_unknown_node: Callable[[TNode], O] | None = None
        self._before_render: BeforeRender[O] | None = None
        self._after_render: AfterRender[O] | None = None

    @classmethod
    def from_config(cls, config: RendererConfig[O]) -> "RendererConfigBuilder[O]":
        """Start from an existing config, e.g. to extend an adapter's defaults."""
        builder = cls(
            join=config.join,
            text=config.text,
            tag=config.tag,
            wrap_attrs=config.wrap_attrs,
            mark_priorities=config.mark_priorities,
        )
        builder._blocks.update(config.blocks)
        builder._marks.update(config.marks)
        builder._attributors.update(config.attributors)
        builder._resolvers.extend(config.block_attribute_resolvers)
        builder._overrides.update(config.node_overrides)
        builder._on_unknown_node = config.on_unknown_node
        builder._before_render = config.before_render
        builder._after_render = config.after_render
        return builder

    # =========================================================================
    # Registration
    # =========================================================================

    def block(
        self, block_type: str, handler: BlockHandler[O] | BlockDescriptor, *, replace: bool = False
    ) -> Self:
        """Register a block handler or descriptor for a node type."""
        _check_free(self._blocks, block_type, "block", replace)
        self._blocks[block_type] = handler
        return self

    def mark(
        self,
        name: str,
        handler: MarkHandler[O] | TagMark,
        *,
        priority: int | None = None,
        replace: bool = False,
    ) -> Self:
        """Register an element mark, optionally setting its priority."""
        _check_free(self._marks, name, "mark", replace)
        _check_free(self._attributors, name, "attributor", replace)
        self._attributors.pop(name, None)
        self._marks[name] = handler
        if priority is not None:
            self._priorities[name] = priority
        return self

    def attributor(
        self,
        name: str,
        handler: Attributor,
        *,
        priority: int | None = None,
        replace: bool = False,
    ) -> Self:
        """Register an attributor, optionally setting its priority."""
        _check_free(self._attributors, name, "attributor", replace)
        _check_free(self._marks, name, "mark", replace)
        self._marks.pop(name, None)
        self._attributors[name] = handler
        if priority is not None:
            self._priorities[name] = priority
        return self

    def priority(self, name: str, value: int) -> Self:
        """Set or replace the priority of a mark."""
        self._priorities[name] = value
        return self

    def block_attribute_resolver(self, resolver: BlockAttributeResolver) -> Self:
        """Append a block attribute resolver; resolvers run in registration order."""
        self._resolvers.append(resolver)
        return self

    def node_override(
        self, node_type: str, override: NodeOverride[O], *, replace: bool = False
    ) -> Self:
        """Register a full traversal override for a node type."""
        _check_free(self._overrides, node_type, "node override", replace)
        self._overrides[node_type] = override
        return self

    def on_unknown_node(self, handler: Callable[[TNode], O] | None) -> Self:
        self._on_unknown_node = handler
        return self

    def before_render(self, hook: BeforeRender[O] | None) -> Self:
        self._before_render = hook
        return self

    def after_render(self, hook: AfterRender[O] | None) -> Self:
        self._after_render = hook
        return self

    def build(self) -> RendererConfig[O]:
        """Build an immutable config from the registrations.

        Raises:
            ConfigError: If the registrations are inconsistent
        """
        return RendererConfig(
            join=self._join,
            text=self._text,
            tag=self._tag,
            wrap_attrs=self._wrap_attrs,
            mark_priorities=dict(self._priorities),
            blocks=dict(self._blocks),
            marks=dict(self._marks),
            attributors=dict(self._attributors),
            block_attribute_resolvers=tuple(self._resolvers),
            node_overrides=dict(self._overrides),
            on_unknown_node=self._on_unknown_node,
            before_render=self._before_render,
            after_render=self._after_render,
        )


def _check_free(registry: Mapping[str, Any], name: str, kind: str, replace: bool) -> None:
    if name in registry and not replace:
        raise ConfigError(f"{kind} already registered (pass replace=True to override)", name=name)
