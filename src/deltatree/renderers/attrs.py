"""Resolved attributes: the class/style/attribute accumulator.

Attributors (color, background, font...) and block attribute resolvers
(indent, align...) do not create output layers of their own; they return
a ``ResolvedAttrs`` contribution that is merged into the element the
adapter does create.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

_EMPTY: Mapping[str, str] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class ResolvedAttrs:
    """Merged contribution of attributors or block attribute resolvers.

    Attributes:
        classes: Class names, in first-contributed order, without duplicates
        style: Style property -> value
        attrs: Named attribute -> value

    Example:
        >>> a = ResolvedAttrs(style={"color": "red"})
        >>> b = ResolvedAttrs(classes=("ql-size-large",), style={"color": "blue"})
        >>> merged = a.merge(b)
        >>> merged.style["color"], merged.classes
        ('blue', ('ql-size-large',))

    """

    classes: tuple[str, ...] = ()
    style: Mapping[str, str] = field(default=_EMPTY)
    attrs: Mapping[str, str] = field(default=_EMPTY)

    def __post_init__(self) -> None:
        object.__setattr__(self, "classes", _unique(self.classes))
        for name in ("style", "attrs"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))

    def __bool__(self) -> bool:
        return bool(self.classes or self.style or self.attrs)

    def merge(self, other: "ResolvedAttrs") -> "ResolvedAttrs":
        """Combine with ``other``; on style or attr conflicts ``other`` wins."""
        if not other:
            return self
        if not self:
            return other
        return ResolvedAttrs(
            classes=_unique((*self.classes, *other.classes)),
            style={**self.style, **other.style},
            attrs={**self.attrs, **other.attrs},
        )


def _unique(classes: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(classes))


EMPTY_ATTRS = ResolvedAttrs()


def merge_all(contributions: Iterable[ResolvedAttrs | None]) -> ResolvedAttrs:
    """Fold contributions left to right; ``None`` contributes nothing."""
    result = EMPTY_ATTRS
    for contribution in contributions:
        if contribution:
            result = result.merge(contribution)
    return result
