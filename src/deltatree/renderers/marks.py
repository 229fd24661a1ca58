"""Mark resolution for text leaves.

A text leaf's attributes split into two kinds of marks:

- **element marks** wrap the content in a new layer (bold, italic, link);
- **attributors** contribute classes, style or attributes to an existing
  layer (color, background, font, size).

Element marks nest by descending priority: the highest priority is the
outermost layer. Marks of equal priority nest alphabetically by name, the
earlier name outside, so output never depends on the order the attributes
were written in.

Attributor contributions are merged in ascending priority (then name), so
the higher-priority attributor wins a style or attribute conflict. The
merged result goes to the innermost element mark; when the leaf has no
element mark at all, the adapter's ``wrap_attrs`` hosts it.
"""

from typing import Any

from deltatree.nodes import TNode
from deltatree.renderers.attrs import ResolvedAttrs, merge_all
from deltatree.renderers.config import RendererConfig, TagMark


def _is_set(value: Any) -> bool:
    # null and false mean "mark removed" in editor deltas
    return value is not None and value is not False


def element_marks(node: TNode, config: RendererConfig[Any]) -> list[tuple[str, Any]]:
    """Element marks on ``node`` as ``(name, value)``, outermost first."""
    present = [
        (name, value)
        for name, value in node.attributes.items()
        if name in config.marks and _is_set(value)
    ]
    present.sort(key=lambda entry: (-config.priority(entry[0]), entry[0]))
    return present


def collect_attributor_attrs(node: TNode, config: RendererConfig[Any]) -> ResolvedAttrs:
    """Merged contributions of every attributor present on ``node``."""
    names = sorted(
        (
            name
            for name, value in node.attributes.items()
            if name in config.attributors and _is_set(value)
        ),
        key=lambda name: (config.priority(name), name),
    )
    return merge_all(config.attributors[name](node.attributes[name], node) for name in names)


def apply_marks[O](node: TNode, content: O, config: RendererConfig[O]) -> O:
    """Wrap already-rendered ``content`` in the marks of ``node``."""
    collected = collect_attributor_attrs(node, config)
    marks = element_marks(node, config)

    if not marks:
        if collected and config.wrap_attrs is not None:
            return config.wrap_attrs(content, collected)
        return content

    output = content
    for depth, (name, value) in enumerate(reversed(marks)):
        attrs = collected if depth == 0 and collected else None
        mark = config.marks[name]
        if isinstance(mark, TagMark):
            # RendererConfig guarantees a tag primitive when TagMarks are registered
            assert config.tag is not None
            output = config.tag(mark.resolve(value), output, attrs)
        else:
            output = mark(output, value, node, attrs)
    return output
