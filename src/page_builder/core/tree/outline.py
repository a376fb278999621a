"""Render element trees as indented outlines."""

import io

from page_builder.core.tree.element_tree import ElementTree
from page_builder.models.element import Element


def render_outline(
    tree: ElementTree,
    *,
    node_id: str | None = None,
    max_depth: int | None = None,
    show_ids: bool = True,
) -> str:
    """Render the whole tree, or one subtree, as an indented bullet list.

    Args:
        tree: The element tree.
        node_id: Root of the subtree to render (None = every root).
        max_depth: Max levels below the start element to include (None = unlimited).
        show_ids: Whether to append element ids.

    Returns:
        Outline text, or an empty string if ``node_id`` is unknown.
    """
    if node_id is not None:
        start = tree.get(node_id)
        if start is None:
            return ""
        starts: tuple[Element, ...] = (start,)
    else:
        starts = tree.roots

    out = io.StringIO()
    todo: list[tuple[Element, int]] = [(e, 0) for e in reversed(starts)]
    while todo:
        element, depth = todo.pop()
        indent = "    " * depth
        label = f"{element.name} <{element.type}>"
        if show_ids:
            label += f"  [id={element.id}]"
        out.write(f"{indent}- {label}\n")

        if max_depth is not None and depth == max_depth:
            if element.elements:
                count = len(element.elements)
                noun = "child" if count == 1 else "children"
                out.write(f"{indent}    - ... ({count} more {noun})\n")
            continue

        todo.extend((child, depth + 1) for child in reversed(element.elements))

    return out.getvalue()
