"""Structural placement rules for dropped components."""

from page_builder.config import FORM_CONTAINER_TYPES, FORM_ITEM_TYPES
from page_builder.core.tree.element_tree import ElementTree


def is_placement_legal(
    dragged_type: str,
    target_id: str | None,
    target_type: str | None,
    tree: ElementTree,
) -> bool:
    """Decide whether ``dragged_type`` may be placed at the target.

    Form-field types are legal only when the target itself, or one of its
    ancestors, is a form container. Types without a rule are always legal.
    """
    if dragged_type not in FORM_ITEM_TYPES:
        return True

    if target_type in FORM_CONTAINER_TYPES:
        return True
    if target_id is None:
        return False

    target = tree.get(target_id)
    if target is not None and target.type in FORM_CONTAINER_TYPES:
        return True
    return any(a.type in FORM_CONTAINER_TYPES for a in tree.ancestors(target_id))
