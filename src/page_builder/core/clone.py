"""Copy/paste: deep clone of an element subtree under fresh ids."""

import copy

from loguru import logger

from page_builder.core.clipboard import Clipboard
from page_builder.core.ids import create_id
from page_builder.core.tree.element_tree import ElementTree
from page_builder.errors import ClipboardEmpty, ClipboardStale
from page_builder.models.element import Element, Selection


def copy_selection(selection: Selection | None, clipboard: Clipboard) -> bool:
    """Record the selected element in the clipboard. Returns False if nothing is selected."""
    if selection is None:
        return False
    clipboard.set(selection.id)
    return True


def paste_target(
    tree: ElementTree,
    selection: Selection | None,
    clipboard: Clipboard,
) -> tuple[Element, str | None]:
    """Work out what to paste and where.

    Pasting with the copied element itself selected places the clone beside
    the original. With another element selected the clone becomes that
    element's last child; with nothing selected it goes to the page root.

    Returns:
        (source element, destination parent id or None for the page root)

    Raises:
        ClipboardEmpty: nothing was copied.
        ClipboardStale: the copied element is no longer in the tree.
    """
    source_id = clipboard.get()
    if not source_id:
        raise ClipboardEmpty()
    source = tree.get(source_id)
    if source is None:
        raise ClipboardStale(source_id)

    if selection is None:
        return source, None
    if selection.id == source_id:
        return source, source.parent_id
    return source, selection.id


def clone_subtree(source: Element, parent_id: str | None) -> Element:
    """Copy ``source`` and its descendants with new ids, keeping child order.

    Payloads are deep-copied so the clone never shares config objects with
    the original.
    """
    clone = Element(
        id=create_id(source.type),
        type=source.type,
        name=source.name,
        parent_id=parent_id,
        config=copy.deepcopy(source.config),
        events=copy.deepcopy(source.events),
        methods=copy.deepcopy(source.methods),
    )
    clone.elements = [clone_subtree(child, clone.id) for child in source.elements]
    return clone


def paste(tree: ElementTree, selection: Selection | None, clipboard: Clipboard) -> Element:
    """Clone the copied element into the tree and return the clone."""
    source, parent_id = paste_target(tree, selection, clipboard)
    clone = clone_subtree(source, parent_id)
    tree.attach(clone, parent_id)
    logger.debug("Pasted {} as {} under {}", source.id, clone.id, parent_id)
    return clone
