"""Editing session over one page: tree, selection, drops, copy/paste, delete."""

import asyncio
from collections.abc import Callable
from typing import Any, Literal

from loguru import logger

from page_builder.config import MAX_MATERIALIZE_DEPTH
from page_builder.core.clipboard import Clipboard
from page_builder.core.clone import copy_selection, paste
from page_builder.core.insert import DropEvent, commit_drop, prepare_drop
from page_builder.core.persistence import dump_page_data, page_record, parse_page_record
from page_builder.core.selection import HostElement, SelectionState, nearest_identified
from page_builder.core.tree.element_tree import ElementTree
from page_builder.errors import EditorError, ResolutionFailed, ValidationRejected
from page_builder.models.element import Advisory, DragItem, Element, PageDocument, Selection
from page_builder.protocols import SchemaResolverProtocol

Mode = Literal["edit", "preview"]


class DropSurface:
    """A region of the canvas that accepts dropped components.

    The page canvas is the outermost surface (no container); container
    elements expose nested surfaces whose drops become their children.
    """

    def __init__(
        self,
        editor: "Editor",
        container_id: str | None = None,
        parent: "DropSurface | None" = None,
    ) -> None:
        self.editor = editor
        self.container_id = container_id
        self.parent = parent
        self.depth = parent.depth + 1 if parent is not None else 0

    def nested(self, container_id: str) -> "DropSurface":
        """Return a surface for a container rendered inside this one."""
        return DropSurface(self.editor, container_id, parent=self)

    async def drop(self, event: DropEvent) -> Element | None:
        """Handle a drop released over this surface.

        Returns the committed element, or None when the drop was owned by
        another surface, rejected, or failed.
        """
        if not event.claim(self):
            return None

        editor = self.editor
        generation = editor.generation
        preparation = asyncio.ensure_future(
            prepare_drop(
                editor.tree,
                editor.resolver,
                event.item,
                parent_id=self.container_id,
                selection=editor.state.selected,
                max_depth=editor.max_depth,
            )
        )
        event.track(self, preparation)
        try:
            element = await preparation
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            logger.debug("Drop of {} on {} abandoned", event.item.type, self.container_id)
            return None
        except ValidationRejected as e:
            editor.advise("info", str(e))
            return None
        except ResolutionFailed as e:
            editor.advise("error", str(e))
            return None

        if event.owner is not self:
            return None
        if editor.generation != generation:
            logger.debug("Page changed while {} was resolving, dropping it", event.item.type)
            return None
        if not commit_drop(editor.tree, element, self.container_id):
            editor.advise("warning", "The drop target was removed before the component was added")
            return None
        return element


class Editor:
    """One editing session over a page.

    The clipboard is passed in and outlives the page: loading another page or
    unloading keeps whatever was copied.
    """

    def __init__(
        self,
        resolver: SchemaResolverProtocol,
        clipboard: Clipboard,
        *,
        mode: Mode = "edit",
        max_depth: int = MAX_MATERIALIZE_DEPTH,
        on_advisory: Callable[[Advisory], Any] | None = None,
    ) -> None:
        self.resolver = resolver
        self.clipboard = clipboard
        self.mode: Mode = mode
        self.max_depth = max_depth
        self.on_advisory = on_advisory
        self.tree = ElementTree()
        self.state = SelectionState()
        self.page: PageDocument | None = None
        self.advisories: list[Advisory] = []
        # Bumped on every unload; drops started under an older page never commit.
        self.generation = 0
        self._canvas = DropSurface(self)

    # --- lifecycle ---

    def load(self, record: dict[str, Any]) -> PageDocument:
        """Start editing a page record, replacing anything loaded before."""
        self.unload()
        page = parse_page_record(record)
        if page.malformed:
            self.advise("error", "Page data is malformed, starting from an empty page")
        self.tree = ElementTree.from_elements(page.elements)
        self.page = page
        logger.info("Loaded page {} ({} elements)", page.page_id, len(self.tree))
        return page

    def unload(self) -> None:
        """Discard the page, its tree, selection and hover."""
        self.tree = ElementTree()
        self.state.clear()
        self.page = None
        self.generation += 1

    def snapshot(self) -> tuple[PageDocument, str]:
        """Return the page and its serialized page data for saving."""
        page = self.page or PageDocument()
        return page, dump_page_data(page, self.tree)

    def record(self) -> dict[str, Any]:
        """Return the full page record for the current state."""
        return page_record(self.page or PageDocument(), self.tree)

    # --- advisories ---

    def advise(self, level: Literal["info", "warning", "error"], message: str) -> None:
        advisory = Advisory(level, message)
        self.advisories.append(advisory)
        if level == "info":
            logger.info(message)
        else:
            logger.warning(message)
        if self.on_advisory is not None:
            self.on_advisory(advisory)

    # --- drops ---

    @property
    def canvas(self) -> DropSurface:
        """The outermost drop surface (the page root)."""
        return self._canvas

    def surface(self, container_id: str) -> DropSurface:
        """A drop surface for a container element, nested at its tree depth."""
        surface = self._canvas
        chain = [container_id, *(a.id for a in self.tree.ancestors(container_id))]
        for element_id in reversed(chain):
            surface = surface.nested(element_id)
        return surface

    async def drop(self, item: DragItem, *surfaces: DropSurface) -> Element | None:
        """Dispatch one drop to the surfaces under the pointer, innermost first.

        With no surfaces given the drop lands on the canvas.
        """
        event = DropEvent(item)
        targets = surfaces or (self._canvas,)
        results = await asyncio.gather(*(s.drop(event) for s in targets))
        return next((r for r in results if r is not None), None)

    # --- pointer ---

    def click(self, target: HostElement | None) -> Selection | None:
        """Select the element under the pointer; clicking empty canvas clears the selection."""
        if self.mode == "preview":
            return self.state.selected
        hit = nearest_identified(target)
        if hit is None:
            self.state.clear_selection()
            return None
        element = self.tree.get(hit.id)
        if element is None:
            return self.state.selected
        if self.state.selected is None or element.id != self.state.selected.id:
            self.state.select(element.id, element.type)
        return self.state.selected

    def pointer_over(self, target: HostElement | None) -> Selection | None:
        """Track the element under the pointer for the hover toolbar."""
        if self.mode == "preview":
            return None
        hit = nearest_identified(target)
        if hit is None or hit.id not in self.tree:
            self.state.clear_hover()
        else:
            self.state.hover(hit)
        return self.state.hovered

    def pointer_leave(self) -> None:
        self.state.clear_hover()

    def select(self, element_id: str) -> bool:
        """Select an element by id. Returns False if it is not in the tree."""
        element = self.tree.get(element_id)
        if element is None:
            return False
        self.state.select(element.id, element.type)
        return True

    # --- copy / paste / delete ---

    def copy(self) -> bool:
        """Copy the selected element. Silently does nothing without a selection."""
        return copy_selection(self.state.selected, self.clipboard)

    def paste(self) -> Element | None:
        """Paste a clone of the copied element; see clone.paste_target for placement."""
        try:
            return paste(self.tree, self.state.selected, self.clipboard)
        except EditorError as e:
            self.advise("info", str(e))
            return None

    def remove(self, element_id: str) -> list[str]:
        """Remove an element and its subtree. Unknown ids are ignored."""
        removed = self.tree.remove(element_id)
        if removed:
            self.state.forget(removed)
            logger.debug("Removed {} ({} elements)", element_id, len(removed))
        return removed

    def delete(self) -> list[str]:
        """Remove the selected element."""
        if self.state.selected is None:
            return []
        return self.remove(self.state.selected.id)
