"""The page element tree and its id index.

The tree (ordered roots, each element owning ordered children) and the index
(id -> element) always describe the same element objects. Every mutating
method validates first and writes second, so a refused mutation leaves both
untouched.
"""

from collections import deque
from collections.abc import Iterator
from typing import Any

from page_builder.errors import DuplicateElementId, MalformedPersistedDocument
from page_builder.models.element import Element


class ElementTree:
    """Ordered forest of page elements with an id -> element index."""

    def __init__(self) -> None:
        self._roots: list[Element] = []
        self._index: dict[str, Element] = {}

    @classmethod
    def from_elements(cls, elements: list[Element]) -> "ElementTree":
        """Build a tree from already-constructed root elements.

        Raises:
            MalformedPersistedDocument: on duplicate ids or parent links that
                do not match the containing element.
        """
        tree = cls()
        index: dict[str, Element] = {}
        todo: deque[tuple[Element, str | None]] = deque((root, None) for root in elements)
        while todo:
            element, holder_id = todo.popleft()
            if element.id in index:
                msg = f"Duplicate element id: {element.id!r}"
                raise MalformedPersistedDocument(msg)
            if element.parent_id != holder_id:
                msg = (
                    f"Element {element.id!r} has parentId {element.parent_id!r} "
                    f"but is held by {holder_id!r}"
                )
                raise MalformedPersistedDocument(msg)
            index[element.id] = element
            todo.extend((child, element.id) for child in element.elements)

        tree._roots = list(elements)
        tree._index = index
        return tree

    @property
    def roots(self) -> tuple[Element, ...]:
        return tuple(self._roots)

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._index

    def get(self, element_id: str | None) -> Element | None:
        """Return the element with this id, or None."""
        if element_id is None:
            return None
        return self._index.get(element_id)

    def walk(self) -> Iterator[Element]:
        """Yield every element in pre-order."""
        for root in self._roots:
            yield from root.walk()

    def ancestors(self, element_id: str) -> Iterator[Element]:
        """Yield the ancestors of an element, nearest first."""
        element = self._index.get(element_id)
        seen: set[str] = set()
        while element is not None and element.parent_id is not None:
            if element.parent_id in seen:
                break
            seen.add(element.parent_id)
            element = self._index.get(element.parent_id)
            if element is not None:
                yield element

    def attach(self, element: Element, parent_id: str | None = None) -> None:
        """Append a fully built subtree under ``parent_id`` (or at the root).

        The subtree root's ``parent_id`` is set to the holder; descendants must
        already link to their holders.

        Raises:
            KeyError: if ``parent_id`` is not in the tree.
            DuplicateElementId: if any id of the subtree is already taken.
        """
        parent: Element | None = None
        if parent_id is not None:
            parent = self._index.get(parent_id)
            if parent is None:
                msg = f"Parent element {parent_id!r} not found"
                raise KeyError(msg)

        incoming: dict[str, Element] = {}
        for node in element.walk():
            if node.id in self._index or node.id in incoming:
                raise DuplicateElementId(node.id)
            for child in node.elements:
                if child.parent_id != node.id:
                    msg = f"Element {child.id!r} links to {child.parent_id!r}, expected {node.id!r}"
                    raise ValueError(msg)
            incoming[node.id] = node

        element.parent_id = parent_id
        if parent is None:
            self._roots.append(element)
        else:
            parent.elements.append(element)
        self._index.update(incoming)

    def remove(self, element_id: str) -> list[str]:
        """Remove an element and its whole subtree.

        Returns:
            Ids removed, in pre-order. Empty if the id is unknown.
        """
        element = self._index.get(element_id)
        if element is None:
            return []

        holder = self._roots
        if element.parent_id is not None:
            parent = self._index.get(element.parent_id)
            if parent is not None:
                holder = parent.elements
        holder[:] = [e for e in holder if e is not element]

        removed = [node.id for node in element.walk()]
        for node_id in removed:
            del self._index[node_id]
        return removed

    def to_list(self) -> list[dict[str, Any]]:
        """Serialize the roots (with children) to the persisted shape."""
        return [root.to_dict() for root in self._roots]

    def index_snapshot(self) -> dict[str, dict[str, Any]]:
        """Return the flattened index as ``{id: element-without-children}``."""
        snapshot: dict[str, dict[str, Any]] = {}
        for element in self.walk():
            data = element.to_dict()
            del data["elements"]
            snapshot[element.id] = data
        return snapshot

    def check_consistency(self) -> None:
        """Raise AssertionError if the tree and the index disagree."""
        seen: dict[str, Element] = {}
        todo: deque[tuple[Element, str | None]] = deque((root, None) for root in self._roots)
        while todo:
            element, holder_id = todo.popleft()
            assert element.id not in seen, f"duplicate id {element.id!r}"
            assert element.parent_id == holder_id, f"bad parent link on {element.id!r}"
            assert self._index.get(element.id) is element, f"index out of sync for {element.id!r}"
            seen[element.id] = element
            todo.extend((child, element.id) for child in element.elements)
        assert len(seen) == len(self._index), (
            f"index has {len(self._index)} entries, tree has {len(seen)} elements"
        )
