"""Selection and hover state, and pointer target resolution."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from page_builder.models.element import Selection


@dataclass
class HostElement:
    """A rendered node of the host surface.

    Only the rendered root of a page element carries ``data["id"]``; inner
    parts of its rendering do not.
    """

    tag: str
    data: dict[str, str] = field(default_factory=dict)
    parent: "HostElement | None" = None


def nearest_identified(target: HostElement | None) -> Selection | None:
    """Walk up from ``target`` to the nearest host element that carries an element id."""
    node = target
    while node is not None:
        element_id = node.data.get("id")
        if element_id:
            return Selection(element_id, node.data.get("type"))
        node = node.parent
    return None


class SelectionState:
    """At most one selected and one hovered element.

    The selected element is never reported as hovered.
    """

    def __init__(self) -> None:
        self.selected: Selection | None = None
        self.hovered: Selection | None = None

    def select(self, element_id: str, element_type: str | None = None) -> None:
        self.selected = Selection(element_id, element_type)
        self.hovered = None

    def clear_selection(self) -> None:
        self.selected = None

    def hover(self, target: Selection) -> bool:
        """Hover ``target``. Returns False when nothing changed."""
        if self.selected is not None and target.id == self.selected.id:
            return False
        if self.hovered is not None and target.id == self.hovered.id:
            return False
        self.hovered = target
        return True

    def clear_hover(self) -> None:
        self.hovered = None

    def clear(self) -> None:
        self.selected = None
        self.hovered = None

    def forget(self, element_ids: Iterable[str]) -> None:
        """Drop references to removed elements."""
        removed = set(element_ids)
        if self.selected is not None and self.selected.id in removed:
            self.selected = None
        if self.hovered is not None and self.hovered.id in removed:
            self.hovered = None
