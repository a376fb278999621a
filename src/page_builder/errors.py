"""Exceptions raised by the element tree engine.

Every error here is recoverable: the editor session turns them into user
advisories and leaves the tree untouched.
"""


class EditorError(Exception):
    """Base class for element tree engine errors."""


class ValidationRejected(EditorError):
    """The drop target does not structurally accept the dragged type."""

    def __init__(self, dragged_type: str, target_type: str | None) -> None:
        self.dragged_type = dragged_type
        self.target_type = target_type
        where = target_type or "page root"
        super().__init__(f"{dragged_type!r} cannot be placed in {where!r}; put form fields inside a Form")


class ResolutionFailed(EditorError):
    """The schema resolver failed for a component type."""

    def __init__(self, component_type: str, reason: str = "") -> None:
        self.component_type = component_type
        msg = f"Cannot resolve schema for {component_type!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ClipboardEmpty(EditorError):
    """Paste was requested but nothing has been copied."""

    def __init__(self) -> None:
        super().__init__("Nothing has been copied")


class ClipboardStale(EditorError):
    """The copied element no longer exists in the tree."""

    def __init__(self, element_id: str) -> None:
        self.element_id = element_id
        super().__init__(f"Copied element {element_id!r} no longer exists")


class DuplicateElementId(EditorError):
    """A commit would introduce an id that is already present."""

    def __init__(self, element_id: str) -> None:
        self.element_id = element_id
        super().__init__(f"Element id {element_id!r} is already in use")


class MalformedPersistedDocument(EditorError):
    """Stored page data cannot be turned into an element tree."""


class PageApiError(RuntimeError):
    """The remote page API reported a failure."""
