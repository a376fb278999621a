"""Domain models for the page element tree."""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass
class Element:
    """A single component node in a page element tree.

    ``config``, ``events`` and ``methods`` are opaque payloads supplied by the
    schema resolver; the engine carries them without looking inside.
    """

    id: str
    type: str
    name: str
    parent_id: str | None = None
    config: Any = None
    events: Any = None
    methods: Any = field(default_factory=list)
    elements: list["Element"] = field(default_factory=list)

    def walk(self) -> Iterator["Element"]:
        """Traverse the subtree depth-first, yielding self then children."""
        yield self
        for child in self.elements:
            yield from child.walk()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted shape, children included."""
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "name": self.name,
            "config": self.config,
            "events": self.events,
            "methods": self.methods,
            "elements": [child.to_dict() for child in self.elements],
        }
        if self.parent_id is not None:
            data["parentId"] = self.parent_id
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Element":
        """Build an element (and its children) from the persisted shape."""
        return cls(
            id=data["id"],
            type=data["type"],
            name=data.get("name", data["type"]),
            parent_id=data.get("parentId"),
            config=data.get("config"),
            events=data.get("events"),
            methods=data["methods"] if data.get("methods") is not None else [],
            elements=[cls.from_dict(child) for child in data.get("elements") or []],
        )


@dataclass(frozen=True)
class ChildDescriptor:
    """A declarative default child of a component schema."""

    type: str
    name: str


@dataclass(frozen=True)
class SchemaPayload:
    """Default configuration for a component type."""

    config: Any = None
    events: Any = None
    methods: Any = None
    elements: tuple[ChildDescriptor, ...] = ()


@dataclass(frozen=True)
class DragItem:
    """The descriptor carried by a drag from the component menu."""

    type: str
    name: str
    id: str | None = None


@dataclass(frozen=True)
class Selection:
    """Reference to the selected (or pointed-at) element."""

    id: str
    type: str | None = None


@dataclass(frozen=True)
class Advisory:
    """A user-facing notice produced by a recovered error."""

    level: Literal["info", "warning", "error"]
    message: str


@dataclass
class PageDocument:
    """A page record with its element tree."""

    page_id: int | None = None
    name: str = ""
    remark: str = ""
    is_public: int = 0
    is_edit: int = 1
    preview_img: str | None = None
    user_id: int | None = None
    publish_ids: dict[str, int | None] = field(default_factory=dict)
    publish_states: dict[str, int | None] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)
    events: list[Any] = field(default_factory=list)
    elements: list[Element] = field(default_factory=list)
    malformed: bool = False
