"""Protocols for the collaborators of the element tree engine."""

from typing import Any, Protocol, runtime_checkable

from page_builder.models.element import SchemaPayload


@runtime_checkable
class SchemaResolverProtocol(Protocol):
    """Protocol for component schema lookups."""

    async def resolve(self, component_type: str) -> SchemaPayload:
        """Return the default configuration of a component type."""
        ...


@runtime_checkable
class PageApiProtocol(Protocol):
    """Protocol for remote page persistence clients."""

    def get_page_detail(self, page_id: int) -> dict[str, Any]:
        """Fetch a page record."""
        ...

    def save_page(self, page_id: int, page_data: str, **meta: Any) -> dict[str, Any]:
        """Store serialized page data for a page."""
        ...
