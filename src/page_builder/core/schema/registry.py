"""Schema resolution for component types."""

import asyncio
import copy
import json
from pathlib import Path
from typing import Any

from loguru import logger

from page_builder.errors import ResolutionFailed
from page_builder.models.element import ChildDescriptor, SchemaPayload
from page_builder.protocols import SchemaResolverProtocol


def payload_from_dict(data: dict[str, Any]) -> SchemaPayload:
    """Build a SchemaPayload from a registry entry."""
    children = tuple(
        ChildDescriptor(type=c["type"], name=c.get("name", c["type"]))
        for c in data.get("elements") or []
    )
    return SchemaPayload(
        config=data.get("config"),
        events=data.get("events"),
        methods=data.get("methods"),
        elements=children,
    )


class RegistrySchemaResolver:
    """Resolve component schemas from an in-memory registry.

    Each resolution returns fresh copies of the payload, so elements built
    from the same type never share config objects.
    """

    def __init__(self, components: dict[str, dict[str, Any]]) -> None:
        self._components = components

    @classmethod
    def from_file(cls, path: str | Path) -> "RegistrySchemaResolver":
        """Load a JSON registry mapping component type -> schema."""
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            msg = f"Component registry must be a JSON object: {path!r}"
            raise ValueError(msg)
        return cls(data)

    @property
    def types(self) -> list[str]:
        return sorted(self._components)

    async def resolve(self, component_type: str) -> SchemaPayload:
        """Return the default schema of ``component_type``."""
        entry = self._components.get(component_type)
        if entry is None:
            raise ResolutionFailed(component_type, "unknown component type")
        return payload_from_dict(copy.deepcopy(entry))


async def resolve_schema(resolver: SchemaResolverProtocol, component_type: str) -> SchemaPayload:
    """Resolve a schema, normalizing every failure to ResolutionFailed.

    Cancellation is propagated untouched.
    """
    try:
        return await resolver.resolve(component_type)
    except asyncio.CancelledError:
        raise
    except ResolutionFailed:
        raise
    except Exception as e:
        logger.debug("Schema resolver raised for {}: {!r}", component_type, e)
        raise ResolutionFailed(component_type, str(e)) from e
