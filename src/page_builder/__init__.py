"""Page builder element tree engine."""

from page_builder.core.clipboard import Clipboard
from page_builder.core.schema.registry import RegistrySchemaResolver
from page_builder.core.tree.element_tree import ElementTree
from page_builder.editor import DropSurface, Editor
from page_builder.models.element import DragItem, Element, PageDocument, Selection
from page_builder.protocols import PageApiProtocol, SchemaResolverProtocol

__all__ = [
    "Clipboard",
    "DragItem",
    "DropSurface",
    "Editor",
    "Element",
    "ElementTree",
    "PageApiProtocol",
    "PageDocument",
    "RegistrySchemaResolver",
    "SchemaResolverProtocol",
    "Selection",
]
