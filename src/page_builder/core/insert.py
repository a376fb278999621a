"""Insert protocol: turn a dropped component descriptor into a committed subtree.

Preparation is asynchronous (schema lookups for the dropped type and all its
default children) and never touches the tree. Commit is a single synchronous
``ElementTree.attach`` call, so nothing half-built is ever visible.
"""

import asyncio
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol, TypeVar

from loguru import logger

from page_builder.config import MAX_MATERIALIZE_DEPTH
from page_builder.core.ids import create_id
from page_builder.core.placement import is_placement_legal
from page_builder.core.schema.registry import resolve_schema
from page_builder.core.tree.element_tree import ElementTree
from page_builder.errors import ValidationRejected
from page_builder.models.element import ChildDescriptor, DragItem, Element, SchemaPayload, Selection
from page_builder.protocols import SchemaResolverProtocol

T = TypeVar("T")


class _Surface(Protocol):
    depth: int


class DropEvent:
    """A single drop, claimed by exactly one surface.

    Surfaces nest; the most deeply nested surface that claims the drop owns
    it. A late claim by a deeper surface cancels the in-flight preparation of
    the previous owner.
    """

    def __init__(self, item: DragItem) -> None:
        self.item = item
        self.owner: _Surface | None = None
        self._inflight: asyncio.Future[Any] | None = None

    def did_drop(self) -> bool:
        """True once some surface has claimed this drop."""
        return self.owner is not None

    def claim(self, surface: _Surface) -> bool:
        """Try to take ownership. Returns False if a surface at least as deep owns it."""
        if self.owner is not None and surface.depth <= self.owner.depth:
            return False
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Drop of {} reclaimed by a nested surface, cancelling", self.item.type)
            self._inflight.cancel()
        self.owner = surface
        self._inflight = None
        return True

    def track(self, surface: _Surface, future: asyncio.Future[Any]) -> None:
        """Register the preparation running on behalf of ``surface``."""
        if self.owner is surface:
            self._inflight = future


@dataclass
class ResolvedChild:
    """A default child whose schema has been resolved but has no id yet."""

    descriptor: ChildDescriptor
    payload: SchemaPayload
    children: list["ResolvedChild"] = field(default_factory=list)


async def gather_or_cancel(aws: Iterable[Awaitable[T]]) -> list[T]:
    """Await all concurrently; on the first failure cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def materialize_children(
    resolver: SchemaResolverProtocol,
    descriptors: Iterable[ChildDescriptor],
    *,
    max_depth: int = MAX_MATERIALIZE_DEPTH,
) -> list[ResolvedChild]:
    """Resolve default children level by level.

    Each level's schemas are resolved concurrently. Payloads that declare
    children of their own queue the next level. Order within every holder
    follows the declaration order.

    Raises:
        ResolutionFailed: if any schema lookup fails; nothing is returned.
    """
    result: list[ResolvedChild] = []
    frontier: list[tuple[ChildDescriptor, list[ResolvedChild], int]] = [
        (d, result, 1) for d in descriptors
    ]
    while frontier:
        payloads = await gather_or_cancel(resolve_schema(resolver, d.type) for d, _, _ in frontier)
        next_frontier: list[tuple[ChildDescriptor, list[ResolvedChild], int]] = []
        for (descriptor, holder, depth), payload in zip(frontier, payloads, strict=True):
            node = ResolvedChild(descriptor=descriptor, payload=payload)
            holder.append(node)
            if not payload.elements:
                continue
            if depth >= max_depth:
                logger.warning(
                    "Default children of {} nested deeper than {} levels, not materialized",
                    descriptor.type,
                    max_depth,
                )
                continue
            next_frontier.extend((c, node.children, depth + 1) for c in payload.elements)
        frontier = next_frontier
    return result


def _methods(payload: SchemaPayload) -> Any:
    return payload.methods if payload.methods is not None else []


def _build_child(resolved: ResolvedChild, parent_id: str) -> Element:
    element_id = create_id(resolved.descriptor.type)
    return Element(
        id=element_id,
        type=resolved.descriptor.type,
        name=resolved.descriptor.name,
        parent_id=parent_id,
        config=resolved.payload.config,
        events=resolved.payload.events,
        methods=_methods(resolved.payload),
        elements=[_build_child(c, element_id) for c in resolved.children],
    )


def build_element(
    item: DragItem,
    payload: SchemaPayload,
    children: list[ResolvedChild],
    *,
    tree: ElementTree,
) -> Element:
    """Assemble the dropped element and its default children in one pass.

    The supplied drag id is kept unless it is already used in ``tree``.
    """
    element_id = item.id
    if not element_id or element_id in tree:
        element_id = create_id(item.type)
    return Element(
        id=element_id,
        type=item.type,
        name=item.name,
        config=payload.config,
        events=payload.events,
        methods=_methods(payload),
        elements=[_build_child(c, element_id) for c in children],
    )


async def prepare_drop(
    tree: ElementTree,
    resolver: SchemaResolverProtocol,
    item: DragItem,
    *,
    parent_id: str | None = None,
    selection: Selection | None = None,
    max_depth: int = MAX_MATERIALIZE_DEPTH,
) -> Element:
    """Resolve, validate and build a dropped element without committing it.

    Placement is checked against the current selection; when nothing is
    selected, against the container the drop landed in.

    Raises:
        ResolutionFailed: if the item's or any default child's schema fails.
        ValidationRejected: if the target does not accept ``item.type``.
    """
    payload = await resolve_schema(resolver, item.type)

    target = selection
    if target is None and parent_id is not None:
        container = tree.get(parent_id)
        target = Selection(parent_id, container.type if container else None)
    target_id = target.id if target else None
    target_type = target.type if target else None
    if not is_placement_legal(item.type, target_id, target_type, tree):
        raise ValidationRejected(item.type, target_type)

    children = await materialize_children(resolver, payload.elements, max_depth=max_depth)
    return build_element(item, payload, children, tree=tree)


def commit_drop(tree: ElementTree, element: Element, parent_id: str | None) -> bool:
    """Attach a prepared element. Returns False if the container has gone."""
    if parent_id is not None and parent_id not in tree:
        logger.info("Drop target {} was removed before {} could be inserted", parent_id, element.id)
        return False
    if element.id in tree:
        # Another drop committed the same id while this one was resolving.
        element.id = create_id(element.type)
        for child in element.elements:
            child.parent_id = element.id
    tree.attach(element, parent_id)
    logger.debug("Inserted {} ({} elements) under {}", element.id, sum(1 for _ in element.walk()), parent_id)
    return True


async def insert_drop(
    tree: ElementTree,
    resolver: SchemaResolverProtocol,
    item: DragItem,
    *,
    parent_id: str | None = None,
    selection: Selection | None = None,
    max_depth: int = MAX_MATERIALIZE_DEPTH,
) -> Element | None:
    """Prepare and commit a drop. Returns the new element, or None if the target vanished."""
    element = await prepare_drop(
        tree, resolver, item, parent_id=parent_id, selection=selection, max_depth=max_depth
    )
    if not commit_drop(tree, element, parent_id):
        return None
    return element
