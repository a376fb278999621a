"""Convert page records to element trees and back."""

import copy
import json
from typing import Any

from loguru import logger

from page_builder.config import DEFAULT_PAGE_CONFIG, DEFAULT_PAGE_EVENTS, PAGE_DATA_FIELDS
from page_builder.core.tree.element_tree import ElementTree
from page_builder.errors import MalformedPersistedDocument
from page_builder.models.element import Element, PageDocument

_ENVIRONMENTS = ("stg", "pre", "prd")


def _page_data_text(record: dict[str, Any]) -> str:
    for key in PAGE_DATA_FIELDS:
        value = record.get(key)
        if value:
            return str(value)
    return "{}"


def parse_page_data(text: str) -> tuple[dict[str, Any], list[Any], list[Element]]:
    """Parse serialized page data into (config, events, root elements).

    Raises:
        MalformedPersistedDocument: if the text is not a JSON object, or the
            elements it describes do not form a valid tree.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Page data is not valid JSON: {e}"
        raise MalformedPersistedDocument(msg) from e
    if not isinstance(data, dict):
        msg = f"Page data must be a JSON object, got {type(data).__name__}"
        raise MalformedPersistedDocument(msg)

    stored_config = data.get("config") or {}
    if not isinstance(stored_config, dict):
        msg = "Page data 'config' must be an object"
        raise MalformedPersistedDocument(msg)
    config = copy.deepcopy(DEFAULT_PAGE_CONFIG)
    config.update(stored_config)
    events = data.get("events") or copy.deepcopy(DEFAULT_PAGE_EVENTS)

    raw_elements = data.get("elements") or []
    if not isinstance(raw_elements, list):
        msg = "Page data 'elements' must be a list"
        raise MalformedPersistedDocument(msg)
    try:
        elements = [Element.from_dict(e) for e in raw_elements]
    except (KeyError, TypeError, AttributeError) as e:
        msg = f"Bad element entry in page data: {e!r}"
        raise MalformedPersistedDocument(msg) from e
    # Validates ids and parent links.
    ElementTree.from_elements(elements)
    return config, events, elements


def parse_page_record(record: dict[str, Any]) -> PageDocument:
    """Build a PageDocument from a page record.

    Malformed page data never fails the load: the document comes back with
    no elements and ``malformed`` set.
    """
    page = PageDocument(
        page_id=record.get("id"),
        name=record.get("name") or "",
        remark=record.get("remark") or "",
        is_public=record.get("isPublic", 0),
        is_edit=record.get("isEdit", 1),
        preview_img=record.get("previewImg"),
        user_id=record.get("userId"),
        publish_ids={env: record.get(f"{env}PublishId") for env in _ENVIRONMENTS},
        publish_states={env: record.get(f"{env}State") for env in _ENVIRONMENTS},
    )

    text = _page_data_text(record)
    try:
        page.config, page.events, page.elements = parse_page_data(text)
    except MalformedPersistedDocument as e:
        logger.warning("Page {} has malformed page data, starting empty: {}", page.page_id, e)
        logger.debug("Page data was: {!r}", text[:500])
        page.config = copy.deepcopy(DEFAULT_PAGE_CONFIG)
        page.events = copy.deepcopy(DEFAULT_PAGE_EVENTS)
        page.elements = []
        page.malformed = True
    return page


def dump_page_data(page: PageDocument, tree: ElementTree) -> str:
    """Serialize page config and the element tree for saving."""
    data = {
        "config": page.config,
        "events": page.events,
        "elements": tree.to_list(),
        "elementsMap": tree.index_snapshot(),
    }
    return json.dumps(data, ensure_ascii=False, sort_keys=True)


def page_record(page: PageDocument, tree: ElementTree) -> dict[str, Any]:
    """Build a full page record, the inverse of parse_page_record."""
    record: dict[str, Any] = {
        "id": page.page_id,
        "name": page.name,
        "remark": page.remark,
        "isPublic": page.is_public,
        "isEdit": page.is_edit,
        "previewImg": page.preview_img,
        "userId": page.user_id,
        "pageData": dump_page_data(page, tree),
    }
    for env in _ENVIRONMENTS:
        record[f"{env}PublishId"] = page.publish_ids.get(env)
        record[f"{env}State"] = page.publish_states.get(env)
    return record
