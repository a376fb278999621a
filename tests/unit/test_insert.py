"""Tests for the insert (drop) protocol."""

import asyncio

import pytest

from page_builder.core.clipboard import Clipboard
from page_builder.core.insert import DropEvent, insert_drop
from page_builder.core.schema.registry import RegistrySchemaResolver
from page_builder.core.tree.element_tree import ElementTree
from page_builder.editor import Editor
from page_builder.errors import ResolutionFailed, ValidationRejected
from page_builder.models.element import DragItem, Element, SchemaPayload, Selection
from tests.unit.fakes import FakeResolver
from tests.unit.samples import COMPONENTS, ids_of


async def _settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


def test_drop_on_canvas_appends_root(editor: Editor) -> None:
    element = asyncio.run(editor.drop(DragItem(type="Card", name="Panel")))

    assert element is not None
    assert editor.tree.roots[-1] is element
    assert element.parent_id is None
    assert element.name == "Panel"
    assert element.config == {"props": {"title": "Card"}}
    assert len(editor.tree) == 7
    editor.tree.check_consistency()


def test_drop_keeps_supplied_id(editor: Editor) -> None:
    element = asyncio.run(editor.drop(DragItem(type="Card", name="Card", id="Card_new")))
    assert element is not None
    assert element.id == "Card_new"
    assert editor.tree.get("Card_new") is element


def test_drop_replaces_supplied_id_already_in_use(editor: Editor) -> None:
    element = asyncio.run(editor.drop(DragItem(type="Card", name="Card", id="Button_1")))
    assert element is not None
    assert element.id != "Button_1"
    assert element.id.startswith("Card_")
    editor.tree.check_consistency()


def test_drop_materializes_default_children(editor: Editor) -> None:
    form = asyncio.run(editor.drop(DragItem(type="Form", name="Signup", id="Form_new")))

    assert form is not None
    assert [c.type for c in form.elements] == ["Input"]
    child = form.elements[0]
    assert child.parent_id == "Form_new"
    assert child.id.startswith("Input_")
    assert editor.tree.get(child.id) is child
    editor.tree.check_consistency()


def test_nested_default_children_keep_declared_order(editor: Editor) -> None:
    modal = asyncio.run(editor.drop(DragItem(type="Modal", name="Dialog")))

    assert modal is not None
    assert [(c.type, c.name) for c in modal.elements] == [("Text", "Content"), ("Footer", "Footer")]
    footer = modal.elements[1]
    assert [c.name for c in footer.elements] == ["Cancel", "OK"]
    assert all(c.parent_id == footer.id for c in footer.elements)
    assert len(editor.tree) == 6 + 5
    editor.tree.check_consistency()


def test_child_resolutions_run_concurrently(editor: Editor, resolver: FakeResolver) -> None:
    async def scenario() -> Element | None:
        text_gate = resolver.gate("Text")
        footer_gate = resolver.gate("Footer")
        task = asyncio.create_task(editor.drop(DragItem(type="Modal", name="Dialog")))
        await _settle()
        # Both children were requested before either finished.
        assert resolver.calls == ["Modal", "Text", "Footer"]
        assert len(editor.tree) == 6
        footer_gate.set()
        text_gate.set()
        return await task

    modal = asyncio.run(scenario())
    assert modal is not None
    assert [c.type for c in modal.elements] == ["Text", "Footer"]


def test_child_failure_aborts_whole_insert(editor: Editor, resolver: FakeResolver) -> None:
    """A failing child resolution leaves no new element in the tree."""
    before = ids_of(editor.tree)
    resolver.gate("Text")  # never released
    resolver.failures.add("Footer")

    result = asyncio.run(editor.drop(DragItem(type="Modal", name="Dialog")))

    assert result is None
    assert ids_of(editor.tree) == before
    assert resolver.cancelled == ["Text"]
    assert editor.advisories[-1].level == "error"
    assert "Footer" in editor.advisories[-1].message
    editor.tree.check_consistency()


def test_root_schema_failure_aborts(editor: Editor, resolver: FakeResolver) -> None:
    resolver.failures.add("Card")
    assert asyncio.run(editor.drop(DragItem(type="Card", name="Card"))) is None
    assert len(editor.tree) == 6
    assert editor.advisories[-1].level == "error"


def test_form_field_at_root_is_rejected(editor: Editor) -> None:
    result = asyncio.run(editor.drop(DragItem(type="Input", name="Input")))

    assert result is None
    assert len(editor.tree) == 6
    assert editor.advisories[-1].level == "info"
    assert "Form" in editor.advisories[-1].message


def test_form_field_dropped_into_selected_form(editor: Editor) -> None:
    editor.select("Form_1")
    element = asyncio.run(editor.drop(DragItem(type="Select", name="Kind"), editor.surface("Form_1")))

    assert element is not None
    assert element.parent_id == "Form_1"
    assert [e.type for e in editor.tree.get("Form_1").elements] == ["Input", "Select", "Select"]  # type: ignore[union-attr]


def test_placement_checks_the_selection(editor: Editor) -> None:
    """The current selection, not the drop container, is the validation context."""
    editor.select("Text_1")
    result = asyncio.run(editor.drop(DragItem(type="Input", name="Input"), editor.surface("Form_1")))
    assert result is None
    assert editor.advisories[-1].level == "info"


def test_overlapping_drops_commit_in_completion_order(editor: Editor, resolver: FakeResolver) -> None:
    async def scenario() -> tuple[Element | None, Element | None]:
        card_gate = resolver.gate("Card")
        slow = asyncio.create_task(editor.drop(DragItem(type="Card", name="Slow")))
        fast = asyncio.create_task(editor.drop(DragItem(type="Text", name="Fast")))
        fast_result = await fast
        assert len(editor.tree) == 7
        card_gate.set()
        return await slow, fast_result

    slow, fast = asyncio.run(scenario())
    assert slow is not None and fast is not None
    assert [r.name for r in editor.tree.roots] == ["Card", "Save", "Fast", "Slow"]
    assert len(set(ids_of(editor.tree))) == len(editor.tree) == 8
    editor.tree.check_consistency()


def test_container_removed_while_resolving(editor: Editor, resolver: FakeResolver) -> None:
    async def scenario() -> Element | None:
        gate = resolver.gate("Text")
        task = asyncio.create_task(editor.drop(DragItem(type="Text", name="T"), editor.surface("Card_1")))
        await _settle()
        editor.remove("Card_1")
        gate.set()
        return await task

    assert asyncio.run(scenario()) is None
    assert ids_of(editor.tree) == ["Button_1"]
    assert editor.advisories[-1].level == "warning"


def test_unload_while_resolving_discards_drop(editor: Editor, resolver: FakeResolver) -> None:
    async def scenario() -> Element | None:
        gate = resolver.gate("Card")
        task = asyncio.create_task(editor.drop(DragItem(type="Card", name="Card")))
        await _settle()
        editor.unload()
        gate.set()
        return await task

    assert asyncio.run(scenario()) is None
    assert len(editor.tree) == 0


def test_nested_surface_owns_the_drop(editor: Editor, resolver: FakeResolver) -> None:
    item = DragItem(type="Text", name="Inner")
    element = asyncio.run(editor.drop(item, editor.surface("Card_1"), editor.canvas))

    assert element is not None
    assert element.parent_id == "Card_1"
    assert len(editor.tree.roots) == 2
    assert resolver.calls == ["Text"]


def test_late_nested_claim_cancels_outer_surface(editor: Editor, resolver: FakeResolver) -> None:
    """The canvas starts first; the nested surface still wins and only one element is added."""
    item = DragItem(type="Text", name="Inner")
    element = asyncio.run(editor.drop(item, editor.canvas, editor.surface("Card_1")))

    assert element is not None
    assert element.parent_id == "Card_1"
    assert len(editor.tree) == 7
    assert resolver.calls == ["Text"]


def test_drop_event_claims() -> None:
    class Surface:
        def __init__(self, depth: int) -> None:
            self.depth = depth

    event = DropEvent(DragItem(type="Text", name="t"))
    outer, inner = Surface(0), Surface(1)

    assert not event.did_drop()
    assert event.claim(inner)
    assert event.did_drop()
    assert not event.claim(outer)
    assert not event.claim(Surface(1))
    assert event.owner is inner


def test_self_nesting_schema_stops_at_max_depth(resolver: FakeResolver, clipboard: Clipboard) -> None:
    editor = Editor(resolver, clipboard, max_depth=2)
    element = asyncio.run(editor.drop(DragItem(type="Nest", name="Nest")))

    assert element is not None
    assert len(list(element.walk())) == 3


def test_insert_drop_function(sample_tree: ElementTree) -> None:
    resolver = RegistrySchemaResolver(COMPONENTS)
    element = asyncio.run(
        insert_drop(
            sample_tree,
            resolver,
            DragItem(type="Input", name="Email"),
            parent_id="Form_1",
            selection=Selection("Form_1", "Form"),
        )
    )
    assert element is not None
    assert sample_tree.get("Form_1").elements[-1] is element  # type: ignore[union-attr]


def test_insert_drop_raises_for_protocol_errors(sample_tree: ElementTree) -> None:
    resolver = RegistrySchemaResolver(COMPONENTS)
    with pytest.raises(ValidationRejected):
        asyncio.run(insert_drop(sample_tree, resolver, DragItem(type="Input", name="x")))
    with pytest.raises(ResolutionFailed):
        asyncio.run(insert_drop(sample_tree, resolver, DragItem(type="Nope", name="x")))
    assert len(sample_tree) == 6


class _StaticResolver:
    """Resolves every type to the same payload."""

    def __init__(self, payload: SchemaPayload) -> None:
        self.payload = payload

    async def resolve(self, component_type: str) -> SchemaPayload:
        return self.payload


def test_missing_methods_payload_becomes_empty_list(clipboard: Clipboard) -> None:
    editor = Editor(_StaticResolver(SchemaPayload(config={}, methods=None)), clipboard)
    element = asyncio.run(editor.drop(DragItem(type="Text", name="t")))

    assert element is not None
    assert element.methods == []
    assert editor.advisories == []


def test_methods_payload_is_carried_unchanged(clipboard: Clipboard) -> None:
    methods = {"open": {"args": ["visible"]}, "close": {}}
    editor = Editor(_StaticResolver(SchemaPayload(config={}, methods=methods)), clipboard)
    element = asyncio.run(editor.drop(DragItem(type="Text", name="t")))

    assert element is not None
    assert element.methods == {"open": {"args": ["visible"]}, "close": {}}
    assert element.to_dict()["methods"] == methods


def test_default_child_methods_payload_is_carried_unchanged(clipboard: Clipboard) -> None:
    components = dict(COMPONENTS)
    components["Tabs"] = {"config": {}, "elements": [{"type": "Pane", "name": "Pane"}]}
    components["Pane"] = {"config": {}, "methods": {"activate": {}}}
    editor = Editor(RegistrySchemaResolver(components), clipboard)
    tabs = asyncio.run(editor.drop(DragItem(type="Tabs", name="Tabs")))

    assert tabs is not None
    assert tabs.methods == []
    assert tabs.elements[0].methods == {"activate": {}}
