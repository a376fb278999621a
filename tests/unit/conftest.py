"""Shared test fixtures."""

import copy
import json
from pathlib import Path

import pytest

from page_builder.core.clipboard import Clipboard
from page_builder.core.tree.element_tree import ElementTree
from page_builder.editor import Editor
from tests.unit.fakes import FakeResolver
from tests.unit.samples import COMPONENTS, SAMPLE_RECORD, sample_elements


@pytest.fixture
def sample_tree() -> ElementTree:
    """Return a tree built from SAMPLE_ELEMENTS."""
    return ElementTree.from_elements(sample_elements())


@pytest.fixture
def resolver() -> FakeResolver:
    return FakeResolver(COMPONENTS)


@pytest.fixture
def clipboard() -> Clipboard:
    return Clipboard()


@pytest.fixture
def editor(resolver: FakeResolver, clipboard: Clipboard) -> Editor:
    """Return an editor with SAMPLE_RECORD loaded."""
    ed = Editor(resolver, clipboard)
    ed.load(copy.deepcopy(SAMPLE_RECORD))
    return ed


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Return a page store directory holding SAMPLE_RECORD as page 7."""
    data = tmp_path / "pages"
    data.mkdir()
    (data / "page-7.json").write_text(json.dumps(SAMPLE_RECORD))
    return data
