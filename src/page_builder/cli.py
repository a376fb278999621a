"""CLI for page-builder (inspect and edit stored page element trees)."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from page_builder.config import resolve_data_directory
from page_builder.core.clipboard import Clipboard
from page_builder.core.schema.builtin import BUILTIN_COMPONENTS
from page_builder.core.schema.registry import RegistrySchemaResolver
from page_builder.core.tree.outline import render_outline
from page_builder.editor import DropSurface, Editor
from page_builder.errors import PageApiError
from page_builder.logging_config import configure_logging
from page_builder.models.element import Advisory, DragItem
from page_builder.protocols import PageApiProtocol
from page_builder.store import PageStore

app = typer.Typer(help="Page builder: inspect and edit page element trees.")

_DEFAULT_DATA_DIR = resolve_data_directory()

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Directory with page records"),
]
RegistryOption = Annotated[
    Path | None,
    typer.Option("--registry", "-r", help="JSON component registry (default: built-in)"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_store(data_dir: Path | None) -> PageStore:
    dst = data_dir or _DEFAULT_DATA_DIR
    if not dst.is_dir():
        logger.error("Data directory not found: {}", dst)
        raise typer.Exit(1)
    return PageStore(dst)


def _echo_advisory(advisory: Advisory) -> None:
    typer.echo(f"[{advisory.level}] {advisory.message}", err=True)


def _open_editor(store: PageStore, page_id: str, registry: Path | None = None) -> Editor:
    """Load a stored page into a fresh editor, exiting if the page is missing."""
    record = store.read(page_id)
    if record is None:
        typer.echo(f"Page '{page_id}' not found.")
        raise typer.Exit(1)
    if registry is not None:
        resolver = RegistrySchemaResolver.from_file(registry)
    else:
        resolver = RegistrySchemaResolver(BUILTIN_COMPONENTS)
    editor = Editor(resolver, Clipboard(), on_advisory=_echo_advisory)
    editor.load(record)
    return editor


def _select_or_exit(editor: Editor, element_id: str) -> None:
    if not editor.select(element_id):
        typer.echo(f"Element '{element_id}' not found.")
        raise typer.Exit(1)


@app.command()
def pages(data_dir: DataDirOption = None) -> None:
    """List stored pages."""
    store = _open_store(data_dir)
    ids = store.list_pages()
    typer.echo(f"{len(ids)} pages:\n")
    for page_id in ids:
        record = store.read(page_id) or {}
        typer.echo(f"  {record.get('name') or '(unnamed)'}  [id={page_id}]")


@app.command()
def outline(
    page_id: str = typer.Argument(..., help="Page ID"),
    node: Annotated[
        str | None,
        typer.Option("--node", "-n", help="Only render the subtree of this element"),
    ] = None,
    max_depth: Annotated[
        int | None,
        typer.Option("--max-depth", "-m", help="Max depth levels to render"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Print the element tree of a page."""
    editor = _open_editor(_open_store(data_dir), page_id)
    text = render_outline(editor.tree, node_id=node, max_depth=max_depth)
    if text:
        typer.echo(text, nl=False)
    elif node:
        typer.echo(f"Element '{node}' not found.")
    else:
        typer.echo("(empty page)")


@app.command()
def check(
    page_id: str = typer.Argument(..., help="Page ID"),
    data_dir: DataDirOption = None,
) -> None:
    """Verify that a page's element data parses into a consistent tree."""
    editor = _open_editor(_open_store(data_dir), page_id)
    if editor.page is not None and editor.page.malformed:
        raise typer.Exit(1)
    editor.tree.check_consistency()
    typer.echo(f"OK: {len(editor.tree)} elements, {len(editor.tree.roots)} at the page root")


@app.command()
def components(registry: RegistryOption = None) -> None:
    """List component types known to the registry."""
    if registry is not None:
        resolver = RegistrySchemaResolver.from_file(registry)
    else:
        resolver = RegistrySchemaResolver(BUILTIN_COMPONENTS)
    for component_type in resolver.types:
        typer.echo(component_type)


@app.command()
def insert(
    page_id: str = typer.Argument(..., help="Page ID"),
    component_type: str = typer.Argument(..., help="Component type to add"),
    name: Annotated[str | None, typer.Option("--name", help="Display name")] = None,
    into: Annotated[
        str | None,
        typer.Option("--into", "-i", help="Container element (default: page root)"),
    ] = None,
    registry: RegistryOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Add a component (with its default children) to a page."""
    store = _open_store(data_dir)
    editor = _open_editor(store, page_id, registry)

    surfaces: tuple[DropSurface, ...] = ()
    if into is not None:
        _select_or_exit(editor, into)
        surfaces = (editor.surface(into),)

    item = DragItem(type=component_type, name=name or component_type)
    element = asyncio.run(editor.drop(item, *surfaces))
    if element is None:
        raise typer.Exit(1)

    store.write(editor.record())
    typer.echo(f"Added {element.id} ({sum(1 for _ in element.walk())} elements)")


@app.command()
def clone(
    page_id: str = typer.Argument(..., help="Page ID"),
    element_id: str = typer.Argument(..., help="Element to copy"),
    into: Annotated[
        str | None,
        typer.Option("--into", "-i", help="Paste inside this element (default: beside the original)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Copy an element with its subtree and paste it."""
    store = _open_store(data_dir)
    editor = _open_editor(store, page_id)

    _select_or_exit(editor, element_id)
    editor.copy()
    if into is not None:
        _select_or_exit(editor, into)

    element = editor.paste()
    if element is None:
        raise typer.Exit(1)

    store.write(editor.record())
    typer.echo(f"Pasted {element.id} ({sum(1 for _ in element.walk())} elements)")


@app.command()
def delete(
    page_id: str = typer.Argument(..., help="Page ID"),
    element_id: str = typer.Argument(..., help="Element to delete"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete an element and everything inside it."""
    store = _open_store(data_dir)
    editor = _open_editor(store, page_id)

    removed = editor.remove(element_id)
    if not removed:
        typer.echo(f"Element '{element_id}' not found, nothing deleted.")
        return

    store.write(editor.record())
    typer.echo(f"Deleted {len(removed)} elements")


@app.command()
def fetch(
    page_id: int = typer.Argument(..., help="Page ID"),
    cache: bool = typer.Option(False, "--cache", "-C", help="Use cached API responses"),
    data_dir: DataDirOption = None,
) -> None:
    """Download a page record from the page API into the data directory."""
    from page_builder.api import PageApi

    store = _open_store(data_dir)
    try:
        api: PageApiProtocol = PageApi(from_cache=cache)
        record = api.get_page_detail(page_id)
    except (PageApiError, RuntimeError) as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e

    if not record:
        typer.echo(f"Page '{page_id}' not found on the server.")
        raise typer.Exit(1)
    changed = store.write(record)
    typer.echo(f"Fetched page {page_id}" + ("" if changed else " (unchanged)"))


@app.command()
def push(
    page_id: int = typer.Argument(..., help="Page ID"),
    data_dir: DataDirOption = None,
) -> None:
    """Upload a stored page's element data to the page API."""
    from page_builder.api import PageApi

    store = _open_store(data_dir)
    editor = _open_editor(store, str(page_id))
    if editor.page is not None and editor.page.malformed:
        typer.echo("Refusing to push a page whose stored data is malformed.")
        raise typer.Exit(1)

    page, page_data = editor.snapshot()
    try:
        api: PageApiProtocol = PageApi()
        api.save_page(page_id, page_data, name=page.name, remark=page.remark)
    except (PageApiError, RuntimeError) as e:
        logger.error("{}", e)
        raise typer.Exit(1) from e
    typer.echo(f"Pushed page {page_id} ({len(editor.tree)} elements)")
