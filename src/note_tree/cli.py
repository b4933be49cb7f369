"""CLI for inspecting and editing a note tree from the terminal."""

import sqlite3
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from note_tree.config import DATABASE_FILENAME, ROOT_ID, resolve_data_directory
from note_tree.core.keyboard.commands import Key, KeyboardCommandProcessor
from note_tree.core.ordering.engine import (
    AfterSibling,
    BeforeSibling,
    FirstChild,
    LastChild,
    PositionHint,
    move_node,
    needs_rebalance,
    rebalance,
)
from note_tree.core.storage.blob_store import SqliteBlobStore
from note_tree.core.storage.repository import NodeRepository
from note_tree.core.tree.navigation import (
    children_of,
    find_orphans,
    get_breadcrumbs,
    has_children,
    visible_sequence,
)
from note_tree.core.tree.operations import add_child, set_content, toggle_expanded
from note_tree.logging_config import configure_logging
from note_tree.models.node import NodeType

app = typer.Typer(help="Note tree: build and edit an outline of notes.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Directory holding the notes database"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _open_repo(data_dir: Path | None) -> tuple[sqlite3.Connection, NodeRepository]:
    """Open the notes database, creating it if needed, and load the tree."""
    dst = data_dir or resolve_data_directory()
    dst.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(dst / DATABASE_FILENAME))
    repo = NodeRepository(SqliteBlobStore(conn))
    try:
        repo.load()
    except ValueError as e:
        conn.close()
        logger.error("Stored notes are unreadable: {}", e)
        raise typer.Exit(1) from e
    return conn, repo


def _require_node(repo: NodeRepository, node_id: str) -> None:
    if node_id != ROOT_ID and node_id not in repo:
        typer.echo(f"Node '{node_id}' not found.")
        raise typer.Exit(1)


@app.command()
def show(data_dir: DataDirOption = None) -> None:
    """Print the visible tree, one node per line."""
    conn, repo = _open_repo(data_dir)
    try:
        nodes = repo.all()
        visible = visible_sequence(nodes)
        if not visible:
            typer.echo("(empty)")
        for node_id in visible:
            node = repo.get(node_id)
            if node is None:
                continue
            indent = "    " * len(get_breadcrumbs(nodes, node_id))
            marker = "- "
            if node.metadata.type is NodeType.TODO:
                marker = "- [x] " if node.state.is_completed else "- [ ] "
            folded = " [+]" if not node.state.is_expanded and has_children(nodes, node_id) else ""
            typer.echo(f"{indent}{marker}{node.content or ''}{folded}  id={node_id}")
    finally:
        conn.close()


@app.command()
def add(
    content: str = typer.Argument(..., help="Text of the new node"),
    parent: str = typer.Option(ROOT_ID, "--parent", "-p", help="Parent node id"),
    todo: bool = typer.Option(False, "--todo", help="Create a todo node"),
    data_dir: DataDirOption = None,
) -> None:
    """Append a node as the last child of a parent."""
    conn, repo = _open_repo(data_dir)
    try:
        _require_node(repo, parent)
        node_type = NodeType.TODO if todo else NodeType.TEXT
        node = add_child(repo, parent, content=content, node_type=node_type)
        if node is None:
            typer.echo(f"Node '{parent}' not found.")
            raise typer.Exit(1)
        typer.echo(node.id)
    finally:
        conn.close()


@app.command()
def edit(
    node_id: str = typer.Argument(..., help="Node to edit"),
    content: str = typer.Argument(..., help="New text"),
    data_dir: DataDirOption = None,
) -> None:
    """Replace a node's text."""
    conn, repo = _open_repo(data_dir)
    try:
        _require_node(repo, node_id)
        set_content(repo, node_id, content)
    finally:
        conn.close()


@app.command()
def toggle(
    node_id: str = typer.Argument(..., help="Node to expand or collapse"),
    data_dir: DataDirOption = None,
) -> None:
    """Expand or collapse a node."""
    conn, repo = _open_repo(data_dir)
    try:
        _require_node(repo, node_id)
        toggle_expanded(repo, node_id)
    finally:
        conn.close()


@app.command()
def key(
    name: Key = typer.Argument(..., help="Key to press"),
    focus: str = typer.Option(ROOT_ID, "--focus", "-f", help="Focused node id"),
    shift: bool = typer.Option(False, "--shift", help="Hold shift"),
    data_dir: DataDirOption = None,
) -> None:
    """Press a key on a focused node and print the resulting focus."""
    conn, repo = _open_repo(data_dir)
    try:
        result = KeyboardCommandProcessor(repo).handle(name, focus, shift=shift)
        if not result.handled:
            typer.echo("not handled")
        typer.echo(result.focus or ROOT_ID)
    finally:
        conn.close()


@app.command()
def move(
    node_id: str = typer.Argument(..., help="Node to move"),
    parent: str = typer.Argument(..., help="New parent id"),
    before: Annotated[
        int | None,
        typer.Option("--before", help="Place before the sibling at this index"),
    ] = None,
    after: Annotated[
        int | None,
        typer.Option("--after", help="Place after the sibling at this index"),
    ] = None,
    first: bool = typer.Option(False, "--first", help="Place as first child"),
    data_dir: DataDirOption = None,
) -> None:
    """Move a node under a new parent (last child unless told otherwise)."""
    hint: PositionHint = LastChild()
    if before is not None:
        hint = BeforeSibling(before)
    elif after is not None:
        hint = AfterSibling(after)
    elif first:
        hint = FirstChild()

    conn, repo = _open_repo(data_dir)
    try:
        if move_node(repo, node_id, parent, hint) is None:
            typer.echo("Move rejected.")
            raise typer.Exit(1)
    finally:
        conn.close()


@app.command(name="rebalance")
def rebalance_cmd(
    parent: str = typer.Argument(ROOT_ID, help="Parent whose children are respaced"),
    force: bool = typer.Option(False, "--force", "-f", help="Respace even if gaps are fine"),
    data_dir: DataDirOption = None,
) -> None:
    """Respace sibling priorities under a parent."""
    conn, repo = _open_repo(data_dir)
    try:
        _require_node(repo, parent)
        if not force and not needs_rebalance(children_of(repo.all(), parent)):
            typer.echo("Priorities are fine, nothing to do.")
            return
        changed = rebalance(repo, parent)
        typer.echo(f"Rebalanced {changed} nodes")
    finally:
        conn.close()


@app.command()
def orphans(data_dir: DataDirOption = None) -> None:
    """List nodes whose parent no longer exists."""
    conn, repo = _open_repo(data_dir)
    try:
        found = find_orphans(repo.all())
        typer.echo(f"{len(found)} orphaned nodes")
        for node in found:
            typer.echo(f"  {node.content or ''}  id={node.id}  parent={node.parent_id}")
    finally:
        conn.close()


@app.command()
def delete(
    node_id: str = typer.Argument(..., help="Node to delete"),
    data_dir: DataDirOption = None,
) -> None:
    """Delete a single node. Its children stay behind as orphans."""
    conn, repo = _open_repo(data_dir)
    try:
        if node_id not in repo:
            typer.echo(f"Node '{node_id}' not found.")
            raise typer.Exit(1)
        orphaned = len(children_of(repo.all(), node_id))
        repo.delete(node_id)
        if orphaned:
            logger.warning("{} child node(s) of {} are now orphaned", orphaned, node_id)
    finally:
        conn.close()
