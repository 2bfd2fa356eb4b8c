"""Cluster management commands."""

from typing import List, Optional

import typer
from rich.table import Table

from ..config import Config
from ..db import ClusterRepository
from ..editing import SchemaDraft, SchemaEditor, item_preview
from ..errors import ArchivalConfirmationRequired, ClusterIdeasError, NotFoundError
from ..models import Cluster
from . import common
from .common import console, fail, relative_time, short_id

clusters_app = typer.Typer(help="Manage clusters and their fields")


def _open() -> ClusterRepository:
    config = Config()
    try:
        return ClusterRepository(common.open_store(config))
    except (ClusterIdeasError, ValueError) as e:
        fail(str(e))


def _find(repository: ClusterRepository, name: str) -> Cluster:
    try:
        return repository.find_cluster(name)
    except NotFoundError as e:
        fail(str(e))


@clusters_app.command("list")
def clusters_list() -> None:
    """List all clusters, newest first."""
    repository = _open()
    clusters = repository.list_clusters()

    if not clusters:
        console.print("[yellow]No clusters. Create your first cluster to get started.[/yellow]")
        return

    table = Table(title="Clusters")
    table.add_column("Name", style="cyan")
    table.add_column("Fields", style="magenta", justify="right")
    table.add_column("Items", style="green", justify="right")
    table.add_column("Created", style="dim")

    for cluster in clusters:
        summary = repository.summary(cluster)
        table.add_row(
            cluster.name,
            str(summary.field_count),
            str(summary.item_count),
            relative_time(cluster.created_at),
        )

    console.print(table)


@clusters_app.command("create")
def clusters_create(
    name: str = typer.Argument(..., help="Cluster name"),
    fields: Optional[List[str]] = typer.Option(
        None, "--field", "-f", help="Field name (repeat for each field, in order)"
    ),
) -> None:
    """Create a cluster with its fields."""
    repository = _open()
    try:
        cluster = repository.create_cluster(name, fields or [])
    except ClusterIdeasError as e:
        fail(str(e))

    console.print(
        f"[green]✅ Created cluster: {cluster.name} "
        f"({len(repository.field_definitions(cluster))} fields)[/green]"
    )


@clusters_app.command("show")
def clusters_show(
    name: str = typer.Argument(..., help="Cluster name or id"),
) -> None:
    """Show a cluster's fields and items."""
    repository = _open()
    cluster = _find(repository, name)
    fields = repository.field_definitions(cluster)
    items = repository.items(cluster)
    display = Config().config.display

    console.print(f"[bold]{cluster.name}[/bold]")
    console.print(f"[dim]Created {relative_time(cluster.created_at)}[/dim]")
    console.print(f"[dim]{len(fields)} fields • {len(items)} items[/dim]\n")

    for field in fields:
        console.print(f"[dim]{field.order + 1}.[/dim] {field.field_name}")

    if not items:
        console.print("\n[yellow]No items. Add your first item to this cluster.[/yellow]")
        return

    table = Table(title="Items")
    table.add_column("Id", style="cyan")
    table.add_column("Preview")
    table.add_column("Created", style="dim")

    for item in items:
        table.add_row(
            short_id(item),
            item_preview(
                item,
                fields,
                separator=display.preview_separator,
                placeholder=display.preview_placeholder,
                limit=display.preview_limit,
            ),
            relative_time(item.created_at),
        )

    console.print(table)


@clusters_app.command("delete")
def clusters_delete(
    name: str = typer.Argument(..., help="Cluster name or id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete a cluster with all its fields and items."""
    repository = _open()
    cluster = _find(repository, name)

    if not yes:
        item_count = repository.summary(cluster).item_count
        if item_count:
            prompt = f"This will delete {item_count} item(s). This action cannot be undone. Delete?"
        else:
            prompt = "This action cannot be undone. Delete?"
        if not typer.confirm(f"Delete cluster '{cluster.name}'? {prompt}"):
            raise typer.Abort()

    try:
        repository.delete_cluster(cluster)
    except ClusterIdeasError as e:
        fail(str(e))

    console.print(f"[green]✅ Deleted cluster: {cluster.name}[/green]")


def _field_by_name(draft: SchemaDraft, name: str):
    for field in draft.fields:
        if field.trimmed_name == name.strip():
            return field
    raise NotFoundError(f"Field not found in '{draft.cluster.name}': {name}")


def _apply_edits(
    draft: SchemaDraft,
    new_name: Optional[str],
    renames: List[str],
    removals: List[str],
    additions: List[str],
    moves: List[str],
    force: bool,
) -> None:
    if new_name is not None:
        draft.name = new_name

    for rename in renames:
        old, new = common.parse_pair(rename)
        draft.rename_field(_field_by_name(draft, old).id, new)

    for removal in removals:
        field = _field_by_name(draft, removal)
        try:
            draft.remove_field(field.id, confirmed=force)
        except ArchivalConfirmationRequired as e:
            if not typer.confirm(f"{e} Delete field '{field.trimmed_name}'?"):
                raise typer.Abort()
            draft.remove_field(field.id, confirmed=True)

    for addition in additions:
        draft.add_field(addition)

    for move in moves:
        source, destination = common.parse_pair(move, separator=":")
        try:
            draft.move_field(int(source) - 1, int(destination) - 1)
        except ValueError:
            raise typer.BadParameter(f"Positions must be numbers, got '{move}'")


@clusters_app.command("edit")
def clusters_edit(
    name: str = typer.Argument(..., help="Cluster name or id"),
    new_name: Optional[str] = typer.Option(None, "--name", "-n", help="New cluster name"),
    renames: Optional[List[str]] = typer.Option(
        None, "--rename", "-r", help="Rename a field: OLD=NEW"
    ),
    removals: Optional[List[str]] = typer.Option(
        None, "--remove", help="Remove a field by name"
    ),
    additions: Optional[List[str]] = typer.Option(
        None, "--add", "-a", help="Append a new field"
    ),
    moves: Optional[List[str]] = typer.Option(
        None, "--move", "-m", help="Move a field: FROM:TO (1-based positions)"
    ),
    force: bool = typer.Option(
        False, "--force", help="Remove fields that hold item data without asking"
    ),
) -> None:
    """Edit a cluster's name and fields; all changes are saved together."""
    repository = _open()
    cluster = _find(repository, name)
    draft = SchemaEditor(repository.store).start(cluster)

    try:
        _apply_edits(
            draft,
            new_name,
            renames or [],
            removals or [],
            additions or [],
            moves or [],
            force,
        )
        draft.commit()
    except (ClusterIdeasError, IndexError) as e:
        if not draft.closed:
            draft.cancel()
        fail(str(e))

    fields = ", ".join(f.field_name for f in repository.field_definitions(cluster))
    console.print(f"[green]✅ Updated cluster: {cluster.name} ({fields})[/green]")
