"""Item commands."""

from typing import List, Optional

import typer
from rich.table import Table

from ..config import Config
from ..db import ClusterRepository
from ..editing import ItemEditor, ItemForm, active_field_values, archived_field_values
from ..errors import ClusterIdeasError
from . import common
from .common import console, fail, relative_time, short_id

items_app = typer.Typer(help="Manage the items of a cluster")


def _open() -> ClusterRepository:
    try:
        return ClusterRepository(common.open_store(Config()))
    except (ClusterIdeasError, ValueError) as e:
        fail(str(e))


def _fill(form: ItemForm, values: List[str]) -> None:
    """Apply FIELD=VALUE pairs; only current fields can be set."""
    for pair in values:
        field_name, value = common.parse_pair(pair)
        if field_name not in form.active_fields:
            raise typer.BadParameter(
                f"Unknown field '{field_name}'. Fields: {', '.join(form.active_fields)}"
            )
        form.set_value(field_name, value)


@items_app.command("add")
def items_add(
    cluster_name: str = typer.Argument(..., help="Cluster name or id"),
    values: Optional[List[str]] = typer.Option(
        None, "--value", "-v", help="Field value: FIELD=VALUE"
    ),
) -> None:
    """Add an item to a cluster."""
    repository = _open()
    try:
        cluster = repository.find_cluster(cluster_name)
        form = ItemEditor(repository.store).open_new(cluster)
        _fill(form, values or [])
        item = form.save()
    except ClusterIdeasError as e:
        fail(str(e))

    console.print(f"[green]✅ Added item {short_id(item)} to {cluster.name}[/green]")


@items_app.command("edit")
def items_edit(
    cluster_name: str = typer.Argument(..., help="Cluster name or id"),
    item_id: str = typer.Argument(..., help="Item id or id prefix"),
    values: Optional[List[str]] = typer.Option(
        None, "--value", "-v", help="Field value: FIELD=VALUE"
    ),
) -> None:
    """Change values of an existing item."""
    repository = _open()
    try:
        cluster = repository.find_cluster(cluster_name)
        item = common.resolve_item(repository, cluster, item_id)
        form = ItemEditor(repository.store).open_existing(item)
        _fill(form, values or [])
        form.save()
    except ClusterIdeasError as e:
        fail(str(e))

    console.print(f"[green]✅ Updated item {short_id(item)}[/green]")


@items_app.command("show")
def items_show(
    cluster_name: str = typer.Argument(..., help="Cluster name or id"),
    item_id: str = typer.Argument(..., help="Item id or id prefix"),
) -> None:
    """Show an item's values, including archived fields."""
    repository = _open()
    try:
        cluster = repository.find_cluster(cluster_name)
        item = common.resolve_item(repository, cluster, item_id)
    except ClusterIdeasError as e:
        fail(str(e))

    fields = repository.field_definitions(cluster)
    console.print(f"[dim]Item {item.id} created {relative_time(item.created_at)}[/dim]")

    table = Table(title="Field Values")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    for field_name, value in active_field_values(item, fields):
        table.add_row(field_name, value or "—")
    console.print(table)

    archived = archived_field_values(item, fields)
    if archived:
        table = Table(
            title="Archived Fields",
            caption="These fields are no longer defined in the cluster but contain saved data",
        )
        table.add_column("Field", style="dim")
        table.add_column("Value")
        for field_name, value in archived:
            table.add_row(field_name, value or "—")
        console.print(table)


@items_app.command("delete")
def items_delete(
    cluster_name: str = typer.Argument(..., help="Cluster name or id"),
    item_id: str = typer.Argument(..., help="Item id or id prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Delete an item."""
    repository = _open()
    try:
        cluster = repository.find_cluster(cluster_name)
        item = common.resolve_item(repository, cluster, item_id)
    except ClusterIdeasError as e:
        fail(str(e))

    if not yes and not typer.confirm("Delete item? This action cannot be undone."):
        raise typer.Abort()

    try:
        repository.delete_item(item)
    except ClusterIdeasError as e:
        fail(str(e))

    console.print(f"[green]✅ Deleted item {short_id(item)}[/green]")
