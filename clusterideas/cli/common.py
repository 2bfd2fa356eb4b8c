"""Helpers shared by command implementations."""

from datetime import datetime
from typing import List, NoReturn, Tuple
from uuid import UUID

import pendulum
import typer
from rich.console import Console

from ..config import Config
from ..db import ClusterRepository, ObjectStore, PostgresStore
from ..errors import NotFoundError
from ..models import Cluster, Item

console = Console()


def open_store(config: Config) -> ObjectStore:
    """Open the Postgres store and load every cluster."""
    store = PostgresStore(config.get_db_config())
    store.load()
    return store


def fail(message: str) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]❌ {message}[/red]")
    raise typer.Exit(1)


def relative_time(moment: datetime) -> str:
    """Human readable distance from now, e.g. '3 days ago'."""
    return pendulum.instance(moment).diff_for_humans()


def parse_pair(text: str, separator: str = "=") -> Tuple[str, str]:
    """Split ``KEY<sep>VALUE`` at the first separator."""
    key, found, value = text.partition(separator)
    if not found or not key.strip():
        raise typer.BadParameter(f"Expected KEY{separator}VALUE, got '{text}'")
    return key.strip(), value


def resolve_item(repository: ClusterRepository, cluster: Cluster, item_id: str) -> Item:
    """Find an item by full id or unique id prefix."""
    try:
        return repository.get_item(cluster, UUID(item_id.strip()))
    except ValueError:
        pass

    prefix = item_id.strip().lower()
    matches: List[Item] = [i for i in repository.items(cluster) if str(i.id).startswith(prefix)]
    if len(matches) != 1 or not prefix:
        raise NotFoundError(f"Item not found in '{cluster.name}': {item_id}")
    return matches[0]


def short_id(item: Item) -> str:
    return str(item.id)[:8]
