"""Cluster management in the object store."""

import logging
from typing import List, Sequence
from uuid import UUID

from ..errors import NotFoundError, StorageError, ValidationError
from ..models import Cluster, ClusterSummary, FieldDefinition, Item
from .store import ObjectStore

logger = logging.getLogger(__name__)


class ClusterRepository:
    """Create, list, and delete clusters along with their owned rows."""

    def __init__(self, store: ObjectStore) -> None:
        """Initialize repository over a store."""
        self.store = store

    def _save(self) -> None:
        try:
            self.store.save()
        except StorageError:
            self.store.rollback()
            raise

    def create_cluster(self, name: str, field_names: Sequence[str]) -> Cluster:
        """
        Create a cluster with its initial field definitions.

        Field names are trimmed and empty ones dropped; the survivors are
        numbered in the order given.

        Raises:
            ValidationError: Name is blank or no field name survives.
            StorageError: The save failed; nothing was persisted.
        """
        trimmed_name = name.strip()
        trimmed_fields = [f.strip() for f in field_names if f.strip()]

        errors = []
        if not trimmed_name:
            errors.append("Cluster name is required")
        if not trimmed_fields:
            errors.append("At least one field is required")
        if errors:
            raise ValidationError(errors)

        cluster = Cluster(name=trimmed_name)
        self.store.insert(cluster)
        for index, field_name in enumerate(trimmed_fields):
            self.store.insert(
                FieldDefinition(cluster_id=cluster.id, field_name=field_name, order=index)
            )

        self._save()
        logger.info("Created cluster '%s' with %d field(s)", cluster.name, len(trimmed_fields))
        return cluster

    def delete_cluster(self, cluster: Cluster) -> None:
        """Delete a cluster, its field definitions, and its items."""
        self.store.delete(cluster)
        self._save()
        logger.info("Deleted cluster '%s'", cluster.name)

    def delete_item(self, item: Item) -> None:
        """Delete a single item."""
        self.store.delete(item)
        self._save()
        logger.info("Deleted item %s", item.id)

    def list_clusters(self) -> List[Cluster]:
        """Get all clusters, newest first."""
        return self.store.sorted_by(Cluster, key=lambda c: c.created_at, descending=True)

    def get_cluster(self, cluster_id: UUID) -> Cluster:
        """Get cluster by id."""
        cluster = self.store.get(Cluster, cluster_id)
        if cluster is None:
            raise NotFoundError(f"Cluster not found: {cluster_id}")
        return cluster

    def find_cluster(self, name_or_id: str) -> Cluster:
        """Find a cluster by id or, failing that, by case-insensitive name."""
        try:
            return self.get_cluster(UUID(name_or_id.strip()))
        except (ValueError, NotFoundError):
            pass

        wanted = name_or_id.strip().casefold()
        for cluster in self.list_clusters():
            if cluster.name.casefold() == wanted:
                return cluster
        raise NotFoundError(f"Cluster not found: {name_or_id}")

    def get_item(self, cluster: Cluster, item_id: UUID) -> Item:
        """Get an item of a cluster by id."""
        item = self.store.get(Item, item_id)
        if item is None or item.cluster_id != cluster.id:
            raise NotFoundError(f"Item not found in '{cluster.name}': {item_id}")
        return item

    def field_definitions(self, cluster: Cluster) -> List[FieldDefinition]:
        """Get a cluster's field definitions in display order."""
        return sorted(
            self.store.children(FieldDefinition, "cluster_id", cluster.id),
            key=lambda f: f.order,
        )

    def items(self, cluster: Cluster) -> List[Item]:
        """Get a cluster's items, newest first."""
        return sorted(
            self.store.children(Item, "cluster_id", cluster.id),
            key=lambda i: i.created_at,
            reverse=True,
        )

    def summary(self, cluster: Cluster) -> ClusterSummary:
        """Get field and item counts for a cluster."""
        return ClusterSummary(
            cluster=cluster,
            field_count=len(self.store.children(FieldDefinition, "cluster_id", cluster.id)),
            item_count=len(self.store.children(Item, "cluster_id", cluster.id)),
        )
