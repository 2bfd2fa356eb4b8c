"""Shared fixtures."""

from typing import Callable, Dict

import pytest
from clusterideas.db import ClusterRepository, MemoryStore
from clusterideas.models import Cluster, Item


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def repository(store: MemoryStore) -> ClusterRepository:
    return ClusterRepository(store)


@pytest.fixture
def books(repository: ClusterRepository) -> Cluster:
    return repository.create_cluster("Books", ["Title", "Author"])


@pytest.fixture
def make_item(store: MemoryStore) -> Callable[[Cluster, Dict[str, str]], Item]:
    def _make(cluster: Cluster, values: Dict[str, str]) -> Item:
        item = Item(cluster_id=cluster.id)
        item.set_field_values(values)
        store.insert(item)
        store.save()
        return item

    return _make
