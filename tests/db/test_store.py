"""Object store arena and unit-of-work tests."""

from datetime import datetime, timezone

import pytest
from clusterideas.db import MemoryStore
from clusterideas.errors import StorageError
from clusterideas.models import Cluster, FieldDefinition, Item


def _populate(store: MemoryStore) -> Cluster:
    cluster = Cluster(name="Books")
    store.insert(cluster)
    for index, name in enumerate(["Title", "Author"]):
        store.insert(FieldDefinition(cluster_id=cluster.id, field_name=name, order=index))
    for title in ["Dune", "Emma", "Ubik"]:
        item = Item(cluster_id=cluster.id)
        item.set_field_values({"Title": title})
        store.insert(item)
    store.save()
    return cluster


def test_save_flushes_parents_before_children(store: MemoryStore) -> None:
    _populate(store)

    changes = store.flushed[-1]
    kinds = [type(e) for e in changes.inserts]
    assert kinds == [Cluster, FieldDefinition, FieldDefinition, Item, Item, Item]
    assert not store.has_changes


def test_save_without_changes_does_not_flush(store: MemoryStore) -> None:
    _populate(store)
    store.save()

    assert len(store.flushed) == 1


def test_in_place_mutation_is_detected_as_update(store: MemoryStore) -> None:
    cluster = _populate(store)
    cluster.name = "Novels"

    changes = store.pending_changes()
    assert changes.updates == [cluster]
    assert not changes.inserts
    assert not changes.deletes


def test_cluster_delete_cascades_to_owned_rows(store: MemoryStore) -> None:
    cluster = _populate(store)
    other = Cluster(name="Films")
    store.insert(other)
    store.insert(FieldDefinition(cluster_id=other.id, field_name="Title", order=0))
    store.save()

    store.delete(cluster)
    changes = store.pending_changes()
    store.save()

    assert [type(e) for e in changes.deletes] == [Item] * 3 + [FieldDefinition] * 2 + [Cluster]
    assert store.all(Cluster) == [other]
    assert store.children(FieldDefinition, "cluster_id", cluster.id) == []
    assert store.children(Item, "cluster_id", cluster.id) == []
    assert len(store.all(FieldDefinition)) == 1


def test_field_definition_delete_does_not_touch_items(store: MemoryStore) -> None:
    cluster = _populate(store)
    title = store.children(FieldDefinition, "cluster_id", cluster.id)[0]

    store.delete(title)
    store.save()

    assert len(store.all(Item)) == 3
    assert all("Title" in item.field_values for item in store.all(Item))


def test_failed_save_keeps_snapshot_and_rollback_restores_it(store: MemoryStore) -> None:
    cluster = _populate(store)
    title, author = sorted(
        store.children(FieldDefinition, "cluster_id", cluster.id), key=lambda f: f.order
    )
    title.field_name = "Name"
    store.delete(author)
    store.insert(FieldDefinition(cluster_id=cluster.id, field_name="Year", order=1))

    store.fail_next_save = True
    with pytest.raises(StorageError):
        store.save()
    assert store.has_changes

    store.rollback()

    assert not store.has_changes
    assert title.field_name == "Title"
    restored = sorted(
        store.children(FieldDefinition, "cluster_id", cluster.id), key=lambda f: f.order
    )
    assert [f.field_name for f in restored] == ["Title", "Author"]
    assert restored[0] is title
    assert restored[1] is author


def test_sorted_by_orders_descending(store: MemoryStore) -> None:
    old = Cluster(name="Old", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    new = Cluster(name="New", created_at=datetime(2025, 1, 1, tzinfo=timezone.utc))
    store.insert(old)
    store.insert(new)

    assert store.sorted_by(Cluster, key=lambda c: c.created_at, descending=True) == [new, old]


def test_get_returns_none_for_unknown_id(store: MemoryStore) -> None:
    assert store.get(Cluster, Cluster(name="x").id) is None


def test_unsupported_entity_type_is_rejected(store: MemoryStore) -> None:
    with pytest.raises(TypeError):
        store.insert("not an entity")


def test_rollback_of_failed_cascade_delete_keeps_instances_live(store: MemoryStore) -> None:
    cluster = _populate(store)
    items = store.children(Item, "cluster_id", cluster.id)
    cluster.name = "Renamed before delete"
    store.delete(cluster)

    store.fail_next_save = True
    with pytest.raises(StorageError):
        store.save()
    store.rollback()

    assert store.get(Cluster, cluster.id) is cluster
    assert cluster.name == "Books"
    assert all(store.get(Item, item.id) is item for item in items)

    cluster.name = "Novels"
    assert store.has_changes
    store.save()

    assert store.flushed[-1].updates == [cluster]
    assert not store.has_changes
