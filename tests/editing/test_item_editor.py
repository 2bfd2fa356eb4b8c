"""Item form and projection tests."""

from uuid import uuid4

import pytest
from clusterideas.db import ClusterRepository, MemoryStore
from clusterideas.editing import (
    ItemEditor,
    SchemaEditor,
    active_field_values,
    archived_field_values,
    item_preview,
)
from clusterideas.errors import StorageError, ValidationError
from clusterideas.models import Cluster, FieldDefinition, Item


@pytest.fixture
def editor(store: MemoryStore) -> ItemEditor:
    return ItemEditor(store)


def _fields(*names: str):
    cluster_id = uuid4()
    return [
        FieldDefinition(cluster_id=cluster_id, field_name=name, order=index)
        for index, name in enumerate(names)
    ]


def _item(values) -> Item:
    item = Item(cluster_id=uuid4())
    item.set_field_values(values)
    return item


def test_new_form_has_empty_entry_per_field(editor: ItemEditor, books: Cluster) -> None:
    form = editor.open_new(books)

    assert form.is_new
    assert form.active_fields == ["Title", "Author"]
    assert form.values == {"Title": "", "Author": ""}
    assert not form.is_valid


def test_existing_form_keeps_archived_keys(editor: ItemEditor, books: Cluster, make_item) -> None:
    item = make_item(books, {"Old": "kept", "Title": "Dune"})

    form = editor.open_existing(item)

    assert form.values == {"Old": "kept", "Title": "Dune", "Author": ""}
    assert form.value("Author") == ""


def test_save_rejects_all_blank_values(
    editor: ItemEditor, store: MemoryStore, books: Cluster
) -> None:
    form = editor.open_new(books)
    form.set_value("Title", "   ")

    with pytest.raises(ValidationError):
        form.save()
    assert store.all(Item) == []


def test_create_trims_and_stores_every_value(
    editor: ItemEditor, store: MemoryStore, books: Cluster
) -> None:
    form = editor.open_new(books)
    form.set_value("Title", "  Dune ")

    item = form.save()

    assert store.all(Item) == [item]
    assert item.cluster_id == books.id
    assert item.field_values == {"Title": "Dune", "Author": ""}
    assert not form.is_new
    assert not store.has_changes


def test_edit_overwrites_in_place_and_passes_archived_keys_through(
    editor: ItemEditor, store: MemoryStore, books: Cluster, make_item
) -> None:
    item = make_item(books, {"Old": " kept", "Title": "Dune"})

    form = editor.open_existing(item)
    form.set_value("Author", "Herbert ")
    saved = form.save()

    assert saved is item
    assert store.all(Item) == [item]
    assert item.field_values == {"Old": "kept", "Title": "Dune", "Author": "Herbert"}


def test_form_reflects_schema_changes(
    editor: ItemEditor, repository: ClusterRepository, store, books: Cluster, make_item
) -> None:
    item = make_item(books, {"Title": "Dune", "Author": "Herbert"})
    draft = SchemaEditor(store).start(books)
    draft.remove_field(draft.fields[1].id, confirmed=True)
    draft.add_field("Year")
    draft.commit()

    form = editor.open_existing(item)

    assert form.active_fields == ["Title", "Year"]
    assert form.values == {"Title": "Dune", "Author": "Herbert", "Year": ""}


def test_storage_failure_on_create_leaves_no_item(
    editor: ItemEditor, store: MemoryStore, books: Cluster
) -> None:
    form = editor.open_new(books)
    form.set_value("Title", "Dune")
    store.fail_next_save = True

    with pytest.raises(StorageError):
        form.save()

    assert store.all(Item) == []
    assert form.is_new


def test_storage_failure_on_edit_restores_values(
    editor: ItemEditor, store: MemoryStore, books: Cluster, make_item
) -> None:
    item = make_item(books, {"Title": "Dune"})
    form = editor.open_existing(item)
    form.set_value("Title", "Emma")
    store.fail_next_save = True

    with pytest.raises(StorageError):
        form.save()

    assert item.field_values == {"Title": "Dune"}


def test_preview_skips_missing_values() -> None:
    assert item_preview(_item({"Title": "Dune"}), _fields("Title", "Author")) == "Dune"


def test_preview_uses_first_two_values_in_field_order() -> None:
    fields = _fields("Title", "Author", "Year")
    item = _item({"Year": "1965", "Author": "Herbert", "Title": "Dune"})

    assert item_preview(item, list(reversed(fields))) == "Dune • Herbert"


def test_preview_placeholder_when_nothing_stored() -> None:
    assert item_preview(_item({"Old": "x"}), _fields("Title")) == "No fields"


def test_preview_settings() -> None:
    item = _item({"Title": "Dune", "Author": "Herbert", "Year": "1965"})

    preview = item_preview(
        item, _fields("Title", "Author", "Year"), separator=" / ", placeholder="-", limit=3
    )
    assert preview == "Dune / Herbert / 1965"


def test_archived_values_sorted_case_insensitively() -> None:
    item = _item({"beta": "1", "Title": "Dune", "Alpha": "2", "gamma": ""})

    assert archived_field_values(item, _fields("Title")) == [
        ("Alpha", "2"),
        ("beta", "1"),
        ("gamma", ""),
    ]


def test_active_values_follow_field_order() -> None:
    item = _item({"Author": "", "Title": "Dune", "Old": "x"})

    assert active_field_values(item, _fields("Title", "Author", "Year")) == [
        ("Title", "Dune"),
        ("Author", None),
        ("Year", None),
    ]


def test_edit_after_failed_item_delete_is_saved(
    editor: ItemEditor,
    store: MemoryStore,
    repository: ClusterRepository,
    books: Cluster,
    make_item,
) -> None:
    item = make_item(books, {"Title": "Dune"})
    store.fail_next_save = True
    with pytest.raises(StorageError):
        repository.delete_item(item)

    assert store.get(Item, item.id) is item

    form = editor.open_existing(item)
    form.set_value("Title", "Emma")
    form.save()

    assert store.get(Item, item.id).field_values == {"Title": "Emma", "Author": ""}
    assert store.flushed[-1].updates == [item]
