"""Field-value store codec tests."""

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest
from pydantic import ValidationError
from clusterideas.models import Item, decode_field_values, encode_field_values


def test_round_trip_preserves_mapping() -> None:
    assert decode_field_values(encode_field_values({"Title": "Dune"})) == {"Title": "Dune"}


def test_encoding_keeps_non_ascii_text() -> None:
    assert encode_field_values({"Titel": "Über"}) == '{"Titel": "Über"}'


@pytest.mark.parametrize(
    "data",
    [None, "", b"", "not json", "[1, 2]", '"text"', '{"Title": 1}', b"\xff\xfe"],
)
def test_absent_or_unreadable_data_decodes_to_empty_mapping(data) -> None:
    assert decode_field_values(data) == {}


def test_decodes_bytes() -> None:
    assert decode_field_values(b'{"Author": "Herbert"}') == {"Author": "Herbert"}


def test_item_without_data_has_no_values() -> None:
    item = Item(cluster_id=uuid4())

    assert item.field_values_data is None
    assert item.field_values == {}


def test_item_values_are_replaced_whole() -> None:
    item = Item(cluster_id=uuid4())
    item.set_field_values({"Title": "Dune", "Old": "kept"})
    item.set_field_values({"Title": "Emma"})

    assert item.field_values == {"Title": "Emma"}


def test_item_with_corrupt_blob_reads_as_empty() -> None:
    item = Item(cluster_id=uuid4(), field_values_data="{broken")

    assert item.field_values == {}


def test_identity_and_creation_time_are_immutable() -> None:
    item = Item(cluster_id=uuid4())

    with pytest.raises(ValidationError):
        item.id = uuid4()
    with pytest.raises(ValidationError):
        item.created_at = item.created_at


def test_assignments_are_validated() -> None:
    item = Item(cluster_id=uuid4())

    with pytest.raises(ValidationError):
        item.cluster_id = "not-an-id"


def test_builds_from_attributes() -> None:
    row = SimpleNamespace(
        id=uuid4(),
        created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        cluster_id=uuid4(),
        field_values_data='{"Title": "Dune"}',
    )

    item = Item.model_validate(row)

    assert (item.id, item.cluster_id) == (row.id, row.cluster_id)
    assert item.field_values == {"Title": "Dune"}
