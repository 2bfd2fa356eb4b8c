"""Item creation and editing against a cluster's current schema."""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from ..db.store import ObjectStore
from ..errors import NotFoundError, StorageError, ValidationError
from ..models import Cluster, FieldDefinition, FieldValues, Item

logger = logging.getLogger(__name__)

PREVIEW_SEPARATOR = " • "
PREVIEW_PLACEHOLDER = "No fields"
PREVIEW_LIMIT = 2


def _ordered_names(fields: Iterable[FieldDefinition]) -> List[str]:
    return [f.field_name for f in sorted(fields, key=lambda f: f.order)]


def item_preview(
    item: Item,
    fields: Iterable[FieldDefinition],
    separator: str = PREVIEW_SEPARATOR,
    placeholder: str = PREVIEW_PLACEHOLDER,
    limit: int = PREVIEW_LIMIT,
) -> str:
    """One-line summary built from the first stored values in field order."""
    values = item.field_values
    present = [values[name] for name in _ordered_names(fields) if name in values]
    if not present:
        return placeholder
    return separator.join(present[:limit])


def active_field_values(
    item: Item, fields: Iterable[FieldDefinition]
) -> List[Tuple[str, Optional[str]]]:
    """Current fields in order with their values; None when unset or empty."""
    values = item.field_values
    return [(name, values.get(name) or None) for name in _ordered_names(fields)]


def archived_field_values(
    item: Item, fields: Iterable[FieldDefinition]
) -> List[Tuple[str, str]]:
    """Stored values whose key matches no current field, sorted by key."""
    active = {f.field_name for f in fields}
    archived = [(k, v) for k, v in item.field_values.items() if k not in active]
    return sorted(archived, key=lambda kv: kv[0].casefold())


class ItemForm:
    """Values being entered for a new or existing item."""

    def __init__(
        self,
        editor: "ItemEditor",
        cluster: Cluster,
        fields: List[FieldDefinition],
        values: FieldValues,
        item: Optional[Item] = None,
    ) -> None:
        self._editor = editor
        self.cluster = cluster
        self.fields = fields
        self.values = values
        self.item = item

        # One entry per current field so unset fields show as empty text
        for name in self.active_fields:
            self.values.setdefault(name, "")

    @property
    def is_new(self) -> bool:
        return self.item is None

    @property
    def active_fields(self) -> List[str]:
        return _ordered_names(self.fields)

    def value(self, field_name: str) -> str:
        return self.values.get(field_name, "")

    def set_value(self, field_name: str, value: str) -> None:
        self.values[field_name] = value

    @property
    def is_valid(self) -> bool:
        """At least one value is non-blank."""
        return any(v.strip() for v in self.values.values())

    def save(self) -> Item:
        return self._editor.save(self)


class ItemEditor:
    """Opens item forms and persists them."""

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def _fields(self, cluster: Cluster) -> List[FieldDefinition]:
        return sorted(
            self.store.children(FieldDefinition, "cluster_id", cluster.id),
            key=lambda f: f.order,
        )

    def open_new(self, cluster: Cluster) -> ItemForm:
        """Open an empty form for a new item."""
        return ItemForm(self, cluster, self._fields(cluster), {})

    def open_existing(self, item: Item) -> ItemForm:
        """Open a form over an item's stored values, archived keys included."""
        cluster = self.store.get(Cluster, item.cluster_id)
        if cluster is None:
            raise NotFoundError(f"Cluster not found for item {item.id}")
        return ItemForm(self, cluster, self._fields(cluster), item.field_values, item=item)

    def save(self, form: ItemForm) -> Item:
        """
        Persist a form's values.

        Every value is trimmed and the whole mapping is written, so keys not
        shown in the form pass through unchanged.

        Raises:
            ValidationError: All values are blank.
            StorageError: The save failed; the store was rolled back.
        """
        if not form.is_valid:
            raise ValidationError(["At least one field must have a value"])

        trimmed: Dict[str, str] = {k: v.strip() for k, v in form.values.items()}

        if form.item is None:
            item = Item(cluster_id=form.cluster.id)
            item.set_field_values(trimmed)
            self.store.insert(item)
        else:
            item = form.item
            item.set_field_values(trimmed)

        try:
            self.store.save()
        except StorageError:
            self.store.rollback()
            raise

        form.item = item
        logger.info("Saved item %s in '%s'", item.id, form.cluster.name)
        return item
