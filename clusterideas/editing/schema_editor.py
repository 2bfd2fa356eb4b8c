"""Staged editing of a cluster's field definitions.

An edit session works on a :class:`SchemaDraft`, a detached copy of the
cluster name and its field list. Each staged field remembers which persisted
definition it came from (``existing_id``) separately from its current text,
so a rename updates the definition in place while a removal followed by an
add creates a new one. Nothing is written until :meth:`SchemaDraft.commit`.
"""

import logging
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from ..db.store import ObjectStore
from ..errors import (
    ArchivalConfirmationRequired,
    DraftClosedError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from ..models import Cluster, FieldDefinition, Item

logger = logging.getLogger(__name__)


class EditableField(BaseModel):
    """A field definition as staged in an edit session."""

    id: UUID = Field(default_factory=uuid4, description="Session-local identity")
    existing_id: Optional[UUID] = Field(None, description="Persisted definition, if any")
    name: str = Field("", description="Current name text")
    order: int = Field(0, ge=0)
    original_name: Optional[str] = Field(None, description="Name at session start")

    @property
    def trimmed_name(self) -> str:
        return self.name.strip()

    @property
    def is_new(self) -> bool:
        return self.existing_id is None


class SchemaDraft:
    """Mutable edit session over one cluster's schema."""

    def __init__(
        self,
        editor: "SchemaEditor",
        cluster: Cluster,
        fields: List[EditableField],
    ) -> None:
        self._editor = editor
        self.cluster = cluster
        self.name = cluster.name
        self.fields = fields
        self.closed = False

    def _check_open(self) -> None:
        if self.closed:
            raise DraftClosedError(f"Edit session for '{self.cluster.name}' is closed")

    def _renumber(self) -> None:
        for index, field in enumerate(self.fields):
            field.order = index

    def _index_of(self, field_id: UUID) -> int:
        for index, field in enumerate(self.fields):
            if field.id == field_id:
                return index
        raise NotFoundError(f"Field not in edit session: {field_id}")

    def field(self, field_id: UUID) -> EditableField:
        """Get a staged field by session id."""
        return self.fields[self._index_of(field_id)]

    def add_field(self, name: str) -> EditableField:
        """Append a new field."""
        self._check_open()
        trimmed = name.strip()
        if not trimmed:
            raise ValidationError(["Field name cannot be empty"])

        field = EditableField(name=trimmed, order=len(self.fields))
        self.fields.append(field)
        return field

    def rename_field(self, field_id: UUID, name: str) -> None:
        """Change a staged field's name; checked at commit."""
        self._check_open()
        self.field(field_id).name = name

    def move_field(self, source: int, destination: int) -> None:
        """Move the field at ``source`` so it ends up at ``destination``."""
        self._check_open()
        count = len(self.fields)
        if not 0 <= source < count or not 0 <= destination < count:
            raise IndexError(f"Field position out of range 0..{count - 1}")

        field = self.fields.pop(source)
        self.fields.insert(destination, field)
        self._renumber()

    def items_with_data(self, field_id: UUID) -> int:
        """Count items holding a value under the field's original name."""
        original_name = self.field(field_id).original_name
        if original_name is None:
            return 0
        items = self._editor.store.children(Item, "cluster_id", self.cluster.id)
        return sum(1 for item in items if original_name in item.field_values)

    def removal_requires_confirmation(self, field_id: UUID) -> bool:
        """Whether removing the field would hide stored item data."""
        return self.items_with_data(field_id) > 0

    def remove_field(self, field_id: UUID, confirmed: bool = False) -> EditableField:
        """
        Detach a field from the draft.

        Item values stored under the field's name are left untouched and
        become archived once the draft is committed.

        Raises:
            ArchivalConfirmationRequired: Items hold data for the field and
                ``confirmed`` is false. The draft is unchanged.
        """
        self._check_open()
        index = self._index_of(field_id)
        field = self.fields[index]

        if not confirmed:
            count = self.items_with_data(field_id)
            if count:
                raise ArchivalConfirmationRequired(field.original_name or field.name, count)

        del self.fields[index]
        self._renumber()
        return field

    def validation_errors(self) -> List[str]:
        """Reasons the draft cannot be committed."""
        errors = []
        if not self.name.strip():
            errors.append("Name cannot be empty")
        for field in self.fields:
            if not field.trimmed_name:
                errors.append(f"Field name cannot be empty (position {field.order + 1})")
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors()

    def cancel(self) -> None:
        """Discard the session."""
        self._check_open()
        self.closed = True

    def commit(self) -> Cluster:
        """Apply the draft; see :meth:`SchemaEditor.commit`."""
        return self._editor.commit(self)


class SchemaEditor:
    """Opens edit sessions and reconciles them with persisted definitions."""

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def start(self, cluster: Cluster) -> SchemaDraft:
        """Snapshot the cluster's current schema into a new draft."""
        definitions = sorted(
            self.store.children(FieldDefinition, "cluster_id", cluster.id),
            key=lambda f: f.order,
        )
        fields = [
            EditableField(
                existing_id=definition.id,
                name=definition.field_name,
                order=definition.order,
                original_name=definition.field_name,
            )
            for definition in definitions
        ]
        return SchemaDraft(self, cluster, fields)

    def commit(self, draft: SchemaDraft) -> Cluster:
        """
        Reconcile a draft with the persisted field definitions.

        Definitions no longer referenced by the draft are deleted, referenced
        ones are renamed and renumbered in place, and new entries are
        inserted. Item values are never touched. Everything is saved in one
        transaction.

        Raises:
            ValidationError: The name or a field name is blank; nothing changed.
            StorageError: The save failed; the store was rolled back and the
                draft stays open.
        """
        draft._check_open()
        errors = draft.validation_errors()
        if errors:
            raise ValidationError(errors)

        cluster = draft.cluster
        cluster.name = draft.name.strip()

        persisted = {
            definition.id: definition
            for definition in self.store.children(FieldDefinition, "cluster_id", cluster.id)
        }
        kept_ids = {field.existing_id for field in draft.fields if field.existing_id is not None}

        removed = [d for d in persisted.values() if d.id not in kept_ids]
        for definition in removed:
            self.store.delete(definition)

        added = 0
        for index, field in enumerate(draft.fields):
            definition = persisted.get(field.existing_id) if field.existing_id else None
            if definition is not None:
                definition.field_name = field.trimmed_name
                definition.order = index
            else:
                self.store.insert(
                    FieldDefinition(
                        cluster_id=cluster.id,
                        field_name=field.trimmed_name,
                        order=index,
                    )
                )
                added += 1

        try:
            self.store.save()
        except StorageError:
            self.store.rollback()
            raise

        draft.closed = True
        logger.info(
            "Updated schema of '%s': %d field(s), %d added, %d removed",
            cluster.name,
            len(draft.fields),
            added,
            len(removed),
        )
        return cluster
