"""Edit sessions for schemas and items."""

from .item_editor import (
    ItemEditor,
    ItemForm,
    active_field_values,
    archived_field_values,
    item_preview,
)
from .schema_editor import EditableField, SchemaDraft, SchemaEditor

__all__ = [
    "EditableField",
    "ItemEditor",
    "ItemForm",
    "SchemaDraft",
    "SchemaEditor",
    "active_field_values",
    "archived_field_values",
    "item_preview",
]
