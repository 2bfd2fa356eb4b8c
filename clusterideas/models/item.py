"""Item model: one record of a cluster."""

from typing import Mapping, Optional
from uuid import UUID

from pydantic import Field

from .base import DBModel
from .field_values import FieldValues, decode_field_values, encode_field_values


class Item(DBModel):
    """Item model holding an embedded field-value store."""

    cluster_id: UUID = Field(..., description="Owning cluster")
    field_values_data: Optional[str] = Field(
        None, description="Serialized field-value mapping"
    )

    @property
    def field_values(self) -> FieldValues:
        """Decoded field values; empty when absent or unreadable."""
        return decode_field_values(self.field_values_data)

    def set_field_values(self, values: Mapping[str, str]) -> None:
        """Replace the whole field-value mapping."""
        self.field_values_data = encode_field_values(values)
