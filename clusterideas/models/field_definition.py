"""Field definition model."""

from uuid import UUID

from pydantic import Field

from .base import DBModel


class FieldDefinition(DBModel):
    """One named field of a cluster's schema."""

    cluster_id: UUID = Field(..., description="Owning cluster")
    field_name: str = Field(..., description="Field name, the key used in item values")
    order: int = Field(..., description="Display and input position", ge=0)
