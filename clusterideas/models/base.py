"""Base model class for all stored entities."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class DBModel(BaseModel):
    """Base model for all stored entities."""

    id: UUID = Field(default_factory=uuid4, description="Opaque identity", frozen=True)
    created_at: datetime = Field(
        default_factory=utcnow, description="Creation timestamp", frozen=True
    )

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)
