"""Cluster model: a user-defined record schema."""

from pydantic import BaseModel, Field

from .base import DBModel


class Cluster(DBModel):
    """Cluster model."""

    name: str = Field(..., description="Display name, non-empty after trimming")


class ClusterSummary(BaseModel):
    """Counts shown next to a cluster in listings."""

    cluster: Cluster
    field_count: int = Field(0, ge=0)
    item_count: int = Field(0, ge=0)
