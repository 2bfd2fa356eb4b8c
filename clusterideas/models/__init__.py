"""Data models for Cluster Ideas."""

from .base import DBModel
from .cluster import Cluster, ClusterSummary
from .field_definition import FieldDefinition
from .field_values import FieldValues, decode_field_values, encode_field_values
from .item import Item

__all__ = [
    "Cluster",
    "ClusterSummary",
    "DBModel",
    "FieldDefinition",
    "FieldValues",
    "Item",
    "decode_field_values",
    "encode_field_values",
]
