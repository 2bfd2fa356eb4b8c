"""Storage for Cluster Ideas."""

from .clusters import ClusterRepository
from .connection import get_connection, get_connection_pool
from .init import init_database, validate_connection
from .postgres import PostgresStore
from .store import ChangeSet, MemoryStore, ObjectStore

__all__ = [
    "ChangeSet",
    "ClusterRepository",
    "MemoryStore",
    "ObjectStore",
    "PostgresStore",
    "get_connection",
    "get_connection_pool",
    "init_database",
    "validate_connection",
]
