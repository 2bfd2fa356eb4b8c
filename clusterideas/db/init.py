"""Database initialization and schema management."""

import logging
from typing import Any, Dict

import psycopg
from psycopg.errors import DatabaseError

from .connection import get_connection

logger = logging.getLogger(__name__)


# Ownership is enforced by the object store's cascade walk; the foreign keys
# only guard against orphans.
SCHEMA_SQL = """
-- Clusters table
CREATE TABLE IF NOT EXISTS clusters (
    id UUID PRIMARY KEY,
    name TEXT NOT NULL CHECK (length(btrim(name)) > 0),
    created_at TIMESTAMPTZ NOT NULL
);

-- Field definitions table
CREATE TABLE IF NOT EXISTS field_definitions (
    id UUID PRIMARY KEY,
    cluster_id UUID NOT NULL REFERENCES clusters(id),
    field_name TEXT NOT NULL,
    field_order INTEGER NOT NULL CHECK (field_order >= 0),
    created_at TIMESTAMPTZ NOT NULL
);

-- Items table
CREATE TABLE IF NOT EXISTS items (
    id UUID PRIMARY KEY,
    cluster_id UUID NOT NULL REFERENCES clusters(id),
    field_values_data TEXT,
    created_at TIMESTAMPTZ NOT NULL
);

-- Create indexes
CREATE INDEX IF NOT EXISTS idx_clusters_created_at ON clusters(created_at);
CREATE INDEX IF NOT EXISTS idx_field_definitions_cluster_id ON field_definitions(cluster_id);
CREATE INDEX IF NOT EXISTS idx_items_cluster_id ON items(cluster_id);
"""


def validate_connection(config: Dict[str, Any]) -> bool:
    """Validate database connection."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 AS ok")
                result = cur.fetchone()
                return result is not None and result["ok"] == 1
    except psycopg.Error as e:
        logger.warning("Database connection failed: %s", e)
        return False


def init_database(config: Dict[str, Any]) -> None:
    """Initialize database schema."""
    try:
        with get_connection(config) as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
                conn.commit()
                logger.info("Database schema initialized successfully")
    except DatabaseError as e:
        logger.error("Failed to initialize database schema: %s", e)
        raise
