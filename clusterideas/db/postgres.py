"""Postgres-backed object store."""

import logging
from contextlib import AbstractContextManager
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

import psycopg

from ..errors import StorageError
from ..models import Cluster, DBModel, FieldDefinition, Item
from .connection import get_connection
from .store import MODELS, ChangeSet, ObjectStore

logger = logging.getLogger(__name__)

# model -> (table, [(column, attribute)])
TABLES: Dict[Type[DBModel], Tuple[str, List[Tuple[str, str]]]] = {
    Cluster: (
        "clusters",
        [("id", "id"), ("name", "name"), ("created_at", "created_at")],
    ),
    FieldDefinition: (
        "field_definitions",
        [
            ("id", "id"),
            ("cluster_id", "cluster_id"),
            ("field_name", "field_name"),
            ("field_order", "order"),
            ("created_at", "created_at"),
        ],
    ),
    Item: (
        "items",
        [
            ("id", "id"),
            ("cluster_id", "cluster_id"),
            ("field_values_data", "field_values_data"),
            ("created_at", "created_at"),
        ],
    ),
}

Connector = Callable[[], AbstractContextManager]


def _row_to_entity(model: Type[DBModel], row: Dict[str, Any]) -> DBModel:
    _, columns = TABLES[model]
    return model(**{attribute: row[column] for column, attribute in columns})


class PostgresStore(ObjectStore):
    """Object store persisted to Postgres, one transaction per save."""

    def __init__(self, db_config: Dict[str, Any], connect: Optional[Connector] = None) -> None:
        """Initialize store; call :meth:`load` before use."""
        super().__init__()
        self.db_config = db_config
        self._connect = connect or (lambda: get_connection(self.db_config))

    def load(self) -> None:
        """Load every persisted row into the arena."""
        entities: List[DBModel] = []
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    for model in MODELS:
                        table, _ = TABLES[model]
                        cur.execute(f"SELECT * FROM {table}")
                        entities.extend(_row_to_entity(model, row) for row in cur.fetchall())
        except psycopg.Error as e:
            raise StorageError(f"Failed to load data: {e}", cause=e) from e

        self._reset(entities)
        logger.debug("Loaded %d row(s) from Postgres", len(entities))

    def _flush(self, changes: ChangeSet) -> None:
        try:
            with self._connect() as conn:
                with conn.transaction():
                    with conn.cursor() as cur:
                        # Children before parents
                        for entity in changes.deletes:
                            table, _ = TABLES[type(entity)]
                            cur.execute(f"DELETE FROM {table} WHERE id = %s", (entity.id,))

                        # Parents before children
                        for entity in changes.inserts:
                            table, columns = TABLES[type(entity)]
                            names = ", ".join(column for column, _ in columns)
                            placeholders = ", ".join(["%s"] * len(columns))
                            cur.execute(
                                f"INSERT INTO {table} ({names}) VALUES ({placeholders})",
                                tuple(getattr(entity, attribute) for _, attribute in columns),
                            )

                        for entity in changes.updates:
                            table, columns = TABLES[type(entity)]
                            mutable = [(c, a) for c, a in columns if c not in ("id", "created_at")]
                            assignments = ", ".join(f"{column} = %s" for column, _ in mutable)
                            cur.execute(
                                f"UPDATE {table} SET {assignments} WHERE id = %s",
                                tuple(getattr(entity, a) for _, a in mutable) + (entity.id,),
                            )
        except psycopg.Error as e:
            raise StorageError(f"Failed to save changes: {e}", cause=e) from e
