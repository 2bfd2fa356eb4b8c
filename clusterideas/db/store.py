"""In-process object store: an arena of entities keyed by type and id.

Relations are plain id fields on the child side. Deleting an owner walks the
ownership graph explicitly, so a cluster takes its field definitions and items
with it while nothing else cascades. Changes are staged in the arena and
reach the backend only through :meth:`ObjectStore.save`, one change set at a
time.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type, TypeVar
from uuid import UUID

from ..errors import StorageError
from ..models import Cluster, DBModel, FieldDefinition, Item

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=DBModel)

# Parents before children
MODELS: Tuple[Type[DBModel], ...] = (Cluster, FieldDefinition, Item)

# owner -> [(owned model, attribute holding the owner id)]
CASCADE_RULES: Dict[Type[DBModel], List[Tuple[Type[DBModel], str]]] = {
    Cluster: [(FieldDefinition, "cluster_id"), (Item, "cluster_id")],
}

FROZEN_FIELDS = ("id", "created_at")


class ChangeSet:
    """Entities to write in one transaction."""

    def __init__(self) -> None:
        self.inserts: List[DBModel] = []
        self.updates: List[DBModel] = []
        self.deletes: List[DBModel] = []

    def __bool__(self) -> bool:
        return bool(self.inserts or self.updates or self.deletes)

    def __repr__(self) -> str:
        return (
            f"ChangeSet(inserts={len(self.inserts)}, "
            f"updates={len(self.updates)}, deletes={len(self.deletes)})"
        )


class ObjectStore(ABC):
    """Arena of live entities with a last-committed snapshot."""

    def __init__(self) -> None:
        self._live: Dict[Type[DBModel], Dict[UUID, DBModel]] = {m: {} for m in MODELS}
        self._committed: Dict[Type[DBModel], Dict[UUID, Dict[str, Any]]] = {
            m: {} for m in MODELS
        }
        # Committed entities removed since the last snapshot, kept for rollback
        self._removed: Dict[Type[DBModel], Dict[UUID, DBModel]] = {m: {} for m in MODELS}

    @abstractmethod
    def _flush(self, changes: ChangeSet) -> None:
        """Write a change set atomically, raising on failure."""

    def _table(self, model: Type[DBModel]) -> Dict[UUID, DBModel]:
        if model not in self._live:
            raise TypeError(f"Unsupported entity type: {model.__name__}")
        return self._live[model]

    def _reset(self, entities: Iterable[DBModel]) -> None:
        """Replace arena and snapshot with already-persisted entities."""
        self._live = {m: {} for m in MODELS}
        for entity in entities:
            self._table(type(entity))[entity.id] = entity
        self._take_snapshot()

    def _take_snapshot(self) -> None:
        self._committed = {
            model: {entity_id: entity.model_dump() for entity_id, entity in table.items()}
            for model, table in self._live.items()
        }
        self._removed = {m: {} for m in MODELS}

    # Mutations

    def insert(self, entity: DBModel) -> None:
        """Stage a new entity."""
        self._table(type(entity))[entity.id] = entity

    def delete(self, entity: DBModel) -> None:
        """Stage removal of an entity and everything it owns."""
        for child_model, parent_field in CASCADE_RULES.get(type(entity), []):
            children = self.children(child_model, parent_field, entity.id)
            if children:
                logger.debug(
                    "Cascading delete of %s %s to %d %s row(s)",
                    type(entity).__name__,
                    entity.id,
                    len(children),
                    child_model.__name__,
                )
            for child in children:
                self.delete(child)
        removed = self._table(type(entity)).pop(entity.id, None)
        if removed is not None and entity.id in self._committed[type(entity)]:
            self._removed[type(entity)][entity.id] = removed

    # Queries

    def get(self, model: Type[M], entity_id: UUID) -> Optional[M]:
        """Get entity by id."""
        return self._table(model).get(entity_id)

    def all(self, model: Type[M]) -> List[M]:
        """Get all entities of a type."""
        return list(self._table(model).values())

    def children(self, model: Type[M], parent_field: str, parent_id: UUID) -> List[M]:
        """Get entities whose ``parent_field`` holds ``parent_id``."""
        return [e for e in self._table(model).values() if getattr(e, parent_field) == parent_id]

    def sorted_by(
        self,
        model: Type[M],
        key: Callable[[M], Any],
        descending: bool = False,
    ) -> List[M]:
        """Get all entities of a type ordered by a sort key."""
        return sorted(self._table(model).values(), key=key, reverse=descending)

    # Unit of work

    def pending_changes(self) -> ChangeSet:
        """Diff the arena against the last committed snapshot."""
        changes = ChangeSet()
        for model in MODELS:
            live = self._live[model]
            committed = self._committed[model]
            for entity_id, entity in live.items():
                if entity_id not in committed:
                    changes.inserts.append(entity)
                elif entity.model_dump() != committed[entity_id]:
                    changes.updates.append(entity)

        for model in reversed(MODELS):
            live = self._live[model]
            for entity_id, data in self._committed[model].items():
                if entity_id not in live:
                    changes.deletes.append(model.model_validate(data))

        return changes

    @property
    def has_changes(self) -> bool:
        """Whether anything is staged."""
        return bool(self.pending_changes())

    def save(self) -> None:
        """
        Persist all staged changes in one transaction.

        Raises:
            StorageError: The backend rejected the change set. The snapshot
                is left untouched so :meth:`rollback` restores the last
                committed state.
        """
        changes = self.pending_changes()
        if not changes:
            return

        try:
            self._flush(changes)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save changes: {e}", cause=e) from e

        self._take_snapshot()
        logger.debug("Saved %r", changes)

    def rollback(self) -> None:
        """Discard staged changes, restoring the last committed state in place."""
        for model in MODELS:
            live = self._live[model]
            committed = self._committed[model]

            for entity_id in [i for i in live if i not in committed]:
                del live[entity_id]

            for entity_id, data in committed.items():
                entity = live.get(entity_id)
                if entity is None:
                    entity = self._removed[model].pop(entity_id, None)
                    if entity is None:
                        live[entity_id] = model.model_validate(data)
                        continue
                    live[entity_id] = entity
                for name, value in data.items():
                    if name not in FROZEN_FIELDS and getattr(entity, name) != value:
                        setattr(entity, name, value)

        self._removed = {m: {} for m in MODELS}
        logger.debug("Rolled back staged changes")


class MemoryStore(ObjectStore):
    """Object store kept entirely in process memory."""

    def __init__(self, entities: Iterable[DBModel] = ()) -> None:
        super().__init__()
        self._reset(entities)
        self.fail_next_save = False
        self.flushed: List[ChangeSet] = []

    def _flush(self, changes: ChangeSet) -> None:
        if self.fail_next_save:
            self.fail_next_save = False
            raise StorageError("Simulated storage failure")
        self.flushed.append(changes)
