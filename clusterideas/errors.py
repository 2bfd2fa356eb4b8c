"""Error types raised by the Cluster Ideas model layer."""

from typing import Iterable, List, Optional


class ClusterIdeasError(Exception):
    """Base class for all Cluster Ideas errors."""


class ValidationError(ClusterIdeasError):
    """Required text was empty; the operation did not start."""

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages))


class StorageError(ClusterIdeasError):
    """Persisting a change set failed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class NotFoundError(ClusterIdeasError):
    """No entity matched the requested id or name."""


class ArchivalConfirmationRequired(ClusterIdeasError):
    """A field with stored item data was removed without confirmation."""

    def __init__(self, field_name: str, item_count: int) -> None:
        self.field_name = field_name
        self.item_count = item_count
        super().__init__(
            f"{item_count} item(s) contain data for field '{field_name}'. "
            "Deleting will preserve existing data but hide this field."
        )


class DraftClosedError(ClusterIdeasError):
    """A schema draft was used after commit or cancel."""
