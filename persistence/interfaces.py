from __future__ import annotations

from typing import Any, Mapping, Protocol


class CollectionsDocumentStore(Protocol):
    """
    Durable home of the whole dataset: one document mapping collection names
    to arrays of records.
    """

    def ensure_exists(self) -> bool:
        """Create an empty document if none exists; return whether one was created."""
        ...

    def load(self) -> dict[str, list[dict[str, Any]]]:
        """Load and validate the full document. Raises LoadError."""
        ...

    def save(self, collections: Mapping[str, list[dict[str, Any]]]) -> None:
        """Persist the full document. Raises PersistError."""
        ...
