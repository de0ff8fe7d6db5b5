from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping

from pydantic import RootModel, ValidationError, field_validator, model_validator

from json_store import atomic_write_json, read_json

from .document_store import Record
from .errors import LoadError, PersistError
from .interfaces import CollectionsDocumentStore

logger = logging.getLogger(__name__)


class DatabaseDoc(RootModel[dict[str, list[dict[str, Any]]]]):
    """
    Mirrors the on-disk database schema:
      { "<collection>": [ { "id": "<string>", ... }, ... ] }

    A lone object in place of an array is accepted and normalized into a
    one-element array.
    """

    @field_validator("root", mode="before")
    @classmethod
    def _wrap_lone_objects(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        return {name: ([items] if isinstance(items, dict) else items) for name, items in value.items()}

    @model_validator(mode="after")
    def _require_string_ids(self) -> "DatabaseDoc":
        for name, items in self.root.items():
            for index, item in enumerate(items):
                if not isinstance(item.get("id"), str):
                    raise ValueError(f"Invalid data in {name} at index {index}: Missing or invalid 'id' field")
        return self

    @classmethod
    def from_disk_doc(cls, doc: Any) -> "DatabaseDoc":
        if not isinstance(doc, dict):
            raise LoadError("Invalid JSON structure. Expected top-level object with arrays")
        try:
            return cls.model_validate(doc)
        except ValidationError as e:
            raise LoadError(_describe(e)) from e

    def to_disk_doc(self) -> dict[str, list[Record]]:
        return self.model_dump(mode="json")


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    loc = [str(part) for part in first.get("loc", ())]
    msg = first.get("msg", "invalid value")
    if first.get("type") == "value_error":
        # Raised by _require_string_ids; the message already names the spot.
        return msg.removeprefix("Value error, ")
    if len(loc) >= 2:
        return f"Invalid data in {loc[0]} at index {loc[1]}: {msg}"
    if loc:
        return f"Invalid data in {loc[0]}: expected an array of objects or an object ({msg})"
    return f"Invalid JSON structure: {msg}"


class DiskJsonDatabase(CollectionsDocumentStore):
    """
    The backing file of the resource store: one JSON document holding every
    collection.

    - `load` is strict and raises LoadError on anything it cannot represent.
    - `save` rewrites the whole document atomically.
    """

    def __init__(self, path: Path, *, indent: int = 2):
        self._path = Path(path)
        self._indent = indent

    @property
    def path(self) -> Path:
        return self._path

    def ensure_exists(self) -> bool:
        if self._path.exists():
            return False
        try:
            atomic_write_json(self._path, {}, indent=self._indent)
        except OSError as e:
            raise LoadError(f"Failed to create initial JSON file {self._path}: {e}") from e
        logger.info("Created empty database file %s", self._path)
        return True

    def load(self) -> dict[str, list[Record]]:
        try:
            raw = read_json(self._path)
        except OSError as e:
            raise LoadError(f"Failed to read database file {self._path}: {e}") from e
        except json.JSONDecodeError as e:
            raise LoadError(f"Invalid JSON in database file {self._path}: {e}") from e
        return DatabaseDoc.from_disk_doc(raw).to_disk_doc()

    def save(self, collections: Mapping[str, list[Record]]) -> None:
        try:
            atomic_write_json(self._path, dict(collections), indent=self._indent)
        except (OSError, TypeError, ValueError) as e:
            raise PersistError(f"Failed to write to JSON file {self._path}: {e}") from e
