"""Exception hierarchy for the mock server."""

from __future__ import annotations

from pathlib import Path
from typing import Union


class MockApiError(Exception):
    """Base class for all mock server errors."""


class BootstrapError(MockApiError):
    """The source directory or one of its files could not be read."""


class EmptyDirectoryError(BootstrapError):
    def __init__(self, directory: Path) -> None:
        super().__init__(f"Empty database directory: {directory}")
        self.directory = directory


class CollectionParseError(BootstrapError):
    """A source file holds malformed JSON or something other than an array."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not parse {path}: {reason}")
        self.path = path
        self.reason = reason


class PersistenceError(MockApiError):
    def __init__(self, collection: str, path: Path) -> None:
        super().__init__(f"Could not write collection {collection!r} to {path}")
        self.collection = collection
        self.path = path


class RecordNotFound(MockApiError):
    """No record in ``collection`` carries ``record_id``."""

    def __init__(self, collection: str, record_id: Union[int, str]) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(self.message)

    @property
    def message(self) -> str:
        return f"Could not find {self.collection} with id: {self.record_id}"
