"""In-memory database for the JSON mock server.

Each collection is the live list of records parsed from one ``<name>.json``
file. Request handlers and the persistence scheduler share these lists by
reference; nothing is copied on write.
"""

from __future__ import annotations

import asyncio
import json
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .errors import RecordNotFound

Record = Dict[str, Any]

DELETE_POLICIES = frozenset({"all", "first"})

_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")


# --- Helpers ---

def parse_id(raw: str) -> Optional[int]:
    """Parse the leading integer of a path segment: ``"12abc"`` -> 12."""
    match = _LEADING_INT.match(raw)
    if match is None:
        return None
    return int(match.group(1))


def deep_merge(target: Record, source: Record) -> Record:
    """Merge ``source`` into ``target`` in place.

    Nested mappings merge key by key; scalars and lists are overwritten.
    """
    for key, value in source.items():
        current = target.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            deep_merge(current, value)
        else:
            target[key] = value
    return target


def _record_id(record: Any) -> Optional[int]:
    if not isinstance(record, dict):
        return None
    value = record.get("id")
    # bool is an int subclass; true/false are not ids
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


# --- Collection ---

class Collection:
    """A named, ordered list of records backed by one JSON file."""

    def __init__(self, name: str, records: List[Record], path: Path) -> None:
        self.name = name
        self.records = records
        self.path = path
        self.write_lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self.records)

    def __repr__(self) -> str:
        return f"Collection(name={self.name!r}, records={len(self.records)})"

    def find(self, record_id: Union[int, str]) -> Record:
        for record in self.records:
            if _record_id(record) == record_id:
                return record
        raise RecordNotFound(self.name, record_id)

    def next_id(self) -> int:
        ids = sorted(i for i in map(_record_id, self.records) if i is not None)
        if not ids:
            return 1
        return ids[-1] + 1

    def create(self, body: Record) -> Record:
        record = dict(body)
        record["id"] = self.next_id()
        self.records.append(record)
        return record

    def update(self, record_id: Union[int, str], body: Record) -> Record:
        return deep_merge(self.find(record_id), body)

    def delete(self, record_id: Union[int, str], policy: str = "all") -> Record:
        """Remove matching records and return a copy of the first one."""
        if policy not in DELETE_POLICIES:
            raise ValueError(f"Unknown delete policy {policy!r}")
        snapshot = dict(self.find(record_id))
        if policy == "first":
            for index, record in enumerate(self.records):
                if _record_id(record) == record_id:
                    del self.records[index]
                    break
        else:
            # slice assignment keeps the list object shared with the handlers
            self.records[:] = [
                r for r in self.records if _record_id(r) != record_id
            ]
        return snapshot

    def dump(self) -> str:
        return json.dumps(self.records, separators=(",", ":"))


# --- Store ---

class CollectionStore:
    """Registry of collections keyed by name, plus the advertised route list."""

    def __init__(self) -> None:
        self._collections: Dict[str, Collection] = {}
        self.routes: List[str] = []

    def register(self, name: str, records: List[Record], path: Path) -> Collection:
        if name in self._collections:
            raise ValueError(f"Collection {name!r} is already registered")
        collection = Collection(name, records, path)
        self._collections[name] = collection
        self.routes.append(name)
        return collection

    def get(self, name: str) -> Optional[Collection]:
        return self._collections.get(name)

    def bindings(self) -> List[Tuple[str, Collection]]:
        return list(self._collections.items())

    def __contains__(self, name: object) -> bool:
        return name in self._collections

    def __iter__(self) -> Iterator[Collection]:
        return iter(list(self._collections.values()))

    def __len__(self) -> int:
        return len(self._collections)
