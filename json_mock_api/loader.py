"""Directory loader: turns every ``*.json`` file into a collection.

Files are read and parsed concurrently. The join stops at the first failure;
collections registered by tasks that finished before it stay registered.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, List, Optional, Tuple, Union

from .db import CollectionStore
from .errors import BootstrapError, CollectionParseError, EmptyDirectoryError

logger = logging.getLogger(__name__)

SOURCE_SUFFIX = ".json"


@dataclass
class LoadResult:
    """Outcome of a directory scan."""

    loaded: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def join_all(
    aws: List[Awaitable[Any]],
) -> Tuple[List[Any], Optional[BaseException]]:
    """Run awaitables concurrently until all finish or one fails.

    Returns the results of the tasks that succeeded (in submission order) and
    the first error, if any. Tasks still pending after a failure are
    cancelled.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return [], None

    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)

    results: List[Any] = []
    error: Optional[BaseException] = None
    for task in tasks:
        if task.cancelled():
            continue
        exc = task.exception()
        if exc is None:
            results.append(task.result())
        elif error is None:
            error = exc
    return results, error


def _list_sources(directory: Path) -> Tuple[List[Path], List[str]]:
    entries = sorted(directory.iterdir())
    if not entries:
        raise EmptyDirectoryError(directory)
    sources: List[Path] = []
    ignored: List[str] = []
    for entry in entries:
        # "a.b.json" -> collection "a.b"; ".json" alone has no suffix
        if entry.suffix == SOURCE_SUFFIX and entry.stem and entry.is_file():
            sources.append(entry)
        else:
            ignored.append(entry.name)
    return sources, ignored


class DirectoryLoader:
    """Scans ``directory`` and registers one collection per source file."""

    def __init__(self, directory: Union[str, Path], store: CollectionStore) -> None:
        self.directory = Path(directory)
        self.store = store

    async def list_sources(self) -> List[Path]:
        try:
            sources, ignored = await asyncio.to_thread(_list_sources, self.directory)
        except OSError as exc:
            raise BootstrapError(f"Could not read directory {self.directory}") from exc
        for name in ignored:
            logger.debug("Ignoring %s: not a %s file", name, SOURCE_SUFFIX)
        return sources

    async def load_file(self, path: Path) -> Optional[str]:
        """Read and register one source file.

        Returns the collection name, or ``None`` when the file is empty.
        """
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as exc:
            raise BootstrapError(f"Could not read {path}") from exc
        except UnicodeDecodeError as exc:
            raise CollectionParseError(path, str(exc)) from exc

        if not text:
            logger.warning("File: %s is empty!", path.name)
            return None

        try:
            records = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CollectionParseError(path, str(exc)) from exc
        if not isinstance(records, list):
            raise CollectionParseError(
                path, f"expected a JSON array, got {type(records).__name__}"
            )

        name = path.stem
        self.store.register(name, records, path)
        logger.info("Loaded collection %r (%d records)", name, len(records))
        return name

    async def load(self) -> LoadResult:
        result = LoadResult()
        try:
            sources = await self.list_sources()
        except BootstrapError as exc:
            result.error = exc
            return result

        outcomes, result.error = await join_all(
            [self._load_entry(p) for p in sources]
        )
        for path, name in outcomes:
            if name is None:
                result.skipped.append(path.name)
            else:
                result.loaded.append(name)
        return result

    async def _load_entry(self, path: Path) -> Tuple[Path, Optional[str]]:
        return path, await self.load_file(path)
