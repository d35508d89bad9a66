"""Periodic write-back of collections to their JSON files."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Dict, Optional

from .db import Collection, CollectionStore
from .errors import PersistenceError
from .gate import BusyGate

logger = logging.getLogger(__name__)

GATE_SCOPES = frozenset({"global", "collection"})


def _write_text(path: Path, payload: str) -> None:
    path.write_text(payload, encoding="utf-8")


class PersistenceScheduler:
    """One repeating flush timer per collection.

    A flush holds the collection's write lock and the busy gate while the
    record list is serialized and the file is overwritten. Serialization runs
    on the event loop, so the file always matches the records as they were
    when the write began.
    """

    def __init__(
        self,
        store: CollectionStore,
        gate: BusyGate,
        interval: float = 30,
        gate_scope: str = "global",
        on_failure: Optional[Callable[[PersistenceError], None]] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if gate_scope not in GATE_SCOPES:
            raise ValueError(f"Unknown gate scope {gate_scope!r}")
        self.store = store
        self.gate = gate
        self.interval = interval
        self.gate_scope = gate_scope
        self.on_failure = on_failure
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks.values())

    def start(self) -> None:
        if self._tasks:
            raise RuntimeError("Persistence scheduler already started")
        for collection in self.store:
            self._tasks[collection.name] = asyncio.create_task(
                self._run(collection), name=f"flush:{collection.name}"
            )
        logger.info(
            "Flushing %d collection(s) every %s s", len(self._tasks), self.interval
        )

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def flush(self, collection: Collection) -> None:
        scope = collection.name if self.gate_scope == "collection" else None
        async with collection.write_lock:
            with self.gate.hold(scope):
                try:
                    payload = collection.dump()
                    await asyncio.to_thread(_write_text, collection.path, payload)
                except (OSError, ValueError) as exc:
                    raise PersistenceError(collection.name, collection.path) from exc
        logger.debug("Flushed %r to %s", collection.name, collection.path)

    async def _run(self, collection: Collection) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await self.flush(collection)
            except PersistenceError as exc:
                logger.error("File write error: %s", exc, exc_info=exc)
                if self.on_failure is not None:
                    self.on_failure(exc)
                return
