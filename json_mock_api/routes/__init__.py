"""Route binding for loaded collections."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from ..db import CollectionStore
from .collection import build_router
from .index import router as index_router

logger = logging.getLogger(__name__)

__all__ = ["bind_collections", "build_router", "index_router"]


def bind_collections(
    app: FastAPI, store: CollectionStore, delete_policy: str = "all"
) -> None:
    """Mount one CRUD router per registered collection. Runs once per app."""
    if getattr(app.state, "collections_bound", False):
        raise RuntimeError("Collection routes are already bound")
    for name, collection in store.bindings():
        app.include_router(build_router(collection, delete_policy))
        logger.debug("Bound routes for /%s", name)
    app.state.collections_bound = True
