"""JSON Mock API server.

FastAPI application serving every ``*.json`` file of a directory as a CRUD
collection, with in-memory changes written back on a fixed interval.

Start with:
    json-mock-api --directory db --port 3000
or:
    uvicorn json_mock_api.app:create_app --factory
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse

from .db import CollectionStore
from .errors import PersistenceError, RecordNotFound
from .gate import BusyGate, BusyGateMiddleware
from .loader import DirectoryLoader
from .models import ErrorResponse
from .routes import bind_collections, index_router
from .scheduler import PersistenceScheduler
from .settings import MockApiSettings, get_settings

logger = logging.getLogger(__name__)


def _terminate(exc: PersistenceError) -> None:
    """Default flush failure policy: stop the whole process, no drain."""
    logger.critical("File write error, exiting... (%s)", exc)
    os._exit(1)


async def _record_not_found(request: Request, exc: RecordNotFound) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


async def bootstrap(app: FastAPI) -> None:
    """Load the directory, bind routes and start the flush timers.

    The busy gate is held for the whole window. Any load error is raised,
    which aborts application startup.
    """
    settings: MockApiSettings = app.state.settings
    with app.state.gate.hold():
        loader = DirectoryLoader(settings.directory, app.state.store)
        result = await loader.load()
        if not result.ok:
            logger.error("File read error: %s", result.error)
            raise result.error
        bind_collections(app, app.state.store, settings.delete_policy)
        app.state.scheduler.start()
    logger.info(
        "Mock API started with %d collection(s): %s",
        len(app.state.store),
        ", ".join(app.state.store.routes) or "-",
    )


def create_app(
    settings: Optional[MockApiSettings] = None,
    *,
    on_flush_failure: Optional[Callable[[PersistenceError], None]] = None,
) -> FastAPI:
    settings = settings or get_settings()
    store = CollectionStore()
    gate = BusyGate()
    scheduler = PersistenceScheduler(
        store,
        gate,
        interval=settings.interval,
        gate_scope=settings.gate_scope,
        on_failure=on_flush_failure or _terminate,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await bootstrap(app)
        try:
            yield
        finally:
            await scheduler.stop()

    # docs/openapi routes are disabled so they cannot shadow a collection
    app = FastAPI(
        title="JSON Mock API",
        description="Mock REST API generated from a directory of JSON files",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.gate = gate
    app.state.scheduler = scheduler

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Busy gate
    app.add_middleware(
        BusyGateMiddleware, gate=gate, status_code=settings.busy_status_code
    )

    app.add_exception_handler(RecordNotFound, _record_not_found)

    # Routes
    app.include_router(index_router)

    return app
