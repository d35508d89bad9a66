"""Busy gate for the JSON mock server.

The gate is held while collections are loaded and while a collection is
being written back to disk. Requests arriving in that window are refused
with a fixed busy response instead of touching the records.
"""

from __future__ import annotations

from collections import Counter
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from .models import BusyResponse

BUSY_MESSAGE = "Server is busy at the moment, please try again in a moment"


class BusyGate:
    """Reference-counted advisory gate.

    ``acquire()`` without a scope closes the gate for every request;
    ``acquire("users")`` closes it only for the ``users`` collection. The gate
    reopens once every holder has released.
    """

    def __init__(self) -> None:
        self._holders = 0
        self._scoped: Counter[str] = Counter()

    def acquire(self, scope: Optional[str] = None) -> None:
        if scope is None:
            self._holders += 1
        else:
            self._scoped[scope] += 1

    def release(self, scope: Optional[str] = None) -> None:
        if scope is None:
            if self._holders == 0:
                raise RuntimeError("Busy gate released more times than acquired")
            self._holders -= 1
            return
        if self._scoped[scope] == 0:
            raise RuntimeError(f"Busy gate for {scope!r} is not held")
        self._scoped[scope] -= 1
        if not self._scoped[scope]:
            del self._scoped[scope]

    @contextmanager
    def hold(self, scope: Optional[str] = None) -> Iterator[None]:
        self.acquire(scope)
        try:
            yield
        finally:
            self.release(scope)

    @property
    def busy(self) -> bool:
        return self._holders > 0 or bool(self._scoped)

    def blocks(self, name: Optional[str] = None) -> bool:
        """Whether a request for collection ``name`` must be refused."""
        if self._holders > 0:
            return True
        return name is not None and self._scoped[name] > 0


def _collection_name(path: str) -> Optional[str]:
    name = path.strip("/").split("/", 1)[0]
    return name or None


class BusyGateMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, gate: BusyGate, status_code: int = 400) -> None:
        super().__init__(app)
        self.gate = gate
        self.status_code = status_code

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self.gate.blocks(_collection_name(request.url.path)):
            return JSONResponse(
                status_code=self.status_code,
                content=BusyResponse(message=BUSY_MESSAGE).model_dump(),
            )
        return await call_next(request)
