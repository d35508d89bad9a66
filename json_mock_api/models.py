"""Fixed-shape response bodies.

Records themselves are schemaless and returned as plain dicts.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel


class RouteIndex(BaseModel):
    availableRoutes: List[str]


class CountResponse(BaseModel):
    count: int


class ErrorResponse(BaseModel):
    error: str


class BusyResponse(BaseModel):
    message: str
