"""Root endpoint listing the available collections."""

from __future__ import annotations

from fastapi import APIRouter, Request

from ..models import RouteIndex

router = APIRouter(tags=["index"])


@router.get("/")
async def list_routes(request: Request) -> RouteIndex:
    return RouteIndex(availableRoutes=request.app.state.store.routes)
