"""CRUD endpoints for one collection.

Implements, for a collection ``name``:
    GET    /{name}
    GET    /{name}/count
    GET    /{name}/{id}
    POST   /{name}
    PUT    /{name}/{id}
    DELETE /{name}/{id}
"""

from __future__ import annotations

import json
from typing import Any, Dict, Union

from fastapi import APIRouter, Depends, HTTPException, Request

from ..db import Collection, parse_id
from ..models import CountResponse


def _lookup_id(raw: str) -> Union[int, str]:
    """Leading-integer id of a path segment, or ``"NaN"`` when it has none."""
    record_id = parse_id(raw)
    return "NaN" if record_id is None else record_id


async def read_body(request: Request) -> Dict[str, Any]:
    """Decode a JSON or urlencoded form body; an empty body is ``{}``."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/x-www-form-urlencoded"):
        form = await request.form()
        return dict(form)

    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Malformed JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=422, detail="Body must be a JSON object")
    return body


def build_router(collection: Collection, delete_policy: str = "all") -> APIRouter:
    """Return a router whose handlers operate on ``collection`` in place.

    Handlers are coroutines so they run on the event loop and cannot
    interleave with a flush serializing the same list.
    """
    router = APIRouter(prefix=f"/{collection.name}", tags=[collection.name])

    @router.get("")
    async def list_records():
        return collection.records

    # must precede /{record_id}
    @router.get("/count")
    async def count_records() -> CountResponse:
        return CountResponse(count=len(collection))

    @router.get("/{record_id}")
    async def get_record(record_id: str):
        return collection.find(_lookup_id(record_id))

    @router.post("")
    async def create_record(body: Dict[str, Any] = Depends(read_body)):
        return collection.create(body)

    @router.put("/{record_id}")
    async def update_record(
        record_id: str, body: Dict[str, Any] = Depends(read_body)
    ):
        return collection.update(_lookup_id(record_id), body)

    @router.delete("/{record_id}")
    async def delete_record(record_id: str):
        return collection.delete(_lookup_id(record_id), delete_policy)

    return router
