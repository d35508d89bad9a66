"""Tests for the busy gate and its middleware."""

from __future__ import annotations

import httpx
import pytest
from fastapi import FastAPI

from json_mock_api.gate import BUSY_MESSAGE, BusyGate, BusyGateMiddleware


class TestBusyGate:
    def test_open_by_default(self):
        gate = BusyGate()
        assert not gate.busy
        assert not gate.blocks("users")

    def test_global_hold_blocks_everything(self):
        gate = BusyGate()
        with gate.hold():
            assert gate.busy
            assert gate.blocks(None)
            assert gate.blocks("users")
        assert not gate.busy

    def test_scoped_hold_blocks_only_that_collection(self):
        gate = BusyGate()
        with gate.hold("users"):
            assert gate.busy
            assert gate.blocks("users")
            assert not gate.blocks("posts")
            assert not gate.blocks(None)

    def test_overlapping_holders(self):
        gate = BusyGate()
        gate.acquire()
        gate.acquire()
        gate.release()
        assert gate.busy
        gate.release()
        assert not gate.busy

    def test_release_unheld_gate(self):
        gate = BusyGate()
        with pytest.raises(RuntimeError):
            gate.release()
        with pytest.raises(RuntimeError):
            gate.release("users")

    def test_hold_releases_on_error(self):
        gate = BusyGate()
        with pytest.raises(KeyError):
            with gate.hold("users"):
                raise KeyError("x")
        assert not gate.busy


@pytest.mark.asyncio
class TestBusyGateMiddleware:
    @pytest.fixture
    def gate(self):
        return BusyGate()

    @pytest.fixture
    def hits(self):
        return []

    @pytest.fixture
    async def client(self, gate, hits):
        app = FastAPI()
        app.add_middleware(BusyGateMiddleware, gate=gate, status_code=400)

        @app.get("/")
        async def root():
            hits.append("/")
            return {"ok": True}

        @app.get("/users/{record_id}")
        async def user(record_id: int):
            hits.append("users")
            return {"id": record_id}

        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(
            transport=transport, base_url="http://testserver"
        ) as c:
            yield c

    async def test_passes_through_when_open(self, client):
        resp = await client.get("/users/1")
        assert resp.status_code == 200
        assert resp.json() == {"id": 1}

    async def test_refuses_root_when_busy(self, client, gate, hits):
        gate.acquire()
        resp = await client.get("/")
        assert resp.status_code == 400
        assert resp.json() == {"message": BUSY_MESSAGE}
        assert hits == []

    async def test_scoped_hold(self, client, gate):
        gate.acquire("users")
        blocked = await client.get("/users/1")
        allowed = await client.get("/")
        assert blocked.status_code == 400
        assert allowed.status_code == 200
