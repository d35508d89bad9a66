"""Shared fixtures for the JSON mock server tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from json_mock_api.app import create_app
from json_mock_api.settings import MockApiSettings

USERS = [
    {"id": 1, "name": "Ann", "address": {"city": "Oslo", "zip": "0150"}},
    {"id": 3, "name": "Bob", "tags": ["a", "b"]},
    {"id": 2, "name": "Cid"},
]

POSTS = [
    {"id": 10, "title": "Hello", "userId": 1},
]


def write_json(directory: Path, name: str, data) -> Path:
    path = directory / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def db_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "db"
    directory.mkdir()
    write_json(directory, "users.json", USERS)
    write_json(directory, "posts.json", POSTS)
    (directory / "notes.txt").write_text("not a collection", encoding="utf-8")
    return directory


@pytest.fixture
def make_settings():
    def factory(directory: Path, **overrides) -> MockApiSettings:
        values = {"directory": directory, "interval": 3600}
        values.update(overrides)
        return MockApiSettings(_env_file=None, **values)

    return factory


@pytest.fixture
def flush_failures() -> list:
    return []


@pytest.fixture
def client(db_dir, make_settings, flush_failures):
    app = create_app(make_settings(db_dir), on_flush_failure=flush_failures.append)
    with TestClient(app) as c:
        yield c
