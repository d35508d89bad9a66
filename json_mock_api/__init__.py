"""JSON Mock API: every JSON file in a directory served as a CRUD collection."""

from __future__ import annotations

from .app import create_app
from .settings import MockApiSettings
from .settings import get_settings

__all__ = [
    "MockApiSettings",
    "create_app",
    "get_settings",
]

__version__ = "0.1.0"
