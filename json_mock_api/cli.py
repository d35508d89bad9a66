"""Command line entry point for the JSON mock server.

Usage:
    json-mock-api
    json-mock-api -d fixtures -p 8080 -i 5
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

import uvicorn

from .app import create_app
from .settings import MockApiSettings

logger = logging.getLogger("json_mock_api")

# ---------------------------------------------------------------------------
# ANSI colour helpers
# ---------------------------------------------------------------------------
CYAN = "\033[96m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RESET = "\033[0m"


def _cyan(msg: str) -> str:
    return f"{CYAN}{msg}{RESET}"


def _green(msg: str) -> str:
    return f"{GREEN}{msg}{RESET}"


def _yellow(msg: str) -> str:
    return f"{YELLOW}{msg}{RESET}"


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _positive(cast: Callable[[str], Union[int, float]]) -> Callable[[str], Any]:
    """Numeric option parser; anything that is not a positive number is None."""

    def parse(raw: str) -> Optional[Union[int, float]]:
        try:
            value = cast(raw)
        except ValueError:
            return None
        return value if value > 0 else None

    return parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="json-mock-api",
        description="Serve every JSON file in a directory as a REST collection.",
    )
    parser.add_argument(
        "-d", "--directory",
        help='[optional] Path to directory that contains json files, default "db"',
    )
    parser.add_argument(
        "-p", "--port", type=_positive(int),
        help="[optional] Server port, default 3000",
    )
    parser.add_argument(
        "-i", "--interval", type=_positive(float),
        help="[optional] Save to files interval in seconds, default 30",
    )
    parser.add_argument("--host", help="[optional] Listen address")
    parser.add_argument("--log-level", help="[optional] Logging level, default INFO")
    return parser


def settings_from_args(args: argparse.Namespace) -> MockApiSettings:
    """Overlay explicitly given options on the environment settings."""
    overrides: Dict[str, Any] = {
        key: value
        for key, value in vars(args).items()
        if value is not None
    }
    return MockApiSettings(**overrides)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    server_info = _yellow(f"http://{settings.host}:{settings.port}")
    logger.info(_cyan(f'Reading directory: "{settings.directory}"'))
    logger.info(_cyan(f"File save interval: {settings.interval:g} s"))
    logger.info(_cyan(f'Mock API Running On: "{server_info}"'))
    logger.info(_green(f"Mock API Started {datetime.now():%Y-%m-%d %H:%M:%S}"))

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0
