"""
Shared pytest fixtures for Esso tests.

This module provides common fixtures including:
- A plugin instance with a test secret
- A FastAPI app with one public and one private route
- Helpers to issue tokens and build raw Starlette requests
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
from fastapi import APIRouter, FastAPI, Request
from fastapi.testclient import TestClient
from starlette.requests import Request as StarletteRequest

from esso import Esso
from esso.modules.crypto import derive_key

TEST_SECRET = "1" * 20


def build_app(esso: Esso) -> FastAPI:
    """App with a public route and a private route echoing the auth payload."""
    app = FastAPI()
    esso.register(app)

    @app.get("/")
    async def index():
        return {"ok": True}

    private = APIRouter()
    getattr(esso, esso.options.rename.require_authentication)(private)

    @private.get("/test")
    async def private_route(request: Request):
        return esso.auth(request)

    app.include_router(private)
    return app


def make_request(
    headers: Optional[Dict[str, str]] = None,
    query_string: str = "",
    path: str = "/test",
) -> StarletteRequest:
    """Build a bare Starlette request without a running app."""
    raw_headers: List[Tuple[bytes, bytes]] = [
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in (headers or {}).items()
    ]
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "root_path": "",
        "query_string": query_string.encode("latin-1"),
        "headers": raw_headers,
        "server": ("testserver", 80),
    }
    return StarletteRequest(scope)


@pytest.fixture
def secret() -> str:
    return TEST_SECRET


@pytest.fixture
def key() -> bytes:
    """Key derived with a fixed test salt."""
    return derive_key(TEST_SECRET, "salt")


@pytest.fixture
def esso() -> Esso:
    return Esso(secret=TEST_SECRET)


@pytest.fixture
def client(esso) -> TestClient:
    return TestClient(build_app(esso))


@pytest.fixture
def issue() -> Callable[..., str]:
    """Issue a token from synchronous test code."""
    def _issue(plugin: Esso, payload: Any = None) -> str:
        return asyncio.run(plugin.issuer.issue(payload))
    return _issue


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: Tests that take a long time to run"
    )
