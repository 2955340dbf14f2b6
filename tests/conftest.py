"""Pytest configuration and shared fixtures for huesim tests."""

from __future__ import annotations

import os
import sys

import pytest

_TESTS_DIR = os.path.dirname(__file__)
_PROJECT_ROOT = os.path.abspath(os.path.join(_TESTS_DIR, ".."))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

TEST_IP = "192.0.2.10"


@pytest.fixture
def bridge_config():
    """Bridge settings that never touch the network."""
    from core.config import BridgeConfig

    return BridgeConfig(ip_address=TEST_IP, port=8080, upnp=False)


@pytest.fixture
def bridge(bridge_config):
    """A HueBridge with an empty registry and the packaged device database."""
    from core.bridge import HueBridge

    return HueBridge(bridge_config)


@pytest.fixture
def model_repository():
    from devicedb import ModelRepository

    return ModelRepository()


@pytest.fixture
def app(bridge):
    """Create a FastAPI test app bound to the bridge fixture."""
    from api.app import create_app

    return create_app(bridge)


@pytest.fixture
async def client(app):
    """Create an AsyncClient for HTTP testing against the ASGI app."""
    try:
        import httpx
    except ModuleNotFoundError:
        pytest.skip("httpx not installed in venv; skipping API client tests")

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as client:
        yield client


@pytest.fixture(autouse=True)
def _run_sync_endpoints_inline(monkeypatch):
    """Run sync FastAPI endpoints inline to avoid AnyIO threadpool hangs."""
    import fastapi.concurrency as fastapi_concurrency
    import fastapi.dependencies.utils as fastapi_dep_utils
    import fastapi.routing as fastapi_routing
    import starlette.concurrency as starlette_concurrency

    async def _run_inline(func, *args, **kwargs):
        return func(*args, **kwargs)

    monkeypatch.setattr(starlette_concurrency, "run_in_threadpool", _run_inline)
    monkeypatch.setattr(fastapi_concurrency, "run_in_threadpool", _run_inline)
    monkeypatch.setattr(fastapi_routing, "run_in_threadpool", _run_inline)
    monkeypatch.setattr(fastapi_dep_utils, "run_in_threadpool", _run_inline)
