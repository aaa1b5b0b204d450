import os
import sys
from pathlib import Path
from typing import Callable, List

import httpx
import pytest
import pytest_asyncio

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def pytest_configure(config):
    # Register the asyncio marker so pytest doesn't warn when it's used.
    config.addinivalue_line(
        "markers", "asyncio: mark test to run in an asyncio event loop"
    )
    config.addinivalue_line("markers", "unit: mark test as a unit test")


@pytest.fixture(autouse=True)
def clean_client_env(monkeypatch):
    """Keep ambient REST_API_CLIENT_* variables out of settings tests."""
    for key in list(os.environ):
        if key.startswith("REST_API_CLIENT_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def sleeps(monkeypatch) -> List[float]:
    """Capture backoff delays instead of sleeping."""
    recorded: List[float] = []

    async def fake_sleep(delay, *args, **kwargs):
        recorded.append(delay)

    monkeypatch.setattr("asyncio.sleep", fake_sleep)
    return recorded


@pytest.fixture
def recorded_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def make_http_client(recorded_requests) -> Callable[..., httpx.AsyncClient]:
    """Build an AsyncClient whose transport is a handler function."""

    def factory(handler, **kwargs) -> httpx.AsyncClient:
        def recording_handler(request: httpx.Request):
            recorded_requests.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(recording_handler), **kwargs)

    return factory


@pytest_asyncio.fixture
async def json_client(make_http_client):
    """AsyncClient that answers every request with 200 {"ok": true}."""
    client = make_http_client(lambda request: httpx.Response(200, json={"ok": True}))
    yield client
    await client.aclose()
