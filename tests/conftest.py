"""Shared fixtures for the image proxy tests."""
from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient

from image_proxy.config import Settings, get_settings
from image_proxy.errors import UpstreamError
from image_proxy.handlers.proxy_handler import get_fetcher
from image_proxy.main import create_app

SECRET = "0123456789abcdef0123456789abcdef"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep IMAGE_PROXY_* variables from the developer's shell out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("IMAGE_PROXY_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings() -> Settings:
    return Settings(secret=SECRET)


class FakeFetcher:
    """Stands in for ImageFetcher; maps URLs to bytes or exceptions."""

    def __init__(self) -> None:
        self.sources: dict[str, bytes | Exception] = {}
        self.calls: list[dict] = []

    async def fetch_bytes(
        self,
        url: str,
        *,
        timeout: float,
        max_bytes: int,
        user_agent: str | None = None,
        is_allowed=None,
    ) -> bytes:
        self.calls.append(
            {
                "url": url,
                "timeout": timeout,
                "max_bytes": max_bytes,
                "user_agent": user_agent,
                "is_allowed": is_allowed,
            }
        )
        source = self.sources.get(url)
        if source is None:
            raise UpstreamError("Upstream returned 404")
        if isinstance(source, Exception):
            raise source
        return source


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def app(settings, fetcher):
    application = create_app()
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_fetcher] = lambda: fetcher
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)
