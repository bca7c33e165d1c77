import json
from typing import Callable, Dict, List

import httpx
import pytest

from catalog_images.core.config import Settings
from catalog_images.factories.tiendanube_factory import TiendanubeClientFactory

BASE_URL = "https://api.test/v1/123"


class RecordingSleep:
    """Stands in for asyncio.sleep and records every requested delay."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeResolver:
    """In-memory DriveImageResolver."""

    def __init__(self, images: Dict[str, List[str]] = None, failures: Dict[str, Exception] = None):
        self.images = images or {}
        self.failures = failures or {}
        self.calls: List[str] = []

    async def resolve_images(self, sku: str) -> List[str]:
        self.calls.append(sku)
        if sku in self.failures:
            raise self.failures[sku]
        return self.images.get(sku, [])


def json_response(status_code: int, payload=None) -> httpx.Response:
    if payload is None:
        return httpx.Response(status_code)
    return httpx.Response(status_code, content=json.dumps(payload).encode(),
                          headers={"Content-Type": "application/json"})


def make_client(handler: Callable) -> httpx.AsyncClient:
    return TiendanubeClientFactory.from_credentials(
        base_url=BASE_URL,
        access_token="secret-token",
        user_agent="catalog-images tests",
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        access_token="secret-token",
        store_id="123",
        user_agent="catalog-images tests (dev@example.com)",
        api_base_url="https://api.test/v1",
    )


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()
