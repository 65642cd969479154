"""Shared fixtures: an in-memory bucket and a fake EasyImage endpoint."""

from pathlib import Path
from typing import Dict, Optional, Union

import httpx
import pytest

from ob2static.core.models import StoreError


class MemoryStore:
    """ObjectStore kept in a dict."""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None):
        self.objects: Dict[str, bytes] = dict(objects or {})
        self.content_types: Dict[str, str] = {}
        self.puts = []
        self.gets = []
        self.get_error: Optional[Exception] = None
        self.failing_keys = set()
        self.closed = False

    async def get(self, key: str) -> Optional[bytes]:
        self.gets.append(key)
        if self.get_error is not None:
            raise self.get_error
        return self.objects.get(key)

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        if key in self.failing_keys:
            raise StoreError(f"refused {key}")
        self.puts.append(key)
        self.objects[key] = body
        self.content_types[key] = content_type

    async def close(self) -> None:
        self.closed = True

    def text(self, key: str) -> str:
        return self.objects[key].decode("utf-8")


class EasyImageServer:
    """Handler for httpx.MockTransport mimicking an EasyImage endpoint."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"result": "failed"})
        return httpx.Response(
            200,
            json={"result": "success", "url": f"https://img.example.com/{len(self.requests)}.png"},
        )


def write_vault(root: Path, files: Dict[str, Union[str, bytes]]) -> Path:
    """Create vault files from a {relative path: content} mapping."""
    for name, content in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def image_server():
    return EasyImageServer()


@pytest.fixture
def http_client(image_server):
    return httpx.AsyncClient(transport=httpx.MockTransport(image_server))
