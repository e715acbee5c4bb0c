"""Fixtures for integration tests: a json-server style backend served through httpx.MockTransport."""

import itertools
import json
from typing import Any

import httpx
import pytest

from src.core.gateway import RestGateway
from src.core.session_storage import FileSessionStorage


class FakeJsonServer:
    """Minimal json-server: collections of records, equality query filters, POST/PATCH/DELETE."""

    def __init__(self) -> None:
        self.collections: dict[str, list[dict[str, Any]]] = {"users": [], "tasks": []}
        self._ids = itertools.count(1)

    def _find(self, collection: str, record_id: str) -> dict[str, Any] | None:
        return next((r for r in self.collections.get(collection, []) if str(r["id"]) == record_id), None)

    def handle(self, request: httpx.Request) -> httpx.Response:
        parts = [p for p in request.url.path.split("/") if p]
        collection = parts[0]
        record_id = parts[1] if len(parts) > 1 else None
        records = self.collections.setdefault(collection, [])

        if request.method == "GET" and record_id is None:
            matches = [
                r
                for r in records
                if all(str(r.get(k)).lower() == v.lower() for k, v in request.url.params.items() if not k.startswith("_"))
            ]
            return httpx.Response(200, json=matches)

        if request.method == "POST":
            body = json.loads(request.content)
            record = {**body, "id": body.get("id") or str(next(self._ids))}
            records.append(record)
            return httpx.Response(201, json=record)

        record = self._find(collection, record_id or "")
        if record is None:
            return httpx.Response(404, json={})

        if request.method == "GET":
            return httpx.Response(200, json=record)
        if request.method == "PATCH":
            record.update(json.loads(request.content))
            return httpx.Response(200, json=record)
        if request.method == "DELETE":
            records.remove(record)
            return httpx.Response(200, json={})
        return httpx.Response(405, json={})


@pytest.fixture
def json_server() -> FakeJsonServer:
    return FakeJsonServer()


@pytest.fixture
async def rest_gateway(json_server):
    gateway = RestGateway(base_url="http://gateway.test", transport=httpx.MockTransport(json_server.handle))
    yield gateway
    await gateway.aclose()


@pytest.fixture
def session_file(tmp_path) -> FileSessionStorage:
    return FileSessionStorage(tmp_path / "session.json")
