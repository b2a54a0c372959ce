"""Shared fixtures: the app with in-memory stores in place of Supabase."""

from __future__ import annotations

import os
from collections import defaultdict

os.environ.setdefault("SUPABASE_URL", "https://forms-test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-role-key")

import pytest
from fastapi.testclient import TestClient

from forms_api.main import app
from forms_api.services.storage import ContentStore, get_content_store, get_store


class FakeStore:
    """Records inserted rows per table; can be told to fail."""

    def __init__(self) -> None:
        self.rows: dict[str, list[dict]] = defaultdict(list)
        self.error: Exception | None = None

    async def insert(self, table: str, row: dict) -> dict:
        if self.error is not None:
            raise self.error
        stored = {"id": len(self.rows[table]) + 1, **row}
        self.rows[table].append(stored)
        return stored


VALID_CONTACT = {
    "name": "Ada Lovelace",
    "email": "ada@analytical.org",
    "subject": "Engines",
    "message": "About the analytical engine.",
}

VALID_MULTI_STEP = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "email": "ada@analytical.org",
    "addressLine1": "12 St James's Square",
    "city": "London",
    "state": "Greater London",
    "postalCode": "SW1Y 4JH",
    "country": "United Kingdom",
    "preferences": {"receiveNewsletter": True},
}


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def content_store(tmp_path) -> ContentStore:
    return ContentStore(tmp_path / "uploads", "/uploads", clock=lambda: 1700000000.0)


@pytest.fixture
def client(store, content_store):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_content_store] = lambda: content_store
    yield TestClient(app)
    app.dependency_overrides.clear()
