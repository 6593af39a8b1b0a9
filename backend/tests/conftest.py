"""
Document CRUD Gateway — Test Configuration (conftest.py)
=========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures (function-scoped):
    ├── fake_db:          In-memory stand-in for the Firestore AsyncClient
    ├── mock_db:          MagicMock handle for asserting exact database calls
    ├── failing_db:       Handle whose every database call raises
    └── test_client:      HTTPX AsyncClient bound to create_app(db=fake_db)
"""

import os

# Override settings for testing BEFORE any crud_api imports
os.environ["FIRESTORE_PROJECT_ID"] = "test-project"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["API_PREFIX"] = "/api"

import copy  # noqa: E402
import uuid  # noqa: E402
from datetime import datetime, timezone  # noqa: E402
from typing import Any, Dict, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from google.api_core import exceptions as gcp_exceptions  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# In-memory Firestore double
# ══════════════════════════════════════════════════════════════════════════

class FakeSnapshot:
    """Mirrors DocumentSnapshot: .exists, .id, .to_dict()."""

    def __init__(self, document_id: str, data: Optional[Dict[str, Any]]):
        self.id = document_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return copy.deepcopy(self._data)


class FakeDocumentReference:
    def __init__(self, store: Dict[str, Dict[str, Any]], document_id: str):
        self._store = store
        self.id = document_id

    async def get(self) -> FakeSnapshot:
        return FakeSnapshot(self.id, self._store.get(self.id))

    async def update(self, data: Dict[str, Any]) -> None:
        if not isinstance(data, dict):
            raise TypeError("update() requires a mapping of field paths to values")
        if not data:
            raise ValueError("Cannot update with an empty document.")
        if self.id not in self._store:
            raise gcp_exceptions.NotFound(f"No document to update: {self.id}")
        self._store[self.id].update(copy.deepcopy(data))

    async def delete(self) -> None:
        self._store.pop(self.id, None)


class FakeCollectionReference:
    def __init__(self, store: Dict[str, Dict[str, Any]]):
        self._store = store

    def document(self, document_id: str) -> FakeDocumentReference:
        if not isinstance(document_id, str) or not document_id:
            raise ValueError("A document id must be a non-empty string")
        return FakeDocumentReference(self._store, document_id)

    async def add(self, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise TypeError("add() requires a mapping of field names to values")
        document_id = uuid.uuid4().hex[:20]
        self._store[document_id] = copy.deepcopy(data)
        return datetime.now(timezone.utc), FakeDocumentReference(self._store, document_id)


class FakeFirestore:
    """Collections are dicts of id → data; same call surface as AsyncClient."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def collection(self, name: str) -> FakeCollectionReference:
        if not isinstance(name, str) or not name:
            raise ValueError("A collection path must be a non-empty string")
        return FakeCollectionReference(self.collections.setdefault(name, {}))


# ══════════════════════════════════════════════════════════════════════════
# Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def mock_db():
    """
    MagicMock handle: db.collection(c).document(i) returns mock_db.doc_ref,
    db.collection(c) returns mock_db.collection_ref.

    Usage:
        mock_db.doc_ref.get.return_value = snapshot
        await DocumentService(mock_db).read_document("users", "abc")
    """
    db = MagicMock()
    collection_ref = MagicMock()
    doc_ref = MagicMock()
    doc_ref.get = AsyncMock()
    doc_ref.update = AsyncMock()
    doc_ref.delete = AsyncMock()
    collection_ref.add = AsyncMock()
    collection_ref.document.return_value = doc_ref
    db.collection.return_value = collection_ref
    db.collection_ref = collection_ref
    db.doc_ref = doc_ref
    return db


@pytest.fixture
def failing_db(mock_db):
    """Every database call raises, as a denied or unreachable Firestore would."""
    error = gcp_exceptions.PermissionDenied("Missing or insufficient permissions.")
    mock_db.collection_ref.add.side_effect = error
    mock_db.doc_ref.get.side_effect = error
    mock_db.doc_ref.update.side_effect = error
    mock_db.doc_ref.delete.side_effect = error
    return mock_db


@pytest_asyncio.fixture
async def test_client(fake_db):
    """
    HTTPX AsyncClient talking to a fresh app backed by fake_db.

    Usage:
        async def test_create(test_client):
            response = await test_client.post("/api/create", json={...})
    """
    from crud_api.main import create_app

    transport = ASGITransport(app=create_app(db=fake_db))
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
