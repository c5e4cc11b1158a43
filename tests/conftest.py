# shared fixtures for diary tests
# provides mock db, test users and entries, workspaces, and httpx test clients

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport

from diary.main import app
from diary.services.db import get_db
from diary.services.auth_service import hash_password
from diary.services.entry_store import EntryStore
from diary.services.session import SessionProvider
from diary.state.registry import WorkspaceRegistry, get_registry
from diary.state.workspace import DiaryWorkspace


# test ids
ALICE_OID = ObjectId("65a1f0c2e4b0a1a2b3c4d5e1")
BOB_OID = ObjectId("65a1f0c2e4b0a1a2b3c4d5e2")
ALICE_ID = str(ALICE_OID)
BOB_ID = str(BOB_OID)

PASSWORD = "diary-pass"


# test user documents (as they'd appear from mongodb)

ALICE_DOC = {
    "_id": ALICE_OID,
    "email": "alice@example.com",
    "hashed_password": hash_password(PASSWORD),
    "display_name": "Alice",
    "photo_url": None,
    "provider": "password",
    "created_at": "2025-01-01T00:00:00Z",
}

BOB_DOC = {
    "_id": BOB_OID,
    "email": "bob@example.com",
    "hashed_password": hash_password(PASSWORD),
    "display_name": None,
    "photo_url": None,
    "provider": "password",
    "created_at": "2025-01-02T00:00:00Z",
}


# sample entries, alice has two (one favorite), bob has one

ALICE_OLD_ENTRY = {
    "_id": ObjectId("65a1f0c2e4b0a1a2b3c4d6a1"),
    "owner_id": ALICE_ID,
    "title": "Beach day",
    "content": "Went to the beach.",
    "mood": "happy",
    "created_at": datetime(2025, 6, 1, 9, 0, tzinfo=timezone.utc),
    "date": "6/1/2025",
    "images": [],
    "attachments": [],
    "is_favorite": True,
    "is_locked": False,
}

ALICE_NEW_ENTRY = {
    "_id": ObjectId("65a1f0c2e4b0a1a2b3c4d6a2"),
    "owner_id": ALICE_ID,
    "title": "Long shift",
    "content": "Work ran late again.",
    "mood": "sad",
    "created_at": datetime(2025, 6, 3, 21, 0, tzinfo=timezone.utc),
    "date": "6/3/2025",
    "is_favorite": False,
    "is_locked": False,
}

BOB_ENTRY = {
    "_id": ObjectId("65a1f0c2e4b0a1a2b3c4d6b1"),
    "owner_id": BOB_ID,
    "title": "Bob's private thoughts",
    "content": "Nobody else should see this.",
    "mood": "neutral",
    "created_at": datetime(2025, 6, 2, 12, 0, tzinfo=timezone.utc),
    "date": "6/2/2025",
    "images": [],
    "attachments": [],
    "is_favorite": True,
    "is_locked": False,
}


# async cursor mock

class AsyncCursorMock:
    """mock for motor's async cursor — supports async for and chained sort"""

    def __init__(self, data=None):
        self._data = list(data or [])
        self._index = 0

    def sort(self, key, direction=1):
        self._data.sort(key=lambda d: d.get(key), reverse=direction == -1)
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item


class MockCollection:
    """mock for a motor collection with async methods.
    set fail_writes to an exception to make inserts and deletes raise it."""

    def __init__(self, data=None):
        self._data = data or []
        self.inserted = []
        self.deleted = []
        self.fail_writes = None

    def find(self, query=None, projection=None):
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock([d.copy() for d in results])

    async def find_one(self, query=None, projection=None):
        if not query:
            return self._data[0].copy() if self._data else None
        for doc in self._data:
            if self._matches(doc, query):
                return doc.copy()
        return None

    async def insert_one(self, doc):
        if self.fail_writes is not None:
            raise self.fail_writes
        oid = doc.get("_id", ObjectId())
        doc["_id"] = oid
        self._data.append(doc)
        self.inserted.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def update_one(self, query, update, upsert=False):
        result = MagicMock()
        result.modified_count = 0
        for doc in self._data:
            if self._matches(doc, query):
                if "$set" in update:
                    doc.update(update["$set"])
                result.modified_count = 1
                break
        return result

    async def delete_one(self, query):
        if self.fail_writes is not None:
            raise self.fail_writes
        result = MagicMock()
        result.deleted_count = 0
        for doc in self._data:
            if self._matches(doc, query):
                self._data.remove(doc)
                self.deleted.append(doc)
                result.deleted_count = 1
                break
        return result

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            doc_val = doc.get(key)
            if doc_val != value:
                return False
        return True


class MockDatabase:
    """mock database that mimics the Database class"""

    def __init__(self):
        self.users = MockCollection([ALICE_DOC.copy(), BOB_DOC.copy()])
        self.entries = MockCollection([
            ALICE_OLD_ENTRY.copy(),
            BOB_ENTRY.copy(),
            ALICE_NEW_ENTRY.copy(),
        ])

    def collection(self, name):
        return getattr(self, name)

    async def connect(self):
        pass

    async def close(self):
        pass


@pytest.fixture
def mock_db():
    """create a fresh mock database for each test"""
    return MockDatabase()


@pytest.fixture
def store(mock_db):
    return EntryStore(mock_db)


@pytest.fixture
def verifier():
    """google verifier stub — returns claims for any token unless told otherwise"""
    stub = MagicMock()
    stub.verify = AsyncMock(return_value={
        "iss": "https://accounts.google.com",
        "sub": "google-123",
        "email": "carol@gmail.com",
        "name": "Carol",
        "picture": "https://example.com/carol.png",
    })
    return stub


@pytest.fixture
def session(mock_db, verifier):
    return SessionProvider(mock_db, verifier=verifier)


@pytest_asyncio.fixture
async def workspace(session, store):
    """started workspace, nobody signed in yet"""
    ws = DiaryWorkspace("test-session", session, store)
    ws.start()
    yield ws
    await ws.stop()


@pytest_asyncio.fixture
async def alice_workspace(workspace, session):
    """workspace signed in as alice with the first snapshot applied"""
    await session.sign_in_with_credential("alice@example.com", PASSWORD)
    await workspace.settled()
    return workspace


@pytest.fixture
def test_registry():
    return WorkspaceRegistry()


@pytest_asyncio.fixture
async def client(mock_db, test_registry):
    """httpx async test client with mocked dependencies"""

    async def override_get_db():
        return mock_db

    async def override_get_registry():
        return test_registry

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_registry] = override_get_registry

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    await test_registry.close_all()


@pytest_asyncio.fixture
async def alice_client(client):
    """client signed in as alice, bearer header set"""
    resp = await client.post("/auth/login", json={"email": "alice@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    client.headers["Authorization"] = f"Bearer {resp.json()['accessToken']}"
    return client
